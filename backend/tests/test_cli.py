"""Tests for CLI commands."""

import pytest
from click.testing import CliRunner

from scriptflow.cli import cli, console


@pytest.fixture
def process_file(tmp_path, process_yaml):
    path = tmp_path / "process.yaml"
    path.write_text(process_yaml)
    return path


@pytest.fixture
def runner(tmp_path, monkeypatch):
    """CLI runner isolated from the developer's environment."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("SCRIPTFLOW_STATE_DIR", raising=False)
    monkeypatch.delenv("SCRIPTFLOW_ENV_FILE", raising=False)
    monkeypatch.setenv("SCRIPTFLOW_OVERRIDE_CACHE", "true")
    monkeypatch.setattr(console, "width", 200)
    return CliRunner()


class TestRunCommand:
    """Tests for `scriptflow run`."""

    def test_run_boundary_path(self, runner, process_file):
        result = runner.invoke(cli, ["run", str(process_file)])

        assert result.exit_code == 0, result.output
        assert "Rejected Ada: E_LIMIT" in result.output

    def test_run_with_variables(self, runner, process_file):
        result = runner.invoke(cli, [
            "run", str(process_file),
            "--var", 'order={"amount": 100, "customer": "Bo"}',
        ])

        assert result.exit_code == 0, result.output
        assert "Approved Bo" in result.output

    def test_run_with_override(self, runner, process_file):
        result = runner.invoke(cli, [
            "run", str(process_file),
            "--override", "fee='flat'",
        ])

        assert result.exit_code == 0, result.output
        assert "'flat'" in result.output

    def test_override_applies_to_one_run_only(self, runner, tmp_path, monkeypatch):
        """A persisted state dir does not keep --override for later runs."""
        monkeypatch.setenv("SCRIPTFLOW_STATE_DIR", str(tmp_path / "state"))
        path = tmp_path / "single.yaml"
        path.write_text("name: p\nsteps:\n  - id: s\n    script: \"'original'\"\n    resultVariable: out\n")

        first = runner.invoke(cli, ["run", str(path), "--override", "s='patched'"])
        second = runner.invoke(cli, ["run", str(path)])

        assert first.exit_code == 0, first.output
        assert "'patched'" in first.output
        assert second.exit_code == 0, second.output
        assert "'original'" in second.output
        assert "'patched'" not in second.output

    def test_override_with_cache_disabled_warns(self, runner, tmp_path, monkeypatch):
        monkeypatch.setenv("SCRIPTFLOW_OVERRIDE_CACHE", "false")
        path = tmp_path / "single.yaml"
        path.write_text("name: p\nsteps:\n  - id: s\n    script: \"'original'\"\n    resultVariable: out\n")

        result = runner.invoke(cli, ["run", str(path), "--override", "s='patched'"])

        assert result.exit_code == 0, result.output
        assert "ignoring --override" in result.output
        assert "'original'" in result.output

    def test_bad_var_syntax(self, runner, process_file):
        result = runner.invoke(cli, ["run", str(process_file), "--var", "novalue"])
        assert result.exit_code != 0

    def test_failing_process(self, runner, tmp_path):
        path = tmp_path / "fail.yaml"
        path.write_text("name: p\nsteps:\n  - id: a\n    script: raise DomainError('NOPE')\n")

        result = runner.invoke(cli, ["run", str(path)])

        assert result.exit_code == 1
        assert "Process failed" in result.output


class TestValidateCommand:
    """Tests for `scriptflow validate`."""

    def test_valid(self, runner, process_file):
        result = runner.invoke(cli, ["validate", str(process_file)])

        assert result.exit_code == 0
        assert "is valid" in result.output

    def test_uses_configured_default_language(self, runner, tmp_path, monkeypatch):
        """Steps without a language validate as they would run."""
        monkeypatch.setenv("SCRIPTFLOW_DEFAULT_LANGUAGE", "cobol")
        path = tmp_path / "plain.yaml"
        path.write_text("name: p\nsteps:\n  - id: s\n    script: x\n")

        result = runner.invoke(cli, ["validate", str(path)])

        assert result.exit_code == 0
        assert "unregistered language 'cobol'" in result.output

    def test_invalid(self, runner, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("steps: []\n")

        result = runner.invoke(cli, ["validate", str(path)])

        assert result.exit_code == 1


class TestShowAndLanguages:
    """Tests for `scriptflow show` and `scriptflow languages`."""

    def test_show(self, runner, process_file):
        result = runner.invoke(cli, ["show", str(process_file)])

        assert result.exit_code == 0
        assert "check_limit" in result.output
        assert "bound" in result.output

    def test_show_uses_configured_default_language(self, runner, tmp_path, monkeypatch):
        monkeypatch.setenv("SCRIPTFLOW_DEFAULT_LANGUAGE", "expression")
        path = tmp_path / "plain.yaml"
        path.write_text("name: p\nsteps:\n  - id: s\n    script: 1 + 1\n")

        result = runner.invoke(cli, ["show", str(path)])

        assert result.exit_code == 0
        assert "expression" in result.output
        assert "python" not in result.output

    def test_languages(self, runner):
        result = runner.invoke(cli, ["languages"])

        assert result.exit_code == 0
        assert "python" in result.output
        assert "template" in result.output
