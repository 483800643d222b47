"""Tests for process definition parsing and validation."""

import dataclasses

import pytest

from scriptflow.definition import (
    ErrorBoundary,
    InputBinding,
    InputMode,
    ParseError,
    ScriptStepSpec,
    ValidationError,
    load_process,
    parse_process,
    parse_step,
    validate_process,
)


class TestParseStep:
    """Tests for single step parsing."""

    def test_camel_case_keys(self):
        """The camelCase keys of the data model are understood."""
        step = parse_step({
            "id": "s1",
            "script": "1 + 1",
            "language": "expression",
            "resultVariable": "out",
            "skipExpression": "skip_me",
            "storeScriptVariables": True,
            "excludeAmbientVariables": True,
        })

        assert step.id == "s1"
        assert step.language == "expression"
        assert step.result_variable == "out"
        assert step.skip_expression == "skip_me"
        assert step.store_script_variables is True
        assert step.exclude_ambient_variables is True

    def test_snake_case_keys(self):
        """snake_case keys work too."""
        step = parse_step({"id": "s1", "script": "x", "result_variable": "out"})
        assert step.result_variable == "out"

    def test_default_language(self):
        """Steps without a language use the default."""
        step = parse_step({"id": "s1", "script": "x"}, default_language="template")
        assert step.language == "template"

    def test_missing_id(self):
        with pytest.raises(ParseError, match="id"):
            parse_step({"script": "x"})

    def test_missing_script(self):
        with pytest.raises(ParseError, match="script"):
            parse_step({"id": "s1"})

    def test_invalid_type(self):
        with pytest.raises(ParseError, match="invalid type"):
            parse_step({"id": "s1", "type": "user_task", "script": "x"})

    def test_bad_inputs(self):
        with pytest.raises(ParseError, match="target"):
            parse_step({"id": "s1", "script": "x", "inputs": [{"target": "a"}]})


class TestInputMode:
    """The input scoping variant is resolved from the step configuration."""

    def test_inherit_by_default(self):
        step = ScriptStepSpec(id="s", script="x")
        assert step.input_mode is InputMode.INHERIT

    def test_empty_when_excluding_ambient(self):
        step = ScriptStepSpec(id="s", script="x", exclude_ambient_variables=True)
        assert step.input_mode is InputMode.EMPTY

    def test_bound_wins_over_exclusion(self):
        step = ScriptStepSpec(
            id="s",
            script="x",
            exclude_ambient_variables=True,
            inputs=(InputBinding("a", "b"),),
        )
        assert step.input_mode is InputMode.BOUND


class TestScriptStepSpec:
    """Step definitions are immutable."""

    def test_frozen(self):
        step = ScriptStepSpec(id="s", script="x")
        with pytest.raises(dataclasses.FrozenInstanceError):
            step.script = "y"


class TestParseProcess:
    """Tests for whole process parsing."""

    def test_parse(self, process_yaml):
        definition = parse_process(process_yaml)

        assert definition.name == "order-review"
        assert definition.version == "2"
        assert definition.id == "order-review:2"
        assert [s.id for s in definition.steps] == ["fee", "check_limit", "approve", "reject"]
        assert definition.variables["order"]["amount"] == 250

        check = definition.step_index["check_limit"]
        assert check.inputs == (
            InputBinding("amount", "order.amount"),
            InputBinding("limit", "200"),
        )
        assert definition.boundaries_for("check_limit") == (ErrorBoundary("E_LIMIT", "reject"),)
        assert definition.boundaries_for("fee") == ()

    def test_explicit_definition_id(self, process_yaml):
        definition = parse_process(process_yaml, definition_id="custom")
        assert definition.id == "custom"

    def test_invalid_yaml(self):
        with pytest.raises(ParseError, match="Invalid YAML"):
            parse_process("name: [unclosed")

    def test_not_a_mapping(self):
        with pytest.raises(ParseError):
            parse_process("- a\n- b\n")

    def test_missing_name(self):
        with pytest.raises(ParseError, match="name"):
            parse_process("steps: []\n")

    def test_catch_all_boundary(self):
        definition = parse_process(
            "name: p\nsteps:\n  - id: a\n    script: x\n    boundaries:\n      - target: a\n"
        )
        boundary = definition.boundaries_for("a")[0]
        assert boundary.error_code is None
        assert boundary.matches("ANY")


class TestValidateProcess:
    """Tests for process validation."""

    def test_valid(self, process_yaml):
        definition = parse_process(process_yaml)
        assert validate_process(definition) == []

    def test_duplicate_step_ids(self):
        definition = parse_process("name: p\nsteps:\n  - id: a\n    script: x\n  - id: a\n    script: y\n")
        with pytest.raises(ValidationError, match="Duplicate"):
            validate_process(definition)

    def test_boundary_to_missing_step(self):
        definition = parse_process(
            "name: p\nsteps:\n  - id: a\n    script: x\n    boundaries:\n"
            "      - errorCode: E\n        target: nowhere\n"
        )
        with pytest.raises(ValidationError, match="nowhere"):
            validate_process(definition)

    def test_warnings(self):
        definition = parse_process(
            "name: p\nsteps:\n  - id: a\n    language: cobol\n    script: x\n"
            "    excludeAmbientVariables: true\n    inputs:\n      - target: t\n        source: s\n"
        )
        warnings = validate_process(definition, known_languages={"python"})

        assert any("cobol" in w for w in warnings)
        assert any("redundant" in w for w in warnings)


class TestLoadProcess:
    """Tests for loading from disk."""

    def test_load(self, tmp_path, process_yaml):
        path = tmp_path / "process.yaml"
        path.write_text(process_yaml)

        definition = load_process(path)
        assert definition.name == "order-review"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ParseError, match="not found"):
            load_process(tmp_path / "missing.yaml")
