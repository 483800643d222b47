"""
scriptflow CLI - Command-line interface for running script processes.

Usage:
    scriptflow run process.yaml --var amount=250    # Run a process
    scriptflow validate process.yaml                # Validate without running
    scriptflow show process.yaml                    # Show process structure
    scriptflow languages                            # List script languages
"""

import json
import logging
import sys
from typing import Any

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .config import get_config, reload_config
from .definition import ParseError, ValidationError, load_process, validate_process
from .overrides import OverrideStore
from .runner import ProcessRunner
from .scripting import list_languages

console = Console()


def _parse_value(raw: str) -> Any:
    """Parse a --var value as JSON, falling back to the raw string."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def _parse_pairs(pairs: tuple[str, ...], option: str) -> dict[str, str]:
    parsed = {}
    for pair in pairs:
        if "=" not in pair:
            raise click.BadParameter(f"expected KEY=VALUE, got '{pair}'", param_hint=option)
        key, value = pair.split("=", 1)
        parsed[key.strip()] = value
    return parsed


@click.group()
@click.version_option(version="0.1.0", prog_name="scriptflow")
def cli():
    """scriptflow - Script Step Process Runner"""
    pass


@cli.command()
@click.argument("process", type=click.Path(exists=True))
@click.option("--var", "variables", multiple=True,
              help="Initial variable as KEY=VALUE (VALUE parsed as JSON when possible)")
@click.option("--override", "overrides", multiple=True,
              help="Replace a step's script for this run as STEP=SCRIPT")
@click.option("--env-file", type=click.Path(exists=True),
              help="Load configuration from this env file")
@click.option("--verbose", "-v", is_flag=True,
              help="Show detailed output")
def run(process: str, variables: tuple[str, ...], overrides: tuple[str, ...],
        env_file: str | None, verbose: bool):
    """Run a process definition."""

    if verbose:
        logging.basicConfig(level=logging.DEBUG, handlers=[RichHandler(console=console)], format="%(message)s")

    config = reload_config(env_file)

    try:
        definition = load_process(process, default_language=config.default_language)
    except (ParseError, ValidationError) as e:
        console.print(f"[red]✗[/red] {e}")
        sys.exit(1)

    # --override lives in memory for this run only, over the persisted overrides
    store = OverrideStore(base=OverrideStore(config.state_dir))
    run_overrides = _parse_pairs(overrides, "--override")
    if run_overrides and not config.enable_override_cache:
        console.print("[yellow]![/yellow] Override cache is disabled; ignoring --override")
    for step_id, script in run_overrides.items():
        store.set_script(definition.id, step_id, script)

    initial = {k: _parse_value(v) for k, v in _parse_pairs(variables, "--var").items()}

    console.print()
    console.print(Panel(
        f"[bold]scriptflow Process Runner[/bold]\n\n"
        f"Process: {definition.name} (v{definition.version})\n"
        f"Steps: {len(definition.steps)}",
        border_style="blue"
    ))

    result = ProcessRunner(definition, config=config, overrides=store).run(initial)

    table = Table(title="Variables")
    table.add_column("Name", style="cyan")
    table.add_column("Value")
    for name, value in sorted(result.variables.items()):
        table.add_row(name, escape(repr(value)))
    console.print(table)

    console.print(
        f"Completed: {len(result.completed)}  Skipped: {len(result.skipped)}  "
        f"Time: {result.duration_ms}ms"
    )

    if not result.success:
        console.print("\n[red]Process failed:[/red]")
        for error in result.errors:
            console.print(f"  • {escape(error)}")
        sys.exit(1)


@cli.command()
@click.argument("process", type=click.Path(exists=True))
def validate(process: str):
    """Validate a process file without running it."""

    try:
        definition = load_process(process, default_language=get_config().default_language)
        warnings = validate_process(definition, set(list_languages()))
    except (ParseError, ValidationError) as e:
        console.print(f"[red]✗[/red] {e}")
        sys.exit(1)

    console.print(f"[green]✓[/green] Process '{definition.name}' is valid")
    for warning in warnings:
        console.print(f"  [yellow]![/yellow] {warning}")


@cli.command()
@click.argument("process", type=click.Path(exists=True))
def show(process: str):
    """Show the steps of a process."""

    try:
        definition = load_process(process, default_language=get_config().default_language)
    except (ParseError, ValidationError) as e:
        console.print(f"[red]✗[/red] {e}")
        sys.exit(1)

    table = Table(title=f"{definition.name} ({definition.id})")
    table.add_column("Step", style="cyan")
    table.add_column("Language")
    table.add_column("Inputs")
    table.add_column("Result")
    table.add_column("Skip")
    table.add_column("Boundaries")

    for step in definition.steps:
        boundaries = ", ".join(
            f"{b.error_code or '*'} -> {b.target}" for b in definition.boundaries_for(step.id)
        )
        table.add_row(
            step.id,
            step.language,
            step.input_mode.value,
            step.result_variable or "",
            step.skip_expression or "",
            boundaries,
        )

    console.print(table)


@cli.command()
def languages():
    """List registered script languages."""
    for language in sorted(list_languages()):
        console.print(f"  • {language}")


def main():
    cli()


if __name__ == "__main__":
    main()
