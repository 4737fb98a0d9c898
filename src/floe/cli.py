"""
CLI module - Command line interface for floe

Entry point for the `floe` command using Typer.
"""

import json
import logging
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import __version__
from .config import AppConfig, load_config, validate_config
from .constants import Status
from .errors import FloeError
from .runners import check_runner_tools, default_registry
from .workflow import StateMachine, Workflow, WorkflowCallbacks

console = Console()
app = typer.Typer(
    name="floe",
    help="floe - Run Amazon States Language workflows with container tasks.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def version_callback(value: bool):
    if value:
        console.print(f"floe version {__version__}")
        raise typer.Exit()


# Type aliases for common options
ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Path to config file", exists=True, dir_okay=False),
]
WorkflowArgument = Annotated[
    Path, typer.Argument(help="Workflow definition (JSON or YAML)", exists=True, dir_okay=False)
]


@app.callback()
def main(
    version: Annotated[
        bool, typer.Option("--version", "-v", callback=version_callback, is_eager=True, help="Show version")
    ] = False,
):
    """floe - Run Amazon States Language workflows with container tasks."""
    pass


def configure_logging(config: AppConfig, verbose: bool = False) -> None:
    """Route library logging through Rich."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    if config.logging.console_logging:
        root.addHandler(RichHandler(console=Console(stderr=True), show_path=False))
    root.setLevel(logging.DEBUG if verbose else config.logging.level.upper())


def parse_json_option(value: str | None, option: str) -> Any:
    """Parse a JSON command line value."""
    if value is None:
        return None
    try:
        return json.loads(value)
    except json.JSONDecodeError as err:
        console.print(f"[red]Error:[/red] {option} is not valid JSON: {err}")
        raise typer.Exit(1) from err


def parse_runner_options(values: list[str] | None) -> dict[str, str]:
    """Parse repeated key=value runner options."""
    options = {}
    for value in values or []:
        key, separator, option = value.partition("=")
        if not separator or not key:
            console.print(f"[red]Error:[/red] runner option must be key=value, got {value!r}")
            raise typer.Exit(1)
        options[key.replace("-", "_")] = option
    return options


def format_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


@app.command()
def run(
    workflow_path: WorkflowArgument,
    input: Annotated[str | None, typer.Option("--input", "-i", help="Workflow input as JSON")] = None,
    credentials: Annotated[str | None, typer.Option("--credentials", help="Credentials as JSON")] = None,
    credentials_file: Annotated[
        Path | None,
        typer.Option("--credentials-file", help="JSON file with credentials", exists=True, dir_okay=False),
    ] = None,
    docker_runner: Annotated[
        str | None, typer.Option("--docker-runner", help="Runner for docker:// resources (docker, podman, kubernetes)")
    ] = None,
    docker_runner_options: Annotated[
        list[str] | None,
        typer.Option("--docker-runner-options", "-o", help="Runner option as key=value (repeatable)"),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", help="Log every state transition")] = False,
    config: ConfigOption = None,
):
    """
    Run a workflow to completion and print its output.

    [bold]Examples:[/bold]

        floe run workflow.asl --input '{"name": "world"}'

        floe run workflow.asl --docker-runner podman -o network=host

        floe run workflow.asl --credentials-file secrets.json
    """
    cfg = load_config(config)
    if docker_runner:
        cfg.runner.docker_runner = docker_runner

    errors = validate_config(cfg)
    if errors:
        for error in errors:
            console.print(f"[red]Error:[/red] {error}")
        raise typer.Exit(1)

    configure_logging(cfg, verbose)

    workflow_input = parse_json_option(input, "--input")
    secrets = parse_json_option(credentials, "--credentials") or {}
    if credentials_file:
        secrets.update(parse_json_option(credentials_file.read_text(), "--credentials-file") or {})

    options = {**cfg.runner.options(), **parse_runner_options(docker_runner_options)}

    def on_state_start(name: str, _input: Any):
        console.print(f"  [cyan]>[/cyan] {name}")

    def on_state_complete(name: str, next_state: str | None, _output: Any):
        target = f" -> {next_state}" if next_state else ""
        console.print(f"  [green]✓[/green] {name}{target}")

    try:
        workflow = Workflow.load(
            workflow_path,
            input=workflow_input,
            credentials=secrets,
            runners=default_registry(cfg.runner.docker_runner, options),
            callbacks=WorkflowCallbacks(on_state_start=on_state_start, on_state_complete=on_state_complete),
        )
        console.print(f"\n[bold]Running:[/bold] {workflow.name} ({cfg.runner.docker_runner} runner)")
        output = workflow.run()
    except FloeError as err:
        console.print(f"\n[red]Error:[/red] {err}")
        raise typer.Exit(1) from err

    console.print()
    if workflow.status == Status.ERRORED.value:
        console.print(f"[red]✗ {workflow.error or 'Failed'}[/red] {workflow.cause or ''}")
    else:
        console.print("[green]✓ Succeeded[/green]")
    console.print(format_json(output), markup=False, highlight=False)

    if workflow.status == Status.ERRORED.value:
        raise typer.Exit(1)


@app.command()
def validate(workflow_path: WorkflowArgument):
    """Validate a workflow definition and list its states."""
    try:
        definition = StateMachine.load(workflow_path)
    except FloeError as err:
        console.print(f"[red]✗ Invalid:[/red] {err}")
        raise typer.Exit(1) from err

    table = Table(title=f"Workflow: {definition.name}")
    table.add_column("State", style="cyan")
    table.add_column("Type")
    table.add_column("Next", style="dim")

    for name, state in definition.states.items():
        marker = " [bold](start)[/bold]" if name == definition.start_at else ""
        next_states = ", ".join(state.next_states()) or ("(end)" if state.end else "-")
        table.add_row(f"{name}{marker}", state.type, next_states)

    console.print(table)
    console.print(f"[green]✓ Valid[/green] - {len(definition.states)} states")


@app.command()
def check():
    """Check which container runners are available."""
    tools = check_runner_tools()

    table = Table(title="Container Runners")
    table.add_column("Runner", style="cyan")
    table.add_column("Status")
    table.add_column("Path", style="dim")

    for runner, path in tools.items():
        if path:
            status_str = "[green]Available[/green]"
            path_str = path
        else:
            status_str = "[red]Missing[/red]"
            path_str = "-"
        table.add_row(runner, status_str, path_str)

    console.print(table)

    if not any(tools.values()):
        console.print("\n[yellow]No container runner found.[/yellow] Install docker, podman or kubectl.")


if __name__ == "__main__":
    app()
