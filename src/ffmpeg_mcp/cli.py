"""
CLI module - Command line interface for FFmpeg MCP

Entry point for the `ffmcp` command using Typer.
"""

import json
from pathlib import Path
from typing import Annotated, Any

import typer
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .catalog import NO_DEFAULT
from .config import AppConfig, load_config
from .dispatcher import Dispatcher
from .errors import FfmpegMcpError
from .logging_utils import setup_logging
from .operations import build_catalog
from .plan import Invocation, WriteFile
from .tools import check_tools_status
from .validator import validate

console = Console()
err_console = Console(stderr=True)
app = typer.Typer(
    name="ffmcp",
    help="FFmpeg MCP - media processing tools over a stdio tool protocol.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def version_callback(value: bool):
    if value:
        console.print(f"ffmcp version {__version__}")
        raise typer.Exit()


# Type aliases for common options
ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Path to config file", exists=True, dir_okay=False),
]
ArgOption = Annotated[
    list[str] | None,
    typer.Option("--arg", "-a", help="Operation argument as key=value (repeatable)"),
]
JsonOption = Annotated[
    str | None,
    typer.Option("--json", "-j", help="Operation arguments as a JSON object"),
]


@app.callback()
def main(
    version: Annotated[
        bool, typer.Option("--version", "-v", callback=version_callback, is_eager=True, help="Show version")
    ] = False,
):
    """FFmpeg MCP - media processing tools over a stdio tool protocol."""
    pass


def get_config(config_path: Path | None = None) -> AppConfig:
    """Load configuration from a file or the standard locations."""
    return load_config(config_path)


def parse_arguments(pairs: list[str] | None, json_args: str | None) -> dict[str, Any]:
    """
    Merge --json and --arg options into one argument mapping.

    --arg values are parsed as YAML scalars/flow sequences so that
    `crf=23`, `two_pass=true` and `inputs=[a.mp4,b.mp4]` arrive typed.
    Later --arg options override --json keys.
    """
    arguments: dict[str, Any] = {}

    if json_args:
        try:
            loaded = json.loads(json_args)
        except ValueError as e:
            raise typer.BadParameter(f"Invalid JSON: {e}", param_hint="--json") from e
        if not isinstance(loaded, dict):
            raise typer.BadParameter("Expected a JSON object", param_hint="--json")
        arguments.update(loaded)

    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected key=value, got '{pair}'", param_hint="--arg")
        try:
            arguments[key.strip()] = yaml.safe_load(value) if value else ""
        except yaml.YAMLError:
            arguments[key.strip()] = value

    return arguments


def format_default(value: Any) -> str:
    if value is NO_DEFAULT:
        return "-"
    return json.dumps(value)


@app.command()
def serve(config: ConfigOption = None):
    """
    Start the tool server on stdin/stdout.

    Logs go to stderr; stdout carries the protocol.
    """
    from .server import serve as run_server

    run_server(get_config(config))


@app.command()
def operations():
    """List all available operations."""
    catalog = build_catalog()

    table = Table(title="Available Operations")
    table.add_column("Name", style="cyan")
    table.add_column("Required")
    table.add_column("Description", style="dim")

    for descriptor in catalog.list():
        table.add_row(descriptor.name, ", ".join(descriptor.required_names), descriptor.description)

    console.print(table)


@app.command()
def describe(operation: Annotated[str, typer.Argument(help="Operation name (see operations)")]):
    """Show the parameters of one operation."""
    catalog = build_catalog()

    try:
        descriptor = catalog.lookup(operation)
    except FfmpegMcpError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        console.print(f"Available: {', '.join(catalog.names())}")
        raise typer.Exit(1) from None

    table = Table(title=f"{descriptor.name}: {descriptor.description}")
    table.add_column("Parameter", style="cyan")
    table.add_column("Type")
    table.add_column("Required", justify="center")
    table.add_column("Default")
    table.add_column("Choices", style="dim")
    table.add_column("Description", style="dim")

    for param in descriptor.parameters:
        required = "[green]✓[/green]" if param.name in descriptor.required else "[dim]-[/dim]"
        choices = ", ".join(param.choices) if param.choices else ""
        table.add_row(
            param.name, param.type.value, required, format_default(param.default), choices, param.description
        )

    console.print(table)


@app.command()
def plan(
    operation: Annotated[str, typer.Argument(help="Operation name (see operations)")],
    arg: ArgOption = None,
    json_args: JsonOption = None,
    config: ConfigOption = None,
):
    """
    Validate and compile an operation without running it.

    [bold]Examples:[/bold]

        ffmcp plan resize_video -a input=a.mp4 -a output=b.mp4 -a preset=720p

        ffmcp plan compress_video -j '{"input": "a.mp4", "output": "d.mp4", "two_pass": true}'
    """
    arguments = parse_arguments(arg, json_args)
    dispatcher = Dispatcher.from_config(get_config(config))

    try:
        descriptor = dispatcher.catalog.lookup(operation)
        compiled = dispatcher.compile(validate(descriptor, arguments))
    except FfmpegMcpError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from None

    console.print(f"[bold]Plan:[/bold] {compiled.operation}")
    for index, step in enumerate(compiled.steps, start=1):
        if isinstance(step, Invocation):
            action, detail = "run", step.command_line(dispatcher.executable(step.tool))
        elif isinstance(step, WriteFile):
            action, detail = "write", str(step.path)
        else:
            action, detail = "move", f"{step.source} -> {step.destination}"
        console.print(f"  {index}. [cyan]{action:<5}[/cyan] {escape(detail)}", highlight=False)

    if compiled.temp_artifacts:
        console.print("[dim]Temp artifacts:[/dim]")
        for path in compiled.temp_artifacts:
            console.print(f"  [dim]{escape(str(path))}[/dim]")


@app.command()
def run(
    operation: Annotated[str, typer.Argument(help="Operation name (see operations)")],
    arg: ArgOption = None,
    json_args: JsonOption = None,
    output_json: Annotated[bool, typer.Option("--output-json", help="Print the response envelope as JSON")] = False,
    config: ConfigOption = None,
):
    """
    Run an operation locally and print its response.

    [bold]Examples:[/bold]

        ffmcp run trim_media -a input=a.mp4 -a output=c.mp4 -a start_time=00:01:00 -a duration=30

        ffmcp run get_media_info -a input=a.mp4
    """
    app_config = get_config(config)
    setup_logging(app_config.logging)

    arguments = parse_arguments(arg, json_args)
    dispatcher = Dispatcher.from_config(app_config)

    with err_console.status(f"Running {operation}..."):
        envelope = dispatcher.dispatch(operation, arguments)

    if output_json:
        console.print_json(json.dumps(envelope.to_dict()))
    elif envelope.success:
        console.print(f"[green]✓[/green] {escape(envelope.message)}", highlight=False)
        if envelope.diagnostics:
            console.print(envelope.diagnostics, markup=False, style="dim")
    else:
        console.print(f"[red]✗ {envelope.error.value if envelope.error else 'error'}:[/red] ", end="")
        console.print(envelope.message, markup=False)
        if envelope.diagnostics:
            console.print(envelope.diagnostics, markup=False, style="dim")

    if not envelope.success:
        raise typer.Exit(1)


@app.command()
def check(config: ConfigOption = None):
    """Check external tools and show their locations."""
    app_config = get_config(config)
    tools = check_tools_status(app_config.tools)

    table = Table(title="External Tools")
    table.add_column("Tool", style="cyan")
    table.add_column("Status")
    table.add_column("Path", style="dim")

    for tool, path in tools.items():
        if path:
            status_str = "[green]Available[/green]"
            path_str = str(path)
        else:
            status_str = "[red]Missing[/red]"
            path_str = "-"
        table.add_row(tool, status_str, path_str)

    console.print(table)

    missing = [t for t, p in tools.items() if p is None]
    if missing:
        console.print("\n[yellow]Warning:[/yellow] Some tools are missing.")
        if "ffmpeg" in missing or "ffprobe" in missing:
            console.print("Install ffmpeg: sudo apt install ffmpeg (or set FFMPEG_PATH / FFPROBE_PATH)")
        if "whisper" in missing:
            console.print("Install whisper: pip install openai-whisper (or set WHISPER_PATH)")


def main_cli():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main_cli()
