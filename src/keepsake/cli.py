# src/keepsake/cli.py
"""keepsake Command Line Interface.

Entry point for the keepsake CLI tool.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import typer
from dynaconf.vendor.ruamel.yaml.parser import ParserError as YamlParserError
from dynaconf.vendor.ruamel.yaml.scanner import ScannerError as YamlScannerError
from pydantic import ValidationError

from keepsake import __version__
from keepsake.contracts.errors import HistoryLoadError, RetentionCapacityError
from keepsake.core.config import (
    DEFAULT_RELEASES_TO_KEEP,
    KeepsakeSettings,
    load_settings,
    resolve_config,
)

__all__ = [
    "app",
    "load_settings",  # Re-exported from config for convenience
]

app = typer.Typer(
    name="keepsake",
    help="keepsake: decide which releases to keep from a deployment history.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"keepsake version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables from .env file.

    Args:
        env_file: Explicit path to .env file. If None, searches for .env
                 in current directory and parent directories.

    Returns:
        True if .env was found and loaded, False otherwise.

    Raises:
        typer.Exit: If explicit env_file path doesn't exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(
                f"Error: .env file not found: {env_file}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(1)
        return load_dotenv(env_file, override=False)

    return load_dotenv(override=False)  # Don't override existing env vars


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_dotenv: bool = typer.Option(
        False,
        "--no-dotenv",
        help="Skip loading .env file.",
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (skips automatic search).",
        exists=False,  # Existence is checked in _load_dotenv for a clearer message
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """keepsake: decide which releases to keep from a deployment history."""
    from keepsake.core.logging import configure_logging

    # Logging is quiet unless asked for: results go to stdout via formatters
    log_level = "DEBUG" if verbose else "WARNING"
    configure_logging(json_output=json_logs, level=log_level)

    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho(
            "Warning: --env-file ignored because --no-dotenv is set.",
            fg=typer.colors.YELLOW,
            err=True,
        )


def _format_validation_error(
    title: str,
    message: str,
    hint: str | None = None,
    details: list[str] | None = None,
) -> None:
    """Display a formatted validation error with optional hint and details."""
    from rich.console import Console
    from rich.panel import Panel
    from rich.text import Text

    console = Console(stderr=True)

    content = Text()
    content.append(message, style="white")

    if details:
        content.append("\n\n")
        for detail in details:
            content.append(f"  • {detail}\n", style="dim")

    if hint:
        content.append("\n")
        content.append("Hint: ", style="yellow bold")
        content.append(hint, style="yellow")

    panel = Panel(
        content,
        title=f"[red bold]❌ {title}[/]",
        border_style="red",
        padding=(0, 1),
    )
    console.print(panel)


def _load_settings_or_exit(settings_path: Path) -> KeepsakeSettings:
    """Load settings, rendering any failure as a formatted error and exit code 1."""
    try:
        return load_settings(settings_path)
    except (YamlParserError, YamlScannerError) as e:
        _format_validation_error(
            title="YAML Syntax Error",
            message=f"Failed to parse {settings_path.name}",
            details=[str(e.problem)] if hasattr(e, "problem") else None,
            hint="Check for unclosed brackets, incorrect indentation, or invalid characters.",
        )
        raise typer.Exit(1) from None
    except FileNotFoundError:
        _format_validation_error(
            title="File Not Found",
            message=f"Settings file does not exist: {settings_path}",
            hint="Check the path and ensure the file exists.",
        )
        raise typer.Exit(1) from None
    except ValidationError as e:
        details = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            details.append(f"{loc}: {error['msg']}")
        _format_validation_error(
            title="Configuration Validation Failed",
            message=f"Invalid settings in {settings_path.name}",
            details=details,
            hint="Check field names, types, and required values.",
        )
        raise typer.Exit(1) from None


@app.command()
def keep(
    history: str | None = typer.Option(
        None,
        "--history",
        "-H",
        help="Path to deployment history file (YAML or JSON). Defaults to history.path from settings.",
    ),
    settings: str | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
    releases_to_keep: int | None = typer.Option(
        None,
        "--releases-to-keep",
        "-n",
        help=f"Releases to keep per project/environment (default: from settings or {DEFAULT_RELEASES_TO_KEEP}).",
    ),
    output_format: Literal["console", "json"] = typer.Option(
        "console",
        "--format",
        "-f",
        help="Output format: console (human-readable) or json (JSON lines).",
    ),
    show_skipped: bool = typer.Option(
        False,
        "--show-skipped",
        help="Report deployments skipped because of unknown references (console format).",
    ),
) -> None:
    """Compute which releases must be kept.

    Keeps the N most recently deployed distinct releases for every
    (project, environment) pair and prints why each one was kept.

    Examples:

        # Keep the 3 most recent releases per project/environment
        keepsake keep --history ./history.yaml -n 3

        # Machine-readable output
        keepsake keep --history ./history.json --format json
    """
    from keepsake.cli_formatters import (
        create_console_formatters,
        create_json_formatters,
        subscribe_formatters,
    )
    from keepsake.core.events import EventBus
    from keepsake.core.history import load_history
    from keepsake.core.retention import RetentionCoordinator

    config: KeepsakeSettings | None = None
    if settings is not None:
        config = _load_settings_or_exit(Path(settings).expanduser())

    # History path: CLI override > config
    if history is not None:
        history_path = Path(history).expanduser()
    elif config is not None and config.history.path is not None:
        history_path = config.history.path.expanduser()
    else:
        typer.echo("Error: No deployment history given.", err=True)
        typer.echo("Specify --history or set history.path in settings.", err=True)
        raise typer.Exit(1)

    # Releases to keep: CLI override > config > default
    if releases_to_keep is not None:
        effective_releases_to_keep = releases_to_keep
    elif config is not None:
        effective_releases_to_keep = config.retention.releases_to_keep
    else:
        effective_releases_to_keep = DEFAULT_RELEASES_TO_KEEP

    try:
        deployment_history = load_history(history_path)
    except HistoryLoadError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    event_bus = EventBus()
    if output_format == "json":
        subscribe_formatters(event_bus, create_json_formatters())
    else:
        subscribe_formatters(event_bus, create_console_formatters(show_skipped=show_skipped))

    try:
        coordinator = RetentionCoordinator(effective_releases_to_keep, event_bus=event_bus)
    except RetentionCapacityError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    coordinator.compute(
        deployment_history.projects,
        deployment_history.environments,
        deployment_history.releases,
        deployment_history.deployments,
    )


@app.command()
def validate(
    settings: str = typer.Option(
        ...,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
) -> None:
    """Validate settings without computing anything."""
    import json

    settings_path = Path(settings).expanduser()
    config = _load_settings_or_exit(settings_path)

    typer.echo("✅ Settings valid!")
    typer.echo(f"  Releases to keep: {config.retention.releases_to_keep}")
    history_path = config.history.path
    typer.echo(f"  History: {history_path if history_path is not None else '(not set)'}")
    typer.echo(json.dumps(resolve_config(config), indent=2))


if __name__ == "__main__":
    app()
