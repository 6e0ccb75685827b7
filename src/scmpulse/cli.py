"""scmpulse Command Line Interface.

Entry point for the scmpulse CLI tool. ``scmpulse emit`` acts as a host
adapter: a CI step runs it right after checkout and it fires one checkout
through the listener using the CI environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

import typer
from dynaconf.vendor.ruamel.yaml.parser import ParserError as YamlParserError
from dynaconf.vendor.ruamel.yaml.scanner import ScannerError as YamlScannerError
from pydantic import ValidationError

from scmpulse import __version__
from scmpulse.core.config import ScmPulseSettings, load_settings

if TYPE_CHECKING:
    from scmpulse.telemetry.protocols import TelemetrySinkProtocol

__all__ = ["app"]

app = typer.Typer(
    name="scmpulse",
    help="scmpulse: checkout telemetry for build pipelines.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"scmpulse version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables from a .env file.

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

    return load_dotenv(override=False)


def _format_error(
    title: str,
    message: str,
    hint: str | None = None,
    details: list[str] | None = None,
) -> None:
    """Display a formatted error with optional hint and details."""
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

    console.print(
        Panel(
            content,
            title=f"[red bold]{title}[/]",
            border_style="red",
            padding=(0, 1),
        )
    )


def _load_settings_or_exit(settings: str) -> ScmPulseSettings:
    settings_path = Path(settings).expanduser()
    try:
        return load_settings(settings_path)
    except (YamlParserError, YamlScannerError) as e:
        _format_error(
            title="YAML Syntax Error",
            message=f"Failed to parse {settings_path.name}",
            details=[str(e.problem)] if hasattr(e, "problem") else None,
            hint="Check for unclosed brackets, incorrect indentation, or invalid characters.",
        )
        raise typer.Exit(1) from None
    except FileNotFoundError:
        _format_error(
            title="File Not Found",
            message=f"Settings file does not exist: {settings}",
            hint="Check the path and ensure the file exists.",
        )
        raise typer.Exit(1) from None
    except ValidationError as e:
        details = [f"{'.'.join(str(x) for x in error['loc'])}: {error['msg']}" for error in e.errors()]
        _format_error(
            title="Configuration Validation Failed",
            message=f"Invalid settings in {settings_path.name}",
            details=details,
            hint="Check field names, types, and required values.",
        )
        raise typer.Exit(1) from None


def _create_sink_or_exit(settings: ScmPulseSettings) -> TelemetrySinkProtocol:
    from scmpulse.telemetry.errors import TelemetrySinkError
    from scmpulse.telemetry.factory import create_sink

    try:
        return create_sink(settings.sink)
    except TelemetrySinkError as e:
        _format_error(
            title="Sink Configuration Failed",
            message=str(e),
            hint="Check sink.name and sink.options in the settings file.",
        )
        raise typer.Exit(1) from None


@app.callback()
def main(
    ctx: typer.Context,
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
        exists=False,  # Existence is checked in _load_dotenv for a better message
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
    """scmpulse: checkout telemetry for build pipelines."""
    from scmpulse.core.logging import configure_logging

    configure_logging(json_output=json_logs, level="DEBUG" if verbose else "INFO")
    ctx.obj = {"verbose": verbose, "json_logs": json_logs}

    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho(
            "Warning: --env-file ignored because --no-dotenv is set.",
            fg=typer.colors.YELLOW,
            err=True,
        )


@app.command()
def emit(
    ctx: typer.Context,
    settings: str = typer.Option(
        ...,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
    job: str | None = typer.Option(
        None,
        "--job",
        "-j",
        help="Full job name (default: $JOB_NAME).",
    ),
) -> None:
    """Emit checkout telemetry for the current CI run.

    Telemetry failures are logged, never fatal: once settings and the sink
    load, the command exits 0.
    """
    from scmpulse.checkout.listener import CheckoutListener
    from scmpulse.contracts.build import RunContext
    from scmpulse.core.logging import configure_logging
    from scmpulse.host import EnvironmentRun, SettingsHost

    options: dict[str, Any] = ctx.obj or {}
    config = _load_settings_or_exit(settings)
    configure_logging(
        json_output=bool(options.get("json_logs")) or config.logging.json_output,
        level="DEBUG" if options.get("verbose") else config.logging.level,
    )

    job_name = job or os.environ.get("JOB_NAME")
    if not job_name:
        _format_error(
            title="Missing Job Name",
            message="No job name given and JOB_NAME is not set.",
            hint="Pass --job or export JOB_NAME.",
        )
        raise typer.Exit(1)

    try:
        run = EnvironmentRun.from_environ()
    except ValueError as e:
        _format_error(title="Invalid Build Environment", message=str(e), hint="BUILD_NUMBER must be an integer.")
        raise typer.Exit(1) from None

    workspace = os.environ.get("WORKSPACE")
    context = RunContext(
        job_full_name=job_name,
        run=run,
        output=None,
        workspace=Path(workspace) if workspace else None,
    )

    sink = _create_sink_or_exit(config)
    try:
        CheckoutListener(SettingsHost(config), sink, hostname=config.hostname).on_checkout(context)
    finally:
        sink.flush()
        sink.close()


@app.command()
def validate(
    settings: str = typer.Option(
        ...,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
) -> None:
    """Validate settings and sink configuration without sending anything."""
    config = _load_settings_or_exit(settings)
    sink = _create_sink_or_exit(config)
    sink.close()

    emitting = sum(1 for job in config.jobs if job.emit_on_checkout)
    typer.secho("Configuration valid", fg=typer.colors.GREEN)
    typer.echo(f"  Sink: {config.sink.name}")
    typer.echo(f"  Job rules: {len(config.jobs)} ({emitting} emitting on checkout)")
    typer.echo(f"  Whitelist: {len(config.whitelist)} pattern(s), blacklist: {len(config.blacklist)} pattern(s)")
    typer.echo(f"  Global tags: {len(config.global_tags)}, job tag patterns: {len(config.global_job_tags)}")


if __name__ == "__main__":
    app()
