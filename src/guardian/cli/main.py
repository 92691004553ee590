"""guardian CLI - keep an idle-prone backend awake.

Runs the keep-alive cycle from the terminal.
"""

import os
from typing import Annotated

import typer
from rich.console import Console
from rich.panel import Panel

import guardian
from guardian import console as gd_console
from guardian.cli.keepalive_commands import run_keepalive
from guardian.config import PLACEHOLDER_BASE_URL, get_settings
from guardian.logging import configure_logging, enable_network_debug, get_logger

# Configure logging early using env vars directly so a broken .env file
# can't stop the CLI from loading. -v/-vv and --log-format may reconfigure later.
configure_logging(
    level=os.environ.get("GUARDIAN_LOG_LEVEL", "WARNING"),
    json_output=os.environ.get("GUARDIAN_LOG_FORMAT", "console") == "json",
)

LOG = get_logger(__name__)

app = typer.Typer(
    name="guardian",
    help="""
    ⚡ guardian - keep your backend service awake

    Logs in, verifies the session and logs out on a fixed interval
    so free-tier hosts never put the backend to sleep.

    \b
    Quick start:
      guardian check           Validate the configuration
      guardian run             Start the live dashboard
      guardian run --once      Run a single cycle and exit
      guardian config          Show current configuration
    """,
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)
console = Console()


@app.callback(invoke_without_command=True)
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            count=True,
            help="Increase verbosity (-v for info, -vv for debug)",
        ),
    ] = 0,
    log_format: Annotated[
        str | None,
        typer.Option(
            "--log-format",
            help="Log output format: console (human-readable) or json (structured)",
        ),
    ] = None,
    network_debug: Annotated[
        bool,
        typer.Option(
            "--network-debug",
            help="Enable HTTP wire debug logging (urllib3, http.client)",
        ),
    ] = False,
) -> None:
    """guardian - keep your backend service awake."""
    settings = get_settings()
    json_output = (log_format or settings.log_format) == "json"

    # Reconfigure logging if -v flags or --log-format override the settings default
    if verbose >= 2:
        configure_logging(level="DEBUG", json_output=json_output)
    elif verbose >= 1:
        configure_logging(level="INFO", json_output=json_output)
    elif log_format is not None:
        configure_logging(level=settings.log_level, json_output=json_output)

    if network_debug:
        enable_network_debug()


app.command("run")(run_keepalive)


@app.command("version")
def version() -> None:
    """Show guardian version."""
    console.print(
        Panel(
            f"[bold cyan]backend-guardian[/bold cyan] v{guardian.__version__}",
            title="Keep your backend awake",
            border_style="cyan",
        )
    )


@app.command("check")
def check() -> None:
    """Validate the keep-alive configuration without calling the backend."""
    settings = get_settings()
    result = settings.check()

    if not result.is_valid:
        for name in result.missing_vars:
            if name.endswith("API_BASE_URL") and settings.api_base_url == PLACEHOLDER_BASE_URL:
                gd_console.error(f"{name} is still the placeholder {PLACEHOLDER_BASE_URL}")
            else:
                gd_console.error(f"{name} is not set")
        raise typer.Exit(1)

    gd_console.success("Configuration is valid")
    gd_console.info(f"Target: {settings.api_base_url}")


@app.command("config")
def config() -> None:
    """Show current guardian configuration."""
    settings = get_settings()

    password_display = "********" if settings.password else "[red](not set)[/red]"
    info = f"""
[dim]Backend URL:[/dim]      {settings.api_base_url or "[red](not set)[/red]"}
[dim]Account email:[/dim]    {settings.keep_alive_email or "[red](not set)[/red]"}
[dim]Password:[/dim]         {password_display}
[dim]Interval:[/dim]         {settings.interval_minutes:g} minutes
[dim]Initial delay:[/dim]    {settings.initial_delay_seconds:g}s
[dim]Request timeout:[/dim]  {settings.request_timeout:g}s
[dim]401 cleanup:[/dim]      {"yes" if settings.cleanup_on_auth_error else "no"}
[dim]Log entries kept:[/dim] {settings.max_log_entries}
[dim]Log level:[/dim]        {settings.log_level}
[dim]Log format:[/dim]       {settings.log_format}"""

    console.print(Panel(info.strip(), title="⚙ Configuration", border_style="cyan"))


if __name__ == "__main__":
    app()
