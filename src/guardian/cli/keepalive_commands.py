"""Keep-alive CLI command — guardian run."""

import asyncio
import signal
from typing import Annotated

import typer

from guardian import console as gd_console
from guardian.config import GuardianSettings, get_settings
from guardian.dashboard import Dashboard
from guardian.exceptions import GuardianError
from guardian.keepalive.sequencer import KeepAliveSequencer
from guardian.keepalive.service import KeepAliveService
from guardian.keepalive.state import LogEntry, RunStatus, StateSnapshot
from guardian.logging import get_logger

LOG = get_logger(__name__)


class LogPrinter:
    """State subscriber that prints each new activity log entry once."""

    def __init__(self) -> None:
        self._last: LogEntry | None = None

    def __call__(self, snapshot: StateSnapshot) -> None:
        fresh: list[LogEntry] = []
        for entry in snapshot.logs:
            if entry is self._last:
                break
            fresh.append(entry)
        for entry in reversed(fresh):
            gd_console.print_entry(entry)
        if snapshot.logs:
            self._last = snapshot.logs[0]


async def _serve(service: KeepAliveService) -> None:
    """Run the service until SIGINT or SIGTERM."""
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    installed: list[signal.Signals] = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
            installed.append(sig)
        except (NotImplementedError, RuntimeError):
            # Windows: fall back to KeyboardInterrupt
            LOG.debug("signal_handler_unavailable", signal=sig.name)
    try:
        await service.run(stop_event)
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)


def _require_valid_config(settings: GuardianSettings) -> None:
    check = settings.check()
    if check.is_valid:
        return
    for name in check.missing_vars:
        gd_console.error(f"{name} is not set (or still the placeholder value)")
    gd_console.info("Set the variables in the environment or a .env file, then retry.")
    raise typer.Exit(1)


def run_keepalive(
    once: Annotated[
        bool,
        typer.Option("--once", help="Run a single cycle, print the log and exit"),
    ] = False,
    initial_delay: Annotated[
        float | None,
        typer.Option(
            "--initial-delay",
            min=0,
            help="Seconds before the first cycle (0 = immediately)",
        ),
    ] = None,
    interval: Annotated[
        float | None,
        typer.Option("--interval", min=0.1, help="Minutes between cycles"),
    ] = None,
    no_dashboard: Annotated[
        bool,
        typer.Option("--no-dashboard", help="Print log lines instead of the live dashboard"),
    ] = False,
) -> None:
    """Keep the backend awake with a login → verify → logout cycle."""
    settings = get_settings()
    if interval is not None:
        settings = settings.model_copy(update={"interval_minutes": interval})

    sequencer = KeepAliveSequencer(settings)

    if once:
        status = sequencer.run_cycle()
        for entry in reversed(sequencer.state.snapshot().logs):
            gd_console.print_entry(entry)
        raise typer.Exit(0 if status == RunStatus.SUCCESS else 1)

    _require_valid_config(settings)
    service = KeepAliveService(sequencer, initial_delay=initial_delay)

    try:
        if no_dashboard:
            unsubscribe = sequencer.state.subscribe(LogPrinter())
            try:
                asyncio.run(_serve(service))
            finally:
                unsubscribe()
        else:
            with Dashboard(
                settings.interval_minutes,
                show_loading=settings.show_loading,
                console=gd_console.out_console,
            ) as dashboard:
                service.on_tick = dashboard.update
                asyncio.run(_serve(service))
    except KeyboardInterrupt:
        pass
    except GuardianError as exc:
        gd_console.error(str(exc))
        raise typer.Exit(1) from None

    gd_console.info("Keep-alive stopped.")
