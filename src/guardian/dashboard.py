"""Terminal dashboard for the keep-alive service.

Renders the session state (status, countdown, last success and the
activity log) with Rich. The dashboard only reads StateSnapshot objects;
it never writes session state.
"""

from __future__ import annotations

from rich.console import Console, Group, RenderableType
from rich.live import Live
from rich.markup import escape
from rich.panel import Panel
from rich.spinner import Spinner
from rich.table import Table
from rich.text import Text

from guardian.console import ENTRY_STYLES
from guardian.keepalive.countdown import COUNTDOWN_UNSET
from guardian.keepalive.state import RunStatus, StateSnapshot

STATUS_DISPLAY: dict[RunStatus, tuple[str, str]] = {
    RunStatus.IDLE: ("Idle. Waiting for next run.", "dim"),
    RunStatus.RUNNING: ("Running keep-alive task...", "bold cyan"),
    RunStatus.SUCCESS: ("Last run successful.", "green"),
    RunStatus.ERROR: ("Last run failed.", "red"),
}


def _status_text(status: RunStatus) -> Text:
    label, style = STATUS_DISPLAY[status]
    return Text.assemble(("● ", style), (label, "default"))


def _summary(snapshot: StateSnapshot, countdown: str) -> Table:
    table = Table.grid(expand=True, padding=(0, 2))
    table.add_column(ratio=2)
    table.add_column(ratio=1)
    table.add_column(ratio=2)
    table.add_row(
        Text("Status", style="bold"),
        Text("Next Run In", style="bold"),
        Text("Last Success", style="bold"),
    )
    last_run = snapshot.last_run_at
    table.add_row(
        _status_text(snapshot.status),
        Text(countdown or COUNTDOWN_UNSET, style="bold magenta"),
        Text(f"{last_run:%Y-%m-%d %H:%M:%S}" if last_run else "N/A", style="dim"),
    )
    return table


def _activity(snapshot: StateSnapshot, max_lines: int | None) -> RenderableType:
    if not snapshot.logs:
        return Text("No activity yet. Waiting for the first run...", style="dim italic")
    entries = snapshot.logs if max_lines is None else snapshot.logs[:max_lines]
    lines = Text()
    for index, entry in enumerate(entries):
        if index:
            lines.append("\n")
        lines.append(entry.render(), style=ENTRY_STYLES.get(entry.category.value, ""))
    return lines


def render_dashboard(
    snapshot: StateSnapshot,
    countdown: str,
    *,
    interval_minutes: float = 14.0,
    show_loading: bool = True,
    max_lines: int | None = None,
) -> RenderableType:
    """Build the dashboard renderable for one snapshot.

    Args:
        snapshot: Current session state.
        countdown: Pre-formatted countdown text.
        interval_minutes: Interval shown in the footer.
        show_loading: Show the loading view until the first result.
        max_lines: Maximum number of activity log lines to display; every
            retained entry is shown when None.
    """
    if snapshot.initializing and show_loading:
        return Panel(
            Spinner("dots", text=" Initializing keep-alive service..."),
            border_style="cyan",
            padding=(1, 2),
        )

    interval = f"{interval_minutes:g}"
    body = Group(
        Text("Keeping your backend service awake and responsive.", style="dim"),
        Text(),
        Panel(_summary(snapshot, countdown), border_style="dim"),
        Text("Activity Log", style="bold"),
        Panel(_activity(snapshot, max_lines), border_style="dim"),
    )
    return Panel(
        body,
        title="⚡ Backend Guardian",
        title_align="left",
        subtitle=f"[dim]Runs the keep-alive task every {escape(interval)} minutes.[/dim]",
        subtitle_align="left",
        border_style="cyan",
    )


class Dashboard:
    """Live terminal view over the keep-alive session state.

    Use ``update`` as the service's countdown tick callback::

        with Dashboard(settings.interval_minutes) as dashboard:
            service = KeepAliveService(sequencer, on_tick=dashboard.update)
    """

    def __init__(
        self,
        interval_minutes: float = 14.0,
        *,
        show_loading: bool = True,
        console: Console | None = None,
    ) -> None:
        self.interval_minutes = interval_minutes
        self.show_loading = show_loading
        self._live = Live(
            render_dashboard(
                StateSnapshot(),
                COUNTDOWN_UNSET,
                interval_minutes=interval_minutes,
                show_loading=show_loading,
            ),
            console=console,
            auto_refresh=False,
            transient=False,
        )

    def __enter__(self) -> Dashboard:
        self._live.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self._live.stop()

    def update(self, snapshot: StateSnapshot, countdown: str) -> None:
        self._live.update(
            render_dashboard(
                snapshot,
                countdown,
                interval_minutes=self.interval_minutes,
                show_loading=self.show_loading,
            ),
            refresh=True,
        )
