"""Keep-alive session state.

This module holds the in-memory state that the sequencer writes and the
presentation layer reads: the run status, the bounded activity log and the
run timing. Nothing here is persisted; state lives as long as the process.
"""

import threading
from collections import deque
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import StrEnum

from guardian.logging import get_logger

LOG = get_logger(__name__)

DEFAULT_MAX_LOG_ENTRIES = 100


class RunStatus(StrEnum):
    """Outcome of the most recent (or in-progress) keep-alive cycle."""

    IDLE = "idle"
    RUNNING = "running"
    SUCCESS = "success"
    ERROR = "error"


class LogCategory(StrEnum):
    """Category of an activity log entry.

    Each category renders with a short icon prefix; plain step
    announcements carry none.
    """

    START = "start"
    STEP = "step"
    STEP_SUCCESS = "step_success"
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"
    SCHEDULE = "schedule"

    @property
    def icon(self) -> str:
        return _ICONS[self]


_ICONS: dict[LogCategory, str] = {
    LogCategory.START: "🚀",
    LogCategory.STEP: "",
    LogCategory.STEP_SUCCESS: "✅",
    LogCategory.SUCCESS: "🔄",
    LogCategory.ERROR: "❌",
    LogCategory.INFO: "ℹ️",
    LogCategory.SCHEDULE: "⏭️",
}


@dataclass(frozen=True)
class LogEntry:
    """A single timestamped activity log message.

    Attributes:
        timestamp: When the entry was recorded.
        message: Human-readable text, without icon or timestamp.
        category: Category used for the icon prefix and styling.
    """

    timestamp: datetime
    message: str
    category: LogCategory = LogCategory.INFO

    def render(self) -> str:
        """Render as ``[HH:MM:SS] <icon> <message>``."""
        icon = self.category.icon
        body = f"{icon} {self.message}" if icon else self.message
        return f"[{self.timestamp:%H:%M:%S}] {body}"


class ActivityLog:
    """Bounded activity log, newest entry first.

    Once ``max_entries`` is exceeded the oldest entries are discarded.
    Not thread-safe on its own; SessionState serializes access.
    """

    def __init__(self, max_entries: int = DEFAULT_MAX_LOG_ENTRIES) -> None:
        if max_entries < 1:
            raise ValueError(f"max_entries must be at least 1, got {max_entries}")
        self._entries: deque[LogEntry] = deque(maxlen=max_entries)

    @property
    def max_entries(self) -> int:
        return self._entries.maxlen or 0

    def add(self, entry: LogEntry) -> None:
        self._entries.appendleft(entry)

    def entries(self) -> tuple[LogEntry, ...]:
        """Entries, newest first."""
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LogEntry]:
        return iter(tuple(self._entries))


@dataclass(frozen=True)
class RunTiming:
    """Timing of keep-alive cycles.

    Attributes:
        last_run_at: Completion time of the last successful cycle.
        next_run_at: When the next cycle is scheduled.
    """

    last_run_at: datetime | None = None
    next_run_at: datetime | None = None


@dataclass(frozen=True)
class StateSnapshot:
    """Read-only view of the session state handed to the presentation layer."""

    status: RunStatus = RunStatus.IDLE
    logs: tuple[LogEntry, ...] = ()
    timing: RunTiming = field(default_factory=RunTiming)
    initializing: bool = True

    @property
    def last_run_at(self) -> datetime | None:
        return self.timing.last_run_at

    @property
    def next_run_at(self) -> datetime | None:
        return self.timing.next_run_at


Subscriber = Callable[[StateSnapshot], None]


class SessionState:
    """Single-writer store for the keep-alive session.

    The sequencer is the only writer. Readers either take a ``snapshot()``
    or ``subscribe()`` to be called with a fresh snapshot after each change.
    A lock guards the fields because cycles run in a worker thread while
    the countdown timer reads from the event loop thread.
    """

    def __init__(self, max_log_entries: int = DEFAULT_MAX_LOG_ENTRIES) -> None:
        self._lock = threading.Lock()
        self._status = RunStatus.IDLE
        self._log = ActivityLog(max_log_entries)
        self._timing = RunTiming()
        self._initializing = True
        self._subscribers: list[Subscriber] = []

    def snapshot(self) -> StateSnapshot:
        with self._lock:
            return self._snapshot_locked()

    def _snapshot_locked(self) -> StateSnapshot:
        return StateSnapshot(
            status=self._status,
            logs=self._log.entries(),
            timing=self._timing,
            initializing=self._initializing,
        )

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback for state changes.

        Returns:
            A function that removes the subscription.
        """
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self, snapshot: StateSnapshot, subscribers: Iterable[Subscriber]) -> None:
        for callback in subscribers:
            try:
                callback(snapshot)
            except Exception as exc:
                LOG.exception("state_subscriber_failed", error=str(exc))

    def _commit(self, mutate: Callable[[], None]) -> None:
        with self._lock:
            mutate()
            snapshot = self._snapshot_locked()
            subscribers = list(self._subscribers)
        # Callbacks run outside the lock so they may read state again.
        self._notify(snapshot, subscribers)

    def set_status(self, status: RunStatus) -> None:
        def mutate() -> None:
            self._status = status

        self._commit(mutate)

    def add_log(
        self,
        message: str,
        category: LogCategory = LogCategory.INFO,
        *,
        timestamp: datetime | None = None,
    ) -> LogEntry:
        """Append an entry to the front of the activity log."""
        entry = LogEntry(
            timestamp=timestamp or datetime.now().astimezone(),
            message=message,
            category=category,
        )
        self._commit(lambda: self._log.add(entry))
        return entry

    def mark_success(self, completed_at: datetime) -> None:
        """Record a successful cycle completion."""

        def mutate() -> None:
            self._status = RunStatus.SUCCESS
            self._timing = replace(self._timing, last_run_at=completed_at)

        self._commit(mutate)

    def schedule_next(self, next_run_at: datetime) -> None:
        def mutate() -> None:
            self._timing = replace(self._timing, next_run_at=next_run_at)

        self._commit(mutate)

    def finish_initializing(self) -> None:
        if not self._initializing:
            return

        def mutate() -> None:
            self._initializing = False

        self._commit(mutate)
