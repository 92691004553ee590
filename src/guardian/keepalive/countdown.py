"""Countdown text for the next scheduled keep-alive cycle."""

from datetime import datetime

COUNTDOWN_UNSET = "--:--"
COUNTDOWN_DUE = "00:00"


def format_countdown(next_run_at: datetime | None, now: datetime) -> str:
    """Format the time remaining until ``next_run_at`` as ``MM:SS``.

    Never negative: once the scheduled time is reached the fixed
    ``00:00`` is returned until a new time is scheduled.

    Args:
        next_run_at: Scheduled time of the next cycle, or None if unknown.
        now: Current time, comparable with ``next_run_at``.

    Returns:
        ``MM:SS`` text, ``00:00`` when due, or ``--:--`` when unscheduled.
    """
    if next_run_at is None:
        return COUNTDOWN_UNSET
    remaining = int((next_run_at - now).total_seconds())
    if remaining <= 0:
        return COUNTDOWN_DUE
    minutes, seconds = divmod(remaining, 60)
    return f"{minutes:02d}:{seconds:02d}"
