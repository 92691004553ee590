"""Keep-alive cycle for idle-prone backends.

This package provides:
- BackendClient for the login/me/logout endpoints
- KeepAliveSequencer to run one login → verify → logout cycle
- KeepAliveService to repeat cycles and drive the countdown
- SessionState and friends for the in-memory status, log and timing
"""

from guardian.keepalive.client import BackendClient
from guardian.keepalive.countdown import format_countdown
from guardian.keepalive.sequencer import KeepAliveSequencer
from guardian.keepalive.service import KeepAliveService
from guardian.keepalive.state import (
    ActivityLog,
    LogCategory,
    LogEntry,
    RunStatus,
    RunTiming,
    SessionState,
    StateSnapshot,
)

__all__ = [
    # HTTP
    "BackendClient",
    # Cycle and scheduling
    "KeepAliveSequencer",
    "KeepAliveService",
    "format_countdown",
    # State management
    "ActivityLog",
    "LogCategory",
    "LogEntry",
    "RunStatus",
    "RunTiming",
    "SessionState",
    "StateSnapshot",
]
