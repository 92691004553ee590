"""guardian - keep an idle-prone backend awake.

Periodically logs in, verifies the session and logs out again against a
backend's auth API so free-tier hosts never see it as idle.

This package provides:
- A keep-alive sequencer with status, countdown and activity log state
- An asyncio service driving the cycle and countdown timers
- A Rich terminal dashboard and a Typer CLI (``guardian run``)

Example:
    >>> from guardian import KeepAliveSequencer, get_settings
    >>> sequencer = KeepAliveSequencer(get_settings())
    >>> sequencer.run_cycle()
    <RunStatus.SUCCESS: 'success'>
"""

from guardian.config import GuardianSettings, get_settings
from guardian.exceptions import (
    AuthenticationError,
    ConfigurationError,
    GuardianError,
    KeepaliveError,
    ServerError,
    TransportError,
)
from guardian.keepalive import (
    BackendClient,
    KeepAliveSequencer,
    KeepAliveService,
    LogEntry,
    RunStatus,
    SessionState,
    StateSnapshot,
)

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Keep-alive
    "BackendClient",
    "KeepAliveSequencer",
    "KeepAliveService",
    "LogEntry",
    "RunStatus",
    "SessionState",
    "StateSnapshot",
    # Configuration
    "GuardianSettings",
    "get_settings",
    # Exceptions
    "GuardianError",
    "ConfigurationError",
    "KeepaliveError",
    "TransportError",
    "ServerError",
    "AuthenticationError",
]
