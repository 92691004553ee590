"""Keep-alive sequencer: one login → verify → logout cycle.

The sequencer owns the SessionState and is its only writer. Each call to
``run_cycle`` validates configuration, performs the three backend calls in
order (stopping at the first failure), records the outcome, and always
stamps the next scheduled run.
"""

from collections.abc import Callable
from datetime import datetime

from guardian.config import GuardianSettings
from guardian.exceptions import KeepaliveError
from guardian.keepalive.client import BackendClient
from guardian.keepalive.state import LogCategory, RunStatus, SessionState
from guardian.logging import cycle_context, get_logger

LOG = get_logger(__name__)

Clock = Callable[[], datetime]
ClientFactory = Callable[[GuardianSettings], BackendClient]


def local_now() -> datetime:
    """Current local time, timezone-aware."""
    return datetime.now().astimezone()


def default_client_factory(settings: GuardianSettings) -> BackendClient:
    return BackendClient(settings.api_base_url or "", timeout=settings.request_timeout)


class KeepAliveSequencer:
    """Runs keep-alive cycles against the configured backend."""

    def __init__(
        self,
        settings: GuardianSettings,
        state: SessionState | None = None,
        client_factory: ClientFactory = default_client_factory,
        clock: Clock = local_now,
    ) -> None:
        self.settings = settings
        self.state = state or SessionState(max_log_entries=settings.max_log_entries)
        self._client_factory = client_factory
        self.clock = clock
        self._cycles = 0

    def _log(self, message: str, category: LogCategory) -> None:
        self.state.add_log(message, category, timestamp=self.clock())

    def record_config_error(self, missing_vars: list[str], prefix: str) -> None:
        """Record an invalid-configuration failure without touching the network."""
        self._log(f"{prefix}: {', '.join(missing_vars)}", LogCategory.ERROR)
        self.state.set_status(RunStatus.ERROR)
        self.state.finish_initializing()
        LOG.error("keepalive_config_invalid", missing_vars=missing_vars)

    def run_cycle(self) -> RunStatus:
        """Run one complete keep-alive cycle.

        Every failure, including unexpected exceptions from the client, is
        recorded in the session state rather than raised. The completion
        time is read once and used for both ``last_run_at`` and
        ``next_run_at``.

        Returns:
            The resulting status, either SUCCESS or ERROR.
        """
        self._cycles += 1
        with cycle_context(self._cycles, self.settings.api_base_url):
            check = self.settings.check()
            if check.is_valid:
                status = self._run_sequence()
            else:
                self.record_config_error(
                    check.missing_vars, "Missing required environment variables"
                )
                status = RunStatus.ERROR

            completed_at = self.clock()
            if status == RunStatus.SUCCESS:
                self.state.mark_success(completed_at)
                self._log("Keep-alive cycle completed successfully", LogCategory.SUCCESS)
                LOG.info("keepalive_cycle_succeeded")
            self._schedule_next(completed_at)
            return status

    def _run_sequence(self) -> RunStatus:
        self.state.set_status(RunStatus.RUNNING)
        self._log("Starting keep-alive sequence...", LogCategory.START)
        LOG.info("keepalive_cycle_started")

        client: BackendClient | None = None
        try:
            client = self._client_factory(self.settings)

            self._log("1/3: Logging in...", LogCategory.STEP)
            client.login(self.settings.keep_alive_email or "", self.settings.password or "")
            self._log("Login successful", LogCategory.STEP_SUCCESS)

            self._log("2/3: Verifying session...", LogCategory.STEP)
            account = client.me()
            self._log(
                f"Session active for: {account.get('email') or 'N/A'}",
                LogCategory.STEP_SUCCESS,
            )

            self._log("3/3: Logging out...", LogCategory.STEP)
            client.logout()
            self._log("Logout successful", LogCategory.STEP_SUCCESS)
            return RunStatus.SUCCESS

        except KeepaliveError as exc:
            self._log(f"Error: {exc.describe()}", LogCategory.ERROR)
            self.state.set_status(RunStatus.ERROR)
            LOG.warning(
                "keepalive_cycle_failed",
                error=exc.message,
                error_type=type(exc).__name__,
                status_code=exc.status_code,
            )
            if (
                client is not None
                and exc.status_code == 401
                and self.settings.cleanup_on_auth_error
            ):
                self._clear_session(client)
            return RunStatus.ERROR

        except Exception as exc:
            # Any other failure still ends the cycle in ERROR.
            self._log(f"Error: {str(exc) or type(exc).__name__}", LogCategory.ERROR)
            self.state.set_status(RunStatus.ERROR)
            LOG.exception("keepalive_cycle_crashed", error_type=type(exc).__name__)
            return RunStatus.ERROR

        finally:
            if client is not None:
                client.close()

    def _clear_session(self, client: BackendClient) -> None:
        """Best-effort logout after a 401 so no half-open session lingers."""
        try:
            client.logout()
        except KeepaliveError as exc:
            LOG.debug("session_cleanup_failed", error=exc.message, status_code=exc.status_code)
            return
        self._log("Cleared invalid session", LogCategory.INFO)

    def _schedule_next(self, completed_at: datetime) -> None:
        next_run_at = completed_at + self.settings.interval
        self.state.schedule_next(next_run_at)
        self._log(f"Next run at: {next_run_at:%H:%M:%S}", LogCategory.SCHEDULE)
        self.state.finish_initializing()
        LOG.info("keepalive_next_run_scheduled", next_run_at=next_run_at.isoformat())
