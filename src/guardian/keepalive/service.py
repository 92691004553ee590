"""Keep-alive service: the two repeating timers.

Runs on a single asyncio event loop with two independent tasks:

- the cycle timer, which runs one cycle after the initial delay and then
  again whenever the recorded ``next_run_at`` comes due
- the countdown timer, which fires ``on_tick`` once per tick so the
  presentation layer can refresh its countdown

Cycles are executed in a worker thread so blocking HTTP calls never stall
the countdown. A cycle is awaited before the next one is scheduled, so at
most one is ever in flight.
"""

import asyncio
from collections.abc import Callable

from guardian.exceptions import ConfigurationError
from guardian.keepalive.countdown import format_countdown
from guardian.keepalive.sequencer import KeepAliveSequencer
from guardian.keepalive.state import SessionState, StateSnapshot
from guardian.logging import get_logger

LOG = get_logger(__name__)

TickCallback = Callable[[StateSnapshot, str], None]


async def _wait_or_stop(stop_event: asyncio.Event, seconds: float) -> bool:
    """Sleep for ``seconds`` unless stopped first.

    Returns:
        True if the stop event was set.
    """
    if stop_event.is_set():
        return True
    try:
        await asyncio.wait_for(stop_event.wait(), timeout=max(seconds, 0.0))
    except TimeoutError:
        return False
    return True


class KeepAliveService:
    """Schedules keep-alive cycles and countdown ticks until stopped."""

    def __init__(
        self,
        sequencer: KeepAliveSequencer,
        *,
        initial_delay: float | None = None,
        tick_seconds: float = 1.0,
        on_tick: TickCallback | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            sequencer: Sequencer that runs the cycles and owns the state.
            initial_delay: Seconds before the first cycle; defaults to the
                sequencer's ``initial_delay_seconds`` setting.
            tick_seconds: Period of the countdown timer.
            on_tick: Called with the current snapshot and countdown text on
                every countdown tick.
        """
        self.sequencer = sequencer
        self.initial_delay = (
            sequencer.settings.initial_delay_seconds if initial_delay is None else initial_delay
        )
        self.tick_seconds = tick_seconds
        self.on_tick = on_tick

    @property
    def state(self) -> SessionState:
        return self.sequencer.state

    def _seconds_until_next_run(self) -> float:
        next_run_at = self.state.snapshot().next_run_at
        if next_run_at is None:
            return self.sequencer.settings.interval.total_seconds()
        return (next_run_at - self.sequencer.clock()).total_seconds()

    async def _cycle_loop(self, stop_event: asyncio.Event) -> None:
        if await _wait_or_stop(stop_event, self.initial_delay):
            return
        while not stop_event.is_set():
            status = await asyncio.to_thread(self.sequencer.run_cycle)
            LOG.debug("keepalive_cycle_finished", status=status.value)
            if await _wait_or_stop(stop_event, self._seconds_until_next_run()):
                return

    async def _countdown_loop(self, stop_event: asyncio.Event) -> None:
        while not stop_event.is_set():
            if self.on_tick is not None:
                snapshot = self.state.snapshot()
                countdown = format_countdown(snapshot.next_run_at, self.sequencer.clock())
                try:
                    self.on_tick(snapshot, countdown)
                except Exception as exc:
                    LOG.exception("countdown_tick_failed", error=str(exc))
            if await _wait_or_stop(stop_event, self.tick_seconds):
                return

    async def run(self, stop_event: asyncio.Event | None = None) -> None:
        """Run both timers until ``stop_event`` is set.

        Raises:
            ConfigurationError: If the configuration is invalid at startup.
                The failure is recorded in the session state first and no
                timer is started.
        """
        check = self.sequencer.settings.check()
        if not check.is_valid:
            self.sequencer.record_config_error(
                check.missing_vars, "Missing environment variables"
            )
            raise ConfigurationError(check.missing_vars)

        stop = stop_event or asyncio.Event()
        LOG.info(
            "keepalive_service_started",
            interval_minutes=self.sequencer.settings.interval_minutes,
            initial_delay=self.initial_delay,
        )
        tasks = [
            asyncio.create_task(self._cycle_loop(stop), name="guardian-cycle"),
            asyncio.create_task(self._countdown_loop(stop), name="guardian-countdown"),
        ]
        waiter = asyncio.create_task(stop.wait(), name="guardian-stop")
        try:
            done, _ = await asyncio.wait([waiter, *tasks], return_when=asyncio.FIRST_COMPLETED)
            for task in done:
                if task is not waiter and not task.cancelled() and task.exception() is not None:
                    raise task.exception()
        finally:
            for task in (waiter, *tasks):
                task.cancel()
            await asyncio.gather(waiter, *tasks, return_exceptions=True)
            LOG.info("keepalive_service_stopped")
