"""Tests for keep-alive state module."""

from datetime import datetime, timedelta, timezone

import pytest

from guardian.keepalive.state import (
    ActivityLog,
    LogCategory,
    LogEntry,
    RunStatus,
    RunTiming,
    SessionState,
    StateSnapshot,
)

T0 = datetime(2026, 1, 15, 9, 30, 5, tzinfo=timezone.utc)


def _entry(message: str, category: LogCategory = LogCategory.INFO) -> LogEntry:
    return LogEntry(timestamp=T0, message=message, category=category)


class TestRunStatus:
    def test_values(self):
        assert [s.value for s in RunStatus] == ["idle", "running", "success", "error"]

    def test_is_string(self):
        assert isinstance(RunStatus.SUCCESS, str)
        assert RunStatus.ERROR == "error"


class TestLogEntry:
    def test_render_with_icon(self):
        entry = _entry("Login successful", LogCategory.STEP_SUCCESS)
        assert entry.render() == "[09:30:05] ✅ Login successful"

    def test_render_plain_step_has_no_icon(self):
        entry = _entry("1/3: Logging in...", LogCategory.STEP)
        assert entry.render() == "[09:30:05] 1/3: Logging in..."

    def test_entries_are_immutable(self):
        entry = _entry("x")
        with pytest.raises(AttributeError):
            entry.message = "y"  # type: ignore[misc]

    @pytest.mark.parametrize("category", list(LogCategory))
    def test_every_category_has_an_icon_entry(self, category):
        assert isinstance(category.icon, str)


class TestActivityLog:
    def test_newest_first(self):
        log = ActivityLog()
        log.add(_entry("first"))
        log.add(_entry("second"))
        assert [e.message for e in log.entries()] == ["second", "first"]

    def test_capped_at_default_of_100(self):
        log = ActivityLog()
        for i in range(150):
            log.add(_entry(f"entry {i}"))
        entries = log.entries()
        assert len(entries) == 100
        assert entries[0].message == "entry 149"
        assert entries[-1].message == "entry 50"

    def test_custom_capacity(self):
        log = ActivityLog(max_entries=3)
        for i in range(5):
            log.add(_entry(str(i)))
        assert [e.message for e in log] == ["4", "3", "2"]
        assert log.max_entries == 3

    def test_rejects_zero_capacity(self):
        with pytest.raises(ValueError, match="at least 1"):
            ActivityLog(max_entries=0)


class TestStateSnapshot:
    def test_defaults(self):
        snapshot = StateSnapshot()
        assert snapshot.status == RunStatus.IDLE
        assert snapshot.logs == ()
        assert snapshot.timing == RunTiming()
        assert snapshot.initializing is True
        assert snapshot.last_run_at is None
        assert snapshot.next_run_at is None


class TestSessionState:
    def test_initial_state(self):
        snapshot = SessionState().snapshot()
        assert snapshot.status == RunStatus.IDLE
        assert snapshot.logs == ()
        assert snapshot.initializing is True

    def test_add_log_returns_entry(self):
        state = SessionState()
        entry = state.add_log("hello", LogCategory.START, timestamp=T0)
        assert entry == LogEntry(T0, "hello", LogCategory.START)
        assert state.snapshot().logs == (entry,)

    def test_log_never_exceeds_cap(self):
        state = SessionState(max_log_entries=5)
        for i in range(12):
            state.add_log(f"m{i}", timestamp=T0)
            assert len(state.snapshot().logs) <= 5
        assert state.snapshot().logs[0].message == "m11"

    def test_mark_success_sets_status_and_last_run(self):
        state = SessionState()
        state.mark_success(T0)
        snapshot = state.snapshot()
        assert snapshot.status == RunStatus.SUCCESS
        assert snapshot.last_run_at == T0

    def test_schedule_next_keeps_last_run(self):
        state = SessionState()
        state.mark_success(T0)
        state.schedule_next(T0 + timedelta(minutes=14))
        timing = state.snapshot().timing
        assert timing.last_run_at == T0
        assert timing.next_run_at == T0 + timedelta(minutes=14)

    def test_snapshot_is_detached(self):
        state = SessionState()
        before = state.snapshot()
        state.set_status(RunStatus.RUNNING)
        assert before.status == RunStatus.IDLE
        assert state.snapshot().status == RunStatus.RUNNING

    def test_finish_initializing(self):
        state = SessionState()
        state.finish_initializing()
        state.finish_initializing()
        assert state.snapshot().initializing is False


class TestSubscriptions:
    def test_subscriber_receives_snapshot_after_each_change(self):
        state = SessionState()
        seen: list[StateSnapshot] = []
        state.subscribe(seen.append)

        state.set_status(RunStatus.RUNNING)
        state.add_log("working", timestamp=T0)

        assert [s.status for s in seen] == [RunStatus.RUNNING, RunStatus.RUNNING]
        assert seen[-1].logs[0].message == "working"

    def test_unsubscribe_stops_notifications(self):
        state = SessionState()
        seen: list[StateSnapshot] = []
        unsubscribe = state.subscribe(seen.append)
        unsubscribe()
        unsubscribe()
        state.set_status(RunStatus.ERROR)
        assert seen == []

    def test_failing_subscriber_does_not_break_writer(self):
        state = SessionState()
        seen: list[StateSnapshot] = []

        def broken(snapshot: StateSnapshot) -> None:
            raise RuntimeError("render failed")

        state.subscribe(broken)
        state.subscribe(seen.append)
        state.set_status(RunStatus.SUCCESS)

        assert state.snapshot().status == RunStatus.SUCCESS
        assert len(seen) == 1

    def test_subscriber_may_read_state(self):
        state = SessionState()
        statuses: list[RunStatus] = []
        state.subscribe(lambda _: statuses.append(state.snapshot().status))
        state.set_status(RunStatus.RUNNING)
        assert statuses == [RunStatus.RUNNING]
