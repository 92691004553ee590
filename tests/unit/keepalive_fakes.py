"""Fakes shared by the keep-alive unit tests."""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

START = datetime(2026, 1, 15, 9, 30, 0, tzinfo=timezone.utc)


class FakeClock:
    """Deterministic clock that only moves when told to."""

    def __init__(self, start: datetime = START) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class TickingClock(FakeClock):
    """Clock that moves forward by ``step`` on every read."""

    def __init__(
        self, start: datetime = START, step: timedelta = timedelta(milliseconds=1)
    ) -> None:
        super().__init__(start)
        self.step = step

    def __call__(self) -> datetime:
        self.now += self.step
        return self.now


class FakeBackendClient:
    """Stand-in for BackendClient that records calls.

    Each step can be given an exception to raise; a list of exceptions is
    consumed one per call, so a second logout can behave differently from
    the first.
    """

    def __init__(
        self,
        login_error: Exception | None = None,
        me_error: Exception | None = None,
        logout_errors: list[Exception | None] | None = None,
        account: dict[str, Any] | None = None,
    ) -> None:
        self.login_error = login_error
        self.me_error = me_error
        self.logout_errors = list(logout_errors or [])
        self.account = {"email": "bot@example.com"} if account is None else account
        self.calls: list[str] = []
        self.closed = False

    def login(self, email: str, password: str) -> dict[str, Any]:
        self.calls.append("login")
        self.credentials = (email, password)
        if self.login_error is not None:
            raise self.login_error
        return {"user": {"email": email}}

    def me(self) -> dict[str, Any]:
        self.calls.append("me")
        if self.me_error is not None:
            raise self.me_error
        return self.account

    def logout(self) -> None:
        self.calls.append("logout")
        if self.logout_errors:
            error = self.logout_errors.pop(0)
            if error is not None:
                raise error

    def close(self) -> None:
        self.closed = True


def factory_for(client: FakeBackendClient) -> Callable[[Any], FakeBackendClient]:
    """Build a client_factory that always hands out ``client``."""

    def _factory(settings: Any) -> FakeBackendClient:
        return client

    return _factory


def close_coro_and_raise(exc: BaseException) -> Callable[[Any], Any]:
    """Create a side_effect for a mocked asyncio.run() that raises ``exc``.

    The coroutine passed to asyncio.run() is closed first so it does not
    trigger "never awaited" RuntimeWarnings.
    """

    def _side_effect(coro: Any) -> Any:
        if hasattr(coro, "close"):
            coro.close()
        raise exc

    return _side_effect
