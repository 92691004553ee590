"""Pytest configuration for guardian tests."""

import os
import sys
from pathlib import Path

import pytest
import structlog
from structlog._config import BoundLoggerLazyProxy

# Add src directory to sys.path for test imports
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate each test from the developer's environment.

    This fixture:
    - Removes every GUARDIAN_* environment variable
    - Runs the test from a temp directory so no stray .env file is read
    - Resets the global settings instance before each test
    """
    for name in list(os.environ):
        if name.startswith("GUARDIAN_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)

    from guardian.config import reset_settings

    reset_settings()

    return tmp_path


@pytest.fixture
def configured_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Provide a complete, valid keep-alive configuration."""
    monkeypatch.setenv("GUARDIAN_API_BASE_URL", "https://api.example.com")
    monkeypatch.setenv("GUARDIAN_KEEP_ALIVE_EMAIL", "bot@example.com")
    monkeypatch.setenv("GUARDIAN_KEEP_ALIVE_PASSWORD", "hunter2")

    from guardian.config import reset_settings

    reset_settings()


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Reset structlog after each test to prevent closed file handle errors.

    CliRunner captures stderr with a temporary file. When configure_logging()
    runs inside CliRunner, structlog binds loggers to that temp file. After
    the test, CliRunner closes the file. We reset structlog to prevent stale
    references.
    """
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
    for module in list(sys.modules.values()):
        for attr in getattr(module, "__dict__", {}).values():
            if isinstance(attr, BoundLoggerLazyProxy):
                attr.__dict__.pop("bind", None)
