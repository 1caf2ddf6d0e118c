"""
Tests for application wiring in app.main: log filters and log level.
"""

import logging

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.main import _PollNoiseFilter, create_app


def _access_record(path: str) -> logging.LogRecord:
    """An access-log record shaped like the ones uvicorn emits."""
    return logging.LogRecord(
        name="uvicorn.access",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg='%s - "%s %s HTTP/%s" %d',
        args=("127.0.0.1:5000", "GET", path, "1.1", 200),
        exc_info=None,
    )


def _poll_filters() -> list[logging.Filter]:
    access_logger = logging.getLogger("uvicorn.access")
    return [f for f in access_logger.filters if isinstance(f, _PollNoiseFilter)]


@pytest.fixture(autouse=True)
def _restore_app_log_level():
    app_logger = logging.getLogger("app")
    level = app_logger.level
    yield
    app_logger.setLevel(level)


# ── _PollNoiseFilter ──────────────────────────────────────────────────────────


def test_poll_access_line_is_dropped():
    """GET /command access lines are filtered out."""
    assert _PollNoiseFilter().filter(_access_record("/command?id=x")) is False


@pytest.mark.parametrize("path", ["/list", "/register", "/set-command", "/health"])
def test_other_access_lines_are_kept(path):
    """Every other endpoint still shows up in the access log."""
    assert _PollNoiseFilter().filter(_access_record(path)) is True


def test_records_from_other_loggers_are_kept():
    """The filter only ever touches uvicorn.access records."""
    record = logging.LogRecord(
        name="app.api.routes.devices",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Command delivered - id=%s",
        args=("/command",),
        exc_info=None,
    )
    assert _PollNoiseFilter().filter(record) is True


def test_filter_installed_once_across_apps_and_restarts():
    """Building and starting several apps leaves a single poll filter."""
    first = create_app(Settings(device_timeout=30.0))
    create_app(Settings(device_timeout=30.0))

    with TestClient(first):
        pass
    with TestClient(first):
        pass

    assert len(_poll_filters()) == 1


# ── log level ─────────────────────────────────────────────────────────────────


def test_debug_setting_enables_debug_logging():
    """DEBUG=true lowers the application log level to DEBUG."""
    create_app(Settings(device_timeout=30.0, debug=True))
    assert logging.getLogger("app").getEffectiveLevel() == logging.DEBUG


def test_default_log_level_is_info():
    """Without DEBUG the application logs at INFO."""
    create_app(Settings(device_timeout=30.0, debug=False))
    assert logging.getLogger("app").getEffectiveLevel() == logging.INFO
