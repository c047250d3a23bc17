"""
Tests for the restbase logging package.
"""

import io
import logging

import pytest
from rich.console import Console

from restbase.server import LOGGING_CONFIG, configure_log_levels
from restbase.utils.logging import (
    DetailedLogFormatter,
    Logger,
    RestLogRecord,
    RichLoggingHandler,
    SimpleLogFormatter,
    bind_request_id,
    capture_logs,
    create_rich_console_handler,
    current_request_id,
    get_emoji,
)


@pytest.fixture
def log():
    """A logger of its own, so level changes do not leak into other tests."""
    return Logger("restbase.tests", level="debug")


def test_levels(log):
    log.set_level("warning")

    assert log.level == "warning"
    assert log.should_log("error")
    assert not log.should_log("info")
    with capture_logs(name="restbase.tests") as logs:
        log.info("Hidden")
        log.warning("Shown")

    assert logs.get_messages() == ["Shown"]


def test_default_component():
    storage_log = Logger("restbase.tests", level="debug", component="storage")

    with capture_logs(name="restbase.tests") as logs:
        storage_log.info("Created tables", context={"tables": 3})
        storage_log.info("Listing", component="api")

    assert [entry["component"] for entry in logs.get_logs()] == ["storage", "api"]
    assert logs.get_logs()[0]["context"] == {"tables": 3}


def test_bind_request_id(log):
    with capture_logs(name="restbase.tests") as logs:
        with bind_request_id("req-42"):
            log.info("Inside")
        log.info("Outside")

    assert [entry["request_id"] for entry in logs.get_logs()] == ["req-42", None]
    assert current_request_id.get() is None


def test_capture_logs_extras(log):
    with capture_logs(name="restbase.tests") as logs:
        log.info("Listing widgets", component="api", operation="request", context={"q": "W0"})
        log.debug("Details")

    assert logs.get_messages() == ["Listing widgets", "Details"]
    assert logs.get_logs("info")[0]["operation"] == "request"
    assert logs.contains("widgets", level="info")
    assert not logs.contains("Details", level="info")


def test_time_operation(log):
    with capture_logs(name="restbase.tests") as logs:
        with log.time_operation("paginate", component="pagination"):
            pass

    assert logs.contains("Completed paginate in")


def test_time_operation_failure(log):
    with capture_logs("error", name="restbase.tests") as logs:
        with pytest.raises(RuntimeError):
            with log.time_operation("create_all", component="storage"):
                raise RuntimeError("disk full")

    assert logs.get_logs()[0]["context"] == {"error": "disk full"}


def test_get_emoji():
    assert get_emoji("level", "error") == "❌"
    assert get_emoji("operation", "search") == "🔎"
    assert get_emoji("operation", "teleport") == "❓"


def test_record_emoji_prefers_operation():
    assert RestLogRecord("info", "x", operation="guard").emoji == "🛡️"
    assert RestLogRecord("info", "x", operation="other").emoji == "ℹ️"
    assert RestLogRecord("info", "x", emoji="⭐").emoji == "⭐"


def test_simple_formatter_header():
    record = RestLogRecord("warning", "Rejected", component="Guard", operation="guard")

    text = SimpleLogFormatter(show_time=False).format_record(record).plain

    assert text == "🛡️ [WARNING] [guard] guard: Rejected"


def test_header_shows_short_request_id():
    record = RestLogRecord("info", "200 in 0.004s", component="api", request_id="0f9c2a7e-5b1d-4c3e")

    text = SimpleLogFormatter(show_time=False).format_record(record).plain
    hidden = SimpleLogFormatter(show_time=False, show_request_id=False).format_record(record).plain

    assert text.endswith("200 in 0.004s (req 0f9c2a7e)")
    assert "req" not in hidden


def test_detailed_formatter_renders_context():
    output = io.StringIO()
    console = Console(file=output, width=120)
    record = RestLogRecord("info", "Listing", component="api", context={"per_page": 5})

    console.print(DetailedLogFormatter().format_record(record))

    assert "Listing" in output.getvalue()
    assert "per_page" in output.getvalue()


def test_detailed_formatter_boxes_errors_with_traceback():
    output = io.StringIO()
    console = Console(file=output, width=120)
    try:
        raise RuntimeError("disk full")
    except RuntimeError as e:
        record = RestLogRecord("error", "Failed", component="storage", exc_info=(type(e), e, e.__traceback__))

    console.print(DetailedLogFormatter().format_record(record))

    assert "ERROR in storage" in output.getvalue()
    assert "disk full" in output.getvalue()


def test_rich_handler_renders_extras():
    output = io.StringIO()
    handler = RichLoggingHandler(console=Console(file=output, width=120), formatter=SimpleLogFormatter())
    python_logger = logging.getLogger("restbase.tests.handler")
    python_logger.addHandler(handler)
    try:
        with bind_request_id("abcdef0123"):
            Logger("restbase.tests.handler").warning("Rejected", component="guard")
    finally:
        python_logger.removeHandler(handler)

    assert "[guard] Rejected" in output.getvalue()
    assert "(req abcdef01)" in output.getvalue()


def test_console_handler_factory():
    assert isinstance(create_rich_console_handler().rest_formatter, SimpleLogFormatter)
    assert isinstance(create_rich_console_handler(detailed=True).rest_formatter, DetailedLogFormatter)


def test_configure_log_levels(monkeypatch):
    monkeypatch.setitem(LOGGING_CONFIG, "root", dict(LOGGING_CONFIG["root"]))
    monkeypatch.setitem(LOGGING_CONFIG, "loggers", {k: dict(v) for k, v in LOGGING_CONFIG["loggers"].items()})
    monkeypatch.setitem(LOGGING_CONFIG, "handlers", {k: dict(v) for k, v in LOGGING_CONFIG["handlers"].items()})

    configure_log_levels("debug")

    assert LOGGING_CONFIG["loggers"]["restbase"]["level"] == "DEBUG"
    assert LOGGING_CONFIG["handlers"]["rich_console"]["detailed"] is True
