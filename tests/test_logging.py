from __future__ import annotations

import io
import json
import logging

from taskboard.core.config import Settings
from taskboard.core.context import bind_user_id, request_scope
from taskboard.core.logging import configure_logging


def test_configure_logging_outputs_json_with_request_id() -> None:
    settings = Settings(environment="test", log_level="INFO")
    configure_logging(settings)

    root_logger = logging.getLogger()
    handler = next(
        (h for h in root_logger.handlers if isinstance(h, logging.StreamHandler)),
        None,
    )
    assert handler is not None, "Expected JSON stream handler to be configured"

    buffer = io.StringIO()
    previous_stream = handler.setStream(buffer)

    try:
        with request_scope("req-json-1"):
            bind_user_id("665f1c2ab0d1c7a1e4f0a001")
            logger = logging.getLogger("taskboard.tests.logging")
            logger.info("structured log event", extra={"component": "unit-test", "task_id": object()})
    finally:
        handler.flush()
        handler.setStream(previous_stream)

    log_lines = buffer.getvalue().strip().splitlines()
    assert log_lines, "Expected structured log line to be captured"
    payload = json.loads(log_lines[-1])

    assert payload["message"] == "structured log event"
    assert payload["request_id"] == "req-json-1"
    assert payload["user_id"] == "665f1c2ab0d1c7a1e4f0a001"
    assert payload["environment"] == "test"
    assert payload["level"] == "INFO"
    assert payload["component"] == "unit-test"
    assert payload["service"] == settings.project_name
    assert isinstance(payload["task_id"], str)


def test_third_party_logs_are_quieted() -> None:
    configure_logging(Settings(environment="development"))

    assert logging.getLogger("pymongo").level == logging.WARNING
    assert logging.getLogger("passlib.handlers.bcrypt").level == logging.ERROR
    assert logging.getLogger().level == logging.DEBUG


def test_explicit_extra_fields_override_bound_context() -> None:
    configure_logging(Settings(environment="test"))
    root_logger = logging.getLogger()
    handler = next(h for h in root_logger.handlers if isinstance(h, logging.StreamHandler))
    buffer = io.StringIO()
    previous_stream = handler.setStream(buffer)

    try:
        with request_scope("req-json-2"):
            bind_user_id("session-user")
            logging.getLogger("taskboard.services.tasks").warning(
                "Task deleted",
                extra={"user_id": "explicit-user"},
            )
        logging.getLogger("taskboard.tests.logging").warning("outside any request")
    finally:
        handler.flush()
        handler.setStream(previous_stream)

    inside, outside = (json.loads(line) for line in buffer.getvalue().strip().splitlines()[-2:])
    assert inside["user_id"] == "explicit-user"
    assert inside["request_id"] == "req-json-2"
    assert outside["request_id"] == "-"
    assert outside["user_id"] == "-"
