"""Unit tests for structured logging helpers."""

import json
import logging

from moono.logging_config import JsonFormatter, SessionIdFilter, session_id_var


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("moono.test", logging.WARNING, __file__, 1, "Completion write failed", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    """Extra fields and session ids end up in the JSON line."""

    def test_extra_fields_included(self):
        line = JsonFormatter().format(_record(lesson_id=5, user_id="u-1"))
        payload = json.loads(line)
        assert payload["message"] == "Completion write failed"
        assert payload["level"] == "WARNING"
        assert payload["lesson_id"] == 5
        assert payload["user_id"] == "u-1"

    def test_unserializable_extra_stringified(self):
        payload = json.loads(JsonFormatter().format(_record(step_ids={1})))
        assert payload["step_ids"] == "{1}"

    def test_session_id_from_context(self):
        token = session_id_var.set("abc123")
        try:
            record = _record()
            SessionIdFilter().filter(record)
        finally:
            session_id_var.reset(token)
        payload = json.loads(JsonFormatter().format(record))
        assert payload["session_id"] == "abc123"

    def test_no_session_id_outside_lesson(self):
        record = _record()
        SessionIdFilter().filter(record)
        assert record.session_id == "-"
        assert "session_id" not in json.loads(JsonFormatter().format(record))
