import logging

from app.core.logging_config import ContextFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("app.test", logging.WARNING, __file__, 1, "Upstream rejected request", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_known_context_is_appended_in_order():
    formatter = ContextFormatter("%(levelname)s:%(message)s")

    line = formatter.format(_record(reason="blocked with status 403", endpoint="timetable", attempt=2, unrelated="x"))

    assert line == "WARNING:Upstream rejected request | endpoint=timetable attempt=2 reason=blocked with status 403"


def test_record_without_context_is_unchanged():
    formatter = ContextFormatter("%(levelname)s:%(message)s")

    assert formatter.format(_record(session_id="")) == "WARNING:Upstream rejected request"
