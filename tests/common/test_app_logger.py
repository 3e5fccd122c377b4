from __future__ import annotations

import logging

from calendar_admin.common.app_logger import REDACTED, ContextFormatter, get_logger, mask, redact, setup_logging


def test_redact_masks_sensitive_keys_recursively():
    data = {
        "email": "a@b.c",
        "password": "x",
        "nested": {"sessionId": "abc", "items": [{"authToken": "t", "ok": 1}]},
        "Cookie": "c",
    }
    assert redact(data) == {
        "email": "a@b.c",
        "password": REDACTED,
        "nested": {"sessionId": REDACTED, "items": [{"authToken": REDACTED, "ok": 1}]},
        "Cookie": REDACTED,
    }


def test_mask_keeps_prefix():
    assert mask("alice@example.com") == "ali***"
    assert mask("") == "-"
    assert mask(None) == "-"


def test_formatter_appends_redacted_context():
    record = logging.LogRecord("calendar_admin.test", logging.INFO, __file__, 1, "hello", (), None)
    record.context = {"user_id": 3, "csrf": "nope"}

    line = ContextFormatter("%(message)s").format(record)
    assert line == 'hello {"user_id": 3, "csrf": "***REDACTED***"}'


def test_setup_logging_is_idempotent():
    first = setup_logging("INFO")
    handlers = list(first.handlers)
    second = setup_logging("DEBUG")

    assert first is second
    assert second.handlers == handlers
    assert second.level == logging.DEBUG
    assert second.propagate is False
    setup_logging("WARNING")


def test_get_logger_nests_under_package_logger():
    assert get_logger("calendar_admin.users.service").name == "calendar_admin.users.service"
    assert get_logger("security").name == "calendar_admin.security"
    assert get_logger().name == "calendar_admin"
