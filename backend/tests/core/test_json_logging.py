"""Tests for the JSON log formatter."""

import json
import logging

from culturebridge.core.config import settings
from culturebridge.core.logging import CustomJsonFormatter


def _format(record: logging.LogRecord) -> dict:
    formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(logger)s %(event)s")
    return json.loads(formatter.format(record))


def test_formatter_renames_standard_fields():
    record = logging.LogRecord(
        "culturebridge.rewards.service", logging.INFO, __file__, 1, "Reward granted", None, None
    )
    record.user_id = "u-1"

    payload = _format(record)

    assert payload["event"] == "Reward granted"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "culturebridge.rewards.service"
    assert payload["service"] == "culturebridge"
    assert payload["env"] == settings.ENV
    assert payload["user_id"] == "u-1"
    assert "message" not in payload


def test_formatter_interpolates_message_args():
    record = logging.LogRecord(
        "culturebridge", logging.WARNING, __file__, 1, "User %s joined", ("abc",), None
    )

    assert _format(record)["event"] == "User abc joined"
