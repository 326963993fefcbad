"""Tests for logging configuration."""

import json
import logging

from json_log_formatter import JSONFormatter

from chartmigrate.core.logging import StructuredFormatter, configure_logging


def make_record(**extra):
    record = logging.LogRecord(
        "chartmigrate.core.engine", logging.INFO, __file__, 1, "Applied rule", None, None
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:
    def test_plain_message(self):
        assert StructuredFormatter().format(make_record()) == "[INFO] Applied rule"

    def test_rule_schema_and_context(self):
        record = make_record(
            rule_id="license-key",
            schema_version="v25.1.1",
            context={"path": "license_key"},
        )
        assert StructuredFormatter().format(record) == (
            "[INFO] rule=license-key schema=v25.1.1 path=license_key Applied rule"
        )


class TestConfigureLogging:
    def test_sets_level_and_single_handler(self):
        configure_logging(level="DEBUG")
        configure_logging(level="WARNING")
        logger = logging.getLogger("chartmigrate")
        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, StructuredFormatter)

    def test_json_format(self):
        configure_logging(json_format=True)
        handler = logging.getLogger("chartmigrate").handlers[0]
        assert isinstance(handler.formatter, JSONFormatter)
        payload = json.loads(handler.formatter.format(make_record(rule_id="license-key")))
        assert payload["message"] == "Applied rule"
        assert payload["rule_id"] == "license-key"
