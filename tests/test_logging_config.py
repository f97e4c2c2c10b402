"""Tests for the logging setup."""

import json
import logging

from billing_ledger.logging_config import JsonFormatter, configure_logging


def make_record(message="Imported %d rows", args=(3,), **extra):
    record = logging.LogRecord(
        "billing_ledger.services.import_service", logging.INFO,
        __file__, 10, message, args, None,
    )
    record.__dict__.update(extra)
    return record


class TestJsonFormatter:

    def test_formats_single_line_json(self):
        line = JsonFormatter().format(make_record())
        payload = json.loads(line)

        assert payload["level"] == "INFO"
        assert payload["logger"] == "billing_ledger.services.import_service"
        assert payload["message"] == "Imported 3 rows"
        assert "timestamp" in payload
        assert "\n" not in line

    def test_includes_extra_fields(self):
        payload = json.loads(JsonFormatter().format(make_record(tenant_id=7)))

        assert payload["tenant_id"] == 7


class TestConfigureLogging:

    def test_replaces_root_handlers(self):
        root = logging.getLogger()
        previous = list(root.handlers), root.level
        try:
            configure_logging("debug", "json")
            configure_logging("warning", "json")

            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0].formatter, JsonFormatter)
            assert root.level == logging.WARNING
        finally:
            root.handlers[:] = previous[0]
            root.setLevel(previous[1])
