"""Tests for SDK logging setup."""

import json
import logging
import sys

from aesdk.core.logging import ROOT_LOGGER, JsonFormatter, configure_logging


class TestJsonFormatter:
    """Tests for the JSON log formatter."""

    def test_format(self):
        """Test records render as one JSON object."""
        record = logging.LogRecord(
            "aesdk.sdk", logging.INFO, __file__, 1, "Node %s selected", ("a",), None
        )

        payload = json.loads(JsonFormatter().format(record))

        assert payload["level"] == "INFO"
        assert payload["logger"] == "aesdk.sdk"
        assert payload["msg"] == "Node a selected"
        assert "exc" not in payload

    def test_format_exception(self):
        """Test exceptions are included."""
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logging.LogRecord(
                "aesdk", logging.ERROR, __file__, 1, "failed", (), sys.exc_info()
            )

        payload = json.loads(JsonFormatter().format(record))

        assert "RuntimeError: boom" in payload["exc"]


class TestConfigureLogging:
    """Tests for configure_logging."""

    def teardown_method(self):
        """Remove handlers added by the tests."""
        logger = logging.getLogger(ROOT_LOGGER)
        for handler in list(logger.handlers):
            if getattr(handler, "_aesdk_handler", False):
                logger.removeHandler(handler)

    def test_json_format(self, settings):
        """Test the JSON formatter is used when configured."""
        settings = settings.model_copy(update={"log_format": "json", "log_level": "debug"})

        logger = configure_logging(settings)

        assert logger.name == ROOT_LOGGER
        assert logger.level == logging.DEBUG
        assert isinstance(logger.handlers[-1].formatter, JsonFormatter)

    def test_repeated_calls_replace_handler(self, settings):
        """Test configuring twice keeps a single SDK handler."""
        configure_logging(settings)
        logger = configure_logging(settings)

        handlers = [h for h in logger.handlers if getattr(h, "_aesdk_handler", False)]
        assert len(handlers) == 1
        assert not isinstance(handlers[0].formatter, JsonFormatter)
