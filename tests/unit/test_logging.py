"""Unit tests for JSON logging setup."""
import io
import json
import logging

import pytest

from webhelpers.utils.logging import setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


class TestSetupLogging:
    """Test structured log output."""

    def test_json_record(self, restore_root_logger):
        stream = io.StringIO()
        setup_logging(level="debug", stream=stream)

        logging.getLogger("webhelpers.tests").info("suffix list built")

        record = json.loads(stream.getvalue().splitlines()[-1])
        assert record["message"] == "suffix list built"
        assert record["level"] == "INFO"
        assert record["name"] == "webhelpers.tests"
        assert record["service"] == "webhelpers"
        assert "timestamp" in record

    def test_level(self, restore_root_logger):
        stream = io.StringIO()
        setup_logging(level="WARNING", stream=stream)

        logging.getLogger("webhelpers.tests").info("hidden")
        assert stream.getvalue() == ""
        assert restore_root_logger.level == logging.WARNING

    def test_repeated_setup_single_handler(self, restore_root_logger):
        setup_logging(stream=io.StringIO())
        handler = setup_logging(stream=io.StringIO())
        assert restore_root_logger.handlers == [handler]
