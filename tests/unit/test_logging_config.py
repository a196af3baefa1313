"""
Unit tests for setup_logging() and credential redaction
"""

import logging
import sys
from pathlib import Path

# Add parent directory to path to import trello_helper module
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import pytest

from trello_helper import setup_logging
from trello_helper.logging_config import RedactCredentialsFilter, resolve_level


class TestResolveLevel:
    @pytest.mark.parametrize(
        "level,expected",
        [
            ("DEBUG", logging.DEBUG),
            ("warning", logging.WARNING),
            (logging.ERROR, logging.ERROR),
            ("10", logging.DEBUG),
            (5, 5),
            ("chatty", logging.INFO),
        ],
    )
    def test_resolve_level(self, level, expected):
        """Should accept level names, numbers and numeric strings"""
        assert resolve_level(level) == expected


class TestSetupLogging:
    def test_sets_level_and_console_handler(self):
        setup_logging("DEBUG")
        logger = logging.getLogger("trello_helper")
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert logger.propagate is False

    def test_numeric_level(self):
        setup_logging(logging.WARNING)
        assert logging.getLogger("trello_helper").level == logging.WARNING

    def test_repeated_setup_does_not_duplicate_handlers(self):
        setup_logging("INFO")
        setup_logging("INFO")
        assert len(logging.getLogger("trello_helper").handlers) == 1

    def test_http_loggers_untouched_by_default(self):
        """Should leave urllib3/requests alone unless http_level is given"""
        urllib3_logger = logging.getLogger("urllib3")
        urllib3_logger.setLevel(logging.CRITICAL)

        setup_logging("DEBUG")

        assert urllib3_logger.level == logging.CRITICAL

    def test_http_level_configures_transport_loggers(self):
        """Should set the level and share handlers with urllib3 and requests"""
        setup_logging("INFO", http_level="DEBUG")

        package_handlers = logging.getLogger("trello_helper").handlers
        for name in ("urllib3", "requests"):
            logger = logging.getLogger(name)
            assert logger.level == logging.DEBUG
            assert logger.handlers == package_handlers
            assert logger.propagate is False

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "trello.log"
        setup_logging("INFO", str(log_file))
        logger = logging.getLogger("trello_helper")
        assert len(logger.handlers) == 2

        logging.getLogger("trello_helper.dispatcher").info("hello file")
        for handler in logger.handlers:
            handler.flush()
        assert "trello_helper.dispatcher - INFO - hello file" in log_file.read_text()

    def test_file_output_redacts_urllib3_credentials(self, tmp_path):
        """Should hide key/token in the request URLs urllib3 logs"""
        log_file = tmp_path / "trello.log"
        setup_logging("INFO", str(log_file), http_level="DEBUG")

        logging.getLogger("urllib3.connectionpool").debug(
            '%s "%s %s HTTP/1.1" %s',
            "https://api.trello.com:443",
            "GET",
            "/1/cards/ABC?key=abc123&token=secret456&fields=name",
            200,
        )
        for handler in logging.getLogger("urllib3").handlers:
            handler.flush()

        text = log_file.read_text()
        assert "key=<hidden>&token=<hidden>&fields=name" in text
        assert "abc123" not in text
        assert "secret456" not in text


class TestRedactCredentialsFilter:
    def _record(self, msg, args=None):
        return logging.LogRecord("trello_helper", logging.INFO, __file__, 1, msg, args, None)

    def test_redacts_formatted_message(self):
        record = self._record("GET %s", ("/1/members/me?key=k1&token=t1",))

        assert RedactCredentialsFilter().filter(record) is True
        assert record.getMessage() == "GET /1/members/me?key=<hidden>&token=<hidden>"

    def test_leaves_other_messages_alone(self):
        record = self._record("Archived %d card(s)", (3,))
        RedactCredentialsFilter().filter(record)
        assert record.args == (3,)
        assert record.getMessage() == "Archived 3 card(s)"
