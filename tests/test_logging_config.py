"""Tests for logging setup."""

import logging
import sys

import pytest
from draft_assistant.utils.logging_config import setup_logging


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


class TestSetupLogging:
    """Test handler wiring."""

    def test_console_handler_writes_to_stdout(self, root_logger):
        setup_logging("DEBUG")

        assert root_logger.level == logging.DEBUG
        assert len(root_logger.handlers) == 1
        assert root_logger.handlers[0].stream is sys.stdout

    def test_log_file_adds_file_handler(self, root_logger, tmp_path):
        log_file = tmp_path / "logs" / "assistant.log"
        setup_logging("warning", log_file=str(log_file))

        assert root_logger.level == logging.WARNING
        assert any(isinstance(h, logging.FileHandler) for h in root_logger.handlers)
        assert log_file.parent.is_dir()

    def test_client_loggers_are_quieted(self, root_logger):
        setup_logging("INFO")
        assert logging.getLogger("urllib3").level == logging.WARNING
