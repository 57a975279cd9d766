"""Tests for logging configuration."""

import logging

import pytest

from tag_reader.utils.logging_config import set_log_level, setup_logging

WATCHED = ["tag_reader", "tag_reader.service", "mutagen", "some.library"]


@pytest.fixture(autouse=True)
def restore_logging():
    """Put the root handlers and logger levels back after each test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    root_level = root.level
    levels = {name: logging.getLogger(name).level for name in WATCHED}
    yield
    root.handlers[:] = handlers
    root.setLevel(root_level)
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)


class TestSetupLogging:
    """Test handler installation."""

    def test_console_and_file_handlers(self, temp_dir):
        """A log file adds a rotating file handler next to the console."""
        log_file = temp_dir / "logs" / "tag-reader.log"

        setup_logging(log_level="INFO", log_file=log_file)

        root = logging.getLogger()
        assert root.level == logging.INFO
        assert len(root.handlers) == 2
        assert log_file.parent.is_dir()

    def test_without_console(self):
        """console_output=False installs no handler."""
        setup_logging(log_level="ERROR", console_output=False)

        assert logging.getLogger().handlers == []


class TestSetLogLevel:
    """Test narrowing the level change to tag reader loggers."""

    def test_debug_only_for_package_loggers(self):
        """Package loggers go to DEBUG, the root and other libraries do not."""
        setup_logging(log_level="WARNING")
        other = logging.getLogger("some.library")

        set_log_level("DEBUG")

        root = logging.getLogger()
        assert logging.getLogger("tag_reader").level == logging.DEBUG
        assert logging.getLogger("tag_reader.service").level == logging.DEBUG
        assert logging.getLogger("tag_reader.service").isEnabledFor(logging.DEBUG)
        assert root.level == logging.WARNING
        assert not other.isEnabledFor(logging.DEBUG)
        assert logging.getLogger("mutagen").level == logging.WARNING
        assert all(h.level == logging.DEBUG for h in root.handlers)

    def test_unknown_level_falls_back_to_info(self):
        """An unknown name means INFO."""
        set_log_level("chatty")

        assert logging.getLogger("tag_reader").level == logging.INFO
