"""Tests for logging setup."""

import logging
import logging.handlers

import pytest

from addonmirror.common.config import LoggingConfig
from addonmirror.common.logger import LOGGER_PREFIX, configure_logging, get_logger, setup_logger


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger = logging.getLogger(LOGGER_PREFIX)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


class TestSetupLogger:
    """Tests for setup_logger."""

    def test_file_logging(self, tmp_path):
        """Test component loggers write to the rotating log file."""
        setup_logger(log_dir=str(tmp_path), level="debug", file_logging=True, console_logging=False)

        get_logger("aggregator").debug("hello from the aggregator")
        for handler in logging.getLogger(LOGGER_PREFIX).handlers:
            handler.flush()

        content = (tmp_path / "addonmirror.log").read_text()
        assert "[DEBUG] [addonmirror.aggregator] hello from the aggregator" in content

    def test_reconfigure_replaces_handlers(self, tmp_path):
        """Test a second call applies the new settings instead of stacking handlers."""
        setup_logger(log_dir=str(tmp_path), file_logging=True)
        logger = setup_logger(level="WARNING", file_logging=False)

        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1
        assert not isinstance(logger.handlers[0], logging.handlers.RotatingFileHandler)

    def test_invalid_level(self):
        with pytest.raises(ValueError, match="Invalid log level"):
            setup_logger(level="LOUD")

    def test_configure_from_config(self, tmp_path):
        logger = configure_logging(LoggingConfig(level="ERROR", log_dir=str(tmp_path), file_logging=True))

        assert logger.level == logging.ERROR
        assert (tmp_path / "addonmirror.log").exists()


def test_get_logger_namespace():
    assert get_logger("store").name == "addonmirror.store"
