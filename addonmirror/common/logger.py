"""Logging infrastructure for addon-mirror.

Every component logs under the "addonmirror" namespace; configuring that
one logger covers the fetcher, aggregator, store and HTTP access log.
"""

import logging
import logging.handlers
import os

from .config import LoggingConfig

LOGGER_PREFIX = "addonmirror"
LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"
MAX_LOG_BYTES = 10485760  # 10MB
LOG_BACKUP_COUNT = 5
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def setup_logger(
    log_dir: str = "/var/log/addonmirror",
    level: str = "INFO",
    file_logging: bool = False,
    console_logging: bool = True,
) -> logging.Logger:
    """Configure the addonmirror root logger.

    Calling it again replaces the handlers installed by the previous call,
    so a reload of the configuration takes effect.

    Args:
        log_dir: Directory for addonmirror.log when file logging is enabled
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        file_logging: Write a rotating log file
        console_logging: Log to stderr

    Returns:
        The configured logger

    Raises:
        ValueError: If the level is unknown
    """
    level_upper = level.upper()
    if level_upper not in LOG_LEVELS:
        raise ValueError(f"Invalid log level: {level}. Must be one of: {', '.join(LOG_LEVELS)}")

    logger = logging.getLogger(LOGGER_PREFIX)
    logger.setLevel(level_upper)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    if file_logging:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            os.path.join(log_dir, f"{LOGGER_PREFIX}.log"),
            maxBytes=MAX_LOG_BYTES,
            backupCount=LOG_BACKUP_COUNT,
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if console_logging:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    return logger


def configure_logging(config: LoggingConfig) -> logging.Logger:
    """Apply the logging section of the mirror configuration."""
    return setup_logger(
        log_dir=config.log_dir,
        level=config.level,
        file_logging=config.file_logging,
    )


def get_logger(name: str) -> logging.Logger:
    """Get a component logger under the addonmirror namespace.

    Args:
        name: Component name (e.g. "aggregator")

    Returns:
        Logger instance
    """
    return logging.getLogger(f"{LOGGER_PREFIX}.{name}")
