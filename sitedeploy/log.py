"""Logging setup for sitedeploy.

Every record is written as ``<YYYY-MM-DD HH:MM:SS> : <message>`` to stdout and
appended to the configured log file. The file is never truncated or rotated.
"""

import logging
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .config import Config


LOG_FORMAT = "%(asctime)s : %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
ROOT_LOGGER = "sitedeploy"


def setup_logging(config: "Config") -> logging.Logger:
    """
    Configure the sitedeploy logger with a console handler and an append-only file handler.

    Calling this again replaces the handlers installed by a previous call, so
    repeated runs in one process do not duplicate lines.

    Args:
        config: Deployment configuration holding the log file path and level

    Returns:
        The configured ``sitedeploy`` logger
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, config.log_level))
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    try:
        file_handler = logging.FileHandler(config.log_file, mode="a", encoding="utf-8")
    except OSError as e:
        # Keep reporting on stdout; a non-root run must still show why it stops.
        logger.warning(f"Warning: Cannot write log file {config.log_file}: {e}")
    else:
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
