"""Logging configuration for geminid."""

import logging
import sys

from .config import VirtualHostConfig


ROOT_LOGGER_NAME = "geminid"
FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: int | str = logging.DEBUG) -> None:
    """
    Configure console logging for every geminid logger.

    Args:
        level: Console logging level (default: DEBUG)
    """
    if isinstance(level, str):
        level = level.upper()

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(logging.DEBUG)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(FORMAT, datefmt=DATE_FORMAT))
    root_logger.addHandler(console_handler)


def get_host_logger(host: VirtualHostConfig, *, file_level: int = logging.INFO) -> logging.Logger:
    """
    Get the logger for one virtual host.

    Records go to the host's log file (INFO and above by default) and
    propagate to the console handler installed by ``setup_logging``.

    Args:
        host: Virtual host whose hostname and log file are used
        file_level: Minimum level written to the log file

    Returns:
        Logger named geminid.host.<hostname>
    """
    logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.host.{host.hostname}")
    logger.setLevel(logging.DEBUG)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    file_handler = logging.FileHandler(host.log_file, encoding="utf-8", delay=True)
    file_handler.setLevel(file_level)
    file_handler.setFormatter(logging.Formatter(FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(file_handler)
    return logger
