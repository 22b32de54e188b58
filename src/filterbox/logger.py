"""Logging configuration for filterbox using loguru.

filterbox logs nothing until :func:`setup_logger` is called, so library
users keep control of loguru's sinks. The CLI calls it once from its
callback with the values of :class:`~filterbox.config.EngineSettings`.
"""

import os
import sys
from typing import Optional

from loguru import logger

from filterbox.utils import get_project_root

DEFAULT_LOG_FILE = "filterbox.log"

_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[name]}:{function}:{line} - {message}"
_CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan> - <level>{message}</level>"
)


def resolve_log_path(log_file: Optional[str] = None) -> str:
    """Absolute path of the log file; relative paths start at the project root."""
    path = log_file or DEFAULT_LOG_FILE
    if not os.path.isabs(path):
        path = os.path.join(get_project_root(), path)
    return path


def setup_logger(
    log_file: Optional[str] = None,
    log_level: str = "INFO",
    rotation: str = "10 MB",
    retention: str = "7 days",
    compression: str = "zip",
    console_output: bool = False,
) -> str:
    """
    Replace loguru's sinks with a rotating file sink and, optionally, stderr.

    Args:
        log_file: Log file path (defaults to ``filterbox.log`` in the project root)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        rotation: Log rotation size
        retention: How long to keep old logs
        compression: Compression format for old logs
        console_output: Also log to stderr

    Returns:
        The absolute path of the log file
    """
    path = resolve_log_path(log_file)

    logger.remove()
    if console_output:
        logger.add(sys.stderr, level=log_level, format=_CONSOLE_FORMAT, colorize=True)
    logger.add(
        path,
        level=log_level,
        format=_FILE_FORMAT,
        rotation=rotation,
        retention=retention,
        compression=compression,
        encoding="utf-8",
    )
    logger.enable("filterbox")
    return path


def get_logger(name: Optional[str] = None):
    """
    Get a logger bound to ``name``.

    Args:
        name: Component name shown in log lines (defaults to ``"filterbox"``)
    """
    return logger.bind(name=name or "filterbox")


logger.configure(extra={"name": "filterbox"})
logger.disable("filterbox")
