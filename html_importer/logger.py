"""
Logging for the HTML Importer framework.

Every module logs through a child of the "html_importer" logger, so the
handlers configured here (stdout, plus an optional log file) apply to the
whole pipeline and the record name tells which stage emitted it.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

PACKAGE_LOGGER = "html_importer"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _file_handlers(logger: logging.Logger) -> dict[str, logging.FileHandler]:
    return {
        str(Path(handler.baseFilename).resolve()): handler
        for handler in logger.handlers
        if isinstance(handler, logging.FileHandler)
    }


def setup_logger(
    name: str = PACKAGE_LOGGER,
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configure and return the package logger.

    Safe to call repeatedly: the stdout handler is created once, later calls
    change the level and attach `log_file` if it is not attached yet.

    Args:
        name: Logger name
        level: Level as a number or a name such as "DEBUG"
        log_file: Optional file that receives the same records
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(name)
    logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    if not any(type(handler) is logging.StreamHandler for handler in logger.handlers):
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file and str(Path(log_file).resolve()) not in _file_handlers(logger):
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    for handler in logger.handlers:
        handler.setLevel(level)
    return logger


# Package logger with its stdout handler, ready at import time
logger = setup_logger()


def get_module_logger(module_name: str) -> logging.Logger:
    """Child logger for one module, e.g. "html_importer.transformer"."""
    return logging.getLogger(f"{PACKAGE_LOGGER}.{module_name}")
