"""
Logging setup for mapview.

All package loggers live under the ``mapview`` logger, which gets its own
stdout handler (and optionally a log file) and does not propagate to the
root logger. The geospatial libraries mapview drives through (rasterio,
fiona/pyogrio, matplotlib) are chatty at DEBUG, so they are held at WARNING
unless mapview itself runs at DEBUG.
"""

import logging
import os
import sys
from typing import Optional


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
SHORT_FORMAT = "%(levelname)s: %(message)s"

# verbosity -> level for the mapview logger
VERBOSITY_LEVELS = {
    -2: logging.ERROR,
    -1: logging.WARNING,
    0: logging.INFO,
    1: logging.DEBUG,
}

LIBRARY_LOGGERS = ("rasterio", "fiona", "pyogrio", "matplotlib", "PIL")

ENV_LEVEL = "MAPVIEW_LOG_LEVEL"


def _level_for(verbosity: int) -> int:
    verbosity = max(-2, min(1, verbosity))
    level = VERBOSITY_LEVELS[verbosity]

    override = os.environ.get(ENV_LEVEL, "").upper()
    if override in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        level = getattr(logging, override)
    return level


def setup_logging(
    verbosity: int = 0,
    log_file: Optional[str] = None,
    format_string: Optional[str] = None
) -> None:
    """
    Configure the ``mapview`` logger.

    Calling it again replaces the handlers installed by the previous call, so
    the CLI can reconfigure what was set up on import.

    Args:
        verbosity: -2 (errors only) .. 1 (debug); values outside are clipped
        log_file: Also append everything (DEBUG and up) to this file
        format_string: Console format; a short one is used below INFO

    Environment Variables:
        MAPVIEW_LOG_LEVEL: Force the console level (DEBUG, INFO, WARNING, ERROR)

    Example:
        >>> setup_logging(verbosity=1)
        >>> setup_logging(log_file="maps.log")
    """
    level = _level_for(verbosity)
    if format_string is None:
        format_string = LOG_FORMAT if verbosity >= 0 else SHORT_FORMAT

    logger = logging.getLogger("mapview")
    logger.setLevel(logging.DEBUG if log_file else level)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(logging.Formatter(format_string))
    logger.addHandler(console)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        except OSError as e:
            logger.warning(f"Cannot write log file {log_file}: {e}")
        else:
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
            logger.addHandler(file_handler)
            logger.info(f"Writing log to {log_file}")

    library_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)

    logger.debug(f"mapview logging at {logging.getLevelName(level)}")
