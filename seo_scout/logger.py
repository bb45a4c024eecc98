"""Logging setup shared by every **SeoScout** module.

Highlights
----------
* One root project logger, ``SeoScout``; modules log through children such as
  ``SeoScout.crawler`` or ``SeoScout.fetcher`` obtained with :func:`get_logger`.
* Console output goes to *stderr*: the CLI prints JSON reports on stdout.
* An optional rotating log file, switched on with ``log_file``::

      from seo_scout.logger import configure
      configure(level="DEBUG", log_file="crawl.log")
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, List, Optional, Union

# --------------------------------------------------------------------------- #
# Constants                                                                   #
# --------------------------------------------------------------------------- #

DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOGGER_NAME: Final[str] = "SeoScout"
LOG_FILE_MAX_BYTES: Final[int] = 5 * 1024 * 1024
LOG_FILE_BACKUPS: Final[int] = 3

_LevelT = Union[int, str]


# --------------------------------------------------------------------------- #
# Handlers                                                                    #
# --------------------------------------------------------------------------- #


def _build_handlers(fmt: str, log_file: Optional[Union[str, Path]]) -> List[logging.Handler]:
    formatter = logging.Formatter(fmt)
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        handlers.append(
            RotatingFileHandler(
                filename=str(log_file),
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUPS,
                encoding="utf-8",
            )
        )
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


# --------------------------------------------------------------------------- #
# Public API                                                                  #
# --------------------------------------------------------------------------- #


def configure(
    *,
    level: _LevelT = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    log_format: str = DEFAULT_FORMAT,
    replace_handlers: bool = True,
) -> logging.Logger:
    """Set level, format and destinations of the ``SeoScout`` logger.

    Parameters
    ----------
    level
        ``"DEBUG"``, ``"INFO"`` ... or the numeric equivalent.
    log_file
        Also write to this file, rotated at 5 MiB. *None* keeps stderr only.
    log_format
        :class:`logging.Formatter` format string.
    replace_handlers
        Drop handlers installed by an earlier call (the CLI calls this once
        per invocation).
    """
    project = logging.getLogger(LOGGER_NAME)
    project.setLevel(level)
    if replace_handlers:
        for old in list(project.handlers):
            project.removeHandler(old)
    for handler in _build_handlers(log_format, log_file):
        project.addHandler(handler)
    # child loggers propagate up to here, not to the root logger
    project.propagate = False
    return project


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """``SeoScout`` itself, or its child ``SeoScout.<name>``."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}" if name else LOGGER_NAME)


logger: logging.Logger = configure()

__all__ = ["logger", "configure", "get_logger", "DEFAULT_FORMAT", "LOGGER_NAME"]
