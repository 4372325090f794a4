"""
Logging configuration for the Posts API.

Two streams are set up.  Application loggers (``logging.getLogger(__name__)``
in every module) propagate to the root logger, which writes
``time [LEVEL] module: message`` lines.  One line per HTTP request is
written by the request middleware to the ``posts_api.access`` logger,
which has its own shorter format, its own level and does not propagate,
so access lines can be silenced without losing application logs.

Handlers installed here are named, and ``setup_logging`` only adds the
ones that are missing.  Tests build many applications in one process and
this keeps the output from being duplicated.
"""

import logging
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
ACCESS_FORMAT = "%(asctime)s [access] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

ACCESS_LOGGER = "posts_api.access"
CONSOLE_HANDLER = "posts_api.console"
FILE_HANDLER = "posts_api.file"
ACCESS_HANDLER = "posts_api.access"


def _level(name: Optional[str], default: int) -> int:
    if not name:
        return default
    value = logging.getLevelName(name.upper())
    return value if isinstance(value, int) else default


def _has_handler(logger: logging.Logger, name: str) -> bool:
    return any(handler.get_name() == name for handler in logger.handlers)


def _named(handler: logging.Handler, name: str, fmt: str) -> logging.Handler:
    handler.set_name(name)
    handler.setFormatter(logging.Formatter(fmt=fmt, datefmt=DATE_FORMAT))
    return handler


def setup_logging(
    level: str = "INFO",
    logfile: Optional[str] = None,
    access_level: Optional[str] = None,
) -> None:
    """Configure application and access logging.

    Parameters
    ----------
    level : str
        Level name for application logs (e.g. ``"DEBUG"``).  Case
        insensitive; unknown names fall back to ``INFO``.
    logfile : Optional[str]
        If given, both streams are also appended to this file.
    access_level : Optional[str]
        Level of the per-request access log.  Defaults to ``level``;
        ``"WARNING"`` silences it.
    """
    root = logging.getLogger()
    root.setLevel(_level(level, logging.INFO))
    if not _has_handler(root, CONSOLE_HANDLER):
        root.addHandler(_named(logging.StreamHandler(), CONSOLE_HANDLER, LOG_FORMAT))

    access = logging.getLogger(ACCESS_LOGGER)
    access.setLevel(_level(access_level, root.level))
    access.propagate = False
    if not _has_handler(access, ACCESS_HANDLER):
        access.addHandler(_named(logging.StreamHandler(), ACCESS_HANDLER, ACCESS_FORMAT))

    if logfile:
        log_path = str(Path(logfile).resolve())
        if not _has_handler(root, FILE_HANDLER):
            root.addHandler(_named(logging.FileHandler(log_path, encoding="utf-8"), FILE_HANDLER, LOG_FORMAT))
        if not _has_handler(access, FILE_HANDLER):
            access.addHandler(_named(logging.FileHandler(log_path, encoding="utf-8"), FILE_HANDLER, ACCESS_FORMAT))

    # The access logger already records every request.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
