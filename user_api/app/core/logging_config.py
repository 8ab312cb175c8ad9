"""
Basic logging configuration for the application.

The ``setup_logging`` function configures the root logger with a console
handler and an optional file handler.  Log format includes the
timestamp, logger name, log level and message.  Request/response records
are written to the ``requests`` channel, which may be given its own file.
This module ensures that logging is set up exactly once.
"""

import logging
from pathlib import Path
from typing import Optional


REQUEST_CHANNEL = "requests"


def setup_logging(
    level: str = "INFO",
    logfile: Optional[str] = None,
    request_logfile: Optional[str] = None,
) -> None:
    """Configure root logger.

    If no handlers are attached to the root logger, attach a console
    handler and optionally a file handler.  The root logger's level is
    set based on the provided ``level``.

    Parameters
    ----------
    level : str
        Logging level name (e.g. ``"DEBUG"``, ``"INFO"``).  Case
        insensitive.
    logfile : Optional[str]
        Path to a file to log messages to.  If omitted, no file handler is
        added.  Paths are resolved relative to the current working
        directory.
    request_logfile : Optional[str]
        Path to a dedicated file for the ``requests`` channel.  Records on
        that channel still propagate to the root handlers.
    """
    logger = logging.getLogger()
    if logger.handlers:
        # Avoid configuring logging multiple times.  This happens when
        # ``create_app`` is called repeatedly, e.g. in tests.
        return

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(numeric_level)

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if logfile:
        log_path = Path(logfile).resolve()
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if request_logfile:
        request_path = Path(request_logfile).resolve()
        request_handler = logging.FileHandler(request_path, encoding="utf-8")
        request_handler.setFormatter(formatter)
        logging.getLogger(REQUEST_CHANNEL).addHandler(request_handler)
