"""Logging configuration for lumen."""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from lumen.config import LOG_FORMAT, LOG_LEVEL


def setup_logging(
    level: str | None = None,
    log_file: Path | str | None = None,
    name: str = "lumen",
) -> logging.Logger:
    """
    Set up logging for the ``lumen`` logger hierarchy.

    Library modules only create loggers; this is called by the CLI.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Defaults to
            ``LUMEN_LOG_LEVEL``.
        log_file: Optional path of a rotating log file.
        name: Logger name

    Returns:
        Configured logger instance
    """
    if level is None:
        level = LOG_LEVEL
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(name)
    logger.setLevel(numeric_level)

    # Repeated calls replace the handlers installed by the previous one
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # File handler
    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10485760,  # 10MB
            backupCount=5,
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
