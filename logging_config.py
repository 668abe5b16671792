"""Logging configuration for the octomap server."""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

from config import LOG_FORMAT, LOG_LEVEL

CONSOLE_HANDLER_NAME = "octomap-console"


def _find_handler(logger: logging.Logger, name: str) -> Optional[logging.Handler]:
    for handler in logger.handlers:
        if handler.get_name() == name:
            return handler
    return None


def setup_logging(
    name: Optional[str] = None,
    level: Optional[str] = None,
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    Set up logging configuration.

    Calling it again only updates the level; handlers already attached are reused.

    Args:
        name: Logger name, the root logger if None
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file, console only if None

    Returns:
        Configured logger instance
    """
    if level is None:
        level = LOG_LEVEL
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(name)
    logger.setLevel(numeric_level)

    formatter = logging.Formatter(LOG_FORMAT)

    # Console handler
    console_handler = _find_handler(logger, CONSOLE_HANDLER_NAME)
    if console_handler is None:
        console_handler = logging.StreamHandler()
        console_handler.set_name(CONSOLE_HANDLER_NAME)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)
    console_handler.setLevel(numeric_level)

    # File handler
    if log_file is not None:
        log_file = Path(log_file)
        file_handler_name = f"octomap-file:{log_file.resolve()}"
        file_handler = _find_handler(logger, file_handler_name)
        if file_handler is None:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=10485760,  # 10MB
                backupCount=5,
            )
            file_handler.set_name(file_handler_name)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
        file_handler.setLevel(numeric_level)

    return logger
