"""
Logging configuration for the luminosity tools.
"""

import datetime
import logging
import os
import sys
from typing import Any, Optional

from .config import AppConfig


def setup_logging(config: AppConfig, log_prefix: Optional[str] = None) -> None:
    """
    Configure logging based on settings.

    Args:
        config: Application configuration
        log_prefix: Optional prefix for the log file name
    """
    log_level = getattr(logging, config.log_level, logging.INFO)
    log_format = '%(asctime)s - %(levelname)s - %(message)s'

    log_file = config.log_file

    # Create a timestamp-based log file if prefix provided but no specific file
    if not log_file and log_prefix:
        timestamp = datetime.datetime.now().strftime("%Y%m%d-%H%M%S")
        log_file = f"{log_prefix}_{timestamp}.log"

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir, exist_ok=True)

        logging.basicConfig(
            filename=log_file,
            level=log_level,
            format=log_format
        )

        # Also log to console if debug mode is enabled
        if config.debug_mode:
            console = logging.StreamHandler(sys.stderr)
            console.setLevel(log_level)
            console.setFormatter(logging.Formatter(log_format))
            logging.getLogger('').addHandler(console)
    else:
        logging.basicConfig(
            level=log_level,
            format=log_format,
            stream=sys.stderr
        )

    logging.getLogger('PIL').setLevel(logging.WARNING)

    if config.debug_mode:
        logging.debug("Debug mode enabled")
        logging.debug(f"Python version: {sys.version}")
        logging.debug(f"Platform: {sys.platform}")
        logging.debug(f"Configuration summary:")
        logging.debug(f"  Busy timeout: {config.db_busy_timeout} ms")
        logging.debug(f"  Load collections: {config.load_collections}")
        logging.debug(f"  Verify previews: {config.verify_previews}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the specified name.

    Args:
        name: Name for the logger

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def format_fields(fields: dict) -> str:
    """Render event fields as space separated key=value pairs."""
    return " ".join(f"{key}={value}" for key, value in fields.items())


class EventLogger:
    """
    Emits structured events (an action plus key/value fields) through a
    standard logger. Components take one of these as a collaborator
    instead of reaching for module-level state.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or get_logger("luminosity")

    def event(self, level: int, message: str, action: str, **fields: Any) -> None:
        if not self.logger.isEnabledFor(level):
            return
        rendered = format_fields({'action': action, **fields})
        if message:
            self.logger.log(level, f"{message} {rendered}")
        else:
            self.logger.log(level, rendered)

    def debug(self, message: str, action: str, **fields: Any) -> None:
        self.event(logging.DEBUG, message, action, **fields)

    def info(self, message: str, action: str, **fields: Any) -> None:
        self.event(logging.INFO, message, action, **fields)

    def warning(self, message: str, action: str, **fields: Any) -> None:
        self.event(logging.WARNING, message, action, **fields)

    def error(self, message: str, action: str, **fields: Any) -> None:
        self.event(logging.ERROR, message, action, **fields)
