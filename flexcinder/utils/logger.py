"""Logging setup for the flexvolume driver.

Standard output belongs to the orchestrator (it reads exactly one JSON
envelope from it), so log records are written to a log file or stderr.
"""

import logging
import os
import sys
from typing import Optional

from pythonjsonlogger.json import JsonFormatter

ROOT_LOGGER = 'flexcinder'
LOG_FORMAT = '%(asctime)s %(name)s %(levelname)s %(process)d %(message)s'

_configured = False


def get_logger(name: str) -> logging.Logger:
    """Return a module logger under the driver's logger hierarchy."""
    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


def setup_logging(level: str = 'INFO', log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure JSON logging for the current process.

    Args:
        level: Log level name
        log_file: Path of the log file, stderr is used when empty

    Returns:
        The configured root driver logger
    """
    global _configured

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    if _configured:
        return logger

    handler = None
    if log_file:
        try:
            os.makedirs(os.path.dirname(log_file) or '.', mode=0o755, exist_ok=True)
            handler = logging.FileHandler(log_file)
        except OSError as e:
            sys.stderr.write(f"cannot open log file {log_file}: {e}, logging to stderr\n")

    if handler is None:
        handler = logging.StreamHandler(sys.stderr)

    handler.setFormatter(JsonFormatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False

    _configured = True
    return logger
