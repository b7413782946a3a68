"""Central logging configuration for the library."""
import logging
import os
from typing import Optional

from .config import ENV_LOG_LEVEL

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module-level logger with default configuration applied."""
    logger = logging.getLogger(name)
    if not logging.getLogger().handlers:
        level_name = os.getenv(ENV_LOG_LEVEL, "INFO").upper()
        logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=_LOG_FORMAT)
    return logger
