import logging
import sys
from typing import Optional

from src.config.settings import LOG_LEVEL

_LOGGING_CONFIGURED = False


def configure_logging(level: str = LOG_LEVEL) -> None:
    """
    Configure logging once per process.
    Safe to call multiple times.
    """
    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        stream=sys.stdout,
    )

    _LOGGING_CONFIGURED = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a named logger, configuring logging on first use."""
    configure_logging()
    return logging.getLogger(name)
