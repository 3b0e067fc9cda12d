"""
Centralized logging for the WebPlot backend and dashboard client.

Usage:
    from api.shared.logger import get_logger

    logger = get_logger(__name__)
    logger.info("Webhook server running at http://%s:%d", host, port)
    logger.warning("Ignoring undecodable webhook body: %s", err)
"""

import logging
import sys
from typing import Union

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Loggers that emit one INFO line per HTTP request
QUIET_LOGGERS = ("httpx", "httpcore")

_configured = False


def _resolve_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, str(level).upper(), logging.INFO)


def setup_logging(level: Union[str, int] = "INFO") -> None:
    """Configure root logging.

    Call once at startup (main.py or the dashboard CLI). Subsequent calls
    only adjust the root level. Request logs from the HTTP client stay at
    WARNING unless DEBUG is asked for.
    """
    global _configured
    resolved = _resolve_level(level)
    if _configured:
        logging.getLogger().setLevel(resolved)
    else:
        logging.basicConfig(
            level=resolved,
            format=LOG_FORMAT,
            datefmt="%H:%M:%S",
            stream=sys.stdout,
            force=True,
        )
        _configured = True

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if resolved <= logging.DEBUG else logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Return a logger for a module (typically ``__name__``)."""
    return logging.getLogger(name)
