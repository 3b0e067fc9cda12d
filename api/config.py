"""
Runtime configuration for WebPlot.

Settings are read from environment variables, falling back to defaults:

- WEBPLOT_HOST / WEBPLOT_PORT: where the webhook server binds
- WEBPLOT_LOG_LEVEL: root log level for server and dashboard
- WEBPLOT_SERVER_URL: base URL the dashboard poller pulls from
- WEBPLOT_POLL_INTERVAL / WEBPLOT_POLL_TIMEOUT: poller timing in seconds

Command-line flags in ``main.py`` and ``dashboard/__main__.py`` take
precedence over the environment.
"""

import os
from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional

from .shared.logger import get_logger

logger = get_logger(__name__)

ENV_PREFIX = "WEBPLOT_"

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3001
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_SERVER_URL = "http://localhost:3001"
DEFAULT_POLL_INTERVAL = 2.0
DEFAULT_POLL_TIMEOUT = 10.0


def _env(environ: Mapping[str, str], key: str) -> Optional[str]:
    value = environ.get(ENV_PREFIX + key)
    if value is None or not value.strip():
        return None
    return value.strip()


def _env_int(environ: Mapping[str, str], key: str, default: int) -> int:
    raw = _env(environ, key)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid %s%s=%r, using default %s", ENV_PREFIX, key, raw, default)
        return default


def _env_float(environ: Mapping[str, str], key: str, default: float) -> float:
    raw = _env(environ, key)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid %s%s=%r, using default %s", ENV_PREFIX, key, raw, default)
        return default
    if value <= 0:
        logger.warning("%s%s must be positive, using default %s", ENV_PREFIX, key, default)
        return default
    return value


@dataclass
class ServerSettings:
    """Settings for the webhook HTTP server."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = DEFAULT_LOG_LEVEL

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ServerSettings":
        environ = os.environ if environ is None else environ
        return cls(
            host=_env(environ, "HOST") or DEFAULT_HOST,
            port=_env_int(environ, "PORT", DEFAULT_PORT),
            log_level=(_env(environ, "LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
        )


@dataclass
class PollerSettings:
    """Settings for the dashboard poller."""

    server_url: str = DEFAULT_SERVER_URL
    interval: float = DEFAULT_POLL_INTERVAL
    timeout: float = DEFAULT_POLL_TIMEOUT
    log_level: str = DEFAULT_LOG_LEVEL

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "PollerSettings":
        environ = os.environ if environ is None else environ
        return cls(
            server_url=(_env(environ, "SERVER_URL") or DEFAULT_SERVER_URL).rstrip("/"),
            interval=_env_float(environ, "POLL_INTERVAL", DEFAULT_POLL_INTERVAL),
            timeout=_env_float(environ, "POLL_TIMEOUT", DEFAULT_POLL_TIMEOUT),
            log_level=(_env(environ, "LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
        )
