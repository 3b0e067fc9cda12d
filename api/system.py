"""
Health and runtime information for the WebPlot server.

Mounted under ``/api`` next to the webhook routes.
"""

import platform
import sys
import time
from importlib import metadata
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends

from .config import ServerSettings
from .store import IngestionStore, get_store

router = APIRouter()

_STARTED_AT = time.monotonic()

# Distributions reported by /system/info, by their name on the index
RUNTIME_DISTRIBUTIONS = (
    "fastapi",
    "starlette",
    "pydantic",
    "uvicorn",
    "orjson",
    "httpx",
    "numpy",
    "pandas",
)


def _distribution_version(name: str) -> Optional[str]:
    try:
        return metadata.version(name)
    except metadata.PackageNotFoundError:
        return None


def _uptime_seconds() -> float:
    return round(time.monotonic() - _STARTED_AT, 3)


@router.get("/health")
async def health_check(store: IngestionStore = Depends(get_store)) -> Dict[str, Any]:
    """Liveness plus a glance at what has been ingested so far."""
    latest = store.get_latest()
    return {
        "status": "healthy",
        "message": "WebPlot webhook server is running",
        "records": len(store),
        "latest_id": latest.id if latest is not None else None,
        "uptime_seconds": _uptime_seconds(),
    }


@router.get("/system/info")
async def system_info() -> Dict[str, Any]:
    """Interpreter, host, effective settings and installed package versions."""
    packages = {}
    for name in RUNTIME_DISTRIBUTIONS:
        version = _distribution_version(name)
        if version is not None:
            packages[name] = version

    return {
        "python": {
            "version": platform.python_version(),
            "implementation": platform.python_implementation(),
            "executable": sys.executable,
        },
        "system": {
            "os": platform.system(),
            "release": platform.release(),
            "machine": platform.machine(),
        },
        "server": ServerSettings.from_env().to_dict(),
        "packages": packages,
    }
