"""
Shared utilities for the WebPlot API and dashboard client.
"""
from .logger import get_logger, setup_logging

__all__ = [
    "get_logger",
    "setup_logging",
]
