"""
Tests for logging setup.

Run with: pytest tests/test_logger.py -v
"""

import logging
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from api.shared.logger import QUIET_LOGGERS, get_logger, setup_logging


@pytest.fixture
def restore_levels():
    root = logging.getLogger()
    saved = {name: logging.getLogger(name).level for name in QUIET_LOGGERS}
    saved_root = root.level
    yield
    root.setLevel(saved_root)
    for name, level in saved.items():
        logging.getLogger(name).setLevel(level)


class TestSetupLogging:

    def test_http_client_loggers_are_quiet(self, restore_levels):
        setup_logging("INFO")

        assert logging.getLogger().level == logging.INFO
        for name in QUIET_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING

    def test_debug_lets_request_logs_through(self, restore_levels):
        setup_logging("debug")

        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self, restore_levels):
        setup_logging("chatty")

        assert logging.getLogger().level == logging.INFO


def test_get_logger_uses_module_name():
    assert get_logger("dashboard.poller").name == "dashboard.poller"
