"""
Tests for structured logging setup.
"""

import json
import logging
from unittest.mock import patch

import pytest
import structlog

from core.config import settings
from core.logging import configure_logging


@pytest.fixture
def restore_logging():
    root_level = logging.getLogger().level
    azure_level = logging.getLogger("azure").level
    yield
    structlog.reset_defaults()
    logging.getLogger().setLevel(root_level)
    logging.getLogger("azure").setLevel(azure_level)


@pytest.mark.unit
@pytest.mark.usefixtures("restore_logging")
class TestConfigureLogging:
    def test_level_and_json_rendering(self, capsys) -> None:
        with patch.object(settings, "LOG_LEVEL", "warning"), patch.object(settings, "LOG_FORMAT", "json"):
            configure_logging()

        logger = structlog.get_logger("tests")
        logger.info("below_threshold")
        logger.warning("complaint_stats_failed", user_id="rep-a")

        lines = capsys.readouterr().out.strip().splitlines()
        assert len(lines) == 1
        event = json.loads(lines[0])
        assert event["event"] == "complaint_stats_failed"
        assert event["level"] == "warning"
        assert event["user_id"] == "rep-a"
        assert logging.getLogger().level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self) -> None:
        with patch.object(settings, "LOG_LEVEL", "chatty"):
            configure_logging()

        assert logging.getLogger().level == logging.INFO

    def test_azure_sdk_is_quieted(self) -> None:
        with patch.object(settings, "LOG_LEVEL", "DEBUG"):
            configure_logging()

        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("azure").level == logging.WARNING
