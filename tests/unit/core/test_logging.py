"""
Tests for structured logging configuration.
"""

import json
import logging

import pytest

from robik.core.logging import configure_logging, get_logger


@pytest.fixture
def log_file(temp_dir):
    """Log file that is released after the test."""
    path = temp_dir / "robik.log"
    yield path
    for handler in logging.root.handlers:
        handler.close()
    logging.root.handlers.clear()


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_json_lines_in_file(self, log_file):
        """Test events are written as JSON with their context."""
        configure_logging(level="DEBUG", json_output=True, log_file=log_file)

        get_logger("robik.kinematics.opw").debug("opw_inverse_solved", wrist_singular=2)

        event = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert event["event"] == "opw_inverse_solved"
        assert event["wrist_singular"] == 2
        assert event["level"] == "debug"
        assert event["logger"] == "robik.kinematics.opw"
        assert "timestamp" in event

    def test_level_filters_events(self, log_file):
        """Test events below the configured level are dropped."""
        configure_logging(level="WARNING", json_output=True, log_file=log_file)
        logger = get_logger("robik.test")

        logger.debug("hidden_event")
        logger.warning("visible_event")

        text = log_file.read_text()
        assert "hidden_event" not in text
        assert "visible_event" in text

    def test_console_format(self, log_file):
        """Test console rendering is plain text."""
        configure_logging(level="INFO", log_file=log_file)

        get_logger("robik.test").info("robot_loaded", robot="IRB4600")

        line = log_file.read_text().strip().splitlines()[-1]
        assert "robot_loaded" in line
        assert "robot=IRB4600" in line
        assert not line.startswith("{")

    def test_reconfigure_replaces_handlers(self, log_file):
        """Test a second call does not stack handlers."""
        configure_logging(log_file=log_file)
        configure_logging(log_file=log_file)

        assert len(logging.root.handlers) == 2

    def test_unknown_level_defaults_to_warning(self, log_file):
        configure_logging(level="chatty", log_file=log_file)
        assert logging.root.level == logging.WARNING
