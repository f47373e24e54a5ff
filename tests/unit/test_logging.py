"""Unit tests for logging setup."""

import io
import json
import logging

from movegov.utils.logging import (
    LogMode,
    MoveGovLogger,
    configure_from_cli,
    get_logger,
    setup_logging,
)


class TestSetupLogging:
    """Tests for the three output modes."""

    def test_human_mode(self) -> None:
        """Test ``[LEVEL] message`` without colors on a non-TTY stream."""
        stream = io.StringIO()
        setup_logging(LogMode.HUMAN, stream=stream)

        get_logger("movegov.test").info("Scanned %d functions", 3)

        assert stream.getvalue() == "[INFO] Scanned 3 functions\n"

    def test_verbose_mode(self) -> None:
        """Test the logger name and a timestamp are included."""
        stream = io.StringIO()
        setup_logging(LogMode.VERBOSE, level=logging.DEBUG, stream=stream)

        get_logger("movegov.analyzers.scanner").debug("details")

        line = stream.getvalue()
        assert line.startswith("[DEBUG][")
        assert "movegov.analyzers.scanner: details" in line

    def test_json_mode(self) -> None:
        """Test one JSON object per line."""
        stream = io.StringIO()
        setup_logging(LogMode.JSON, stream=stream)

        get_logger("movegov.pipeline").warning("careful")

        entry = json.loads(stream.getvalue())
        assert entry["level"] == "WARNING"
        assert entry["logger"] == "movegov.pipeline"
        assert entry["msg"] == "careful"
        assert "ts" in entry

    def test_structured_extra_data(self) -> None:
        """Test structured keys appear in JSON mode."""
        stream = io.StringIO()
        setup_logging(LogMode.JSON, stream=stream)

        get_logger("movegov.pipeline").structured(
            logging.INFO, "Generated", actions=["increment"], module="counter::counter"
        )

        entry = json.loads(stream.getvalue())
        assert entry["actions"] == ["increment"]
        assert entry["module"] == "counter::counter"

    def test_structured_respects_level(self) -> None:
        """Test structured records below the level are dropped."""
        stream = io.StringIO()
        setup_logging(LogMode.JSON, level=logging.WARNING, stream=stream)

        get_logger("movegov.pipeline").structured(logging.INFO, "quiet", a=1)

        assert stream.getvalue() == ""

    def test_level_filtering(self) -> None:
        """Test records below the level are dropped."""
        stream = io.StringIO()
        setup_logging(LogMode.HUMAN, level=logging.WARNING, stream=stream)

        logger = get_logger("movegov.test")
        logger.info("hidden")
        logger.error("shown")

        assert stream.getvalue() == "[ERROR] shown\n"


class TestConfigureFromCli:
    """Tests for flag-driven configuration."""

    def test_quiet(self) -> None:
        """Test quiet raises the level to warnings."""
        configure_from_cli(quiet=True)

        assert logging.getLogger("movegov").level == logging.WARNING

    def test_verbose(self) -> None:
        """Test verbose lowers the level to debug."""
        configure_from_cli(verbose=True)

        assert logging.getLogger("movegov").level == logging.DEBUG

    def test_logger_class(self) -> None:
        """Test package loggers support structured logging."""
        assert isinstance(get_logger("movegov.something.new"), MoveGovLogger)
