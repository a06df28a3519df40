"""Unit tests for logging configuration."""

from __future__ import annotations

import logging
import os
from datetime import datetime, timedelta
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
import structlog

from kong_api_controller.logging.config import (
    RETENTION_DAYS,
    _cleanup_old_logs,
    _setup_file_logging,
    configure_logging,
    get_logger,
)


@pytest.fixture(autouse=True)
def _reset_logging() -> Any:
    """Restore root handlers and structlog defaults after each test."""
    root = logging.getLogger()
    original_handlers = list(root.handlers)
    original_level = root.level
    yield
    for handler in root.handlers:
        if handler not in original_handlers:
            handler.close()
    root.handlers = original_handlers
    root.setLevel(original_level)
    structlog.reset_defaults()


def _age(path: Path, days: int) -> None:
    old_time = (datetime.now() - timedelta(days=days)).timestamp()
    os.utime(path, (old_time, old_time))


@pytest.mark.unit
class TestCleanupOldLogs:
    """Tests for _cleanup_old_logs function."""

    def test_returns_early_when_log_dir_missing(self, tmp_path: Path) -> None:
        """_cleanup_old_logs should return early if the directory doesn't exist."""
        _cleanup_old_logs(tmp_path / "nonexistent" / "controller.log")

    def test_deletes_old_log_files(self, tmp_path: Path) -> None:
        """Rotated files older than RETENTION_DAYS are deleted."""
        log_file = tmp_path / "controller.log.1"
        log_file.write_text("old log data")
        _age(log_file, RETENTION_DAYS + 5)

        _cleanup_old_logs(tmp_path / "controller.log")

        assert not log_file.exists()

    def test_keeps_recent_and_unrelated_files(self, tmp_path: Path) -> None:
        """Recent logs and files of other names are kept."""
        recent = tmp_path / "controller.log"
        recent.write_text("recent log data")
        other = tmp_path / "other.txt"
        other.write_text("data")
        _age(other, RETENTION_DAYS + 5)

        _cleanup_old_logs(recent)

        assert recent.exists()
        assert other.exists()

    def test_ignores_os_errors(self, tmp_path: Path) -> None:
        """Files that cannot be removed are skipped."""
        log_file = tmp_path / "controller.log.1"
        log_file.write_text("data")
        _age(log_file, RETENTION_DAYS + 5)

        with patch.object(Path, "unlink", side_effect=OSError("permission denied")):
            _cleanup_old_logs(tmp_path / "controller.log")


@pytest.mark.unit
class TestSetupFileLogging:
    """Tests for _setup_file_logging function."""

    def test_creates_log_directory_and_handler(self, tmp_path: Path) -> None:
        """The directory is created and a rotating handler added."""
        log_file = tmp_path / "logs" / "controller.log"

        _setup_file_logging(log_file, [])

        handlers = [h for h in logging.getLogger().handlers if isinstance(h, RotatingFileHandler)]
        assert log_file.parent.exists()
        assert any(Path(h.baseFilename) == log_file for h in handlers)


@pytest.mark.unit
class TestConfigureLogging:
    """Tests for configure_logging function."""

    def _console_handlers(self) -> list[logging.Handler]:
        return [
            h
            for h in logging.getLogger().handlers
            if type(h) is logging.StreamHandler
            and getattr(h, "_kong_api_controller_handler", False)
        ]

    @pytest.mark.parametrize(
        ("kwargs", "level"),
        [
            ({"debug": True}, logging.DEBUG),
            ({"verbose": True}, logging.INFO),
            ({}, logging.WARNING),
        ],
    )
    def test_console_level(self, kwargs: dict[str, bool], level: int) -> None:
        """The console handler level follows the flags."""
        configure_logging(**kwargs)

        (handler,) = self._console_handlers()
        assert handler.level == level

    def test_json_output_uses_json_renderer(self) -> None:
        """JSON output renders records with JSONRenderer."""
        configure_logging(json_output=True)

        (handler,) = self._console_handlers()
        formatter = handler.formatter
        assert isinstance(formatter, structlog.stdlib.ProcessorFormatter)
        assert isinstance(formatter.processors[-1], structlog.processors.JSONRenderer)

    def test_reconfigure_replaces_handlers(self) -> None:
        """Calling configure_logging twice leaves a single console handler."""
        configure_logging()
        configure_logging(verbose=True)

        assert len(self._console_handlers()) == 1

    def test_log_file_adds_file_handler(self, tmp_path: Path) -> None:
        """A log file installs the file handler."""
        log_file = tmp_path / "controller.log"

        with patch("kong_api_controller.logging.config._setup_file_logging") as mock_setup:
            configure_logging(log_file=log_file)

        assert mock_setup.call_args.args[0] == log_file

    def test_urllib3_is_quieted(self) -> None:
        """Request-level urllib3 logging is suppressed at debug level."""
        configure_logging(debug=True)

        assert logging.getLogger("urllib3").level == logging.INFO


@pytest.mark.unit
class TestGetLogger:
    """Tests for get_logger function."""

    def test_returns_bound_logger(self) -> None:
        """get_logger should return a structlog logger."""
        logger = get_logger("test")
        assert logger is not None

    def test_binds_initial_context(self) -> None:
        """get_logger should bind initial context when provided."""
        logger = get_logger("test", controller="route", namespace="gateway")
        assert logger is not None
