"""Unit tests for the run transcript."""

import logging
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from rich.logging import RichHandler

from gpureset.core.transcript import (
    PACKAGE_LOGGER,
    enable_verbose_console,
    install_null_handler,
    start_transcript,
    stop_transcript,
    transcript_path,
)


@pytest.fixture
def package_logger() -> Iterator[logging.Logger]:
    """Package logger restored to its original handlers afterwards."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    handlers, level = list(logger.handlers), logger.level
    yield logger
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
    logger.setLevel(level)


class TestTranscript:
    """Tests for transcript file handling."""

    def test_transcript_path(self, tmp_path: Path) -> None:
        """Transcripts are named by prefix and start time."""
        path = transcript_path(tmp_path, "amd-reset", datetime(2025, 4, 17, 9, 5, 3))

        assert path == tmp_path / "amd-reset-20250417-090503.log"

    def test_records_module_logs(self, tmp_path: Path, package_logger: logging.Logger) -> None:
        """Every package logger writes into the transcript."""
        path = tmp_path / "log" / "mesa-reset.log"

        handler = start_transcript(path)
        logging.getLogger("gpureset.operators.apt").debug("apt-get exited 100")
        stop_transcript(handler)
        logging.getLogger("gpureset.operators.apt").info("after stop")

        text = path.read_text()
        assert "DEBUG" in text
        assert "gpureset.operators.apt: apt-get exited 100" in text
        assert "after stop" not in text
        assert handler not in package_logger.handlers


class TestVerboseConsole:
    """Tests for enable_verbose_console function."""

    def test_idempotent(self, package_logger: logging.Logger) -> None:
        """Only one Rich handler is ever installed."""
        enable_verbose_console()
        enable_verbose_console()

        rich_handlers = [h for h in package_logger.handlers if isinstance(h, RichHandler)]
        assert len(rich_handlers) == 1
        assert package_logger.level == logging.DEBUG


class TestNullHandler:
    """Tests for install_null_handler function."""

    def test_installs_once(self, package_logger: logging.Logger) -> None:
        """The package logger carries exactly one NullHandler."""
        install_null_handler()
        install_null_handler()

        null_handlers = [h for h in package_logger.handlers if isinstance(h, logging.NullHandler)]
        assert len(null_handlers) == 1

    def test_warnings_skip_stderr_fallback(
        self, package_logger: logging.Logger, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Package warnings never reach logging's last-resort stderr handler."""
        fallback = MagicMock(spec=logging.Handler)
        fallback.level = logging.WARNING
        monkeypatch.setattr(logging, "lastResort", fallback)
        monkeypatch.setattr(logging.getLogger(), "handlers", [])

        install_null_handler()
        logging.getLogger("gpureset.console").warning("Skipping dkms inventory")

        fallback.handle.assert_not_called()
