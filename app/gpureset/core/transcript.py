"""Run transcript and console logging setup.

A reset writes everything it does to a timestamped log file so the
operator has a durable record of every command, its exit status, and
every failure that was logged and skipped.
"""

import logging
from datetime import datetime
from pathlib import Path

from rich.logging import RichHandler

from gpureset.core.paths import ensure_dir
from gpureset.utils.formatting import err_console

# Root logger for the package; all module loggers propagate here.
PACKAGE_LOGGER = "gpureset"

_TRANSCRIPT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def transcript_path(log_dir: Path, prefix: str, now: datetime | None = None) -> Path:
    """Build the transcript path for a run.

    Args:
        log_dir: Directory holding transcripts.
        prefix: Profile log prefix (e.g. ``amd-reset``).
        now: Run start time. Defaults to the current local time.

    Returns:
        Path like ``/var/log/amd-reset-20250101-120000.log``.
    """
    stamp = (now or datetime.now()).strftime("%Y%m%d-%H%M%S")
    return log_dir / f"{prefix}-{stamp}.log"


def install_null_handler() -> None:
    """Keep package records away from logging's stderr fallback.

    Without any handler on the package logger, WARNING records would be
    echoed to stderr next to the Rich console output.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    if not any(isinstance(h, logging.NullHandler) for h in logger.handlers):
        logger.addHandler(logging.NullHandler())


def start_transcript(path: Path) -> logging.FileHandler:
    """Attach a DEBUG file handler for the run transcript.

    Args:
        path: Transcript file to append to.

    Returns:
        The installed handler; pass it to :func:`stop_transcript`.

    Raises:
        RuntimeError: If the log directory cannot be created.
        OSError: If the transcript file cannot be opened.
    """
    ensure_dir(path.parent, "log")
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(_TRANSCRIPT_FORMAT))

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(logging.DEBUG)
    logger.addHandler(handler)
    return handler


def stop_transcript(handler: logging.Handler) -> None:
    """Detach and close a transcript handler."""
    logging.getLogger(PACKAGE_LOGGER).removeHandler(handler)
    handler.close()


def enable_verbose_console() -> None:
    """Stream DEBUG records to stderr through Rich.

    The console mirror logger is excluded since those lines are already
    printed directly.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    if any(isinstance(h, RichHandler) for h in logger.handlers):
        return

    handler = RichHandler(console=err_console, show_path=False, markup=False)
    handler.setLevel(logging.DEBUG)
    handler.addFilter(lambda record: not record.name.startswith(f"{PACKAGE_LOGGER}.console"))

    logger.setLevel(logging.DEBUG)
    logger.addHandler(handler)
