"""Precondition checks run before anything is collected."""

import logging
import os
import time
from collections.abc import Callable
from pathlib import Path

from gpureset.core.errors import PreconditionError
from gpureset.utils.formatting import print_warning
from gpureset.utils.shell import command_exists

logger = logging.getLogger(__name__)


def require_root(euid: int | None = None) -> None:
    """Refuse to run without root privileges.

    Raises:
        PreconditionError: If the effective uid is not 0.
    """
    uid = os.geteuid() if euid is None else euid
    if uid != 0:
        msg = "Run as root (sudo gpureset run ...)"
        raise PreconditionError(msg)


def require_tools(tools: tuple[str, ...] = ("apt-get", "dpkg")) -> None:
    """Refuse to run on hosts without the apt/dpkg toolchain.

    Raises:
        PreconditionError: If any tool is missing from PATH.
    """
    missing = [tool for tool in tools if not command_exists(tool)]
    if missing:
        msg = f"Required tool(s) not found: {', '.join(missing)}. This host is not apt-based."
        raise PreconditionError(msg)


def read_release(os_release: Path) -> str:
    """Read ``VERSION_ID`` from an os-release file.

    Returns:
        The version id, or ``unknown`` if the file or key is missing.
    """
    try:
        lines = os_release.read_text(encoding="utf-8").splitlines()
    except OSError as e:
        logger.debug("Cannot read %s: %s", os_release, e)
        return "unknown"

    for line in lines:
        key, sep, value = line.partition("=")
        if sep and key.strip() == "VERSION_ID":
            return value.strip().strip("\"'") or "unknown"
    return "unknown"


def check_release(
    os_release: Path,
    expected: str,
    grace_seconds: int,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """Warn and pause when the host release differs from the targeted one.

    A mismatch never aborts; the pause gives the operator a chance to
    cancel with Ctrl+C.

    Returns:
        True if the release matches.
    """
    release = read_release(os_release)
    if release == expected:
        logger.info("Release %s matches", release)
        return True

    print_warning(
        f"This reset targets release {expected}; detected {release}. "
        f"Continuing in {grace_seconds}s (Ctrl+C to cancel)."
    )
    sleep(grace_seconds)
    return False
