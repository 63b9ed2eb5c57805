"""Abstract base class for inventory scanners.

This module defines the Scanner interface that every inventory
category collector implements.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from gpureset.core.paths import HostPaths
from gpureset.models.inventory import InventoryItem, ItemKind
from gpureset.utils.shell import CommandResult, CommandRunner, run_command

logger = logging.getLogger(__name__)

# Infix added to renamed-aside artifacts; such files are never re-collected.
DISABLED_MARKER = ".disabled."


class Scanner(ABC):
    """Abstract base class for all inventory scanners.

    Scanners are read-only: they query the package database, DKMS, or
    the filesystem and yield one InventoryItem per artifact found.

    Example:
        >>> scanner = SourceScanner(HostPaths())
        >>> if scanner.is_available():
        ...     for item in scanner.scan():
        ...         print(item.path)
    """

    def __init__(self, paths: HostPaths | None = None, runner: CommandRunner | None = None) -> None:
        """Initialize the scanner.

        Args:
            paths: Host layout to scan. Defaults to the live root.
            runner: Command runner override; defaults to run_command.
        """
        self._paths = paths or HostPaths()
        self._runner = runner

    @property
    @abstractmethod
    def kind(self) -> ItemKind:
        """Return the inventory category this scanner collects."""

    @abstractmethod
    def scan(self) -> Iterator[InventoryItem]:
        """Scan and yield all items of this category.

        Yields:
            InventoryItem instances.

        Raises:
            RuntimeError: If the underlying tool fails.
        """

    def is_available(self) -> bool:
        """Check if this category can be collected on this host.

        Returns:
            True by default; command-backed scanners check their tool.
        """
        return True

    def _run(self, args: list[str], timeout: float | None = 60.0) -> CommandResult:
        """Run a read-only query command."""
        runner = self._runner or run_command
        return runner(args, timeout=timeout)


class FileScanner(Scanner):
    """Scanner yielding regular files from one directory by suffix.

    Subclasses set ``_suffixes`` and implement ``_directory``; files whose
    names carry the disabled marker are skipped.
    """

    _suffixes: tuple[str, ...] = ()
    _read_content: bool = False

    @abstractmethod
    def _directory(self) -> Path:
        """Directory to list."""

    def _accepts(self, path: Path) -> bool:
        """Check if a file name belongs to this category."""
        return path.suffix in self._suffixes

    def _describe(self, path: Path) -> dict[str, Any]:
        """Build item metadata for one file.

        Reads the file content for content-classified kinds; unreadable
        files are still reported, without content.
        """
        if not self._read_content:
            return {}
        try:
            return {"content": path.read_text(encoding="utf-8", errors="replace")}
        except OSError as e:
            logger.warning("Cannot read %s: %s", path, e)
            return {}

    def scan(self) -> Iterator[InventoryItem]:
        """Yield matching files in sorted order.

        Yields:
            InventoryItem per file.
        """
        directory = self._directory()
        if not directory.is_dir():
            return

        for path in sorted(directory.iterdir()):
            if DISABLED_MARKER in path.name or not path.is_file():
                continue
            if not self._accepts(path):
                continue
            yield InventoryItem(
                kind=self.kind,
                name=path.name,
                path=str(path),
                metadata=self._describe(path),
            )
