"""Filesystem operator.

Every destructive file operation of a reset lives here: sources backups,
rename-aside moves, directory removal, and writing managed files. None
of them shell out.
"""

import logging
import shutil
from pathlib import Path

from gpureset.core.paths import HostPaths
from gpureset.models.action import ActionResult, RemediationAction, failed, succeeded

logger = logging.getLogger(__name__)


def unique_destination(destination: Path) -> Path:
    """Return ``destination`` or the first free ``<destination>.<n>`` variant."""
    if not destination.exists():
        return destination
    counter = 1
    while True:
        candidate = destination.with_name(f"{destination.name}.{counter}")
        if not candidate.exists():
            return candidate
        counter += 1


class FileOperator:
    """Operator for file moves, removals and writes.

    Moves never overwrite: if the planned destination exists, a numeric
    suffix is appended.
    """

    def __init__(self, paths: HostPaths | None = None) -> None:
        self._paths = paths or HostPaths()

    def backup_sources(self, timestamp: int) -> list[ActionResult]:
        """Copy the APT sources configuration aside before it is touched.

        ``sources.list`` is copied to ``sources.list.bak-<timestamp>`` and
        every entry of ``sources.list.d`` into ``sources.list.d.bak``.

        Args:
            timestamp: Run timestamp.

        Returns:
            One ActionResult per backed-up file.
        """
        results: list[ActionResult] = []

        sources_list = self._paths.sources_list
        if sources_list.is_file():
            backup = unique_destination(
                sources_list.with_name(f"{sources_list.name}.bak-{timestamp}")
            )
            results.append(self._copy(sources_list, backup))

        sources_dir = self._paths.sources_list_d
        if sources_dir.is_dir():
            backup_dir = self._paths.sources_backup_dir
            backup_dir.mkdir(parents=True, exist_ok=True)
            for entry in sorted(sources_dir.iterdir()):
                if entry.is_file():
                    results.append(self._copy(entry, backup_dir / entry.name))

        if not results:
            logger.info("No APT sources to back up")
        return results

    def _copy(self, source: Path, destination: Path) -> ActionResult:
        try:
            shutil.copy2(source, destination)
        except OSError as e:
            return failed("backup_sources", str(source), str(e))
        logger.info("Backed up %s to %s", source, destination)
        return succeeded("backup_sources", str(source), f"Copied to {destination}")

    def rename_aside(self, action: RemediationAction) -> ActionResult:
        """Move a file to its planned backup location.

        Args:
            action: A rename action with ``item.path`` and ``backup_path`` set.

        Returns:
            ActionResult naming the final destination.
        """
        operation = action.action_type.value
        source = Path(action.item.path or "")
        if action.backup_path is None or not (source.exists() or source.is_symlink()):
            return failed(operation, str(source), "File no longer exists")

        destination = unique_destination(Path(action.backup_path))
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.move(str(source), str(destination))
        except OSError as e:
            return failed(operation, str(source), str(e))

        logger.info("Moved %s to %s (%s)", source, destination, action.rule)
        return succeeded(operation, str(source), f"Moved to {destination}")

    def remove_tree(self, action: RemediationAction) -> ActionResult:
        """Recursively remove a directory.

        Symlinks are unlinked, never followed.

        Args:
            action: A directory removal action.

        Returns:
            ActionResult for the removal.
        """
        operation = action.action_type.value
        target = Path(action.item.path or "")
        try:
            if target.is_symlink():
                target.unlink()
            elif target.is_dir():
                shutil.rmtree(target)
            else:
                return succeeded(operation, str(target), "Already absent")
        except OSError as e:
            return failed(operation, str(target), str(e))

        logger.info("Removed %s (%s)", target, action.rule)
        return succeeded(operation, str(target), "Removed")

    def write_file(self, path: Path, content: str) -> ActionResult:
        """Write a managed file, replacing any previous content.

        Args:
            path: Destination path.
            content: File content.

        Returns:
            ActionResult for the write.
        """
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            return failed("write_file", str(path), str(e))
        logger.info("Wrote %s", path)
        return succeeded("write_file", str(path), "Written")
