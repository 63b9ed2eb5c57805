"""Filesystem artifact scanners.

Collects modprobe configuration files, top-level vendor install trees
under /opt, and per-user GPU shader caches.
"""

from collections.abc import Iterator
from pathlib import Path

from gpureset.core.paths import HostPaths
from gpureset.core.rules import DEFAULT_CACHE_DIR_NAMES
from gpureset.models.inventory import InventoryItem, ItemKind
from gpureset.scanners.base import DISABLED_MARKER, FileScanner, Scanner
from gpureset.utils.shell import CommandRunner


class ModprobeScanner(FileScanner):
    """Scanner for ``/etc/modprobe.d/*.conf``."""

    _suffixes = (".conf",)

    @property
    def kind(self) -> ItemKind:
        return ItemKind.MODULE_CONFIG_FILE

    def _directory(self) -> Path:
        return self._paths.modprobe_d


class InstallDirScanner(Scanner):
    """Scanner for top-level directories under ``/opt``."""

    @property
    def kind(self) -> ItemKind:
        return ItemKind.INSTALL_DIRECTORY

    def scan(self) -> Iterator[InventoryItem]:
        opt_dir = self._paths.opt_dir
        if not opt_dir.is_dir():
            return

        for path in sorted(opt_dir.iterdir()):
            if path.is_dir() and DISABLED_MARKER not in path.name:
                yield InventoryItem(kind=self.kind, name=path.name, path=str(path))


class ShaderCacheScanner(Scanner):
    """Scanner for GPU shader caches in every user's ``~/.cache``.

    Only entries matching the configured cache names (globs allowed) are
    looked up; the rest of each cache directory is never collected.
    """

    def __init__(
        self,
        paths: HostPaths | None = None,
        runner: CommandRunner | None = None,
        names: tuple[str, ...] = DEFAULT_CACHE_DIR_NAMES,
    ) -> None:
        super().__init__(paths, runner)
        self._names = names

    @property
    def kind(self) -> ItemKind:
        return ItemKind.CACHE_DIRECTORY

    def scan(self) -> Iterator[InventoryItem]:
        for cache_dir in self._paths.user_cache_dirs():
            seen: set[Path] = set()
            for pattern in self._names:
                for path in sorted(cache_dir.glob(pattern)):
                    if path in seen or path.is_symlink() or not path.is_dir():
                        continue
                    seen.add(path)
                    yield InventoryItem(kind=self.kind, name=path.name, path=str(path))
