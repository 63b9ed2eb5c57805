"""APT configuration scanners.

Collects repository source files, preferences (pin) files, and
repository signing keys from /etc/apt.
"""

from pathlib import Path

from gpureset.models.inventory import ItemKind
from gpureset.scanners.base import FileScanner


class SourceScanner(FileScanner):
    """Scanner for ``sources.list.d`` entries (one-line and deb822 formats).

    The main ``sources.list`` is never collected; it is only backed up.
    """

    _suffixes = (".list", ".sources")
    _read_content = True

    @property
    def kind(self) -> ItemKind:
        return ItemKind.REPOSITORY_SOURCE

    def _directory(self) -> Path:
        return self._paths.sources_list_d


class PinScanner(FileScanner):
    """Scanner for ``preferences.d`` files apt actually reads.

    apt only parses files with no extension or a ``.pref`` extension.
    """

    _read_content = True

    @property
    def kind(self) -> ItemKind:
        return ItemKind.PIN_RULE

    def _directory(self) -> Path:
        return self._paths.preferences_d

    def _accepts(self, path: Path) -> bool:
        return path.suffix in ("", ".pref")


class SigningKeyScanner(FileScanner):
    """Scanner for keyrings in ``trusted.gpg.d``."""

    _suffixes = (".gpg", ".asc")

    @property
    def kind(self) -> ItemKind:
        return ItemKind.SIGNING_KEY

    def _directory(self) -> Path:
        return self._paths.trusted_gpg_d
