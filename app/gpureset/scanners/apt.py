"""APT package scanner implementation.

Lists installed packages using dpkg-query. Only packages in the
``installed`` state are reported; half-removed and config-only entries
are left out.
"""

import logging
from collections.abc import Iterator

from gpureset.models.inventory import InventoryItem, ItemKind
from gpureset.scanners.base import Scanner
from gpureset.utils.shell import command_exists

logger = logging.getLogger(__name__)


class AptScanner(Scanner):
    """Scanner for dpkg packages.

    Uses dpkg-query for the package list and ``dpkg --print-architecture``
    to flag packages of a foreign architecture, so later purges can be
    arch-qualified.
    """

    # dpkg-query format string: Package, Version, Architecture, Status
    _DPKG_FORMAT = "${Package}\\t${Version}\\t${Architecture}\\t${db:Status-Status}\\n"

    @property
    def kind(self) -> ItemKind:
        """Return PACKAGE as the collected category."""
        return ItemKind.PACKAGE

    def is_available(self) -> bool:
        """Check if dpkg-query is available."""
        return command_exists("dpkg-query")

    def scan(self) -> Iterator[InventoryItem]:
        """Scan all installed packages.

        Yields:
            InventoryItem for each installed package.

        Raises:
            RuntimeError: If dpkg-query fails.
        """
        native_arch = self._native_architecture()

        result = self._run(["dpkg-query", "-W", "-f", self._DPKG_FORMAT])
        if not result.success:
            msg = f"dpkg-query failed: {result.error_text}"
            raise RuntimeError(msg)

        for line in result.stdout.strip().split("\n"):
            if not line:
                continue

            item = self._parse_dpkg_line(line, native_arch)
            if item is not None:
                yield item

    def _native_architecture(self) -> str | None:
        """Get the dpkg native architecture, or None if it cannot be queried."""
        result = self._run(["dpkg", "--print-architecture"])
        if not result.success:
            logger.debug("dpkg --print-architecture failed: %s", result.error_text)
            return None
        return result.stdout.strip() or None

    def _parse_dpkg_line(self, line: str, native_arch: str | None) -> InventoryItem | None:
        """Parse a single line of dpkg-query output.

        Args:
            line: Tab-separated line from dpkg-query.
            native_arch: Native dpkg architecture, if known.

        Returns:
            InventoryItem for installed packages, None otherwise.
        """
        parts = line.split("\t")
        if len(parts) < 4:
            logger.debug("Skipping malformed dpkg line (parts=%d): %r", len(parts), line[:100])
            return None

        name, version, arch, status = (part.strip() for part in parts[:4])

        if not name or status != "installed":
            return None

        foreign_arch = bool(native_arch) and arch not in ("all", native_arch, "")

        return InventoryItem(
            kind=ItemKind.PACKAGE,
            name=name,
            metadata={
                "version": version,
                "architecture": arch,
                "foreign_arch": foreign_arch,
            },
        )
