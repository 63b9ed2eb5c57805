"""DKMS module build scanner.

Parses ``dkms status`` output in both the legacy comma format
(``amdgpu, 5.11.32, 5.15.0-generic, x86_64: installed``) and the current
slash format (``amdgpu/6.3.6, 6.2.0-36-generic, x86_64: installed``).
"""

import logging
from collections.abc import Iterator

from gpureset.models.inventory import InventoryItem, ItemKind
from gpureset.scanners.base import Scanner
from gpureset.utils.shell import command_exists

logger = logging.getLogger(__name__)


def parse_dkms_status(output: str) -> dict[str, list[str]]:
    """Group registered DKMS versions by module name.

    Args:
        output: Raw ``dkms status`` stdout.

    Returns:
        Module name to versions, both in first-seen order.
    """
    modules: dict[str, list[str]] = {}

    for line in output.splitlines():
        head = line.split(":", 1)[0].strip()
        if not head:
            continue

        fields = [f.strip() for f in head.split(",")]
        if "/" in fields[0]:
            name, _, version = fields[0].partition("/")
        elif len(fields) >= 2:
            name, version = fields[0], fields[1]
        else:
            logger.debug("Skipping unrecognised dkms status line: %r", line[:100])
            continue

        if not name or not version:
            continue

        versions = modules.setdefault(name, [])
        if version not in versions:
            versions.append(version)

    return modules


class DkmsScanner(Scanner):
    """Scanner for DKMS module registrations.

    One item per module name; every registered version is recorded in
    the item's metadata so deregistration can remove all of them.
    """

    @property
    def kind(self) -> ItemKind:
        """Return MODULE_BUILD as the collected category."""
        return ItemKind.MODULE_BUILD

    def is_available(self) -> bool:
        """Check if dkms is installed."""
        return command_exists("dkms")

    def scan(self) -> Iterator[InventoryItem]:
        """Scan registered module builds.

        Yields:
            InventoryItem per module with all of its versions.

        Raises:
            RuntimeError: If dkms status fails.
        """
        result = self._run(["dkms", "status"])
        if not result.success:
            msg = f"dkms status failed: {result.error_text}"
            raise RuntimeError(msg)

        for name, versions in parse_dkms_status(result.stdout).items():
            yield InventoryItem(
                kind=ItemKind.MODULE_BUILD,
                name=name,
                metadata={"versions": tuple(versions)},
            )
