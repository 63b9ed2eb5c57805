"""Inventory collection.

Runs every scanner of a profile and concatenates their items. A scanner
that cannot run degrades its category to an empty result; collection as
a whole never fails.
"""

import logging
import subprocess

from gpureset.models.inventory import InventoryItem
from gpureset.scanners.base import Scanner

logger = logging.getLogger(__name__)


def collect_inventory(scanners: list[Scanner]) -> list[InventoryItem]:
    """Collect a read-only snapshot of host state.

    Args:
        scanners: Scanners to run, in order.

    Returns:
        All collected items, grouped by scanner order.
    """
    items: list[InventoryItem] = []

    for scanner in scanners:
        category = scanner.kind.value
        if not scanner.is_available():
            logger.warning("Skipping %s inventory: required tool not available", category)
            continue

        try:
            found = list(scanner.scan())
        except (RuntimeError, OSError, subprocess.SubprocessError) as e:
            logger.warning("Skipping %s inventory: %s", category, e)
            continue

        logger.info("Collected %d %s item(s)", len(found), category)
        items.extend(found)

    return items
