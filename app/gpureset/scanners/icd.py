"""Vulkan ICD and OpenCL vendor descriptor scanners.

Both descriptor kinds name the driver library the API loader will use.
The scanners record that library so the classifier can keep only the
stock open-source implementations.
"""

import json
import logging
from pathlib import Path
from typing import Any

from gpureset.models.inventory import ItemKind
from gpureset.scanners.base import FileScanner

logger = logging.getLogger(__name__)


def read_icd_library_path(path: Path) -> str | None:
    """Read ``ICD.library_path`` from a Vulkan ICD manifest.

    Args:
        path: JSON manifest to read.

    Returns:
        Declared library path, or None if the manifest is unreadable or
        does not declare one.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Cannot parse Vulkan ICD %s: %s", path, e)
        return None

    icd = data.get("ICD") if isinstance(data, dict) else None
    library = icd.get("library_path") if isinstance(icd, dict) else None
    return library if isinstance(library, str) and library else None


def read_opencl_library(path: Path) -> str | None:
    """Read the library name from an OpenCL vendor ``.icd`` file.

    Args:
        path: Vendor file to read.

    Returns:
        First non-empty line, or None if unreadable or empty.
    """
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.warning("Cannot read OpenCL vendor file %s: %s", path, e)
        return None

    for line in text.splitlines():
        if line.strip():
            return line.strip()
    return None


class VulkanIcdScanner(FileScanner):
    """Scanner for ``/etc/vulkan/icd.d/*.json``."""

    _suffixes = (".json",)

    @property
    def kind(self) -> ItemKind:
        return ItemKind.VULKAN_ICD

    def _directory(self) -> Path:
        return self._paths.vulkan_icd_d

    def _describe(self, path: Path) -> dict[str, Any]:
        return {"library_path": read_icd_library_path(path)}


class OpenClVendorScanner(FileScanner):
    """Scanner for ``/etc/OpenCL/vendors/*.icd``."""

    _suffixes = (".icd",)

    @property
    def kind(self) -> ItemKind:
        return ItemKind.OPENCL_VENDOR_FILE

    def _directory(self) -> Path:
        return self._paths.opencl_vendors_d

    def _describe(self, path: Path) -> dict[str, Any]:
        return {"library_path": read_opencl_library(path)}
