"""Inventory models for collected host state.

This module defines the data structures the collectors produce: one
immutable InventoryItem per discovered artifact.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ItemKind(str, Enum):
    """Category of a discovered artifact.

    Attributes:
        PACKAGE: Installed dpkg package.
        REPOSITORY_SOURCE: APT source file in sources.list.d.
        PIN_RULE: APT preferences file in preferences.d.
        MODULE_BUILD: DKMS module registration (all versions).
        MODULE_CONFIG_FILE: modprobe configuration file.
        SIGNING_KEY: Repository keyring in trusted.gpg.d.
        INSTALL_DIRECTORY: Top-level directory under /opt.
        CACHE_DIRECTORY: Per-user GPU shader cache directory.
        VULKAN_ICD: Vulkan installable client driver descriptor.
        OPENCL_VENDOR_FILE: OpenCL ICD loader vendor file.
    """

    PACKAGE = "package"
    REPOSITORY_SOURCE = "repository_source"
    PIN_RULE = "pin_rule"
    MODULE_BUILD = "module_build"
    MODULE_CONFIG_FILE = "module_config_file"
    SIGNING_KEY = "signing_key"
    INSTALL_DIRECTORY = "install_directory"
    CACHE_DIRECTORY = "cache_directory"
    VULKAN_ICD = "vulkan_icd"
    OPENCL_VENDOR_FILE = "opencl_vendor_file"


@dataclass(frozen=True, slots=True)
class InventoryItem:
    """A single artifact discovered on the host.

    Identity is ``(kind, name, path)``; kind-specific metadata (package
    version and architecture, module versions, file content, ICD library
    path) is carried alongside but excluded from equality and hashing.

    Attributes:
        kind: Artifact category.
        name: Package/module name, or the file or directory base name.
        path: Absolute path for filesystem artifacts, None otherwise.
        metadata: Kind-specific details recorded by the collector.
    """

    kind: ItemKind
    name: str
    path: str | None = None
    metadata: dict[str, Any] = field(default_factory=lambda: {}, compare=False, hash=False)

    def __post_init__(self) -> None:
        """Validate item data after initialization."""
        if not self.name:
            msg = "Inventory item name cannot be empty"
            raise ValueError(msg)

    @property
    def label(self) -> str:
        """Human-readable identifier: the path when known, else the name."""
        return self.path or self.name

    @property
    def content(self) -> str:
        """File content captured at collection time (empty if not read)."""
        return str(self.metadata.get("content", ""))

    @property
    def package_spec(self) -> str:
        """Package argument for apt-get, arch-qualified for foreign architectures."""
        arch = self.metadata.get("architecture")
        if self.metadata.get("foreign_arch") and arch:
            return f"{self.name}:{arch}"
        return self.name

    @property
    def versions(self) -> tuple[str, ...]:
        """Registered module build versions (module builds only)."""
        return tuple(self.metadata.get("versions", ()))

    @property
    def library_path(self) -> str | None:
        """Driver library declared by an ICD or OpenCL vendor descriptor."""
        value = self.metadata.get("library_path")
        return str(value) if value else None
