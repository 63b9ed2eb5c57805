"""Inventory scanners, one per collected category.

This module exports the scanner classes and a factory building the
scanner set for a profile.
"""

from gpureset.core.paths import HostPaths
from gpureset.core.rules import RuleSet
from gpureset.models.inventory import ItemKind
from gpureset.scanners.apt import AptScanner
from gpureset.scanners.apt_config import PinScanner, SigningKeyScanner, SourceScanner
from gpureset.scanners.base import Scanner
from gpureset.scanners.dkms import DkmsScanner
from gpureset.scanners.filesystem import InstallDirScanner, ModprobeScanner, ShaderCacheScanner
from gpureset.scanners.icd import OpenClVendorScanner, VulkanIcdScanner
from gpureset.utils.shell import CommandRunner

SCANNER_TYPES: dict[ItemKind, type[Scanner]] = {
    ItemKind.PACKAGE: AptScanner,
    ItemKind.REPOSITORY_SOURCE: SourceScanner,
    ItemKind.PIN_RULE: PinScanner,
    ItemKind.MODULE_BUILD: DkmsScanner,
    ItemKind.MODULE_CONFIG_FILE: ModprobeScanner,
    ItemKind.SIGNING_KEY: SigningKeyScanner,
    ItemKind.INSTALL_DIRECTORY: InstallDirScanner,
    ItemKind.CACHE_DIRECTORY: ShaderCacheScanner,
    ItemKind.VULKAN_ICD: VulkanIcdScanner,
    ItemKind.OPENCL_VENDOR_FILE: OpenClVendorScanner,
}


def build_scanners(
    kinds: tuple[ItemKind, ...],
    paths: HostPaths,
    runner: CommandRunner | None = None,
    rules: RuleSet | None = None,
) -> list[Scanner]:
    """Create scanners for the requested categories, in declaration order.

    The shader cache scanner looks up the rule set's cache names; without
    rules it uses the default names.
    """
    scanners: list[Scanner] = []
    for kind in kinds:
        if kind == ItemKind.CACHE_DIRECTORY and rules is not None:
            scanners.append(ShaderCacheScanner(paths, runner, names=rules.cache_dir_names))
        else:
            scanners.append(SCANNER_TYPES[kind](paths, runner))
    return scanners


__all__ = [
    "SCANNER_TYPES",
    "AptScanner",
    "DkmsScanner",
    "InstallDirScanner",
    "ModprobeScanner",
    "OpenClVendorScanner",
    "PinScanner",
    "Scanner",
    "ShaderCacheScanner",
    "SigningKeyScanner",
    "SourceScanner",
    "VulkanIcdScanner",
    "build_scanners",
]
