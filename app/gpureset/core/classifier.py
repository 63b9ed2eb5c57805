"""Foreign-versus-stock classification.

Each inventory kind has one predicate taking ``(item, rules)`` and
returning the id of the first matching rule, or None. The Classifier
dispatches on kind and turns a match into FOREIGN and no match into
STOCK, so every item gets exactly one label.

Vulkan ICD and OpenCL vendor descriptors are the exception to the
deny-list direction: they are foreign unless their library matches the
allow-list, since an unknown ICD left active overrides the stock driver.
"""

import fnmatch
from collections.abc import Callable, Iterable

from gpureset.core.rules import RuleSet, compile_pattern
from gpureset.models.classification import ClassificationResult, Label
from gpureset.models.inventory import InventoryItem, ItemKind

Predicate = Callable[[InventoryItem, RuleSet], str | None]


def _first_regex(value: str, patterns: Iterable[str], category: str) -> str | None:
    for pattern in patterns:
        if compile_pattern(pattern).search(value):
            return f"{category}:{pattern}"
    return None


def _first_keyword(text: str, keywords: Iterable[str], category: str) -> str | None:
    lowered = text.lower()
    for keyword in keywords:
        if keyword.lower() in lowered:
            return f"{category}:{keyword}"
    return None


def _first_glob(name: str, globs: Iterable[str], category: str) -> str | None:
    lowered = name.lower()
    for glob in globs:
        if fnmatch.fnmatchcase(lowered, glob.lower()):
            return f"{category}:{glob}"
    return None


def match_package(item: InventoryItem, rules: RuleSet) -> str | None:
    """Match a package name against the vendor package patterns."""
    return _first_regex(item.name, rules.package_patterns, "package")


def match_source(item: InventoryItem, rules: RuleSet) -> str | None:
    """Match an APT source file's content against vendor repository keywords."""
    return _first_keyword(item.content, rules.source_keywords, "source")


def match_pin(item: InventoryItem, rules: RuleSet) -> str | None:
    """Match an APT preferences file's content against vendor keywords."""
    return _first_keyword(item.content, rules.pin_keywords, "pin")


def match_module_build(item: InventoryItem, rules: RuleSet) -> str | None:
    """Match a DKMS module name against the vendor module patterns."""
    return _first_regex(item.name, rules.effective_module_patterns, "module")


def match_module_config(item: InventoryItem, rules: RuleSet) -> str | None:
    """Match a modprobe.d file name against vendor globs."""
    return _first_glob(item.name, rules.module_config_globs, "modprobe")


def match_signing_key(item: InventoryItem, rules: RuleSet) -> str | None:
    """Match a trusted.gpg.d keyring name against vendor globs."""
    return _first_glob(item.name, rules.signing_key_globs, "keyring")


def match_install_dir(item: InventoryItem, rules: RuleSet) -> str | None:
    """Match an /opt directory name against vendor install globs."""
    return _first_glob(item.name, rules.install_dir_globs, "install-dir")


def match_cache_dir(item: InventoryItem, rules: RuleSet) -> str | None:
    """Match a shader cache directory name against the cache list."""
    return _first_glob(item.name, rules.cache_dir_names, "cache")


def match_vulkan_icd(item: InventoryItem, rules: RuleSet) -> str | None:
    """Flag a Vulkan ICD whose library is not on the allow-list."""
    library = item.library_path
    if library and _first_regex(library, rules.vulkan_icd_allow, "allow"):
        return None
    return f"vulkan-icd:not-allowed:{library or 'unknown'}"


def match_opencl_vendor(item: InventoryItem, rules: RuleSet) -> str | None:
    """Flag an OpenCL vendor file whose library is not on the allow-list."""
    library = item.library_path
    if library and _first_regex(library, rules.opencl_vendor_allow, "allow"):
        return None
    return f"opencl-vendor:not-allowed:{library or 'unknown'}"


PREDICATES: dict[ItemKind, Predicate] = {
    ItemKind.PACKAGE: match_package,
    ItemKind.REPOSITORY_SOURCE: match_source,
    ItemKind.PIN_RULE: match_pin,
    ItemKind.MODULE_BUILD: match_module_build,
    ItemKind.MODULE_CONFIG_FILE: match_module_config,
    ItemKind.SIGNING_KEY: match_signing_key,
    ItemKind.INSTALL_DIRECTORY: match_install_dir,
    ItemKind.CACHE_DIRECTORY: match_cache_dir,
    ItemKind.VULKAN_ICD: match_vulkan_icd,
    ItemKind.OPENCL_VENDOR_FILE: match_opencl_vendor,
}


class Classifier:
    """Labels inventory items using an injected rule set.

    Attributes:
        rules: The immutable rule set in use.
    """

    def __init__(self, rules: RuleSet) -> None:
        self.rules = rules

    def classify(self, item: InventoryItem) -> ClassificationResult:
        """Label a single item.

        Files gpureset manages itself are always stock.

        Args:
            item: Item to classify.

        Returns:
            ClassificationResult with the deciding rule.
        """
        if item.path is not None and item.name in self.rules.managed_files:
            return ClassificationResult(item=item, label=Label.STOCK, rule=f"managed:{item.name}")

        rule = PREDICATES[item.kind](item, self.rules)
        if rule is None:
            return ClassificationResult(item=item, label=Label.STOCK)
        return ClassificationResult(item=item, label=Label.FOREIGN, rule=rule)

    def classify_all(self, items: Iterable[InventoryItem]) -> list[ClassificationResult]:
        """Label every item, preserving order."""
        return [self.classify(item) for item in items]
