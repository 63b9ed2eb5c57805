"""Remediation planning.

Turns classification results into remediation actions, one per foreign
item, and decides where every renamed artifact goes before anything is
touched.
"""

from pathlib import Path

from gpureset.core.paths import HostPaths
from gpureset.models.action import RENAME_ACTIONS, ActionType, RemediationAction
from gpureset.models.classification import ClassificationResult
from gpureset.models.inventory import InventoryItem, ItemKind
from gpureset.scanners.base import DISABLED_MARKER

ACTION_FOR_KIND: dict[ItemKind, ActionType] = {
    ItemKind.REPOSITORY_SOURCE: ActionType.DISABLE_SOURCE,
    ItemKind.PIN_RULE: ActionType.REMOVE_PIN,
    ItemKind.PACKAGE: ActionType.PURGE_PACKAGE,
    ItemKind.MODULE_BUILD: ActionType.DEREGISTER_MODULE_BUILD,
    ItemKind.MODULE_CONFIG_FILE: ActionType.QUARANTINE_FILE,
    ItemKind.SIGNING_KEY: ActionType.QUARANTINE_FILE,
    ItemKind.VULKAN_ICD: ActionType.QUARANTINE_FILE,
    ItemKind.OPENCL_VENDOR_FILE: ActionType.QUARANTINE_FILE,
    ItemKind.INSTALL_DIRECTORY: ActionType.REMOVE_DIRECTORY,
    ItemKind.CACHE_DIRECTORY: ActionType.REMOVE_DIRECTORY,
}

# Execution order of action types inside the remediation stage.
ACTION_ORDER: tuple[ActionType, ...] = (
    ActionType.DISABLE_SOURCE,
    ActionType.REMOVE_PIN,
    ActionType.PURGE_PACKAGE,
    ActionType.DEREGISTER_MODULE_BUILD,
    ActionType.QUARANTINE_FILE,
    ActionType.REMOVE_DIRECTORY,
)


def disabled_name(name: str, timestamp: int) -> str:
    """Name a renamed-aside artifact: ``<name>.disabled.<epoch>``."""
    return f"{name}{DISABLED_MARKER}{timestamp}"


def backup_path_for(item: InventoryItem, paths: HostPaths, timestamp: int) -> str | None:
    """Decide where a reversible action moves an item.

    Vulkan ICDs and OpenCL vendor files are moved into dedicated backup
    directories so the loaders stop seeing them; every other renamed
    file stays beside the original.

    Args:
        item: Foreign item being planned.
        paths: Host layout.
        timestamp: Run timestamp (epoch seconds).

    Returns:
        Destination path, or None for purges and directory removals.
    """
    if ACTION_FOR_KIND[item.kind] not in RENAME_ACTIONS:
        return None
    if item.path is None:
        return None

    name = disabled_name(item.name, timestamp)
    if item.kind == ItemKind.VULKAN_ICD:
        return str(paths.vulkan_icd_backup_dir / name)
    if item.kind == ItemKind.OPENCL_VENDOR_FILE:
        return str(paths.opencl_vendors_backup_dir / name)
    return str(Path(item.path).with_name(name))


def plan_remediation(
    results: list[ClassificationResult],
    paths: HostPaths,
    timestamp: int,
) -> list[RemediationAction]:
    """Derive remediation actions from foreign classification results.

    Stock results never produce an action. Actions are returned in
    execution order (by action type, then inventory order).

    Args:
        results: Classifier output.
        paths: Host layout.
        timestamp: Run timestamp used in backup names.

    Returns:
        Ordered list of RemediationAction.
    """
    actions = [
        RemediationAction(
            action_type=ACTION_FOR_KIND[result.item.kind],
            item=result.item,
            rule=result.rule,
            backup_path=backup_path_for(result.item, paths, timestamp),
        )
        for result in results
        if result.is_foreign
    ]
    return sorted(actions, key=lambda a: ACTION_ORDER.index(a.action_type))


def actions_of(actions: list[RemediationAction], *types: ActionType) -> list[RemediationAction]:
    """Filter planned actions by type, keeping order."""
    return [action for action in actions if action.action_type in types]
