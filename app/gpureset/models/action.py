"""Action models for remediation and restoration.

This module defines data structures for the mutations a reset performs
(remediation actions derived from foreign items, restoration targets
declared up front) and their execution results.
"""

from dataclasses import dataclass
from enum import Enum

from gpureset.models.inventory import InventoryItem


class ActionType(str, Enum):
    """Type of remediation action.

    Attributes:
        DISABLE_SOURCE: Rename an APT source file aside.
        REMOVE_PIN: Rename an APT preferences file aside.
        PURGE_PACKAGE: Purge a package through apt-get.
        DEREGISTER_MODULE_BUILD: Remove every DKMS version of a module.
        QUARANTINE_FILE: Move a configuration or descriptor file aside.
        REMOVE_DIRECTORY: Recursively remove a vendor or cache directory.
    """

    DISABLE_SOURCE = "disable_source"
    REMOVE_PIN = "remove_pin"
    PURGE_PACKAGE = "purge_package"
    DEREGISTER_MODULE_BUILD = "deregister_module_build"
    QUARANTINE_FILE = "quarantine_file"
    REMOVE_DIRECTORY = "remove_directory"


# Actions whose undo is a manual rename of the backup artifact.
RENAME_ACTIONS: frozenset[ActionType] = frozenset(
    {ActionType.DISABLE_SOURCE, ActionType.REMOVE_PIN, ActionType.QUARANTINE_FILE}
)


@dataclass(frozen=True, slots=True)
class RemediationAction:
    """A planned mutation against one foreign item.

    Attributes:
        action_type: What to do with the item.
        item: The foreign inventory item.
        rule: Audit id of the classification rule that marked it foreign.
        backup_path: Where the artifact is moved to, for rename actions.
    """

    action_type: ActionType
    item: InventoryItem
    rule: str
    backup_path: str | None = None

    def __post_init__(self) -> None:
        """Validate action data after initialization."""
        if self.action_type in RENAME_ACTIONS:
            if not self.item.path:
                msg = f"{self.action_type.value} requires an item path"
                raise ValueError(msg)
            if not self.backup_path:
                msg = f"{self.action_type.value} requires a backup path"
                raise ValueError(msg)

    @property
    def target(self) -> str:
        """What the action operates on (package spec, module, or path)."""
        if self.action_type == ActionType.PURGE_PACKAGE:
            return self.item.package_spec
        return self.item.label


@dataclass(frozen=True, slots=True)
class RestorationTarget:
    """A stock package to install or reinstall.

    Attributes:
        package: Package name.
        reinstall: Use ``--reinstall`` so already-present packages are refreshed.
        architecture: Optional architecture qualifier (e.g. ``i386``).
    """

    package: str
    reinstall: bool = False
    architecture: str | None = None

    def __post_init__(self) -> None:
        """Validate target data after initialization."""
        if not self.package:
            msg = "Package name cannot be empty"
            raise ValueError(msg)

    @property
    def spec(self) -> str:
        """Package argument for apt-get."""
        if self.architecture:
            return f"{self.package}:{self.architecture}"
        return self.package


@dataclass(frozen=True, slots=True)
class ActionResult:
    """Result of a single host operation.

    Attributes:
        operation: Operation name (an ActionType value or a restoration operation).
        target: Package, module, path, or command the operation touched.
        success: Whether the operation completed successfully.
        message: Optional success message or additional information.
        error: Optional error message if the operation failed.
    """

    operation: str
    target: str
    success: bool
    message: str | None = None
    error: str | None = None

    @property
    def failed(self) -> bool:
        """Check if the operation failed."""
        return not self.success


def succeeded(operation: str, target: str, message: str | None = None) -> ActionResult:
    """Create a successful result."""
    return ActionResult(operation=operation, target=target, success=True, message=message)


def failed(operation: str, target: str, error: str) -> ActionResult:
    """Create a failed result."""
    return ActionResult(operation=operation, target=target, success=False, error=error)
