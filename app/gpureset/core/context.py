"""Shared state handed from step to step during a run."""

from dataclasses import dataclass, field

from gpureset.core.paths import HostPaths
from gpureset.core.profiles import Profile
from gpureset.models.action import RemediationAction
from gpureset.models.classification import ClassificationResult
from gpureset.models.inventory import InventoryItem
from gpureset.operators import AptOperator, BootOperator, DkmsOperator, FileOperator
from gpureset.scanners.base import Scanner
from gpureset.utils.shell import CommandRunner


@dataclass(slots=True)
class Operators:
    """The operators a run mutates the host through."""

    apt: AptOperator
    dkms: DkmsOperator
    boot: BootOperator
    files: FileOperator

    @classmethod
    def create(cls, paths: HostPaths, runner: CommandRunner | None = None) -> "Operators":
        """Build the default operator set for a host layout."""
        return cls(
            apt=AptOperator(runner),
            dkms=DkmsOperator(runner),
            boot=BootOperator(runner),
            files=FileOperator(paths),
        )


@dataclass(slots=True)
class RunContext:
    """Everything a step may read or fill in.

    Each stage writes exactly one field and only reads the fields of
    earlier stages.

    Attributes:
        profile: Active reset profile.
        paths: Host layout.
        timestamp: Run timestamp (epoch seconds) used in backup names.
        scanners: Collector scanners for the profile.
        operators: Host operators.
        inventory: Collector output.
        classifications: Classifier output.
        actions: Planned remediation actions.
    """

    profile: Profile
    paths: HostPaths
    timestamp: int
    scanners: list[Scanner]
    operators: Operators
    inventory: list[InventoryItem] = field(default_factory=lambda: [])
    classifications: list[ClassificationResult] = field(default_factory=lambda: [])
    actions: list[RemediationAction] = field(default_factory=lambda: [])
