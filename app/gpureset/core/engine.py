"""Reset engine.

Wires a profile to the four stages and runs them as one declared
pipeline: collect, classify (and plan), remediate, restore.
"""

import logging
import time
from collections.abc import Callable

from gpureset.core.classifier import Classifier
from gpureset.core.context import Operators, RunContext
from gpureset.core.inventory import collect_inventory
from gpureset.core.paths import HostPaths
from gpureset.core.pipeline import Pipeline, Step
from gpureset.core.planner import plan_remediation
from gpureset.core.profiles import Profile
from gpureset.core.remediator import remediation_steps
from gpureset.core.restorer import restoration_steps
from gpureset.models.action import ActionResult, succeeded
from gpureset.models.classification import Label
from gpureset.models.report import RunReport, RunStage
from gpureset.scanners import build_scanners
from gpureset.scanners.base import Scanner
from gpureset.utils.shell import CommandRunner

logger = logging.getLogger(__name__)


def collect(ctx: RunContext) -> list[ActionResult]:
    """Take the read-only inventory snapshot."""
    ctx.inventory = collect_inventory(ctx.scanners)
    return [succeeded("collect", "inventory", f"{len(ctx.inventory)} item(s)")]


def classify(ctx: RunContext) -> list[ActionResult]:
    """Label every collected item."""
    ctx.classifications = Classifier(ctx.profile.rules).classify_all(ctx.inventory)
    foreign = sum(1 for result in ctx.classifications if result.label == Label.FOREIGN)
    return [succeeded("classify", "inventory", f"{foreign} foreign item(s)")]


def plan(ctx: RunContext) -> list[ActionResult]:
    """Derive remediation actions from the foreign items."""
    ctx.actions = plan_remediation(ctx.classifications, ctx.paths, ctx.timestamp)
    return [succeeded("plan", "actions", f"{len(ctx.actions)} action(s)")]


def inspection_steps() -> list[Step[RunContext]]:
    """Steps that only read host state."""
    return [
        Step("collect", RunStage.COLLECTING, collect),
        Step("classify", RunStage.CLASSIFYING, classify, requires=("collect",)),
        Step("plan", RunStage.CLASSIFYING, plan, requires=("classify",)),
    ]


def build_pipeline(profile: Profile, *, inspect_only: bool = False) -> Pipeline[RunContext]:
    """Build the pipeline for a profile.

    Args:
        profile: Active profile.
        inspect_only: Stop after planning (dry run).

    Returns:
        Validated pipeline.
    """
    steps = inspection_steps()
    if not inspect_only:
        steps += remediation_steps(profile)
        steps += restoration_steps(profile)
    return Pipeline(steps)


class ResetEngine:
    """Runs one reset for one profile.

    Example:
        >>> engine = ResetEngine(FULL_PROFILE, HostPaths())
        >>> report = engine.run()
        >>> report.completed
        True
    """

    def __init__(
        self,
        profile: Profile,
        paths: HostPaths,
        *,
        runner: CommandRunner | None = None,
        timestamp: int | None = None,
        scanners: list[Scanner] | None = None,
        operators: Operators | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            profile: Active profile.
            paths: Host layout.
            runner: Command runner shared by scanners and operators.
            timestamp: Run timestamp; defaults to now.
            scanners: Scanner override; defaults to the profile's scanners.
            operators: Operator override; defaults to real operators.
        """
        self.profile = profile
        self.context = RunContext(
            profile=profile,
            paths=paths,
            timestamp=int(time.time()) if timestamp is None else timestamp,
            scanners=(
                scanners
                if scanners is not None
                else build_scanners(profile.kinds, paths, runner, profile.rules)
            ),
            operators=operators or Operators.create(paths, runner),
        )
        self.report = RunReport()

    @property
    def stage(self) -> RunStage:
        """Current lifecycle stage."""
        return self.report.stage

    def _execute(
        self, inspect_only: bool, on_stage: Callable[[RunStage], None] | None
    ) -> RunReport:
        if self.report.stage != RunStage.START:
            msg = "A reset engine runs exactly once"
            raise RuntimeError(msg)

        pipeline = build_pipeline(self.profile, inspect_only=inspect_only)
        logger.info(
            "Starting %s reset (%s): %s",
            self.profile.scope.value,
            "dry run" if inspect_only else "live",
            ", ".join(pipeline.names),
        )
        report = pipeline.run(self.context, self.report, on_stage)
        logger.info(
            "Reset finished: %d step(s), %d with failures", len(report.steps), len(report.failures)
        )
        return report

    def plan(self, on_stage: Callable[[RunStage], None] | None = None) -> RunReport:
        """Collect, classify and plan without mutating anything."""
        return self._execute(True, on_stage)

    def run(self, on_stage: Callable[[RunStage], None] | None = None) -> RunReport:
        """Run the full reset.

        Raises:
            PreconditionError: Propagated from a step; nothing after it ran.
        """
        return self._execute(False, on_stage)
