"""Run report models.

The report is the only output of a reset besides host state and the
transcript: which steps ran, in what order, and what each operation
returned.
"""

from dataclasses import dataclass, field
from enum import Enum

from gpureset.models.action import ActionResult


class RunStage(Enum):
    """Linear lifecycle of a reset run.

    Values are ordered; a run never moves to a lower value.
    """

    START = 0
    COLLECTING = 1
    CLASSIFYING = 2
    REMEDIATING = 3
    RESTORING = 4
    DONE = 5

    @property
    def title(self) -> str:
        """Display name for the stage."""
        return self.name.capitalize()


@dataclass(frozen=True, slots=True)
class StepResult:
    """Outcome of one pipeline step.

    Attributes:
        name: Step name.
        stage: Stage the step belongs to.
        results: Per-operation results produced by the step.
        error: Logged exception text when the step raised.
    """

    name: str
    stage: RunStage
    results: tuple[ActionResult, ...] = ()
    error: str | None = None

    @property
    def success(self) -> bool:
        """Check if the step and all of its operations succeeded."""
        return self.error is None and all(r.success for r in self.results)


@dataclass(slots=True)
class RunReport:
    """Accumulated results of a reset run.

    Attributes:
        steps: Step results in execution order.
        stage: Last stage entered.
    """

    steps: list[StepResult] = field(default_factory=lambda: [])
    stage: RunStage = RunStage.START

    @property
    def executed(self) -> list[str]:
        """Names of executed steps in order."""
        return [step.name for step in self.steps]

    @property
    def results(self) -> list[ActionResult]:
        """All operation results in execution order."""
        return [result for step in self.steps for result in step.results]

    @property
    def failures(self) -> list[StepResult]:
        """Steps that raised or contain a failed operation."""
        return [step for step in self.steps if not step.success]

    @property
    def completed(self) -> bool:
        """Check if the run reached DONE."""
        return self.stage == RunStage.DONE

    def step(self, name: str) -> StepResult | None:
        """Look up a step result by name."""
        for step in self.steps:
            if step.name == name:
                return step
        return None
