"""Declared step pipeline.

A reset is an ordered list of named steps. Each step declares the stage
it belongs to and the steps it requires; the pipeline refuses orderings
where a requirement runs later or a stage goes backwards, so ordering is
a property of the declaration rather than of code position.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from gpureset.core.errors import Disposition, error_policy
from gpureset.models.action import ActionResult
from gpureset.models.report import RunReport, RunStage, StepResult

logger = logging.getLogger(__name__)

ContextT = TypeVar("ContextT")


@dataclass(frozen=True, slots=True)
class Step(Generic[ContextT]):
    """One named unit of work.

    Attributes:
        name: Unique step name.
        stage: Lifecycle stage the step runs in.
        run: Callable receiving the run context and returning operation results.
        requires: Names of steps that must have run before this one.
    """

    name: str
    stage: RunStage
    run: Callable[[ContextT], list[ActionResult]]
    requires: tuple[str, ...] = ()


class PipelineError(ValueError):
    """Raised when a pipeline declaration is inconsistent."""


class Pipeline(Generic[ContextT]):
    """Sequential executor for declared steps.

    Args:
        steps: Steps in execution order.

    Raises:
        PipelineError: On duplicate names, unknown or later requirements,
            or a stage lower than the previous step's.
    """

    def __init__(self, steps: list[Step[ContextT]]) -> None:
        self._steps = list(steps)
        self._validate()

    @property
    def steps(self) -> list[Step[ContextT]]:
        return list(self._steps)

    @property
    def names(self) -> list[str]:
        return [step.name for step in self._steps]

    def _validate(self) -> None:
        seen: set[str] = set()
        stage = RunStage.START
        for step in self._steps:
            if step.name in seen:
                raise PipelineError(f"Duplicate step name: {step.name}")
            missing = [name for name in step.requires if name not in seen]
            if missing:
                raise PipelineError(
                    f"Step {step.name} requires {', '.join(missing)} to be declared before it"
                )
            if step.stage.value < stage.value:
                raise PipelineError(
                    f"Step {step.name} moves back from {stage.title} to {step.stage.title}"
                )
            seen.add(step.name)
            stage = step.stage

    def run(
        self,
        context: ContextT,
        report: RunReport | None = None,
        on_stage: Callable[[RunStage], None] | None = None,
    ) -> RunReport:
        """Execute every step once, in order.

        Exceptions are passed through :func:`error_policy`; logged ones are
        recorded on the step and execution continues, fatal ones propagate.

        Args:
            context: Shared run context handed to each step.
            report: Report to append to. A new one is created if omitted.
            on_stage: Called whenever a step enters a new stage.

        Returns:
            The report with one StepResult per step, stage set to DONE.
        """
        report = report if report is not None else RunReport()

        for step in self._steps:
            if step.stage != report.stage:
                report.stage = step.stage
                if on_stage is not None:
                    on_stage(step.stage)

            logger.info("Step %s (%s)", step.name, step.stage.title)
            try:
                results = step.run(context)
            except Exception as e:
                if error_policy(e) is Disposition.FATAL:
                    logger.error("Step %s failed fatally: %s", step.name, e)
                    raise
                logger.error("Step %s failed: %s", step.name, e)
                report.steps.append(StepResult(name=step.name, stage=step.stage, error=str(e)))
                continue

            for result in results:
                if result.failed:
                    logger.warning(
                        "%s %s failed: %s", result.operation, result.target, result.error
                    )
            report.steps.append(
                StepResult(name=step.name, stage=step.stage, results=tuple(results))
            )

        report.stage = RunStage.DONE
        if on_stage is not None:
            on_stage(RunStage.DONE)
        return report
