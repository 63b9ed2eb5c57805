"""Unit tests for run report models."""

from gpureset.models.action import failed, succeeded
from gpureset.models.report import RunReport, RunStage, StepResult


class TestRunStage:
    """Tests for RunStage enum."""

    def test_stages_are_ordered(self) -> None:
        """The lifecycle is linear."""
        values = [stage.value for stage in RunStage]
        assert values == sorted(values)
        assert RunStage.START.value < RunStage.DONE.value

    def test_title(self) -> None:
        """title capitalises the stage name."""
        assert RunStage.REMEDIATING.title == "Remediating"


class TestStepResult:
    """Tests for StepResult dataclass."""

    def test_success_when_all_results_succeed(self) -> None:
        """A step with only successful results succeeded."""
        step = StepResult("purge-packages", RunStage.REMEDIATING, (succeeded("p", "a"),))
        assert step.success is True

    def test_failure_when_a_result_failed(self) -> None:
        """One failed result fails the step."""
        step = StepResult(
            "purge-packages",
            RunStage.REMEDIATING,
            (succeeded("p", "a"), failed("p", "b", "E: broken")),
        )
        assert step.success is False

    def test_failure_when_step_raised(self) -> None:
        """A recorded error fails the step."""
        step = StepResult("refresh-metadata", RunStage.REMEDIATING, error="apt-get timed out")
        assert step.success is False


class TestRunReport:
    """Tests for RunReport dataclass."""

    def test_defaults(self) -> None:
        """A new report is empty and at START."""
        report = RunReport()
        assert report.steps == []
        assert report.stage == RunStage.START
        assert report.completed is False

    def test_executed_and_results(self) -> None:
        """executed lists step names; results flattens operation results."""
        report = RunReport()
        report.steps.append(StepResult("collect", RunStage.COLLECTING, (succeeded("c", "i"),)))
        report.steps.append(
            StepResult("purge-packages", RunStage.REMEDIATING, (failed("p", "x", "err"),))
        )

        assert report.executed == ["collect", "purge-packages"]
        assert [r.target for r in report.results] == ["i", "x"]
        assert [s.name for s in report.failures] == ["purge-packages"]

    def test_step_lookup(self) -> None:
        """step() finds results by name."""
        report = RunReport(steps=[StepResult("collect", RunStage.COLLECTING)])
        assert report.step("collect") is not None
        assert report.step("missing") is None

    def test_completed_at_done(self) -> None:
        """completed is True once DONE is reached."""
        assert RunReport(stage=RunStage.DONE).completed is True
