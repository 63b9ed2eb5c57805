"""Run command implementation.

Executes a reset: preconditions, transcript, the staged pipeline, the
result summary, and the optional reboot.
"""

import logging
import time
from pathlib import Path
from typing import Annotated

import typer

from gpureset.cli.display import (
    create_actions_table,
    create_results_table,
    print_hints,
    print_results_summary,
)
from gpureset.cli.types import ConfigOption, ScopeOption, load_settings
from gpureset.core.engine import ResetEngine
from gpureset.core.errors import PreconditionError
from gpureset.core.preflight import check_release, require_root, require_tools
from gpureset.core.profiles import Profile, Scope
from gpureset.core.transcript import start_transcript, stop_transcript, transcript_path
from gpureset.models.report import RunReport, RunStage
from gpureset.operators.boot import BootOperator
from gpureset.utils.formatting import (
    console,
    print_error,
    print_info,
    print_step,
    print_success,
    print_warning,
)

logger = logging.getLogger(__name__)

# Seconds the operator has to cancel an automatic reboot
REBOOT_COUNTDOWN = 10

app = typer.Typer(
    help="Reset the GPU driver stack to distribution defaults.",
    invoke_without_command=True,
)


def _announce_stage(stage: RunStage) -> None:
    if stage != RunStage.DONE:
        print_step(stage.title)


def _open_transcript(profile: Profile, log_dir: Path) -> logging.Handler | None:
    path = transcript_path(log_dir, profile.log_prefix)
    try:
        handler = start_transcript(path)
    except (RuntimeError, OSError) as e:
        print_warning(f"Cannot write transcript to {path}: {e}. Continuing without it.")
        return None
    print_info(f"Logging to {path}")
    return handler


def _show_report(engine: ResetEngine, report: RunReport, dry_run: bool) -> None:
    actions = engine.context.actions
    if actions:
        console.print(create_actions_table(actions, dry_run=dry_run))
    else:
        print_success("No foreign items found.")

    if dry_run:
        print_info("Dry run: no changes made.")
        return

    results = [
        result
        for step in report.steps
        if step.stage in (RunStage.REMEDIATING, RunStage.RESTORING)
        for result in step.results
    ]
    if results:
        console.print(create_results_table(results))
    for step in report.steps:
        if step.error:
            print_warning(f"Step {step.name} stopped early: {step.error}")
    print_results_summary(results)


def countdown_reboot(boot: BootOperator, seconds: int = REBOOT_COUNTDOWN) -> bool:
    """Reboot after a cancellable countdown.

    Args:
        boot: Operator issuing the reboot.
        seconds: Countdown length.

    Returns:
        True if the reboot was requested.
    """
    print_warning(f"Auto-rebooting in {seconds} seconds... (Ctrl+C to cancel)")
    try:
        time.sleep(seconds)
    except KeyboardInterrupt:
        print_info("Reboot cancelled. Run: sudo reboot")
        return False

    result = boot.reboot()
    if result.failed:
        print_warning(f"Reboot failed: {result.error}. Run: sudo reboot")
        return False
    return True


@app.callback(invoke_without_command=True)
def run_reset(
    ctx: typer.Context,
    scope: ScopeOption = Scope.FULL,
    auto_reboot: Annotated[
        bool,
        typer.Option(
            "--auto-reboot",
            help="Reboot 10 seconds after a completed reset.",
        ),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            "-n",
            help="Collect, classify and show the plan without changing anything.",
        ),
    ] = False,
    config_path: ConfigOption = None,
) -> None:
    """Remove foreign AMD GPU stacks and restore the stock stack.

    Must run as root unless --dry-run is given.

    Examples:
        sudo gpureset run                      # Full reset
        sudo gpureset run --scope userland     # Mesa/Vulkan userland only
        sudo gpureset run --auto-reboot        # Reboot when done
        gpureset run --dry-run                 # Show what would be removed
    """
    # Skip if a subcommand is being invoked
    if ctx.invoked_subcommand is not None:
        return

    config = load_settings(config_path)
    profile = config.profile_for(scope)
    paths = config.host_paths()

    if not dry_run:
        try:
            require_root()
            require_tools()
        except PreconditionError as e:
            print_error(str(e))
            raise typer.Exit(code=1) from e

    handler = None if dry_run else _open_transcript(profile, paths.transcript_dir)
    try:
        print_step(f"{profile.title} ({scope.value})")
        if not dry_run:
            check_release(
                paths.os_release, config.expected_release, profile.release_grace_seconds
            )

        engine = ResetEngine(profile, paths)
        try:
            report = engine.plan(_announce_stage) if dry_run else engine.run(_announce_stage)
        except PreconditionError as e:
            print_error(str(e))
            raise typer.Exit(code=1) from e

        _show_report(engine, report, dry_run)
        if not dry_run:
            print_success(f"{profile.title} complete.")
            print_hints(profile)
            if auto_reboot:
                countdown_reboot(engine.context.operators.boot)
    finally:
        if handler is not None:
            stop_transcript(handler)
