"""Remediation steps.

Destroys foreign state in a fixed order: back up sources, disable
foreign sources and pins, refresh so apt forgets foreign candidates,
purge packages, deregister module builds, move foreign configuration
aside, remove foreign directories, then tidy.
"""

from gpureset.core.context import RunContext
from gpureset.core.pipeline import Step
from gpureset.core.planner import actions_of
from gpureset.core.profiles import Profile
from gpureset.models.action import ActionResult, ActionType
from gpureset.models.inventory import ItemKind
from gpureset.models.report import RunStage

_QUARANTINE_KINDS = (
    ItemKind.MODULE_CONFIG_FILE,
    ItemKind.SIGNING_KEY,
    ItemKind.VULKAN_ICD,
    ItemKind.OPENCL_VENDOR_FILE,
)
_DIRECTORY_KINDS = (ItemKind.INSTALL_DIRECTORY, ItemKind.CACHE_DIRECTORY)


def backup_sources(ctx: RunContext) -> list[ActionResult]:
    """Copy sources.list and sources.list.d aside."""
    return ctx.operators.files.backup_sources(ctx.timestamp)


def _rename_all(ctx: RunContext, action_type: ActionType) -> list[ActionResult]:
    return [
        ctx.operators.files.rename_aside(action) for action in actions_of(ctx.actions, action_type)
    ]


def disable_sources(ctx: RunContext) -> list[ActionResult]:
    """Rename foreign APT source files aside."""
    results = _rename_all(ctx, ActionType.DISABLE_SOURCE)
    if results:
        ctx.operators.apt.invalidate_metadata()
    return results


def remove_pins(ctx: RunContext) -> list[ActionResult]:
    """Rename foreign APT preferences files aside."""
    results = _rename_all(ctx, ActionType.REMOVE_PIN)
    if results:
        ctx.operators.apt.invalidate_metadata()
    return results


def refresh_metadata(ctx: RunContext) -> list[ActionResult]:
    """Refresh package metadata so foreign candidates disappear."""
    return ctx.operators.apt.update(force=True)


def purge_packages(ctx: RunContext) -> list[ActionResult]:
    """Purge every foreign package in one apt transaction."""
    specs = [action.target for action in actions_of(ctx.actions, ActionType.PURGE_PACKAGE)]
    return ctx.operators.apt.purge(specs)


def deregister_module_builds(ctx: RunContext) -> list[ActionResult]:
    """Remove all registered versions of each foreign DKMS module."""
    results: list[ActionResult] = []
    for action in actions_of(ctx.actions, ActionType.DEREGISTER_MODULE_BUILD):
        results.extend(ctx.operators.dkms.remove(action.item.name, action.item.versions))
    return results


def quarantine_files(ctx: RunContext) -> list[ActionResult]:
    """Move foreign module configs, keyrings and ICD descriptors aside."""
    return _rename_all(ctx, ActionType.QUARANTINE_FILE)


def remove_directories(ctx: RunContext) -> list[ActionResult]:
    """Remove foreign install trees and shader caches."""
    return [
        ctx.operators.files.remove_tree(action)
        for action in actions_of(ctx.actions, ActionType.REMOVE_DIRECTORY)
    ]


def tidy_and_refresh(ctx: RunContext) -> list[ActionResult]:
    """Purge orphans, clean the archive cache and refresh metadata."""
    apt = ctx.operators.apt
    return [*apt.autoremove(), *apt.autoclean(), *apt.update(force=True)]


def remediation_steps(profile: Profile) -> list[Step[RunContext]]:
    """Declare the remediation steps a profile needs.

    Args:
        profile: Active profile.

    Returns:
        Steps in execution order.
    """
    stage = RunStage.REMEDIATING
    steps: list[Step[RunContext]] = [
        Step("backup-sources", stage, backup_sources, requires=("plan",)),
        Step("disable-sources", stage, disable_sources, requires=("backup-sources",)),
    ]
    if profile.collects(ItemKind.PIN_RULE):
        steps.append(Step("remove-pins", stage, remove_pins, requires=("backup-sources",)))
    steps += [
        Step("refresh-metadata", stage, refresh_metadata, requires=("disable-sources",)),
        Step("purge-packages", stage, purge_packages, requires=("refresh-metadata",)),
    ]
    if profile.collects(ItemKind.MODULE_BUILD):
        steps.append(
            Step(
                "deregister-module-builds",
                stage,
                deregister_module_builds,
                requires=("purge-packages",),
            )
        )
    if any(profile.collects(kind) for kind in _QUARANTINE_KINDS):
        steps.append(Step("quarantine-files", stage, quarantine_files, requires=("plan",)))
    if any(profile.collects(kind) for kind in _DIRECTORY_KINDS):
        steps.append(
            Step("remove-directories", stage, remove_directories, requires=("purge-packages",))
        )
    steps.append(Step("tidy-and-refresh", stage, tidy_and_refresh, requires=("purge-packages",)))
    return steps
