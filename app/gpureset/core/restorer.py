"""Restoration steps.

Brings the host back to distribution defaults after remediation:
refresh, enable the foreign architecture where the profile needs it,
install the stock packages, reset GL alternatives, rebuild boot
artifacts, write the module preference file, and try to load the module.
"""

import logging
import platform
from pathlib import Path

from gpureset.core.context import RunContext
from gpureset.core.pipeline import Step
from gpureset.core.profiles import Profile
from gpureset.models.action import ActionResult, RestorationTarget
from gpureset.models.report import RunStage

logger = logging.getLogger(__name__)


def running_kernel() -> str:
    """Release string of the running kernel, as ``uname -r`` prints it."""
    return platform.release()


def mesa_ld_conf(triplet: str) -> Path:
    """Mesa's ld.so configuration for a multiarch triplet."""
    return Path("/usr/lib") / triplet / "mesa" / "ld.so.conf"


def restore_refresh(ctx: RunContext) -> list[ActionResult]:
    """Refresh metadata unless remediation already left it fresh."""
    return ctx.operators.apt.update()


def enable_architecture(ctx: RunContext) -> list[ActionResult]:
    """Enable the profile's foreign architecture and refresh if it changed."""
    arch = ctx.profile.foreign_architecture
    if arch is None:
        return []
    apt = ctx.operators.apt
    return [*apt.add_architecture(arch), *apt.update()]


def install_stock(ctx: RunContext) -> list[ActionResult]:
    """Install or reinstall the profile's stock packages."""
    return ctx.operators.apt.install(list(ctx.profile.restoration_targets))


def install_running_headers(ctx: RunContext) -> list[ActionResult]:
    """Install headers matching the running kernel."""
    target = RestorationTarget(package=f"linux-headers-{running_kernel()}")
    return ctx.operators.apt.install([target])


def reset_gl_alternatives(ctx: RunContext) -> list[ActionResult]:
    """Point every configured GL alternative back at Mesa."""
    results: list[ActionResult] = []
    for triplet in ctx.profile.gl_alternatives:
        results.extend(ctx.operators.boot.reset_gl_alternative(triplet, mesa_ld_conf(triplet)))
    return results


def regenerate_initramfs(ctx: RunContext) -> list[ActionResult]:
    """Rebuild initramfs images for every installed kernel."""
    return ctx.operators.boot.regenerate_initramfs()


def update_bootloader(ctx: RunContext) -> list[ActionResult]:
    """Regenerate the bootloader configuration."""
    return ctx.operators.boot.update_bootloader()


def write_module_preference(ctx: RunContext) -> list[ActionResult]:
    """Write the managed modprobe.d preference file."""
    content = ctx.profile.module_preference
    if content is None:
        return []
    path = ctx.paths.modprobe_d / ctx.profile.module_preference_file
    return [ctx.operators.files.write_file(path, content)]


def load_module(ctx: RunContext) -> list[ActionResult]:
    """Try to load the kernel module now; a failure only means reboot first."""
    module = ctx.profile.load_module
    if module is None:
        return []
    results = ctx.operators.boot.load_module(module)
    if any(result.failed for result in results):
        logger.info("%s could not be loaded now; it will load after reboot", module)
    return results


def restoration_steps(profile: Profile) -> list[Step[RunContext]]:
    """Declare the restoration steps a profile needs.

    Args:
        profile: Active profile.

    Returns:
        Steps in execution order.
    """
    stage = RunStage.RESTORING
    steps: list[Step[RunContext]] = [
        Step("restore-refresh", stage, restore_refresh, requires=("tidy-and-refresh",)),
    ]
    if profile.foreign_architecture:
        steps.append(
            Step("enable-architecture", stage, enable_architecture, requires=("restore-refresh",))
        )
    steps.append(Step("install-stock", stage, install_stock, requires=("restore-refresh",)))
    if profile.install_running_headers:
        steps.append(
            Step(
                "install-running-headers",
                stage,
                install_running_headers,
                requires=("install-stock",),
            )
        )
    if profile.gl_alternatives:
        steps.append(
            Step("reset-gl-alternatives", stage, reset_gl_alternatives, requires=("install-stock",))
        )
    if profile.regenerate_boot:
        steps += [
            Step("regenerate-initramfs", stage, regenerate_initramfs, requires=("install-stock",)),
            Step(
                "update-bootloader", stage, update_bootloader, requires=("regenerate-initramfs",)
            ),
        ]
    if profile.module_preference:
        steps.append(
            Step(
                "write-module-preference",
                stage,
                write_module_preference,
                requires=("install-stock",),
            )
        )
    if profile.load_module:
        steps.append(Step("load-module", stage, load_module, requires=("install-stock",)))
    return steps
