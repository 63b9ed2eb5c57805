"""Reset profiles.

A profile is the static policy for one blast radius: which inventory
categories are collected, which rules classify them, and what a clean
system should have afterwards.
"""

from dataclasses import dataclass, replace
from enum import Enum

from gpureset.core.rules import FULL_RULES, MODULE_PREFERENCE_FILE, USERLAND_RULES, RuleSet
from gpureset.models.action import RestorationTarget
from gpureset.models.inventory import ItemKind


class Scope(str, Enum):
    """Blast radius of a reset.

    Attributes:
        FULL: Kernel stack, compute stack, userland graphics, DKMS sources.
        USERLAND: Graphics/compute userland libraries only; kernel untouched.
    """

    FULL = "full"
    USERLAND = "userland"


@dataclass(frozen=True, slots=True)
class Profile:
    """Everything that differs between the full and userland resets.

    Attributes:
        scope: Which reset this profile describes.
        title: Banner shown at start.
        rules: Classification rules.
        kinds: Inventory categories collected.
        restoration_targets: Stock packages installed after remediation.
        install_running_headers: Also install headers for the running kernel.
        foreign_architecture: Architecture to enable before restoring (e.g. i386).
        gl_alternatives: Multiarch triplets whose GL alternative is reset to Mesa.
        regenerate_boot: Rebuild initramfs and bootloader configuration.
        module_preference: modprobe.d content written to the managed file, if any.
        load_module: Kernel module to load at the end (best effort).
        log_prefix: Transcript file name prefix.
        release_grace_seconds: Pause after a release mismatch warning.
        hints: Closing checks suggested to the operator.
    """

    scope: Scope
    title: str
    rules: RuleSet
    kinds: tuple[ItemKind, ...]
    restoration_targets: tuple[RestorationTarget, ...]
    install_running_headers: bool = False
    foreign_architecture: str | None = None
    gl_alternatives: tuple[str, ...] = ()
    regenerate_boot: bool = False
    module_preference: str | None = None
    load_module: str | None = None
    log_prefix: str = "gpu-reset"
    release_grace_seconds: int = 10
    hints: tuple[str, ...] = ()

    @property
    def module_preference_file(self) -> str:
        """Name of the managed modprobe.d file."""
        return MODULE_PREFERENCE_FILE

    def collects(self, kind: ItemKind) -> bool:
        """Check if this profile collects the given category."""
        return kind in self.kinds


def _targets(
    *packages: str, reinstall: bool = False, arch: str | None = None
) -> tuple[RestorationTarget, ...]:
    return tuple(
        RestorationTarget(package=p, reinstall=reinstall, architecture=arch) for p in packages
    )


FULL_PROFILE = Profile(
    scope=Scope.FULL,
    title="AMD GPU stack factory-reset",
    rules=FULL_RULES,
    kinds=tuple(ItemKind),
    restoration_targets=_targets(
        "linux-generic",
        "linux-headers-generic",
        "linux-image-generic",
        "linux-firmware",
        "xserver-xorg-video-amdgpu",
        "libdrm2",
        "libdrm-amdgpu1",
        "mesa-vulkan-drivers",
        "libgl1-mesa-dri",
        "mesa-opencl-icd",
        "vulkan-tools",
        "pciutils",
        "initramfs-tools",
    ),
    install_running_headers=True,
    regenerate_boot=True,
    module_preference=(
        "options amdgpu si_support=1 cik_support=1\noptions radeon si_support=0 cik_support=0\n"
    ),
    load_module="amdgpu",
    log_prefix="amd-reset",
    release_grace_seconds=10,
    hints=("Reboot to load the clean, stock stack: sudo reboot",),
)

USERLAND_PROFILE = Profile(
    scope=Scope.USERLAND,
    title="Mesa/Vulkan stack reset",
    rules=USERLAND_RULES,
    kinds=(
        ItemKind.PACKAGE,
        ItemKind.REPOSITORY_SOURCE,
        ItemKind.VULKAN_ICD,
        ItemKind.OPENCL_VENDOR_FILE,
        ItemKind.CACHE_DIRECTORY,
    ),
    restoration_targets=(
        *_targets(
            "libdrm2",
            "libdrm-amdgpu1",
            "libdrm-common",
            "libgl1",
            "libglx0",
            "libegl1",
            "libgbm1",
            "libgl1-mesa-dri",
            "libglx-mesa0",
            "mesa-vulkan-drivers",
            "libvulkan1",
            "vulkan-tools",
            "mesa-utils",
            "xserver-xorg-video-amdgpu",
            reinstall=True,
        ),
        *_targets(
            "libdrm2",
            "libdrm-amdgpu1",
            "libgl1",
            "libglx0",
            "libegl1",
            "libgbm1",
            "libgl1-mesa-dri",
            "libglx-mesa0",
            "mesa-vulkan-drivers",
            "libvulkan1",
            reinstall=True,
            arch="i386",
        ),
    ),
    foreign_architecture="i386",
    gl_alternatives=("x86_64-linux-gnu", "i386-linux-gnu"),
    log_prefix="mesa-reset",
    release_grace_seconds=5,
    hints=(
        "glxinfo -B | grep -E 'OpenGL renderer|OpenGL core profile'   (from mesa-utils)",
        "vulkaninfo | grep -E 'GPU id|driverName|apiVersion'          (from vulkan-tools)",
        "Reboot or log out and back in if a graphical session was running.",
    ),
)

PROFILES: dict[Scope, Profile] = {
    Scope.FULL: FULL_PROFILE,
    Scope.USERLAND: USERLAND_PROFILE,
}


def get_profile(scope: Scope, rules: RuleSet | None = None) -> Profile:
    """Get the profile for a scope, optionally with replacement rules.

    Args:
        scope: Requested blast radius.
        rules: Rules to use instead of the built-in defaults.

    Returns:
        Profile instance.
    """
    profile = PROFILES[scope]
    if rules is not None:
        profile = replace(profile, rules=rules)
    return profile
