"""Boot and system operator.

Wraps initramfs regeneration, the bootloader, kernel modules, GL
alternatives, and reboot.
"""

import logging
from pathlib import Path

from gpureset.models.action import ActionResult, succeeded
from gpureset.operators.base import Operator

logger = logging.getLogger(__name__)


class BootOperator(Operator):
    """Operator for boot-chain and dynamic-linker maintenance."""

    # update-initramfs over every kernel can be slow
    _TIMEOUT: float = 900.0

    @property
    def tool(self) -> str:
        """Return update-initramfs as the driven executable."""
        return "update-initramfs"

    def regenerate_initramfs(self) -> list[ActionResult]:
        """Create initramfs images for all kernels, updating if create fails.

        ``-c`` refuses when images already exist on some systems, so ``-u``
        is tried next.
        """
        created = self._execute(
            "regenerate_initramfs", "all kernels", ["update-initramfs", "-c", "-k", "all"]
        )
        if created.success:
            return [created]

        logger.info("update-initramfs -c failed (%s), falling back to -u", created.error)
        return [
            self._execute(
                "regenerate_initramfs",
                "all kernels",
                ["update-initramfs", "-u", "-k", "all"],
                message="Updated existing images",
            )
        ]

    def update_bootloader(self) -> list[ActionResult]:
        """Regenerate the GRUB configuration."""
        return [self._execute("update_bootloader", "grub", ["update-grub"])]

    def load_module(self, module: str) -> list[ActionResult]:
        """Load a kernel module; expected to fail until the next reboot."""
        return [self._execute("load_module", module, ["modprobe", module], timeout=60.0)]

    def reset_gl_alternative(self, triplet: str, mesa_conf: Path) -> list[ActionResult]:
        """Point the ``<triplet>_gl_conf`` alternative back at Mesa.

        Args:
            triplet: Multiarch triplet (e.g. ``x86_64-linux-gnu``).
            mesa_conf: Mesa's ld.so configuration for that triplet.

        Returns:
            Results for the alternative and the linker cache refresh.
        """
        name = f"{triplet}_gl_conf"
        listed = self._call(["update-alternatives", "--list", name], timeout=60.0)
        if not listed.success:
            return [succeeded("reset_gl_alternative", name, "No alternative registered")]

        if str(mesa_conf) in listed.stdout.split():
            args = ["update-alternatives", "--set", name, str(mesa_conf)]
        else:
            args = ["update-alternatives", "--auto", name]
        return [
            self._execute("reset_gl_alternative", name, args, timeout=60.0),
            self.refresh_linker_cache(),
        ]

    def refresh_linker_cache(self) -> ActionResult:
        """Rebuild the dynamic linker cache."""
        return self._execute("ldconfig", "linker cache", ["ldconfig"], timeout=120.0)

    def reboot(self) -> ActionResult:
        """Reboot the host through systemd."""
        return self._execute("reboot", "host", ["systemctl", "reboot"], timeout=60.0)
