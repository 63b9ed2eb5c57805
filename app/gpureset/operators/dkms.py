"""DKMS operator implementation.

Deregisters out-of-tree module builds so no kernel update rebuilds them.
"""

import logging

from gpureset.models.action import ActionResult, ActionType
from gpureset.operators.base import Operator

logger = logging.getLogger(__name__)


class DkmsOperator(Operator):
    """Operator for the dkms tool.

    A module with several registered versions is removed one version at
    a time, each across all kernels.
    """

    @property
    def tool(self) -> str:
        """Return dkms as the driven executable."""
        return "dkms"

    def remove(self, module: str, versions: tuple[str, ...]) -> list[ActionResult]:
        """Remove every registered version of a module.

        Args:
            module: DKMS module name.
            versions: Registered versions.

        Returns:
            One ActionResult per version.
        """
        operation = ActionType.DEREGISTER_MODULE_BUILD.value
        return [
            self._execute(
                operation,
                f"{module}/{version}",
                ["dkms", "remove", "-m", module, "-v", version, "--all"],
            )
            for version in versions
        ]
