"""Abstract base class for command-backed operators.

This module defines the Operator interface shared by the apt, dkms,
and boot operators, and the single place where an external command is
turned into an ActionResult.
"""

import logging
import subprocess
from abc import ABC, abstractmethod
from collections.abc import Mapping

from gpureset.core.errors import OperationError
from gpureset.models.action import ActionResult, failed, succeeded
from gpureset.utils.shell import CommandResult, CommandRunner, command_exists, run_command

logger = logging.getLogger(__name__)


class Operator(ABC):
    """Abstract base class for all host operators.

    Operators run one blocking external command at a time and report
    every outcome as an ActionResult; a failing command never raises.

    Example:
        >>> operator = AptOperator()
        >>> if operator.is_available():
        ...     for result in operator.purge(["rocm-dev"]):
        ...         print(f"{result.target}: {result.success}")
    """

    # Default timeout for a single command (seconds)
    _TIMEOUT: float = 300.0

    def __init__(self, runner: CommandRunner | None = None) -> None:
        """Initialize the operator.

        Args:
            runner: Command runner override; defaults to run_command.
        """
        self._runner = runner

    @property
    @abstractmethod
    def tool(self) -> str:
        """Return the executable this operator drives."""

    def is_available(self) -> bool:
        """Check if the operator's executable is on PATH."""
        return command_exists(self.tool)

    def _call(
        self,
        args: list[str],
        *,
        timeout: float | None = None,
        env: Mapping[str, str] | None = None,
    ) -> CommandResult:
        """Run a command and log it to the transcript.

        Raises:
            OperationError: If the command cannot be started or times out.
        """
        runner = self._runner or run_command
        logger.info("Running: %s", " ".join(args))
        try:
            result = runner(args, timeout=timeout or self._TIMEOUT, env=env)
        except subprocess.TimeoutExpired as e:
            msg = f"{args[0]} timed out after {e.timeout:.0f}s"
            raise OperationError(msg) from e
        except OSError as e:
            msg = f"{args[0]} could not be run: {e}"
            raise OperationError(msg) from e

        logger.debug("%s exited %d", args[0], result.returncode)
        if result.stdout.strip():
            logger.debug("stdout:\n%s", result.stdout.rstrip())
        if result.stderr.strip():
            logger.debug("stderr:\n%s", result.stderr.rstrip())
        return result

    def _execute(
        self,
        operation: str,
        target: str,
        args: list[str],
        *,
        timeout: float | None = None,
        env: Mapping[str, str] | None = None,
        message: str | None = None,
    ) -> ActionResult:
        """Run a command and convert the outcome into an ActionResult.

        Args:
            operation: Operation name for the result.
            target: What the operation touched.
            args: Command to run.
            timeout: Per-command timeout override.
            env: Extra environment variables.
            message: Success message.

        Returns:
            ActionResult; start failures and timeouts are failures, not raises.
        """
        try:
            result = self._call(args, timeout=timeout, env=env)
        except OperationError as e:
            return failed(operation, target, str(e))

        if result.success:
            return succeeded(operation, target, message)
        return failed(operation, target, result.error_text)
