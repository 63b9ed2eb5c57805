"""Exception hierarchy and the fatal-versus-logged error policy.

Only two classes of failure exist during a reset. Precondition failures
stop the run before anything is collected. Operational failures are
recorded against the step that hit them and the run carries on.
"""

import subprocess
from enum import Enum


class ResetError(Exception):
    """Base exception for gpureset errors."""


class PreconditionError(ResetError):
    """Raised when the host cannot be reset (privileges, missing tooling, bad config)."""


class OperationError(ResetError):
    """Raised when a single remediation or restoration operation fails."""


class Disposition(Enum):
    """What the pipeline does with an exception raised by a step.

    Attributes:
        FATAL: Stop the run and propagate the exception.
        LOGGED: Record the failure on the step and continue.
    """

    FATAL = "fatal"
    LOGGED = "logged"


# Exception types that represent host-state failures rather than bugs.
_OPERATIONAL_ERRORS: tuple[type[BaseException], ...] = (
    OperationError,
    OSError,
    subprocess.SubprocessError,
)


def error_policy(error: BaseException) -> Disposition:
    """Decide whether an exception raised inside a step is fatal.

    Precondition failures and unexpected exception types (programming
    errors) are fatal. Filesystem, subprocess, and operation failures are
    logged so the rest of the reset still runs.

    Args:
        error: Exception raised by a pipeline step.

    Returns:
        Disposition for the exception.
    """
    if isinstance(error, PreconditionError):
        return Disposition.FATAL
    if isinstance(error, _OPERATIONAL_ERRORS):
        return Disposition.LOGGED
    return Disposition.FATAL
