"""Utility modules for gpureset.

This module exports commonly used utility functions.
"""

from gpureset.utils.formatting import (
    console,
    err_console,
    print_error,
    print_info,
    print_step,
    print_success,
    print_warning,
)
from gpureset.utils.shell import CommandResult, CommandRunner, command_exists, run_command

__all__ = [
    "CommandResult",
    "CommandRunner",
    "command_exists",
    "console",
    "err_console",
    "print_error",
    "print_info",
    "print_step",
    "print_success",
    "print_warning",
    "run_command",
]
