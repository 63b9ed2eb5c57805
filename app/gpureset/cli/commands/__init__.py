"""CLI commands for gpureset.

This package contains all subcommand implementations.
"""

from gpureset.cli.commands import rules, run, scan

__all__ = ["rules", "run", "scan"]
