"""CLI package for gpureset.

This package contains the Typer application and all subcommands.
"""

from gpureset.cli.main import app

__all__ = ["app"]
