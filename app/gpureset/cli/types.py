"""Shared option types and helpers for CLI commands."""

from pathlib import Path
from typing import Annotated

import typer

from gpureset.core.config import ConfigError, ResetConfig, load_config
from gpureset.core.profiles import Scope
from gpureset.utils.formatting import print_error

ScopeOption = Annotated[
    Scope,
    typer.Option(
        "--scope",
        "-s",
        help="Reset scope: full (kernel, compute and graphics) or userland (graphics only).",
        case_sensitive=False,
    ),
]

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Config file (default: /etc/gpureset/config.toml or $GPURESET_CONFIG).",
    ),
]


def load_settings(config_path: Path | None) -> ResetConfig:
    """Load the configuration or exit with code 1.

    Args:
        config_path: Explicit config path, or None for the default.

    Returns:
        Validated configuration.

    Raises:
        typer.Exit: If the configuration is invalid.
    """
    try:
        return load_config(config_path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
