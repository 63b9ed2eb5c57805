"""Rules command implementation.

Prints the effective classification rules and exports them as TOML.
"""

from pathlib import Path
from typing import Annotated

import typer

from gpureset.cli.display import create_rules_table
from gpureset.cli.types import ConfigOption, ScopeOption, load_settings
from gpureset.core.config import ConfigError, write_rules
from gpureset.core.profiles import Scope
from gpureset.utils.formatting import console, print_error, print_success

app = typer.Typer(
    help="Show or export classification rules.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def show_rules(
    ctx: typer.Context,
    scope: ScopeOption = Scope.FULL,
    write_path: Annotated[
        Path | None,
        typer.Option(
            "--write",
            "-w",
            help="Write the effective rules as a config.toml fragment.",
        ),
    ] = None,
    config_path: ConfigOption = None,
) -> None:
    """Show the effective rules for a scope (defaults plus config overrides).

    Examples:
        gpureset rules                               # Full-scope rules
        gpureset rules --scope userland              # Userland rules
        gpureset rules --write /tmp/rules.toml       # Export for editing
    """
    # Skip if a subcommand is being invoked
    if ctx.invoked_subcommand is not None:
        return

    config = load_settings(config_path)
    rules = config.rules_for(scope)

    if write_path is None:
        console.print(create_rules_table(rules))
        return

    try:
        written = write_rules(scope, rules, write_path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    print_success(f"Rules written to {written}")
