"""Scan command implementation.

Shows what a reset would classify as foreign without changing anything.
"""

from typing import Annotated

import typer

from gpureset.cli.display import create_inventory_table, print_classification_summary
from gpureset.cli.types import ConfigOption, ScopeOption, load_settings
from gpureset.core.engine import ResetEngine
from gpureset.core.profiles import Scope
from gpureset.utils.formatting import console, print_info

app = typer.Typer(
    help="Scan and classify GPU stack inventory.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def scan_inventory(
    ctx: typer.Context,
    scope: ScopeOption = Scope.FULL,
    foreign_only: Annotated[
        bool,
        typer.Option(
            "--foreign-only",
            "-f",
            help="Only list items that would be removed.",
        ),
    ] = False,
    config_path: ConfigOption = None,
) -> None:
    """Collect and classify the host inventory.

    Read-only; does not need root, though some locations may be
    unreadable without it.

    Examples:
        gpureset scan                           # Full-scope inventory
        gpureset scan --scope userland          # Userland categories only
        gpureset scan --foreign-only            # Only what a reset removes
    """
    # Skip if a subcommand is being invoked
    if ctx.invoked_subcommand is not None:
        return

    config = load_settings(config_path)
    profile = config.profile_for(scope)

    engine = ResetEngine(profile, config.host_paths())
    engine.plan()
    results = engine.context.classifications

    if not results:
        print_info("No inventory items found.")
        return

    console.print(create_inventory_table(results, foreign_only=foreign_only))
    print_classification_summary(results)
