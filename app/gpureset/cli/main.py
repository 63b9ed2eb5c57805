"""Main CLI application entry point.

Defines the Typer application and global options.
"""

from typing import Annotated

import typer

from gpureset import __version__
from gpureset.cli.commands import rules, run, scan
from gpureset.core.transcript import enable_verbose_console, install_null_handler

# Create main Typer app
app = typer.Typer(
    name="gpureset",
    help="Factory-reset the AMD GPU driver stack on apt-based hosts.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"gpureset version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Stream the debug log (every command and its output) to the console.",
        ),
    ] = False,
) -> None:
    """gpureset - Remove third-party AMD GPU stacks and restore distribution defaults.

    Detects vendor packages, repositories, DKMS modules and loader
    descriptors, removes them, and reinstalls the stock stack.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    install_null_handler()
    if verbose:
        enable_verbose_console()


# Register commands
app.add_typer(run.app, name="run")
app.add_typer(scan.app, name="scan")
app.add_typer(rules.app, name="rules")


if __name__ == "__main__":
    app()
