"""Shared Rich display functions for inventory, plans and results.

Provides reusable table builders and summary printers used by the run
and scan commands.
"""

from rich.markup import escape
from rich.table import Table

from gpureset.core.profiles import Profile
from gpureset.core.rules import RuleSet
from gpureset.models.action import ActionResult, ActionType, RemediationAction
from gpureset.models.classification import ClassificationResult
from gpureset.utils.formatting import console, print_success

_ACTION_LABELS: dict[ActionType, str] = {
    ActionType.DISABLE_SOURCE: "disable",
    ActionType.REMOVE_PIN: "unpin",
    ActionType.PURGE_PACKAGE: "purge",
    ActionType.DEREGISTER_MODULE_BUILD: "dkms-rm",
    ActionType.QUARANTINE_FILE: "move",
    ActionType.REMOVE_DIRECTORY: "rm -r",
}


def create_inventory_table(
    results: list[ClassificationResult], foreign_only: bool = False
) -> Table:
    """Create a Rich table of classified inventory items.

    Args:
        results: Classifier output.
        foreign_only: Only list foreign items.

    Returns:
        Rich Table with Label, Kind, Item and Rule columns.
    """
    table = Table(
        title="Foreign Items" if foreign_only else "Inventory",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Label", width=8, justify="center")
    table.add_column("Kind")
    table.add_column("Item", no_wrap=True)
    table.add_column("Rule")

    for result in results:
        if foreign_only and not result.is_foreign:
            continue
        style = "foreign" if result.is_foreign else "stock"
        table.add_row(
            f"[{style}]{result.label.value}[/{style}]",
            result.item.kind.value,
            f"[{style}]{escape(result.item.label)}[/{style}]",
            f"[muted]{escape(result.rule)}[/muted]",
        )

    return table


def create_actions_table(actions: list[RemediationAction], dry_run: bool = False) -> Table:
    """Create a Rich table displaying planned remediation actions.

    Args:
        actions: Planned actions in execution order.
        dry_run: Whether this is a dry-run (changes table title).

    Returns:
        Rich Table configured for action display.
    """
    title = "Planned Remediation (Dry Run)" if dry_run else "Planned Remediation"

    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Action", width=8, justify="center")
    table.add_column("Target", no_wrap=True)
    table.add_column("Backup")
    table.add_column("Rule")

    for action in actions:
        label = _ACTION_LABELS[action.action_type]
        table.add_row(
            f"[destructive]{label}[/destructive]",
            escape(action.target),
            f"[muted]{escape(action.backup_path or '')}[/muted]",
            f"[muted]{escape(action.rule)}[/muted]",
        )

    return table


def create_results_table(results: list[ActionResult]) -> Table:
    """Create a Rich table displaying operation results.

    Successful results show "OK" status; failed results show "FAIL" with
    the error message.

    Args:
        results: Operation results in execution order.

    Returns:
        Rich Table configured for results display.
    """
    table = Table(
        title="Results",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Status", width=8, justify="center")
    table.add_column("Operation")
    table.add_column("Target", no_wrap=True)
    table.add_column("Message")

    for result in results:
        if result.success:
            status = "[success]OK[/success]"
            message = result.message or ""
        else:
            status = "[error]FAIL[/error]"
            message = result.error or "Unknown error"

        table.add_row(
            status,
            result.operation,
            escape(result.target),
            f"[muted]{escape(message)}[/muted]",
        )

    return table


def create_rules_table(rules: RuleSet) -> Table:
    """Create a Rich table listing every rule list of a rule set."""
    table = Table(
        title="Classification Rules",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Rule list", no_wrap=True)
    table.add_column("Entries")

    for name, value in rules.model_dump().items():
        if value is None:
            entries = "[muted](same as package_patterns)[/muted]"
        else:
            entries = escape("\n".join(value)) or "[muted](empty)[/muted]"
        table.add_row(name, entries)

    return table


def print_classification_summary(results: list[ClassificationResult]) -> None:
    """Print counts of foreign and stock items."""
    foreign = sum(1 for r in results if r.is_foreign)
    stock = len(results) - foreign
    console.print(f"\nSummary: [foreign]{foreign} foreign[/foreign], [stock]{stock} stock[/stock]")


def print_results_summary(results: list[ActionResult]) -> None:
    """Print a summary of operation results.

    Shows a success message when all operations succeed, or a count of
    succeeded/failed operations when there are failures.

    Args:
        results: Operation results.
    """
    success_count = sum(1 for r in results if r.success)
    fail_count = sum(1 for r in results if r.failed)

    if fail_count == 0:
        print_success(f"All {success_count} operation(s) completed successfully.")
    else:
        console.print(
            f"\n[success]{success_count} succeeded[/success], [error]{fail_count} failed[/error]"
            " (see the transcript for details)"
        )


def print_hints(profile: Profile) -> None:
    """Print the closing checks for a profile."""
    if not profile.hints:
        return
    console.print("\n[bold_header]Next steps[/bold_header]")
    for hint in profile.hints:
        console.print(f"  [muted]-[/muted] {escape(hint)}")
