"""CLI for SplitSafe using Typer."""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from decimal import Decimal, InvalidOperation

import typer
from rich.console import Console
from rich.table import Table

from .config import load_settings
from .db import Database
from .exceptions import InvalidAmountError
from .models import Balance, Expense, Group, Transfer
from .service import LedgerService
from .ui import format_address, format_currency, select_member_interactive

app = typer.Typer(
    name="splitsafe",
    help="Track shared expenses and settle up with the fewest transfers",
)

console = Console()


def setup_logging(verbose: bool = False):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


@contextmanager
def open_service(verbose: bool = False) -> Iterator[LedgerService]:
    """Load settings, open the ledger and report errors the way every command does."""
    setup_logging(verbose)
    db = None

    try:
        settings = load_settings()
        db = Database(settings.database_path)
        yield LedgerService(settings, db)
    except Exception as e:
        console.print(f"\n[bold red]Error:[/bold red] {e}")
        if verbose:
            raise
        sys.exit(1)
    finally:
        if db is not None:
            db.close()


def parse_amount(value: str) -> Decimal:
    """Parse a user-entered money amount like "12.50" or "$1,200"."""
    cleaned = value.strip().lstrip("$").replace(",", "")
    try:
        amount = Decimal(cleaned)
    except InvalidOperation as e:
        raise InvalidAmountError(f"Invalid amount: {value!r}") from e
    if not amount.is_finite():
        raise InvalidAmountError(f"Invalid amount: {value!r}")
    return amount


def parse_splits(values: list[str]) -> dict[str, Decimal]:
    """Parse "member=amount" pairs; repeated members are added together."""
    splits: dict[str, Decimal] = {}
    for value in values:
        member, sep, amount = value.rpartition("=")
        if not sep or not member.strip():
            raise InvalidAmountError(
                f"Invalid split {value!r}, expected MEMBER=AMOUNT"
            )
        member = member.strip()
        splits[member] = splits.get(member, Decimal("0")) + parse_amount(amount)
    return splits


def format_money(
    amount: Decimal, currency_code: str = "USD", use_color: bool = True
) -> str:
    """
    Format money in accounting style with alignment.

    Negative amounts use parentheses: ($85.02)
    Positive amounts have spaces:      $85.02
    The spaces ensure decimal points align in tables.
    """
    formatted = format_currency(abs(amount), currency_code)
    if amount < 0:
        return f"([red]{formatted}[/red])" if use_color else f"({formatted})"
    return f" [green]{formatted}[/green] " if use_color else f" {formatted} "


# ============================================================================
# Display
# ============================================================================


def display_groups(groups: list[Group]):
    """Display all groups in a table."""
    table = Table(title="Groups", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim", width=10)
    table.add_column("Name", style="cyan")
    table.add_column("Members", justify="right")
    table.add_column("Created", style="dim")

    for group in groups:
        table.add_row(
            group.id,
            group.name,
            str(len(group.members)),
            group.created_at.strftime("%Y-%m-%d"),
        )

    console.print(table)


def display_expenses(expenses: list[Expense], currency_code: str = "USD"):
    """Display a group's expenses."""
    if not expenses:
        console.print("[yellow]No expenses yet.[/yellow]")
        return

    table = Table(title="Expenses", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim", width=10)
    table.add_column("Title", style="cyan", width=30)
    table.add_column("Paid by")
    table.add_column("Total", justify="right", width=14)
    table.add_column("Split", style="dim", no_wrap=False)

    for expense in expenses:
        split_desc = ", ".join(
            f"{format_address(s.member)} {format_currency(s.amount, currency_code)}"
            for s in expense.splits
            if s.amount != 0
        )
        table.add_row(
            expense.id,
            expense.title[:30] + "..." if len(expense.title) > 30 else expense.title,
            format_address(expense.payer),
            format_money(expense.total, currency_code),
            split_desc,
        )

    console.print(table)


def display_balances(balances: list[Balance], currency_code: str = "USD"):
    """Display who is owed and who owes, largest creditor first."""
    if all(balance.is_settled for balance in balances):
        console.print("[bold green]✓ All settled up![/bold green] Everyone is square")
        return

    table = Table(title="Balances", show_header=True, header_style="bold magenta")
    table.add_column("Member", style="cyan")
    table.add_column("Status")
    table.add_column("Amount", justify="right", width=14)

    for balance in sorted(balances, key=lambda b: b.amount, reverse=True):
        if balance.is_settled:
            continue
        status = "is owed" if balance.amount > 0 else "owes"
        table.add_row(
            format_address(balance.member),
            status,
            format_money(balance.amount, currency_code),
        )

    console.print(table)


def display_transfers(transfers: list[Transfer], currency_code: str = "USD"):
    """Display the suggested settlement transfers."""
    if not transfers:
        console.print(
            "[bold green]✓ Nothing to settle[/bold green] All balances are zero"
        )
        return

    table = Table(
        title="Suggested Transfers", show_header=True, header_style="bold magenta"
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("From", style="cyan")
    table.add_column("", width=2)
    table.add_column("To", style="cyan")
    table.add_column("Amount", justify="right", width=14)

    for idx, transfer in enumerate(transfers, start=1):
        table.add_row(
            str(idx),
            format_address(transfer.from_member),
            "→",
            format_address(transfer.to_member),
            f"[bold]{format_currency(transfer.amount, currency_code)}[/bold]",
        )

    console.print(table)


# ============================================================================
# Commands
# ============================================================================


@app.command("create-group")
def create_group(
    name: str = typer.Argument(..., help="Group name"),
    members: list[str] = typer.Option(
        ..., "--member", "-m", help="Member identifier (repeat for each member)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Create a group with its member roster."""
    with open_service(verbose) as service:
        group = service.create_group(name, members)

        console.print(
            f"\n[bold green]✓ Created group {group.name}[/bold green] "
            f"(ID: [cyan]{group.id}[/cyan], {len(group.members)} members)\n"
        )


@app.command("groups")
def list_groups(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """List all groups."""
    with open_service(verbose) as service:
        groups = service.list_groups()

        if not groups:
            console.print(
                "[yellow]No groups yet.[/yellow] Create one with create-group."
            )
            return

        display_groups(groups)


@app.command("add-expense")
def add_expense(
    group_id: str = typer.Argument(..., help="Group ID"),
    total: str = typer.Option(..., "--total", "-a", help="Total amount paid"),
    title: str = typer.Option("", "--title", "-t", help="What the expense was for"),
    payer: str | None = typer.Option(
        None, "--payer", "-p", help="Member who paid (prompted if omitted)"
    ),
    split: list[str] | None = typer.Option(
        None,
        "--split",
        "-s",
        help="Custom share as MEMBER=AMOUNT (repeat; omit for an equal split)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """
    Record an expense for a group.

    Without --split the total is shared equally by every member. With --split
    each listed member owes the given amount, unlisted members owe nothing,
    and the shares must add up to the total.
    """
    with open_service(verbose) as service:
        group = service.get_group(group_id)
        currency_code = service.settings.currency_code

        if payer is None:
            console.print(f"\n[bold]Who paid?[/bold] ({group.name})")
            payer = select_member_interactive(group.members, label="Payer")
            if payer is None:
                console.print("[yellow]No payer selected.[/yellow]")
                return

        expense = service.add_expense(
            group_id=group_id,
            title=title,
            payer=payer,
            total=parse_amount(total),
            split_mode="custom" if split else "equal",
            custom_splits=parse_splits(split) if split else None,
        )

        console.print(
            f"\n[bold green]✓ Added expense {expense.id}[/bold green]: "
            f"{format_address(expense.payer)} paid "
            f"{format_currency(expense.total, currency_code)}\n"
        )


@app.command("expenses")
def list_expenses(
    group_id: str = typer.Argument(..., help="Group ID"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """List a group's expenses."""
    with open_service(verbose) as service:
        expenses = service.get_expenses(group_id)
        display_expenses(expenses, service.settings.currency_code)


@app.command("balances")
def show_balances(
    group_id: str = typer.Argument(..., help="Group ID"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Show each member's net balance."""
    with open_service(verbose) as service:
        balances = service.get_balances(group_id)
        display_balances(balances, service.settings.currency_code)


@app.command("settle")
def settle(
    group_id: str = typer.Argument(..., help="Group ID"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Show the transfers that settle the group."""
    with open_service(verbose) as service:
        transfers = service.get_settlements(group_id)
        display_transfers(transfers, service.settings.currency_code)


@app.command("show")
def show_group(
    group_id: str = typer.Argument(..., help="Group ID"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Show a group's expenses, balances and suggested transfers."""
    with open_service(verbose) as service:
        summary = service.get_group_summary(group_id)
        currency_code = service.settings.currency_code

        console.print(f"\n[bold]{summary.group.name}[/bold] ({summary.group.id})")
        console.print(
            f"  Members: {', '.join(format_address(m) for m in summary.group.members)}"
        )
        console.print(
            f"  Total spent: {format_money(summary.total_spent, currency_code)}"
        )
        console.print()

        display_expenses(summary.expenses, currency_code)
        console.print()
        display_balances(summary.balances, currency_code)
        console.print()
        display_transfers(summary.transfers, currency_code)


if __name__ == "__main__":
    app()
