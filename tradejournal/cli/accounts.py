"""Account commands for TradeJournal CLI.

Handles trading account management and the trial limit overview.
"""

from datetime import datetime
from typing import Optional

import click
from rich.panel import Panel
from rich.table import Table

from tradejournal.cli.common import console, error_panel, get_service, short_id
from tradejournal.errors import JournalError


@click.group()
def account() -> None:
    """Manage trading accounts.

    Each account is its own ledger with an initial balance and
    a currency. Accounts can be referred to by name or id.

    \b
    Examples:
      tradejournal account list
      tradejournal account add Main --balance 10000 --currency USD
      tradejournal account edit Main --name Prop
      tradejournal account delete Prop --yes
    """
    pass


@account.command("list")
def list_accounts() -> None:
    """List your trading accounts."""
    from tradejournal.ledger.formatting import format_currency

    service = get_service()

    try:
        accounts = service.list_accounts()
    except JournalError as e:
        error_panel(str(e))
        raise SystemExit(1)

    if not accounts:
        console.print(Panel(
            "[dim]No accounts yet[/dim]\n\n"
            "[dim]Run 'tradejournal account add' to create one[/dim]",
            title="[bold]Accounts[/bold]",
            border_style="dim",
        ))
        return

    table = Table(
        title="Trading Accounts",
        show_header=True,
        header_style="bold cyan",
    )

    table.add_column("ID", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Initial Balance", justify="right")
    table.add_column("Currency", justify="center")
    table.add_column("Created", style="dim")

    for acc in accounts:
        table.add_row(
            short_id(acc.id),
            acc.name,
            format_currency(acc.initial_balance, acc.currency, locale="en"),
            acc.currency,
            acc.created_at.strftime("%Y-%m-%d"),
        )

    console.print(table)


@account.command("add")
@click.argument("name")
@click.option("--balance", type=float, required=True, help="Initial balance.")
@click.option("--currency", type=str, default="USD", show_default=True, help="Currency code.")
def add_account(name: str, balance: float, currency: str) -> None:
    """Create a trading account.

    NAME must be unique among your accounts.
    """
    service = get_service()

    try:
        acc = service.create_account(name, balance, currency)
    except JournalError as e:
        error_panel(str(e), title="Account Not Created")
        raise SystemExit(1)

    console.print(
        f"[green]✓ Created account '{acc.name}' "
        f"({acc.initial_balance:,.2f} {acc.currency})[/green]"
    )


@account.command("edit")
@click.argument("account_ref")
@click.option("--name", type=str, default=None, help="New account name.")
@click.option("--balance", type=float, default=None, help="New initial balance.")
@click.option("--currency", type=str, default=None, help="New currency code.")
def edit_account(
    account_ref: str, name: Optional[str], balance: Optional[float], currency: Optional[str]
) -> None:
    """Rename an account or change its initial balance or currency."""
    from pydantic import ValidationError as PydanticValidationError
    from tradejournal.models import AccountUpdate

    if name is None and balance is None and currency is None:
        console.print("[yellow]Nothing to change[/yellow]")
        return

    try:
        changes = AccountUpdate(name=name, initial_balance=balance, currency=currency)
    except PydanticValidationError as e:
        raise click.UsageError("; ".join(err["msg"] for err in e.errors()))

    service = get_service()

    try:
        acc = service.find_account(account_ref)
        acc = service.update_account(acc.id, changes)
    except JournalError as e:
        error_panel(str(e))
        raise SystemExit(1)

    console.print(f"[green]✓ Updated account '{acc.name}'[/green]")


@account.command("delete")
@click.argument("account_ref")
@click.option("--yes", is_flag=True, default=False, help="Do not ask for confirmation.")
def delete_account(account_ref: str, yes: bool) -> None:
    """Delete an account and all of its journal entries."""
    service = get_service()

    try:
        acc = service.find_account(account_ref)
        if not yes:
            click.confirm(
                f"Delete account '{acc.name}' and all of its entries?", abort=True
            )
        service.delete_account(acc.id)
    except JournalError as e:
        error_panel(str(e))
        raise SystemExit(1)

    console.print(f"[green]✓ Deleted account '{acc.name}'[/green]")


@click.command()
def limits() -> None:
    """Show trial limits and subscription status.

    Without an active subscription you can keep one account
    and record ten trades.
    """
    service = get_service()

    try:
        lim = service.check_trial_limits()
        sub = service.get_subscription()
    except JournalError as e:
        error_panel(str(e))
        raise SystemExit(1)

    if sub is not None:
        days = sub.days_remaining(datetime.now())
        console.print(Panel(
            f"[green]✓[/green] Active subscription: [bold]{sub.plan_name}[/bold]\n"
            f"Days remaining: {days}\n\n"
            f"[dim]Accounts: {lim.account_count} | Trades: {lim.trade_count}[/dim]",
            title="[bold cyan]Limits[/bold cyan]",
            border_style="cyan",
        ))
        return

    account_color = "green" if lim.can_add_account else "red"
    trade_color = "green" if lim.can_add_trade else "red"

    console.print(Panel(
        "[bold]Trial tier[/bold]\n\n"
        f"Accounts: [{account_color}]{lim.account_count} / {lim.max_accounts}[/{account_color}]\n"
        f"Trades:   [{trade_color}]{lim.trade_count} / {lim.max_trades}[/{trade_color}]",
        title="[bold cyan]Limits[/bold cyan]",
        border_style="cyan",
    ))
