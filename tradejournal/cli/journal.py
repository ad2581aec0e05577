"""Journal report commands for TradeJournal CLI.

Shows an account's entries with running balances, and its
performance statistics.
"""

from typing import Optional

import click
from rich.panel import Panel
from rich.table import Table

from tradejournal.cli.common import console, error_panel, get_service
from tradejournal.errors import JournalError
from tradejournal.ledger.formatting import (
    format_currency,
    format_entry_date,
    format_number,
    format_percentage,
    outcome_display,
    value_style,
)

OPERATION_LABELS = {
    "trade": "Trade",
    "deposit": "[cyan]Deposit[/cyan]",
    "withdrawal": "[yellow]Withdrawal[/yellow]",
}


@click.command()
@click.argument("account_ref")
@click.option("--limit", type=click.IntRange(min=1), default=None, help="Show only the last N entries.")
def journal(account_ref: str, limit: Optional[int]) -> None:
    """Show the journal of an account.

    Every entry is listed in row order with its outcome, checklist
    scores, and the running balance after it.

    \b
    Examples:
      tradejournal journal Main
      tradejournal journal Main --limit 20
    """
    service = get_service()
    locale = service.locale

    try:
        account = service.find_account(account_ref)
        report = service.get_ledger(account.id)
        symbols = {s.id: s.name for s in service.list_symbols()}
        setups = {s.id: s.name for s in service.list_setups()}
    except JournalError as e:
        error_panel(str(e))
        raise SystemExit(1)

    views = report.views
    if limit is not None:
        views = views[-limit:]

    if not views:
        console.print(Panel(
            f"[dim]No entries in '{account.name}' yet[/dim]\n\n"
            "[dim]Run 'tradejournal trade' or 'tradejournal deposit' to add one[/dim]",
            title=f"[bold]{account.name}[/bold]",
            border_style="dim",
        ))
        return

    table = Table(
        title=f"{account.name} ({account.currency})",
        show_header=True,
        header_style="bold cyan",
    )

    table.add_column("#", justify="right", style="dim")
    table.add_column("Date")
    table.add_column("Day", style="dim")
    table.add_column("Type")
    table.add_column("Symbol", style="bold")
    table.add_column("Setup")
    table.add_column("Dir", justify="center")
    table.add_column("Net P&L", justify="right")
    table.add_column("", justify="center")
    table.add_column("Chk", justify="center")
    table.add_column("Balance", justify="right")
    table.add_column("Change", justify="right")

    for view in views:
        entry = view.entry
        trade = entry.trade
        display = outcome_display(view.outcome)

        if trade is not None:
            symbol = symbols.get(trade.symbol_id, "[dim]-[/dim]") if trade.symbol_id else "[dim]-[/dim]"
            setup = setups.get(trade.setup_id, "[dim]-[/dim]") if trade.setup_id else "[dim]-[/dim]"
            direction = (trade.direction or "-").upper()
            scores = f"{view.entry_score}/{view.exit_score}"
        else:
            symbol = setup = direction = scores = ""

        pnl_style = value_style(entry.net_pnl)
        pnl = (
            f"[{pnl_style}]{format_number(entry.net_pnl, locale)}[/{pnl_style}]"
            if entry.net_pnl is not None
            else "[dim]-[/dim]"
        )
        change_style = value_style(view.balance_change_percentage)

        table.add_row(
            str(entry.row_number),
            format_entry_date(entry.entry_date, entry.show_entry_time),
            view.entry_weekday,
            OPERATION_LABELS[entry.operation_type],
            symbol,
            setup,
            direction,
            pnl,
            display["icon"] if entry.is_trade else "",
            scores,
            format_number(view.running_balance, locale),
            f"[{change_style}]{format_percentage(view.balance_change_percentage, locale=locale)}[/{change_style}]",
        )

    console.print(table)

    summary = report.statistics
    console.print(
        f"\n[bold]Balance:[/bold] {format_currency(summary.current_balance, account.currency, locale)}"
        f"  [dim]|[/dim]  [bold]Trades:[/bold] {summary.total_trades}"
        f"  [dim]|[/dim]  [bold]Win rate:[/bold] {format_percentage(summary.win_rate, locale=locale)}"
    )


@click.command()
@click.argument("account_ref")
def stats(account_ref: str) -> None:
    """Show performance statistics of an account.

    Only trades count toward the trade figures; deposits and
    withdrawals move the balance only.
    """
    service = get_service()
    locale = service.locale

    try:
        account = service.find_account(account_ref)
        result = service.get_account_statistics(account.id)
    except JournalError as e:
        error_panel(str(e))
        raise SystemExit(1)

    def money(value: float) -> str:
        style = value_style(value)
        return f"[{style}]{format_currency(value, account.currency, locale)}[/{style}]"

    change_style = value_style(result.balance_change_percentage)
    profit_factor = (
        format_number(result.profit_factor, locale, max_decimals=2)
        if result.profit_factor is not None
        else "[dim]n/a[/dim]"
    )

    content = (
        f"[bold]Initial balance:[/bold] {format_currency(account.initial_balance, account.currency, locale)}\n"
        f"[bold]Current balance:[/bold] {format_currency(result.current_balance, account.currency, locale)} "
        f"[{change_style}]({format_percentage(result.balance_change_percentage, locale=locale)})[/{change_style}]\n\n"
        f"[bold]Trades:[/bold] {result.total_trades}  "
        f"[green]{result.winning_trades} win[/green] / "
        f"[red]{result.losing_trades} loss[/red] / "
        f"[dim]{result.neutral_trades} neutral[/dim]\n"
        f"[bold]Win rate:[/bold] {format_percentage(result.win_rate, locale=locale)}\n"
        f"[bold]Total P&L:[/bold] {money(result.total_pnl)}\n\n"
        f"[bold]Average win:[/bold] {money(result.average_win)}\n"
        f"[bold]Average loss:[/bold] {money(result.average_loss)}\n"
        f"[bold]Largest win:[/bold] {money(result.largest_win)}\n"
        f"[bold]Largest loss:[/bold] {money(result.largest_loss)}\n"
        f"[bold]Profit factor:[/bold] {profit_factor}"
    )

    console.print(Panel(
        content,
        title=f"[bold cyan]{account.name} Statistics[/bold cyan]",
        border_style="cyan",
    ))
