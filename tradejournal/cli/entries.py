"""Journal entry commands for TradeJournal CLI.

Handles recording trades, deposits and withdrawals, and editing
existing entries by account and row number.
"""

from typing import Optional

import click

from tradejournal.cli.common import console, error_panel, get_service, parse_when
from tradejournal.errors import JournalError


def _resolve_refs(service, symbol: Optional[str], setup: Optional[str]) -> dict:
    refs = {}
    if symbol is not None:
        refs["symbol_id"] = service.find_symbol(symbol).id
    if setup is not None:
        refs["setup_id"] = service.find_setup(setup).id
    return refs


def _pnl_breakdown(
    net: Optional[float],
    gross: Optional[float],
    commission: Optional[float],
    swap: Optional[float],
):
    """Build a P&L breakdown from CLI options, or None when none were given."""
    from pydantic import ValidationError as PydanticValidationError
    from tradejournal.models import PnLBreakdown

    if net is None and gross is None:
        if commission is not None or swap is not None:
            raise click.UsageError("--commission and --swap need --gross")
        return None
    if net is not None and gross is not None:
        raise click.UsageError("Use either --net or --gross, not both")
    try:
        return PnLBreakdown(net_pnl=net, gross_pnl=gross, commission=commission, swap=swap)
    except PydanticValidationError as e:
        raise click.UsageError("; ".join(err["msg"] for err in e.errors()))


PNL_OPTIONS = [
    click.option("--net", type=float, default=None, help="Net P&L (simple mode)."),
    click.option("--gross", type=float, default=None, help="Gross P&L (detailed mode)."),
    click.option("--commission", type=float, default=None, help="Commission paid (positive)."),
    click.option("--swap", type=float, default=None, help="Swap (signed)."),
]


def pnl_options(func):
    for option in reversed(PNL_OPTIONS):
        func = option(func)
    return func


@click.command()
@click.argument("account_ref")
@click.option("--date", "when", type=str, default=None, help="Entry date, 'YYYY-MM-DD [HH:MM]'. Defaults to now.")
@click.option("--symbol", type=str, default=None, help="Symbol name or id.")
@click.option("--setup", type=str, default=None, help="Setup name or id.")
@click.option("--direction", type=click.Choice(["buy", "sell"]), default=None, help="Trade direction.")
@click.option("--size", type=float, default=None, help="Position size.")
@click.option("--risk", type=float, default=None, help="Risk as percentage of balance.")
@click.option("--checklist", "checklist_ref", type=str, default=None, help="Entry checklist name or id.")
@click.option("--check", "checked", multiple=True, help="Checked item number or id (repeatable).")
@click.option("--emotions", type=str, default=None, help="How you felt when entering.")
@click.option("--screenshot", type=str, default=None, help="Path or URL of an entry screenshot.")
@click.option("--notes", type=str, default=None, help="Free-form notes.")
def trade(
    account_ref: str,
    when: Optional[str],
    symbol: Optional[str],
    setup: Optional[str],
    direction: Optional[str],
    size: Optional[float],
    risk: Optional[float],
    checklist_ref: Optional[str],
    checked: tuple[str, ...],
    emotions: Optional[str],
    screenshot: Optional[str],
    notes: Optional[str],
) -> None:
    """Record a new trade on an account.

    \b
    Examples:
      tradejournal trade Main --symbol EURUSD --direction buy --size 1 --risk 1
      tradejournal trade Main --checklist Basics --check 1 --check 3
      tradejournal trade Main --date "2024-03-04 09:30" --notes "London open"
    """
    entry_date, show_time = parse_when(when)
    service = get_service()

    try:
        account = service.find_account(account_ref)
        refs = _resolve_refs(service, symbol, setup)
        checklist_id = (
            service.find_checklist("entry", checklist_ref).id if checklist_ref else None
        )
        entry = service.add_trade(
            account.id,
            entry_date,
            show_entry_time=show_time,
            direction=direction,
            size=size,
            risk_percentage=risk,
            entry_checklist_id=checklist_id,
            entry_checked=list(checked),
            entry_emotions=emotions,
            entry_screenshot=screenshot,
            notes=notes,
            **refs,
        )
    except JournalError as e:
        error_panel(str(e), title="Trade Not Recorded")
        raise SystemExit(1)

    console.print(f"[green]✓ Recorded trade #{entry.row_number} on '{account.name}'[/green]")


def _cash_movement(kind: str, account_ref: str, amount: float, when: Optional[str], notes: Optional[str]) -> None:
    entry_date, show_time = parse_when(when)
    service = get_service()

    try:
        account = service.find_account(account_ref)
        add = service.add_deposit if kind == "deposit" else service.add_withdrawal
        entry = add(account.id, amount, entry_date, show_entry_time=show_time, notes=notes)
    except JournalError as e:
        error_panel(str(e))
        raise SystemExit(1)

    console.print(
        f"[green]✓ Recorded {kind} #{entry.row_number} of "
        f"{amount:,.2f} {account.currency} on '{account.name}'[/green]"
    )


@click.command()
@click.argument("account_ref")
@click.argument("amount", type=float)
@click.option("--date", "when", type=str, default=None, help="Date, 'YYYY-MM-DD [HH:MM]'.")
@click.option("--notes", type=str, default=None, help="Free-form notes.")
def deposit(account_ref: str, amount: float, when: Optional[str], notes: Optional[str]) -> None:
    """Record a deposit of AMOUNT (positive) into an account."""
    _cash_movement("deposit", account_ref, amount, when, notes)


@click.command()
@click.argument("account_ref")
@click.argument("amount", type=float)
@click.option("--date", "when", type=str, default=None, help="Date, 'YYYY-MM-DD [HH:MM]'.")
@click.option("--notes", type=str, default=None, help="Free-form notes.")
def withdraw(account_ref: str, amount: float, when: Optional[str], notes: Optional[str]) -> None:
    """Record a withdrawal of AMOUNT (positive) from an account."""
    _cash_movement("withdrawal", account_ref, amount, when, notes)


@click.group()
def entry() -> None:
    """Edit recorded journal entries.

    Entries are addressed by account and row number, as shown by
    'tradejournal journal'.

    \b
    Examples:
      tradejournal entry pnl Main 3 --net 250
      tradejournal entry pnl Main 3 --gross 270 --commission 20
      tradejournal entry close Main 3 --date "2024-03-04 15:10" --net 250
      tradejournal entry edit Main 3 --notes "Moved stop too early"
      tradejournal entry delete Main 3
    """
    pass


@entry.command("pnl")
@click.argument("account_ref")
@click.argument("row", type=int)
@pnl_options
def set_pnl(
    account_ref: str,
    row: int,
    net: Optional[float],
    gross: Optional[float],
    commission: Optional[float],
    swap: Optional[float],
) -> None:
    """Set the realized P&L of a trade."""
    pnl = _pnl_breakdown(net, gross, commission, swap)
    if pnl is None:
        raise click.UsageError("Give --net or --gross")
    service = get_service()

    try:
        item = service.find_entry(account_ref, row)
        item = service.set_trade_pnl(item.id, pnl)
    except JournalError as e:
        error_panel(str(e))
        raise SystemExit(1)

    console.print(f"[green]✓ Trade #{item.row_number} net P&L: {item.net_pnl:,.2f}[/green]")


@entry.command("close")
@click.argument("account_ref")
@click.argument("row", type=int)
@click.option("--date", "when", type=str, default=None, help="Exit date, 'YYYY-MM-DD [HH:MM]'. Defaults to now.")
@pnl_options
@click.option("--checklist", "checklist_ref", type=str, default=None, help="Exit checklist name or id.")
@click.option("--check", "checked", multiple=True, help="Checked item number or id (repeatable).")
@click.option("--emotions", type=str, default=None, help="How you felt when exiting.")
@click.option("--screenshot", type=str, default=None, help="Path or URL of an exit screenshot.")
def close_entry(
    account_ref: str,
    row: int,
    when: Optional[str],
    net: Optional[float],
    gross: Optional[float],
    commission: Optional[float],
    swap: Optional[float],
    checklist_ref: Optional[str],
    checked: tuple[str, ...],
    emotions: Optional[str],
    screenshot: Optional[str],
) -> None:
    """Record the exit of a trade."""
    exit_date, show_time = parse_when(when)
    pnl = _pnl_breakdown(net, gross, commission, swap)
    service = get_service()

    try:
        item = service.find_entry(account_ref, row)
        checklist_id = (
            service.find_checklist("exit", checklist_ref).id if checklist_ref else None
        )
        item = service.close_trade(
            item.id,
            exit_date,
            show_exit_time=show_time,
            pnl=pnl,
            exit_checklist_id=checklist_id,
            exit_checked=list(checked) if checked else None,
            exit_emotions=emotions,
            exit_screenshot=screenshot,
        )
    except JournalError as e:
        error_panel(str(e))
        raise SystemExit(1)

    console.print(f"[green]✓ Closed trade #{item.row_number}[/green]")


@entry.command("edit")
@click.argument("account_ref")
@click.argument("row", type=int)
@click.option("--date", "when", type=str, default=None, help="New entry date.")
@click.option("--notes", type=str, default=None, help="New notes.")
@click.option("--symbol", type=str, default=None, help="Symbol name or id.")
@click.option("--setup", type=str, default=None, help="Setup name or id.")
@click.option("--direction", type=click.Choice(["buy", "sell"]), default=None, help="Trade direction.")
@click.option("--size", type=float, default=None, help="Position size.")
@click.option("--risk", type=float, default=None, help="Risk as percentage of balance.")
@click.option("--checklist", "checklist_ref", type=str, default=None, help="Entry checklist name or id; re-snapshots the results.")
@click.option("--check", "checked", multiple=True, help="Checked entry item number or id (repeatable).")
@click.option("--emotions", type=str, default=None, help="Entry emotions.")
@click.option("--amount", type=float, default=None, help="New deposit/withdrawal amount (positive).")
def edit_entry(
    account_ref: str,
    row: int,
    when: Optional[str],
    notes: Optional[str],
    symbol: Optional[str],
    setup: Optional[str],
    direction: Optional[str],
    size: Optional[float],
    risk: Optional[float],
    checklist_ref: Optional[str],
    checked: tuple[str, ...],
    emotions: Optional[str],
    amount: Optional[float],
) -> None:
    """Change fields of an entry. Only the given options change.

    Passing --check without --checklist re-ticks the trade's current
    entry checklist.

    \b
    Examples:
      tradejournal entry edit Main 3 --direction sell
      tradejournal entry edit Main 3 --checklist Basics --check 1 --check 2
    """
    service = get_service()

    try:
        item = service.find_entry(account_ref, row)
        changes = _resolve_refs(service, symbol, setup)
        if when is not None:
            changes["entry_date"], changes["show_entry_time"] = parse_when(when)
        if notes is not None:
            changes["notes"] = notes
        if direction is not None:
            changes["direction"] = direction
        if size is not None:
            changes["size"] = size
        if risk is not None:
            changes["risk_percentage"] = risk
        if checklist_ref is not None:
            changes["entry_checklist_id"] = service.find_checklist("entry", checklist_ref).id
        if checked:
            changes["entry_checked"] = list(checked)
        if emotions is not None:
            changes["entry_emotions"] = emotions
        if amount is not None:
            if item.is_trade:
                raise click.UsageError("--amount applies to deposits and withdrawals; use 'entry pnl' for trades")
            if amount <= 0:
                raise click.BadParameter("Amount must be positive", param_hint="--amount")
            changes["net_pnl"] = amount if item.operation_type == "deposit" else -amount

        if not changes:
            console.print("[yellow]Nothing to change[/yellow]")
            return

        item = service.update_entry(item.id, **changes)
    except JournalError as e:
        error_panel(str(e))
        raise SystemExit(1)

    console.print(f"[green]✓ Updated entry #{item.row_number}[/green]")


@entry.command("delete")
@click.argument("account_ref")
@click.argument("row", type=int)
@click.option("--yes", is_flag=True, default=False, help="Do not ask for confirmation.")
def delete_entry(account_ref: str, row: int, yes: bool) -> None:
    """Delete an entry. Its row number is not reused."""
    service = get_service()

    try:
        item = service.find_entry(account_ref, row)
        if not yes:
            click.confirm(f"Delete {item.operation_type} #{item.row_number}?", abort=True)
        service.delete_entry(item.id)
    except JournalError as e:
        error_panel(str(e))
        raise SystemExit(1)

    console.print(f"[green]✓ Deleted entry #{row}[/green]")
