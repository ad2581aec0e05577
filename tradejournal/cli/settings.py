"""Journal settings commands for TradeJournal CLI.

Handles the user's symbols, setups, and entry/exit checklists that
trades refer to.
"""

from typing import Optional

import click
from rich.panel import Panel
from rich.table import Table

from tradejournal.cli.common import console, error_panel, get_service, short_id
from tradejournal.errors import JournalError

KIND_OPTION = click.option(
    "--kind",
    type=click.Choice(["entry", "exit"]),
    default="entry",
    show_default=True,
    help="Checklist kind.",
)


# ==================== Symbols ====================


@click.group()
def symbol() -> None:
    """Manage trading symbols.

    \b
    Examples:
      tradejournal symbol add EURUSD
      tradejournal symbol list
      tradejournal symbol delete EURUSD
    """
    pass


@symbol.command("list")
def list_symbols() -> None:
    """List your symbols."""
    service = get_service()

    try:
        symbols = service.list_symbols()
    except JournalError as e:
        error_panel(str(e))
        raise SystemExit(1)

    if not symbols:
        console.print("[dim]No symbols yet. Add one with 'tradejournal symbol add'.[/dim]")
        return

    table = Table(title="Symbols", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="dim")
    table.add_column("Symbol", style="bold")

    for sym in symbols:
        table.add_row(short_id(sym.id), sym.name)

    console.print(table)


@symbol.command("add")
@click.argument("name")
def add_symbol(name: str) -> None:
    """Add a symbol. NAME is stored upper-cased (e.g., EURUSD)."""
    service = get_service()

    try:
        sym = service.create_symbol(name)
    except JournalError as e:
        error_panel(str(e))
        raise SystemExit(1)

    console.print(f"[green]✓ Added symbol {sym.name}[/green]")


@symbol.command("delete")
@click.argument("symbol_ref")
def delete_symbol(symbol_ref: str) -> None:
    """Delete a symbol.

    Trades that used it keep their entry but show no symbol.
    """
    service = get_service()

    try:
        sym = service.find_symbol(symbol_ref)
        service.delete_symbol(sym.id)
    except JournalError as e:
        error_panel(str(e))
        raise SystemExit(1)

    console.print(f"[green]✓ Deleted symbol {sym.name}[/green]")


# ==================== Setups ====================


@click.group()
def setup() -> None:
    """Manage trading setups.

    \b
    Examples:
      tradejournal setup add Breakout --description "Range breakout on H1"
      tradejournal setup edit Breakout --name "H1 Breakout"
      tradejournal setup list
    """
    pass


@setup.command("list")
def list_setups() -> None:
    """List your setups."""
    service = get_service()

    try:
        setups = service.list_setups()
    except JournalError as e:
        error_panel(str(e))
        raise SystemExit(1)

    if not setups:
        console.print("[dim]No setups yet. Add one with 'tradejournal setup add'.[/dim]")
        return

    table = Table(title="Setups", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Description")

    for item in setups:
        table.add_row(short_id(item.id), item.name, item.description or "[dim]-[/dim]")

    console.print(table)


@setup.command("add")
@click.argument("name")
@click.option("--description", type=str, default=None, help="What the setup looks like.")
def add_setup(name: str, description: Optional[str]) -> None:
    """Add a setup."""
    service = get_service()

    try:
        item = service.create_setup(name, description)
    except JournalError as e:
        error_panel(str(e))
        raise SystemExit(1)

    console.print(f"[green]✓ Added setup '{item.name}'[/green]")


@setup.command("edit")
@click.argument("setup_ref")
@click.option("--name", type=str, default=None, help="New name.")
@click.option("--description", type=str, default=None, help="New description.")
def edit_setup(setup_ref: str, name: Optional[str], description: Optional[str]) -> None:
    """Rename a setup or change its description."""
    service = get_service()

    try:
        item = service.find_setup(setup_ref)
        item = service.update_setup(item.id, name=name, description=description)
    except JournalError as e:
        error_panel(str(e))
        raise SystemExit(1)

    console.print(f"[green]✓ Updated setup '{item.name}'[/green]")


@setup.command("delete")
@click.argument("setup_ref")
def delete_setup(setup_ref: str) -> None:
    """Delete a setup. Trades that used it keep their entry."""
    service = get_service()

    try:
        item = service.find_setup(setup_ref)
        service.delete_setup(item.id)
    except JournalError as e:
        error_panel(str(e))
        raise SystemExit(1)

    console.print(f"[green]✓ Deleted setup '{item.name}'[/green]")


# ==================== Checklists ====================


@click.group()
def checklist() -> None:
    """Manage entry and exit checklists.

    A checklist is a list of yes/no criteria you tick off when
    opening or closing a trade. Editing a checklist never changes
    the results already recorded on trades.

    \b
    Examples:
      tradejournal checklist add Basics --item "Trend aligned" --item "Risk <= 1%"
      tradejournal checklist add Exit --kind exit --item "Target hit"
      tradejournal checklist show Basics
      tradejournal checklist list --kind exit
    """
    pass


@checklist.command("list")
@KIND_OPTION
def list_checklists(kind: str) -> None:
    """List your checklists of one kind."""
    service = get_service()

    try:
        checklists = service.list_checklists(kind)
    except JournalError as e:
        error_panel(str(e))
        raise SystemExit(1)

    if not checklists:
        console.print(f"[dim]No {kind} checklists yet.[/dim]")
        return

    table = Table(
        title=f"{kind.capitalize()} Checklists",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("ID", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Items", justify="right")

    for item in checklists:
        table.add_row(short_id(item.id), item.name, str(len(item.items)))

    console.print(table)


@checklist.command("show")
@click.argument("checklist_ref")
@KIND_OPTION
def show_checklist(checklist_ref: str, kind: str) -> None:
    """Show the items of a checklist, numbered for --check."""
    service = get_service()

    try:
        item = service.find_checklist(kind, checklist_ref)
    except JournalError as e:
        error_panel(str(e))
        raise SystemExit(1)

    lines = [
        f"[cyan]{position}.[/cyan] {checklist_item.text}"
        for position, checklist_item in enumerate(item.ordered_items(), start=1)
    ]
    console.print(Panel(
        "\n".join(lines) or "[dim]No items[/dim]",
        title=f"[bold]{item.name}[/bold] [dim]({item.kind})[/dim]",
        border_style="cyan",
    ))


@checklist.command("add")
@click.argument("name")
@KIND_OPTION
@click.option("--item", "items", multiple=True, required=True, help="Criterion text (repeatable).")
def add_checklist(name: str, kind: str, items: tuple[str, ...]) -> None:
    """Create a checklist from one or more --item options."""
    service = get_service()

    try:
        item = service.create_checklist(kind, name, list(items))
    except JournalError as e:
        error_panel(str(e))
        raise SystemExit(1)

    console.print(
        f"[green]✓ Created {item.kind} checklist '{item.name}' "
        f"with {len(item.items)} items[/green]"
    )


@checklist.command("edit")
@click.argument("checklist_ref")
@KIND_OPTION
@click.option("--name", type=str, default=None, help="New name.")
@click.option("--item", "items", multiple=True, help="Replace items (repeatable).")
def edit_checklist(
    checklist_ref: str, kind: str, name: Optional[str], items: tuple[str, ...]
) -> None:
    """Rename a checklist or replace its items.

    Items whose text stays the same keep their identity.
    """
    service = get_service()

    try:
        item = service.find_checklist(kind, checklist_ref)
        item = service.update_checklist(
            item.id, name=name, item_texts=list(items) if items else None
        )
    except JournalError as e:
        error_panel(str(e))
        raise SystemExit(1)

    console.print(f"[green]✓ Updated checklist '{item.name}'[/green]")


@checklist.command("delete")
@click.argument("checklist_ref")
@KIND_OPTION
def delete_checklist(checklist_ref: str, kind: str) -> None:
    """Delete a checklist. Recorded results stay on their trades."""
    service = get_service()

    try:
        item = service.find_checklist(kind, checklist_ref)
        service.delete_checklist(item.id)
    except JournalError as e:
        error_panel(str(e))
        raise SystemExit(1)

    console.print(f"[green]✓ Deleted checklist '{item.name}'[/green]")
