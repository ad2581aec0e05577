"""Helpers shared by the TradeJournal CLI commands."""

from datetime import datetime
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel

console = Console()


def error_panel(message: str, title: str = "Error") -> None:
    console.print(Panel(
        f"[red]{message}[/red]",
        title=f"[bold red]{title}[/bold red]",
        border_style="red",
    ))


def get_config():
    """Load the configuration or exit with a hint to run login."""
    from tradejournal.config import load_config

    try:
        config = load_config()
    except ValueError as e:
        error_panel(str(e), title="Configuration Error")
        raise SystemExit(1)

    if config is None:
        console.print(Panel(
            "[red]Configuration not found.[/red]\n\n"
            "Run [cyan]tradejournal login --user-id <id>[/cyan] to create a config file.",
            title="[bold red]Error[/bold red]",
            border_style="red",
        ))
        raise SystemExit(1)

    return config


def get_service():
    """Build the journal service for the configured user."""
    from tradejournal.db.store import JournalStore
    from tradejournal.journal.service import JournalService

    config = get_config()
    store = JournalStore(config.db_path)
    return JournalService(
        store,
        user_id=config.user_id,
        policy=config.outcome_policy,
        locale=config.locale,
    )


def parse_when(value: Optional[str]) -> tuple[datetime, bool]:
    """Parse a date or date-time option.

    Returns:
        The timestamp and whether a time of day was given. A missing
        value means now, with the time shown.
    """
    if value is None:
        return datetime.now().replace(second=0, microsecond=0), True
    try:
        moment = datetime.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"Invalid date: {value}. Use YYYY-MM-DD or 'YYYY-MM-DD HH:MM'")
    has_time = len(value.strip()) > 10
    return moment, has_time


def short_id(record_id: str) -> str:
    return record_id[:8]
