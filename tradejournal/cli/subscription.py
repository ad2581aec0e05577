"""Subscription commands for TradeJournal CLI.

A subscription lifts the trial limits for as long as it is active.
"""

from datetime import datetime

import click
from rich.panel import Panel

from tradejournal.cli.common import console, error_panel, get_service
from tradejournal.errors import JournalError


@click.group()
def subscription() -> None:
    """Manage your journal subscription.

    \b
    Examples:
      tradejournal subscription status
      tradejournal subscription add --plan monthly --days 30
    """
    pass


@subscription.command("add")
@click.option("--plan", "plan_name", required=True, help="Plan name.")
@click.option("--days", type=click.IntRange(min=1), required=True, help="Length of the paid period.")
def add_subscription(plan_name: str, days: int) -> None:
    """Add a paid period.

    Renewing while a subscription is active extends it from its
    current end date.
    """
    service = get_service()

    try:
        sub = service.subscribe(plan_name, days)
    except JournalError as e:
        error_panel(str(e))
        raise SystemExit(1)

    console.print(
        f"[green]✓ Subscribed to '{sub.plan_name}' until "
        f"{sub.end_date.strftime('%Y-%m-%d')}[/green]"
    )


@subscription.command("status")
def status() -> None:
    """Show the active subscription."""
    service = get_service()

    try:
        sub = service.get_subscription()
    except JournalError as e:
        error_panel(str(e))
        raise SystemExit(1)

    if sub is None:
        console.print(Panel(
            "[dim]No active subscription[/dim]\n\n"
            "[dim]Run 'tradejournal subscription add' to lift the trial limits[/dim]",
            title="[bold]Subscription[/bold]",
            border_style="dim",
        ))
        return

    now = datetime.now()
    days = sub.days_remaining(now)
    expiring = sub.is_expiring_soon(now)
    days_color = "yellow" if expiring else "green"

    content = (
        f"[bold]Plan:[/bold] {sub.plan_name}\n"
        f"[bold]Ends:[/bold] {sub.end_date.strftime('%Y-%m-%d %H:%M')}\n"
        f"[bold]Days remaining:[/bold] [{days_color}]{days}[/{days_color}]"
    )
    if expiring:
        content += "\n\n[yellow]Your subscription ends soon. Renew to keep unlimited access.[/yellow]"

    console.print(Panel(
        content,
        title="[bold cyan]Subscription[/bold cyan]",
        border_style="cyan",
    ))
