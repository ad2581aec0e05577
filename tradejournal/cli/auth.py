"""Profile commands for TradeJournal CLI.

Handles login/logout of the local user profile that owns
accounts and journal entries.
"""

from typing import Optional

import click
from rich.panel import Panel

from tradejournal.cli.common import console


@click.command()
@click.option(
    "--user-id",
    type=str,
    default=None,
    help="Profile id to log in as. Defaults to the one in config.toml.",
)
def login(user_id: Optional[str]) -> None:
    """Log in with a local user profile.

    Creates ~/.config/tradejournal/config.toml on first use and
    stores the profile id in it.

    \b
    Examples:
      tradejournal login --user-id alice
    """
    import toml
    from tradejournal.config import create_template_config, get_config_path, write_config

    config_path = get_config_path()

    if not config_path.exists():
        if not user_id:
            config_path = create_template_config()
            console.print(Panel(
                f"[yellow]Configuration file created at:[/yellow]\n"
                f"[cyan]{config_path}[/cyan]\n\n"
                f"Run [green]tradejournal login --user-id <id>[/green] to choose a profile.",
                title="[bold]Configuration Required[/bold]",
                border_style="yellow",
            ))
            raise SystemExit(1)
        config_path = create_template_config(user_id)
    else:
        try:
            data = toml.load(config_path)
        except toml.TomlDecodeError as e:
            console.print(Panel(
                f"[red]Invalid config file:[/red]\n\n{e}",
                title="[bold red]Configuration Error[/bold red]",
                border_style="red",
            ))
            raise SystemExit(1)

        if user_id:
            data.setdefault("user", {})["id"] = user_id
            write_config(data, config_path)
        else:
            user_id = data.get("user", {}).get("id")
            if not user_id:
                console.print(Panel(
                    "[red]No profile id configured.[/red]\n\n"
                    "Run [cyan]tradejournal login --user-id <id>[/cyan].",
                    title="[bold red]Login Failed[/bold red]",
                    border_style="red",
                ))
                raise SystemExit(1)

    console.print(Panel(
        f"[green]✓[/green] Logged in as [cyan]{user_id}[/cyan]\n\n"
        f"[dim]Config: {config_path}[/dim]",
        title="[bold green]Login Successful[/bold green]",
        border_style="green",
    ))


@click.command()
def logout() -> None:
    """Log out of the current profile.

    Clears the profile id from the config file. Accounts and
    entries stay in the database.
    """
    import toml
    from tradejournal.config import get_config_path, write_config

    config_path = get_config_path()

    if not config_path.exists():
        console.print("[yellow]No configuration found. Nothing to logout from.[/yellow]")
        return

    data = toml.load(config_path)
    data.setdefault("user", {})["id"] = ""
    write_config(data, config_path)

    console.print(Panel(
        "[green]✓[/green] Profile cleared\n\n"
        "[dim]Your accounts and journal entries remain intact.[/dim]",
        title="[bold green]Logout Successful[/bold green]",
        border_style="green",
    ))
