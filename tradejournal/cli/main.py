"""Main CLI entry point for TradeJournal.

This module provides the main click group and lazy loading
for command modules to keep startup fast.
"""

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

# Console for rich output
console = Console()


class LazyGroup(click.Group):
    """A click Group that lazily loads commands.

    Command modules are only imported when one of their
    commands is actually invoked.
    """

    def __init__(self, *args, lazy_subcommands: dict[str, str] | None = None, **kwargs):
        """Initialize the lazy group.

        Args:
            lazy_subcommands: Mapping of command names to module paths.
        """
        super().__init__(*args, **kwargs)
        self._lazy_subcommands = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        """List all available commands."""
        base = super().list_commands(ctx)
        lazy = list(self._lazy_subcommands.keys())
        return sorted(set(base + lazy))

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        """Get a command by name, lazily loading if needed."""
        if cmd_name in self.commands:
            return self.commands[cmd_name]

        if cmd_name in self._lazy_subcommands:
            return self._lazy_load(cmd_name)

        return None

    def _lazy_load(self, cmd_name: str) -> click.Command:
        """Lazily load a command from its module path."""
        import importlib

        module_path = self._lazy_subcommands[cmd_name]
        module = importlib.import_module(module_path)

        cmd = None
        for attr_name in dir(module):
            attr = getattr(module, attr_name)
            if isinstance(attr, click.Command) and attr.name == cmd_name:
                cmd = attr
                break

        if cmd is None:
            raise click.ClickException(f"Could not find command '{cmd_name}' in {module_path}")

        self.add_command(cmd)
        return cmd


LAZY_SUBCOMMANDS = {
    "login": "tradejournal.cli.auth",
    "logout": "tradejournal.cli.auth",
    "account": "tradejournal.cli.accounts",
    "limits": "tradejournal.cli.accounts",
    "subscription": "tradejournal.cli.subscription",
    "symbol": "tradejournal.cli.settings",
    "setup": "tradejournal.cli.settings",
    "checklist": "tradejournal.cli.settings",
    "trade": "tradejournal.cli.entries",
    "deposit": "tradejournal.cli.entries",
    "withdraw": "tradejournal.cli.entries",
    "entry": "tradejournal.cli.entries",
    "journal": "tradejournal.cli.journal",
    "stats": "tradejournal.cli.journal",
}


CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@click.group(cls=LazyGroup, lazy_subcommands=LAZY_SUBCOMMANDS, context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="tradejournal")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Show debug logging.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """TradeJournal - personal trading journal in your terminal.

    Keep trading accounts, record trades, deposits and withdrawals,
    tick off entry/exit checklists, and review running balance and
    performance statistics.

    \b
    Quick Start:
      tradejournal login --user-id me          # Create your profile
      tradejournal account add Main --balance 10000 --currency USD
      tradejournal trade Main --symbol EURUSD --direction buy
      tradejournal journal Main                # Entries with balances
      tradejournal stats Main                  # Performance summary
    """
    _configure_logging(verbose)
    ctx.ensure_object(dict)


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
