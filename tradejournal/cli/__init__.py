"""CLI commands for TradeJournal.

This package provides the command-line interface for TradeJournal,
including profile setup, account and entry management, and reports.
"""

from tradejournal.cli.main import cli, main

__all__ = ["cli", "main"]
