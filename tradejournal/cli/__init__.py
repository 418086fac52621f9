"""CLI commands for TradeJournal.

This package provides the command-line interface: trade entry,
portfolio management, tags and performance analytics.
"""

from tradejournal.cli.main import cli, main

__all__ = ["cli", "main"]
