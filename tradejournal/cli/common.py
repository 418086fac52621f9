"""Shared helpers for TradeJournal CLI commands."""

import functools
from datetime import datetime
from typing import Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel

from tradejournal.config import JournalConfig, load_config
from tradejournal.db.store import JournalStore
from tradejournal.errors import JournalError

console = Console()


def get_config(ctx: click.Context) -> JournalConfig:
    """Configuration loaded by the root command, or from disk."""
    obj = ctx.find_object(dict)
    if obj is not None and obj.get("config") is not None:
        return obj["config"]
    return load_config()


def get_store(ctx: click.Context) -> JournalStore:
    """Get the data store for the configured database."""
    obj = ctx.find_object(dict)
    if obj is not None and obj.get("store") is not None:
        return obj["store"]
    store = JournalStore(get_config(ctx).db_path)
    if obj is not None:
        obj["store"] = store
    return store


def print_error(message: str, title: str = "Error") -> None:
    console.print(Panel(
        f"[red]{message}[/red]",
        title=f"[bold red]{title}[/bold red]",
        border_style="red",
    ))


def handle_errors(func):
    """Turn journal and validation failures into an error panel and exit 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except JournalError as e:
            print_error(str(e), title=type(e).__name__.replace("Error", " Error").strip())
            raise SystemExit(1)
        except ValidationError as e:
            messages = "\n".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            print_error(messages, title="Invalid Input")
            raise SystemExit(1)
        except ValueError as e:
            print_error(str(e), title="Invalid Input")
            raise SystemExit(1)

    return wrapper


def format_money(value: Optional[float], currency: str = "$", signed: bool = True) -> str:
    """Colour and sign a money amount for rich output."""
    if value is None:
        return "[dim]-[/dim]"
    color = "green" if value >= 0 else "red"
    sign = "+" if signed and value >= 0 else ""
    if value < 0:
        return f"[{color}]-{currency}{abs(value):,.2f}[/{color}]"
    return f"[{color}]{sign}{currency}{value:,.2f}[/{color}]"


def format_ratio(value: float) -> str:
    return "∞" if value == float("inf") else f"{value:.2f}"


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse a CLI date or datetime (ISO 8601)."""
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"Invalid date: {value}. Use YYYY-MM-DD or YYYY-MM-DDTHH:MM")
