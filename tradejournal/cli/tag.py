"""Tag commands for TradeJournal CLI."""

import click
from rich.table import Table

from tradejournal.cli.common import console, get_config, get_store, handle_errors
from tradejournal.models import TagType

TAG_TYPE_CHOICE = click.Choice([t.value for t in TagType], case_sensitive=False)


@click.group()
def tag() -> None:
    """Manage trade tags."""


@tag.command("create")
@click.argument("name")
@click.option("--type", "tag_type", type=TAG_TYPE_CHOICE, default="OTHER")
@click.pass_context
@handle_errors
def create(ctx: click.Context, name: str, tag_type: str) -> None:
    """Create a tag (or change the type of an existing one)."""
    created = get_store(ctx).create_tag(get_config(ctx).user, name, tag_type.upper())
    console.print(f"[green]Tag[/green] {created.name} [dim]({created.type.value})[/dim]")


@tag.command("list")
@click.pass_context
@handle_errors
def list_tags(ctx: click.Context) -> None:
    """List tags."""
    tags = get_store(ctx).get_tags(get_config(ctx).user)
    if not tags:
        console.print("[dim]No tags yet[/dim]")
        return

    table = Table(title="Tags", show_header=True, header_style="bold cyan")
    table.add_column("Name", style="bold")
    table.add_column("Type")
    for t in tags:
        table.add_row(t.name, t.type.value)
    console.print(table)


@tag.command("delete")
@click.argument("name")
@click.pass_context
@handle_errors
def delete(ctx: click.Context, name: str) -> None:
    """Delete a tag and remove it from all trades."""
    get_store(ctx).delete_tag(get_config(ctx).user, name)
    console.print(f"[green]Tag {name} deleted[/green]")
