"""Portfolio commands for TradeJournal CLI.

Handles portfolio creation, balances, statistics and bulk trade moves.
"""

from typing import Optional

import click
from rich.panel import Panel
from rich.table import Table

from tradejournal.cli.common import (
    console,
    format_money,
    format_ratio,
    get_config,
    get_store,
    handle_errors,
)
from tradejournal.models import AccountType
from tradejournal.services import (
    assign_unassigned_trades,
    delete_portfolio,
    get_portfolio_stats,
    get_unassigned_count,
    move_trades,
)

ACCOUNT_CHOICE = click.Choice([a.value for a in AccountType], case_sensitive=False)


@click.group()
def portfolio() -> None:
    """Manage portfolios (trading accounts)."""


@portfolio.command("create")
@click.argument("name")
@click.argument("initial_balance", type=float)
@click.option("--description", default=None)
@click.option("--currency", default=None, help="Currency label (default from config).")
@click.option("--type", "account_type", type=ACCOUNT_CHOICE, default="DEMO", help="REAL or DEMO.")
@click.pass_context
@handle_errors
def create(
    ctx: click.Context,
    name: str,
    initial_balance: float,
    description: Optional[str],
    currency: Optional[str],
    account_type: str,
) -> None:
    """Create a portfolio.

    \b
    Examples:
      tradejournal portfolio create "FTMO 100k" 100000 --type REAL
    """
    config = get_config(ctx)
    created = get_store(ctx).create_portfolio(
        config.user,
        name=name,
        initial_balance=initial_balance,
        description=description,
        currency=currency or config.currency,
        account_type=account_type.upper(),
    )
    console.print(
        f"[green]Created portfolio #{created.id}[/green] {created.name} "
        f"({created.currency} {created.initial_balance:,.2f}, {created.account_type.value})"
    )


@portfolio.command("list")
@click.option("--type", "account_type", type=ACCOUNT_CHOICE, default=None, help="REAL or DEMO.")
@click.pass_context
@handle_errors
def list_portfolios(ctx: click.Context, account_type: Optional[str]) -> None:
    """List portfolios with their current balances."""
    store = get_store(ctx)
    user = get_config(ctx).user
    portfolios = store.get_portfolios(user, account_type.upper() if account_type else None)

    if not portfolios:
        console.print(Panel(
            "[dim]No portfolios yet[/dim]\n\n"
            "[dim]Run 'tradejournal portfolio create NAME BALANCE' to add one[/dim]",
            title="[bold]Portfolios[/bold]",
            border_style="dim",
        ))
        return

    table = Table(title="Portfolios", show_header=True, header_style="bold cyan")
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Type", justify="center")
    table.add_column("Currency", justify="center")
    table.add_column("Initial", justify="right")
    table.add_column("Current", justify="right")
    table.add_column("P&L", justify="right")
    table.add_column("Trades", justify="right")

    for p in portfolios:
        type_color = "green" if p.account_type is AccountType.REAL else "yellow"
        table.add_row(
            str(p.id),
            p.name,
            f"[{type_color}]{p.account_type.value}[/{type_color}]",
            p.currency,
            f"{p.initial_balance:,.2f}",
            f"{p.current_balance:,.2f}",
            format_money(p.current_balance - p.initial_balance, currency=""),
            str(p.trade_count),
        )

    console.print(table)

    unassigned = store.count_unassigned_trades(user)
    if unassigned:
        console.print(
            f"\n[yellow]{unassigned} trade(s) not assigned to a portfolio.[/yellow] "
            "[dim]Use 'tradejournal portfolio assign ID'.[/dim]"
        )


@portfolio.command("show")
@click.argument("portfolio_id", type=int)
@click.pass_context
@handle_errors
def show(ctx: click.Context, portfolio_id: int) -> None:
    """Show portfolio statistics and reconciled balance."""
    data = get_portfolio_stats(get_store(ctx), get_config(ctx).user, portfolio_id)
    p = data["portfolio"]
    s = data["statistics"]
    cur = p["currency"]

    pf = s["profit_factor"]
    pf_text = format_ratio(float("inf")) if pf == "Infinity" else format_ratio(pf)

    text = (
        f"[bold]{p['name']}[/bold] [dim]({p['account_type']}, {cur})[/dim]\n"
        + (f"[dim]{p['description']}[/dim]\n" if p.get("description") else "")
        + "\n"
        f"Initial Balance: {p['initial_balance']:,.2f}\n"
        f"Current Balance: [bold]{data['current_balance']:,.2f}[/bold]\n"
        f"Net P&L:         {format_money(s['total_profit_loss'], currency='')}\n"
        f"Gross P&L:       {format_money(data['total_gross_pnl'], currency='')}\n"
        f"Commission:      {data['total_commission']:,.2f}\n"
        f"{'─' * 30}\n"
        f"Closed Trades:   {s['total_trades']} "
        f"({s['winning_trades']}W / {s['losing_trades']}L)\n"
        f"Win Rate:        {s['win_rate']:.1f}%\n"
        f"Profit Factor:   {pf_text}\n"
        f"Average P&L:     {format_money(data['average_pnl'], currency='')}"
    )

    console.print(Panel(
        text,
        title=f"[bold cyan]Portfolio #{p['id']}[/bold cyan]",
        border_style="cyan",
    ))


@portfolio.command("edit")
@click.argument("portfolio_id", type=int)
@click.option("--name", default=None)
@click.option("--description", default=None)
@click.option("--initial-balance", type=float, default=None)
@click.option("--currency", default=None)
@click.option("--type", "account_type", type=ACCOUNT_CHOICE, default=None)
@click.pass_context
@handle_errors
def edit(
    ctx: click.Context,
    portfolio_id: int,
    name: Optional[str],
    description: Optional[str],
    initial_balance: Optional[float],
    currency: Optional[str],
    account_type: Optional[str],
) -> None:
    """Edit portfolio attributes."""
    updated = get_store(ctx).update_portfolio(
        get_config(ctx).user,
        portfolio_id,
        name=name,
        description=description,
        initial_balance=initial_balance,
        currency=currency,
        account_type=account_type.upper() if account_type else None,
    )
    console.print(f"[green]Updated portfolio #{updated.id}[/green] {updated.name}")


@portfolio.command("delete")
@click.argument("portfolio_id", type=int)
@click.pass_context
@handle_errors
def delete(ctx: click.Context, portfolio_id: int) -> None:
    """Delete an empty portfolio."""
    result = delete_portfolio(get_store(ctx), get_config(ctx).user, portfolio_id)
    console.print(f"[green]{result['message']}[/green]")


@portfolio.command("move")
@click.argument("from_id", type=int)
@click.argument("to_id", type=int)
@click.pass_context
@handle_errors
def move(ctx: click.Context, from_id: int, to_id: int) -> None:
    """Move all trades from one portfolio to another.

    \b
    Examples:
      tradejournal portfolio move 1 2
    """
    result = move_trades(get_store(ctx), get_config(ctx).user, from_id, to_id)
    color = "green" if result["count"] else "dim"
    console.print(f"[{color}]{result['message']}[/{color}]")


@portfolio.command("assign")
@click.argument("portfolio_id", type=int)
@click.pass_context
@handle_errors
def assign(ctx: click.Context, portfolio_id: int) -> None:
    """Assign all unassigned trades to a portfolio."""
    result = assign_unassigned_trades(get_store(ctx), get_config(ctx).user, portfolio_id)
    color = "green" if result["count"] else "dim"
    console.print(f"[{color}]{result['message']}[/{color}]")


@portfolio.command("unassigned")
@click.pass_context
@handle_errors
def unassigned(ctx: click.Context) -> None:
    """Count trades not assigned to any portfolio."""
    result = get_unassigned_count(get_store(ctx), get_config(ctx).user)
    console.print(f"Unassigned trades: [bold]{result['count']}[/bold]")
