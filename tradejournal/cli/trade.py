"""Trade commands for TradeJournal CLI.

Handles journaling, closing, editing, deleting and listing trades.
"""

from datetime import datetime, timezone
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
    parse_datetime,
)
from tradejournal.models import Trade, TradeInput, TradeSide, TradeStatus, TradeUpdate

SIDE_CHOICE = click.Choice([s.value for s in TradeSide], case_sensitive=False)
STATUS_CHOICE = click.Choice([s.value for s in TradeStatus], case_sensitive=False)


def _trade_panel(trade: Trade) -> Panel:
    side_color = "green" if trade.side is TradeSide.LONG else "red"
    lines = [
        f"[bold]{trade.symbol}[/bold] [{side_color}]{trade.side.value}[/{side_color}] "
        f"[dim]({trade.status.value})[/dim]\n",
        f"Entry:      {trade.entry_price:g} x {trade.quantity:g}  "
        f"[dim]{trade.entry_date:%Y-%m-%d %H:%M}[/dim]",
    ]
    if trade.exit_price is not None or trade.exit_date is not None:
        exit_price = f"{trade.exit_price:g}" if trade.exit_price is not None else "-"
        exit_date = f"{trade.exit_date:%Y-%m-%d %H:%M}" if trade.exit_date else ""
        lines.append(f"Exit:       {exit_price}  [dim]{exit_date}[/dim]")
    if trade.stop_loss is not None or trade.take_profit is not None:
        lines.append(f"SL / TP:    {trade.stop_loss or '-'} / {trade.take_profit or '-'}")
    if trade.risk_reward_ratio is not None:
        lines.append(f"R:R:        {format_ratio(trade.risk_reward_ratio)}")
    lines.append(f"Costs:      commission {trade.commission:.2f}, swap {trade.swap:.2f}")
    lines.append(f"Gross P&L:  {format_money(trade.gross_pnl)}")
    lines.append(f"Net P&L:    {format_money(trade.net_pnl)}")
    if trade.pnl_percentage is not None:
        lines.append(f"Return:     {trade.pnl_percentage:+.2f}%")
    if trade.duration_hours is not None:
        lines.append(f"Held:       {trade.duration_hours:.1f}h")
    if trade.portfolio_id is not None:
        lines.append(f"Portfolio:  #{trade.portfolio_id}")
    if trade.tags:
        lines.append(f"Tags:       {', '.join(trade.tags)}")
    for label, text in (
        ("Strategy", trade.strategy),
        ("Notes", trade.notes),
        ("Exit reason", trade.exit_reason),
        ("Mistakes", trade.mistakes),
        ("Lessons", trade.lessons_learned),
    ):
        if text:
            lines.append(f"{label + ':':<12}{text}")

    return Panel(
        "\n".join(lines),
        title=f"[bold cyan]Trade #{trade.id}[/bold cyan]",
        border_style="cyan",
    )


@click.command()
@click.argument("symbol")
@click.argument("side", type=SIDE_CHOICE)
@click.argument("entry_price", type=float)
@click.argument("quantity", type=float)
@click.option("--date", "entry_date", default=None, help="Entry date/time (ISO). Defaults to now.")
@click.option("--exit", "exit_price", type=float, default=None, help="Exit price.")
@click.option("--exit-date", default=None, help="Exit date/time (ISO). Defaults to now with --exit.")
@click.option("--sl", "stop_loss", type=float, default=None, help="Stop loss.")
@click.option("--tp", "take_profit", type=float, default=None, help="Take profit.")
@click.option("--commission", type=float, default=0.0, help="Commission paid.")
@click.option("--swap", type=float, default=0.0, help="Swap (negative for a credit).")
@click.option("--net-pnl", type=float, default=None, help="Broker-reported net P&L.")
@click.option("--gross-pnl", type=float, default=None, help="Broker-reported gross P&L.")
@click.option("--status", type=STATUS_CHOICE, default=None, help="Override the status.")
@click.option("--portfolio", "portfolio_id", type=int, default=None, help="Portfolio ID.")
@click.option("--strategy", default=None, help="Strategy or setup name.")
@click.option("--timeframe", default=None, help="Chart timeframe.")
@click.option("--notes", default=None, help="Why you took the trade.")
@click.option("--tag", "tags", multiple=True, help="Tag name (repeatable).")
@click.pass_context
@handle_errors
def add(
    ctx: click.Context,
    symbol: str,
    side: str,
    entry_price: float,
    quantity: float,
    entry_date: Optional[str],
    exit_price: Optional[float],
    exit_date: Optional[str],
    stop_loss: Optional[float],
    take_profit: Optional[float],
    commission: float,
    swap: float,
    net_pnl: Optional[float],
    gross_pnl: Optional[float],
    status: Optional[str],
    portfolio_id: Optional[int],
    strategy: Optional[str],
    timeframe: Optional[str],
    notes: Optional[str],
    tags: tuple[str, ...],
) -> None:
    """Journal a trade.

    A trade with an exit price (or a broker net P&L) is recorded as
    CLOSED and valued immediately; otherwise it stays OPEN.

    \b
    Examples:
      tradejournal add BTCUSD LONG 45000 0.1 --exit 46500 --commission 10
      tradejournal add XAUUSD SHORT 2350 1 --net-pnl -42.5 --tag news
    """
    now = datetime.now(timezone.utc)
    closed = exit_price is not None or net_pnl is not None
    if status is None:
        status = TradeStatus.CLOSED.value if closed else TradeStatus.OPEN.value

    data = TradeInput(
        symbol=symbol.upper(),
        side=side.upper(),
        status=status.upper(),
        entry_price=entry_price,
        entry_date=parse_datetime(entry_date) or now,
        quantity=quantity,
        exit_price=exit_price,
        exit_date=parse_datetime(exit_date) or (now if closed else None),
        stop_loss=stop_loss,
        take_profit=take_profit,
        commission=commission,
        swap=swap,
        net_pnl=net_pnl,
        gross_pnl=gross_pnl,
        portfolio_id=portfolio_id,
        strategy=strategy,
        timeframe=timeframe,
        notes=notes,
        tags=list(tags),
    )

    trade = get_store(ctx).create_trade(get_config(ctx).user, data)
    console.print(_trade_panel(trade))


@click.command()
@click.argument("trade_id", type=int)
@click.option("--price", "exit_price", type=float, required=True, help="Exit price.")
@click.option("--date", "exit_date", default=None, help="Exit date/time (ISO). Defaults to now.")
@click.option("--commission", type=float, default=None, help="Total commission.")
@click.option("--swap", type=float, default=None, help="Total swap.")
@click.option("--reason", "exit_reason", default=None, help="Why you exited.")
@click.pass_context
@handle_errors
def close(
    ctx: click.Context,
    trade_id: int,
    exit_price: float,
    exit_date: Optional[str],
    commission: Optional[float],
    swap: Optional[float],
    exit_reason: Optional[str],
) -> None:
    """Close an open trade at an exit price.

    \b
    Examples:
      tradejournal close 12 --price 1.0912
      tradejournal close 12 --price 1.0912 --date 2024-05-02T15:30 --commission 7
    """
    update = TradeUpdate(
        status=TradeStatus.CLOSED,
        exit_price=exit_price,
        exit_date=parse_datetime(exit_date) or datetime.now(timezone.utc),
        commission=commission,
        swap=swap,
        exit_reason=exit_reason,
    )
    trade = get_store(ctx).update_trade(get_config(ctx).user, trade_id, update)
    console.print(_trade_panel(trade))


@click.command()
@click.argument("trade_id", type=int)
@click.option("--symbol", default=None)
@click.option("--side", type=SIDE_CHOICE, default=None)
@click.option("--status", type=STATUS_CHOICE, default=None)
@click.option("--entry", "entry_price", type=float, default=None, help="Entry price.")
@click.option("--date", "entry_date", default=None, help="Entry date/time (ISO).")
@click.option("--quantity", type=float, default=None)
@click.option("--exit", "exit_price", type=float, default=None, help="Exit price.")
@click.option("--exit-date", default=None, help="Exit date/time (ISO).")
@click.option("--sl", "stop_loss", type=float, default=None)
@click.option("--tp", "take_profit", type=float, default=None)
@click.option("--commission", type=float, default=None)
@click.option("--swap", type=float, default=None)
@click.option("--net-pnl", type=float, default=None, help="Override net P&L.")
@click.option("--gross-pnl", type=float, default=None, help="Override gross P&L.")
@click.option("--portfolio", "portfolio_id", type=int, default=None)
@click.option("--strategy", default=None)
@click.option("--notes", default=None)
@click.option("--mistakes", default=None)
@click.option("--lessons", "lessons_learned", default=None)
@click.option("--tag", "tags", multiple=True, help="Replace tags (repeatable).")
@click.pass_context
@handle_errors
def edit(ctx: click.Context, trade_id: int, tags: tuple[str, ...], **fields) -> None:
    """Edit a trade. P&L is recomputed when prices, size, side or costs change.

    \b
    Examples:
      tradejournal edit 12 --quantity 2
      tradejournal edit 12 --mistakes "Moved stop" --tag revenge
    """
    for key in ("entry_date", "exit_date"):
        fields[key] = parse_datetime(fields[key])
    for key in ("side", "status"):
        if fields[key] is not None:
            fields[key] = fields[key].upper()
    if tags:
        fields["tags"] = list(tags)

    update = TradeUpdate(**{k: v for k, v in fields.items() if v is not None})
    trade = get_store(ctx).update_trade(get_config(ctx).user, trade_id, update)
    console.print(_trade_panel(trade))


@click.command()
@click.argument("trade_id", type=int)
@click.pass_context
@handle_errors
def show(ctx: click.Context, trade_id: int) -> None:
    """Show one trade in detail."""
    trade = get_store(ctx).get_trade(get_config(ctx).user, trade_id)
    console.print(_trade_panel(trade))


@click.command()
@click.argument("trade_id", type=int)
@click.option("--yes", is_flag=True, default=False, help="Do not ask for confirmation.")
@click.pass_context
@handle_errors
def delete(ctx: click.Context, trade_id: int, yes: bool) -> None:
    """Delete a trade permanently."""
    store = get_store(ctx)
    user = get_config(ctx).user
    trade = store.get_trade(user, trade_id)

    if not yes:
        click.confirm(f"Delete trade #{trade.id} ({trade.symbol})?", abort=True)

    store.delete_trade(user, trade_id)
    console.print(f"[green]Trade #{trade_id} deleted[/green]")


@click.command()
@click.option("--symbol", default=None, help="Symbol contains.")
@click.option("--side", type=SIDE_CHOICE, default=None)
@click.option("--status", type=STATUS_CHOICE, default=None)
@click.option("--portfolio", "portfolio_id", type=int, default=None, help="Portfolio ID.")
@click.option("--unassigned", is_flag=True, default=False, help="Only trades without a portfolio.")
@click.option("--strategy", default=None, help="Strategy contains.")
@click.option("--from", "from_date", default=None, help="Earliest entry date (ISO).")
@click.option("--to", "to_date", default=None, help="Latest entry date (ISO).")
@click.option(
    "--winning/--losing",
    "winning",
    default=None,
    help="Only winning or only losing trades.",
)
@click.option("--sort", "sort_by", default="entry_date", help="entry_date, exit_date, net_pnl, ...")
@click.option("--asc", is_flag=True, default=False, help="Oldest first.")
@click.option("--limit", type=int, default=50, help="Maximum rows (default: 50).")
@click.option("--page", type=int, default=1, help="Page number.")
@click.pass_context
@handle_errors
def trades(
    ctx: click.Context,
    symbol: Optional[str],
    side: Optional[str],
    status: Optional[str],
    portfolio_id: Optional[int],
    unassigned: bool,
    strategy: Optional[str],
    from_date: Optional[str],
    to_date: Optional[str],
    winning: Optional[bool],
    sort_by: str,
    asc: bool,
    limit: int,
    page: int,
) -> None:
    """List trades with optional filters.

    \b
    Examples:
      tradejournal trades                       # Latest 50 trades
      tradejournal trades --symbol EUR --losing
      tradejournal trades --portfolio 2 --from 2024-01-01
    """
    profitability = None if winning is None else ("winning" if winning else "losing")
    results = get_store(ctx).get_trades(
        get_config(ctx).user,
        symbol=symbol,
        side=side.upper() if side else None,
        status=status.upper() if status else None,
        portfolio_id=portfolio_id,
        unassigned=unassigned,
        strategy=strategy,
        from_date=parse_datetime(from_date),
        to_date=parse_datetime(to_date),
        profitability=profitability,
        sort_by=sort_by,
        sort_order="asc" if asc else "desc",
        limit=limit,
        offset=(max(page, 1) - 1) * limit,
    )

    if not results:
        console.print(Panel(
            "[dim]No trades found[/dim]",
            title="[bold]Trades[/bold]",
            border_style="dim",
        ))
        return

    table = Table(title="Trades", show_header=True, header_style="bold cyan")
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Opened", style="dim")
    table.add_column("Symbol", style="bold")
    table.add_column("Side", justify="center")
    table.add_column("Qty", justify="right")
    table.add_column("Entry", justify="right")
    table.add_column("Exit", justify="right")
    table.add_column("Net P&L", justify="right")
    table.add_column("Status", justify="center", style="dim")
    table.add_column("Portfolio", justify="right", style="dim")

    total_pnl = 0.0
    for trade in results:
        side_color = "green" if trade.side is TradeSide.LONG else "red"
        if trade.net_pnl is not None:
            total_pnl += trade.net_pnl
        table.add_row(
            str(trade.id),
            trade.entry_date.strftime("%Y-%m-%d %H:%M"),
            trade.symbol,
            f"[{side_color}]{trade.side.value}[/{side_color}]",
            f"{trade.quantity:g}",
            f"{trade.entry_price:g}",
            f"{trade.exit_price:g}" if trade.exit_price is not None else "-",
            format_money(trade.net_pnl),
            trade.status.value,
            f"#{trade.portfolio_id}" if trade.portfolio_id is not None else "-",
        )

    console.print(table)
    console.print(f"\n[bold]Shown:[/bold] {len(results)}  [bold]Net P&L:[/bold] {format_money(total_pnl)}")
