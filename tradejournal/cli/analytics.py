"""Analytics commands for TradeJournal CLI.

Performance statistics, equity curve and time-bucketed breakdowns.
All commands accept --portfolio to scope to one portfolio.
"""

from typing import Optional

import click
from rich.panel import Panel
from rich.table import Table

from tradejournal.analytics import BucketKey
from tradejournal.cli.common import (
    console,
    format_money,
    format_ratio,
    get_config,
    get_store,
    handle_errors,
)
from tradejournal.services import (
    get_bucketed_performance,
    get_daily_pnl,
    get_distribution,
    get_durations,
    get_overview,
    get_performance_chart,
)

portfolio_option = click.option(
    "--portfolio", "portfolio_id", type=int, default=None, help="Limit to one portfolio."
)


def _no_data(title: str) -> None:
    console.print(Panel(
        "[dim]No closed trades yet[/dim]",
        title=f"[bold]{title}[/bold]",
        border_style="dim",
    ))


def _bar(value: float, scale: float, width: int = 20) -> str:
    if scale <= 0:
        return ""
    length = round(abs(value) / scale * width)
    color = "green" if value >= 0 else "red"
    return f"[{color}]{'█' * length}[/{color}]"


@click.command()
@portfolio_option
@click.pass_context
@handle_errors
def stats(ctx: click.Context, portfolio_id: Optional[int]) -> None:
    """Win rate, profit factor and trade statistics.

    \b
    Examples:
      tradejournal stats
      tradejournal stats --portfolio 2
    """
    s = get_overview(get_store(ctx), get_config(ctx).user, portfolio_id)
    if s["total_trades"] == 0:
        _no_data("Statistics")
        return

    pf = s["profit_factor"]
    pf_text = format_ratio(float("inf")) if pf == "Infinity" else format_ratio(pf)
    breakeven = s["total_trades"] - s["winning_trades"] - s["losing_trades"]

    text = (
        f"Total P&L:      [bold]{format_money(s['total_profit_loss'])}[/bold]\n"
        f"{'─' * 30}\n"
        f"Trades:         {s['total_trades']} "
        f"([green]{s['winning_trades']}W[/green] / [red]{s['losing_trades']}L[/red]"
        + (f" / {breakeven}BE" if breakeven else "")
        + ")\n"
        f"Win Rate:       {s['win_rate']:.1f}%\n"
        f"Profit Factor:  {pf_text}\n"
        f"Average Win:    {format_money(s['average_win'])}\n"
        f"Average Loss:   {format_money(-s['average_loss'])}\n"
        f"Largest Win:    {format_money(s['largest_win'])}\n"
        f"Largest Loss:   {format_money(s['largest_loss'])}"
    )
    console.print(Panel(text, title="[bold cyan]Statistics[/bold cyan]", border_style="cyan"))


@click.command()
@portfolio_option
@click.option("--last", type=int, default=None, help="Only show the last N points.")
@click.pass_context
@handle_errors
def equity(ctx: click.Context, portfolio_id: Optional[int], last: Optional[int]) -> None:
    """Cumulative P&L (equity curve), one row per closed trade."""
    points = get_performance_chart(get_store(ctx), get_config(ctx).user, portfolio_id)
    if not points:
        _no_data("Equity Curve")
        return
    if last:
        points = points[-last:]

    scale = max(abs(p["cumulative_pnl"]) for p in points)
    table = Table(title="Equity Curve", show_header=True, header_style="bold cyan")
    table.add_column("Closed", style="dim")
    table.add_column("Trade P&L", justify="right")
    table.add_column("Cumulative", justify="right")
    table.add_column("")
    for p in points:
        table.add_row(
            (p["date"] or "-")[:16].replace("T", " "),
            format_money(p["trade_pnl"]),
            format_money(p["cumulative_pnl"]),
            _bar(p["cumulative_pnl"], scale),
        )
    console.print(table)


def _bucket_table(title: str, label: str, rows: list[dict], label_key: str) -> Table:
    scale = max((abs(r["total_pnl"]) for r in rows), default=0.0)
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column(label, style="bold")
    table.add_column("Trades", justify="right")
    table.add_column("W/L", justify="right", style="dim")
    table.add_column("Total P&L", justify="right")
    table.add_column("Avg P&L", justify="right")
    table.add_column("")
    for r in rows:
        table.add_row(
            str(r[label_key]),
            str(r["trades"]),
            f"{r['wins']}/{r['losses']}",
            format_money(r["total_pnl"]) if r["trades"] else "[dim]-[/dim]",
            format_money(r["avg_pnl"]) if r["trades"] else "[dim]-[/dim]",
            _bar(r["total_pnl"], scale),
        )
    return table


@click.command()
@portfolio_option
@click.pass_context
@handle_errors
def monthly(ctx: click.Context, portfolio_id: Optional[int]) -> None:
    """Net P&L per month (by exit date)."""
    config = get_config(ctx)
    rows = get_bucketed_performance(
        get_store(ctx), config.user, BucketKey.MONTH, config.timezone, portfolio_id
    )
    if not rows:
        _no_data("Monthly Performance")
        return
    console.print(_bucket_table("Monthly Performance", "Month", rows, "period"))


@click.command()
@portfolio_option
@click.option("--days", type=int, default=14, help="Number of days (default: 14).")
@click.pass_context
@handle_errors
def daily(ctx: click.Context, portfolio_id: Optional[int], days: int) -> None:
    """Net P&L per day for the last N days."""
    config = get_config(ctx)
    series = get_daily_pnl(
        get_store(ctx), config.user, days=days, timezone=config.timezone, portfolio_id=portfolio_id
    )

    scale = max((abs(d["pnl"]) for d in series), default=0.0)
    table = Table(title=f"Daily P&L - last {days} days", show_header=True, header_style="bold cyan")
    table.add_column("Date", style="bold")
    table.add_column("Trades", justify="right")
    table.add_column("P&L", justify="right")
    table.add_column("")
    for d in series:
        table.add_row(
            d["date"],
            str(d["trades"]),
            format_money(d["pnl"]) if d["trades"] else "[dim]-[/dim]",
            _bar(d["pnl"], scale),
        )
    console.print(table)

    total = sum(d["pnl"] for d in series)
    console.print(f"\n[bold]Period P&L:[/bold] {format_money(total)}")


@click.command()
@portfolio_option
@click.pass_context
@handle_errors
def hours(ctx: click.Context, portfolio_id: Optional[int]) -> None:
    """P&L by hour of day the trade was opened."""
    config = get_config(ctx)
    rows = get_bucketed_performance(
        get_store(ctx), config.user, BucketKey.HOUR_OF_DAY, config.timezone, portfolio_id
    )
    for r in rows:
        r["label"] = f"{r['hour']:02d}:00"
    console.print(_bucket_table(f"Time of Day ({config.timezone})", "Hour", rows, "label"))

    traded = [r for r in rows if r["trades"]]
    if traded:
        best = max(traded, key=lambda r: r["total_pnl"])
        worst = min(traded, key=lambda r: r["total_pnl"])
        console.print(f"\n[bold]Best:[/bold] {best['label']}  [bold]Worst:[/bold] {worst['label']}")


@click.command()
@portfolio_option
@click.pass_context
@handle_errors
def weekdays(ctx: click.Context, portfolio_id: Optional[int]) -> None:
    """P&L by day of week the trade was opened."""
    config = get_config(ctx)
    rows = get_bucketed_performance(
        get_store(ctx), config.user, BucketKey.DAY_OF_WEEK, config.timezone, portfolio_id
    )
    if not rows:
        _no_data("Day of Week")
        return
    console.print(_bucket_table("Day of Week", "Day", rows, "day"))


@click.command()
@portfolio_option
@click.option("--bin", "bin_size", type=float, default=100.0, help="Range width (default: 100).")
@click.pass_context
@handle_errors
def distribution(ctx: click.Context, portfolio_id: Optional[int], bin_size: float) -> None:
    """Number of trades per net-P&L range."""
    bins = get_distribution(get_store(ctx), get_config(ctx).user, bin_size, portfolio_id)
    if not bins:
        _no_data("Win/Loss Distribution")
        return

    top = max(b["count"] for b in bins)
    table = Table(title="Win/Loss Distribution", show_header=True, header_style="bold cyan")
    table.add_column("Range", justify="right", style="bold")
    table.add_column("Trades", justify="right")
    table.add_column("%", justify="right", style="dim")
    table.add_column("")
    for b in bins:
        color = "green" if b["lower"] >= 0 else "red"
        length = round(b["count"] / top * 20)
        table.add_row(
            b["range"],
            str(b["count"]),
            f"{b['percentage']:.1f}",
            f"[{color}]{'█' * length}[/{color}]",
        )
    console.print(table)


@click.command()
@portfolio_option
@click.pass_context
@handle_errors
def durations(ctx: click.Context, portfolio_id: Optional[int]) -> None:
    """Holding time of winners versus losers."""
    points = get_durations(get_store(ctx), get_config(ctx).user, portfolio_id)
    if not points:
        _no_data("Trade Duration")
        return

    def _avg(values: list[float]) -> str:
        return f"{sum(values) / len(values):.1f}h" if values else "-"

    winners = [p["duration_hours"] for p in points if p["pnl"] > 0]
    losers = [p["duration_hours"] for p in points if p["pnl"] < 0]
    text = (
        f"Trades:          {len(points)}\n"
        f"Average hold:    {_avg([p['duration_hours'] for p in points])}\n"
        f"Winners hold:    [green]{_avg(winners)}[/green]\n"
        f"Losers hold:     [red]{_avg(losers)}[/red]\n"
        f"Longest hold:    {max(p['duration_hours'] for p in points):.1f}h"
    )
    console.print(Panel(text, title="[bold cyan]Trade Duration[/bold cyan]", border_style="cyan"))
