"""Cumulative (equity curve) and daily P&L series."""

from datetime import date, datetime, timedelta, timezone, tzinfo
from itertools import accumulate
from typing import Iterable, Optional, Union

from tradejournal.analytics.buckets import BucketKey, bucket_by, resolve_timezone, to_local
from tradejournal.analytics.statistics import realized_trades
from tradejournal.models import DailyPnL, EquityPoint, Trade


def _exit_order(trade: Trade) -> tuple:
    # Trades without an exit date go last; sorted() is stable so ties
    # keep their input order
    if trade.exit_date is None:
        return (1, datetime.min.replace(tzinfo=timezone.utc))
    return (0, to_local(trade.exit_date, timezone.utc))


def build_cumulative_series(trades: Iterable[Trade]) -> list[EquityPoint]:
    """Running total of net P&L in exit-date order.

    Args:
        trades: Trades in any order; open and unvalued ones are ignored.

    Returns:
        One point per closed trade carrying its exit date, the running
        total including that trade, and the trade's own net P&L.
    """
    ordered = sorted(realized_trades(trades), key=_exit_order)
    running = accumulate(t.net_pnl for t in ordered)
    return [
        EquityPoint(date=trade.exit_date, cumulative_pnl=total, trade_pnl=trade.net_pnl)
        for trade, total in zip(ordered, running)
    ]


def daily_pnl_series(
    trades: Iterable[Trade],
    days: int = 14,
    today: Optional[date] = None,
    tz: Union[str, tzinfo, None] = None,
) -> list[DailyPnL]:
    """Net P&L per day for the last ``days`` days, oldest first.

    Every day in the window is present, with 0 P&L if nothing closed.
    """
    zone = resolve_timezone(tz)
    if today is None:
        today = datetime.now(zone).date()
    buckets = bucket_by(trades, BucketKey.DAY, zone)

    series = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        bucket = buckets.get(day.isoformat())
        if bucket is None:
            series.append(DailyPnL(date=day))
        else:
            series.append(DailyPnL(date=day, pnl=bucket.total_pnl, trades=bucket.trades))
    return series


def cumulative_daily_series(
    trades: Iterable[Trade], tz: Union[str, tzinfo, None] = None
) -> list[DailyPnL]:
    """Running total of net P&L, one point per trading day."""
    buckets = bucket_by(trades, BucketKey.DAY, tz)
    totals = accumulate(b.total_pnl for b in buckets.values())
    return [
        DailyPnL(date=date.fromisoformat(day), pnl=total, trades=bucket.trades)
        for (day, bucket), total in zip(buckets.items(), totals)
    ]
