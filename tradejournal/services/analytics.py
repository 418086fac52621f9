"""Analytics queries over the journal.

Each function fetches the user's trades from the store, hands them to
the analytics core and returns JSON-ready dictionaries for display.
"""

import logging
from datetime import date
from typing import Optional

from tradejournal.analytics import (
    DAY_NAMES,
    BucketKey,
    bucket_by,
    build_cumulative_series,
    daily_pnl_series,
    duration_points,
    pnl_distribution,
    portfolio_statistics,
    summarize,
)
from tradejournal.db.store import JournalStore
from tradejournal.models import Trade, TradeStatus

logger = logging.getLogger(__name__)


def _closed_trades(
    store: JournalStore, user_id: str, portfolio_id: Optional[int] = None
) -> list[Trade]:
    if portfolio_id is not None:
        # Raises if the portfolio is missing or not the user's
        store.get_portfolio(user_id, portfolio_id)
    return store.get_trades(
        user_id,
        status=TradeStatus.CLOSED,
        portfolio_id=portfolio_id,
        sort_by="exit_date",
        sort_order="asc",
    )


def get_overview(store: JournalStore, user_id: str, portfolio_id: Optional[int] = None) -> dict:
    """Win/loss statistics for the user's closed trades."""
    return summarize(_closed_trades(store, user_id, portfolio_id)).model_dump(mode="json")


def get_performance_chart(
    store: JournalStore, user_id: str, portfolio_id: Optional[int] = None
) -> list[dict]:
    """Equity curve points, one per closed trade."""
    series = build_cumulative_series(_closed_trades(store, user_id, portfolio_id))
    return [point.model_dump(mode="json") for point in series]


def get_bucketed_performance(
    store: JournalStore,
    user_id: str,
    key: BucketKey,
    timezone: str = "UTC",
    portfolio_id: Optional[int] = None,
) -> list[dict]:
    """Per-bucket P&L as a list of rows ordered by bucket.

    Month and day rows carry a ``period`` key; hour rows an ``hour`` key;
    weekday rows ``day_index`` and ``day`` (the weekday name).
    """
    key = BucketKey(key)
    buckets = bucket_by(_closed_trades(store, user_id, portfolio_id), key, timezone)

    rows = []
    for bucket_id, stats in buckets.items():
        row = stats.model_dump(mode="json")
        if key is BucketKey.HOUR_OF_DAY:
            row["hour"] = bucket_id
        elif key is BucketKey.DAY_OF_WEEK:
            row["day_index"] = bucket_id
            row["day"] = DAY_NAMES[bucket_id]
        else:
            row["period"] = bucket_id
        rows.append(row)
    return rows


def get_daily_pnl(
    store: JournalStore,
    user_id: str,
    days: int = 14,
    timezone: str = "UTC",
    today: Optional[date] = None,
    portfolio_id: Optional[int] = None,
) -> list[dict]:
    """Net P&L per day for the trailing window, every day present."""
    series = daily_pnl_series(
        _closed_trades(store, user_id, portfolio_id), days=days, today=today, tz=timezone
    )
    return [day.model_dump(mode="json") for day in series]


def get_distribution(
    store: JournalStore,
    user_id: str,
    bin_size: float = 100.0,
    portfolio_id: Optional[int] = None,
) -> list[dict]:
    """Trade counts per net-P&L range."""
    bins = pnl_distribution(_closed_trades(store, user_id, portfolio_id), bin_size)
    return [dict(b.model_dump(mode="json"), range=b.label) for b in bins]


def get_durations(
    store: JournalStore, user_id: str, portfolio_id: Optional[int] = None
) -> list[dict]:
    """Holding time against net P&L per closed trade."""
    points = duration_points(_closed_trades(store, user_id, portfolio_id))
    return [p.model_dump(mode="json") for p in points]


def get_portfolio_stats(store: JournalStore, user_id: str, portfolio_id: int) -> dict:
    """Statistics and reconciled balance for one portfolio."""
    portfolio = store.get_portfolio(user_id, portfolio_id)
    trades = store.get_trades(user_id, portfolio_id=portfolio_id)
    stats = portfolio_statistics(portfolio, trades)
    logger.debug(
        "Portfolio %s: %d closed trade(s), balance %.2f",
        portfolio_id,
        stats.statistics.total_trades,
        stats.current_balance,
    )
    return stats.model_dump(mode="json")
