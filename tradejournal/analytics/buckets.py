"""Time-bucketed P&L aggregation.

Calendar buckets (month, day) use the exit date because that is when
P&L is realized. Behavioural buckets (hour of day, day of week) use the
entry date because they describe when positions were opened.

All bucketing takes an explicit reference timezone. Naive timestamps
are taken to be UTC.
"""

from datetime import datetime, timezone, tzinfo
from enum import Enum
from functools import reduce
from typing import Iterable, Optional, Union
from zoneinfo import ZoneInfo

from tradejournal.analytics.statistics import realized_trades
from tradejournal.models import BucketStats, Trade

BucketId = Union[str, int]

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


class BucketKey(str, Enum):
    """Calendar unit to group trades by."""

    MONTH = "month"
    DAY = "day"
    HOUR_OF_DAY = "hour"
    DAY_OF_WEEK = "weekday"


def resolve_timezone(tz: Union[str, tzinfo, None]) -> tzinfo:
    """Turn a zone name (e.g. "Europe/London") into a tzinfo. None means UTC."""
    if tz is None:
        return timezone.utc
    if isinstance(tz, str):
        return timezone.utc if tz.upper() == "UTC" else ZoneInfo(tz)
    return tz


def to_local(moment: datetime, tz: Union[str, tzinfo, None] = None) -> datetime:
    """Express a timestamp in the reference timezone."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(resolve_timezone(tz))


def bucket_id(trade: Trade, key: BucketKey, tz: tzinfo) -> Optional[BucketId]:
    """The bucket a trade lands in, or None if it lacks the needed date."""
    if key is BucketKey.MONTH:
        if trade.exit_date is None:
            return None
        return to_local(trade.exit_date, tz).strftime("%Y-%m")
    if key is BucketKey.DAY:
        if trade.exit_date is None:
            return None
        return to_local(trade.exit_date, tz).strftime("%Y-%m-%d")
    if key is BucketKey.HOUR_OF_DAY:
        return to_local(trade.entry_date, tz).hour
    if key is BucketKey.DAY_OF_WEEK:
        # Python weeks start on Monday=0; buckets start on Sunday=0
        return (to_local(trade.entry_date, tz).weekday() + 1) % 7
    raise ValueError(f"Unknown bucket key: {key!r}")


def _empty_buckets(key: BucketKey) -> dict[BucketId, BucketStats]:
    # The hour-of-day heatmap renders a fixed 24-cell grid
    if key is BucketKey.HOUR_OF_DAY:
        return {hour: BucketStats() for hour in range(24)}
    return {}


def bucket_by(
    trades: Iterable[Trade],
    key: BucketKey,
    tz: Union[str, tzinfo, None] = None,
) -> dict[BucketId, BucketStats]:
    """Group closed trades into time buckets.

    Args:
        trades: Trades to group; open and unvalued ones are ignored.
        key: Calendar unit.
        tz: Reference timezone for local dates and hours.

    Returns:
        Ordered mapping of bucket id to totals. Month and day ids are
        "YYYY-MM" / "YYYY-MM-DD" strings sorted chronologically. Hours
        are 0-23, always all present. Weekdays are 0-6 (Sunday=0),
        only those with trades.
    """
    key = BucketKey(key)
    zone = resolve_timezone(tz)

    def step(acc: dict, trade: Trade) -> dict:
        bid = bucket_id(trade, key, zone)
        if bid is None:
            return acc
        return {**acc, bid: acc.get(bid, BucketStats()).with_trade(trade.net_pnl)}

    buckets = reduce(step, realized_trades(trades), _empty_buckets(key))
    return {bid: buckets[bid] for bid in sorted(buckets)}


def monthly_performance(trades: Iterable[Trade], tz=None) -> dict[str, BucketStats]:
    return bucket_by(trades, BucketKey.MONTH, tz)


def daily_performance(trades: Iterable[Trade], tz=None) -> dict[str, BucketStats]:
    return bucket_by(trades, BucketKey.DAY, tz)


def hourly_performance(trades: Iterable[Trade], tz=None) -> dict[int, BucketStats]:
    return bucket_by(trades, BucketKey.HOUR_OF_DAY, tz)


def weekday_performance(trades: Iterable[Trade], tz=None) -> dict[int, BucketStats]:
    return bucket_by(trades, BucketKey.DAY_OF_WEEK, tz)
