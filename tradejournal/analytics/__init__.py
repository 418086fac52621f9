"""Trade valuation and performance analytics.

Pure functions over in-memory trades; nothing here touches storage.
"""

from tradejournal.analytics.valuation import (
    Valuation,
    ValuationSource,
    revaluate,
    valuate,
)
from tradejournal.analytics.statistics import profit_factor, realized_trades, summarize
from tradejournal.analytics.buckets import (
    DAY_NAMES,
    BucketKey,
    bucket_by,
    daily_performance,
    hourly_performance,
    monthly_performance,
    weekday_performance,
)
from tradejournal.analytics.equity import (
    build_cumulative_series,
    cumulative_daily_series,
    daily_pnl_series,
)
from tradejournal.analytics.distribution import duration_points, pnl_distribution
from tradejournal.analytics.balance import (
    Reassignment,
    assign_unassigned,
    current_balance,
    ensure_deletable,
    portfolio_statistics,
    reassign_trades,
)

__all__ = [
    "Valuation",
    "ValuationSource",
    "revaluate",
    "valuate",
    "profit_factor",
    "realized_trades",
    "summarize",
    "DAY_NAMES",
    "BucketKey",
    "bucket_by",
    "daily_performance",
    "hourly_performance",
    "monthly_performance",
    "weekday_performance",
    "build_cumulative_series",
    "cumulative_daily_series",
    "daily_pnl_series",
    "duration_points",
    "pnl_distribution",
    "Reassignment",
    "assign_unassigned",
    "current_balance",
    "ensure_deletable",
    "portfolio_statistics",
    "reassign_trades",
]
