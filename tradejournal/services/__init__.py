"""Application services: store queries wired to the analytics core."""

from tradejournal.services.analytics import (
    get_bucketed_performance,
    get_daily_pnl,
    get_distribution,
    get_durations,
    get_overview,
    get_performance_chart,
    get_portfolio_stats,
)
from tradejournal.services.portfolios import (
    assign_unassigned_trades,
    delete_portfolio,
    get_unassigned_count,
    move_trades,
)

__all__ = [
    "get_bucketed_performance",
    "get_daily_pnl",
    "get_distribution",
    "get_durations",
    "get_overview",
    "get_performance_chart",
    "get_portfolio_stats",
    "assign_unassigned_trades",
    "delete_portfolio",
    "get_unassigned_count",
    "move_trades",
]
