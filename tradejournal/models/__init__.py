"""Data models for TradeJournal."""

from tradejournal.models.trade import Trade, TradeInput, TradeSide, TradeStatus, TradeUpdate
from tradejournal.models.portfolio import AccountType, Portfolio
from tradejournal.models.tag import Tag, TagType
from tradejournal.models.stats import (
    BucketStats,
    BulkResult,
    DailyPnL,
    DistributionBin,
    DurationPoint,
    EquityPoint,
    PortfolioStats,
    Statistics,
)

__all__ = [
    "Trade",
    "TradeInput",
    "TradeSide",
    "TradeStatus",
    "TradeUpdate",
    "AccountType",
    "Portfolio",
    "Tag",
    "TagType",
    "BucketStats",
    "BulkResult",
    "DailyPnL",
    "DistributionBin",
    "DurationPoint",
    "EquityPoint",
    "PortfolioStats",
    "Statistics",
]
