"""Aggregate result models produced by the analytics core."""

import math
from datetime import date as date_type
from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, Field, computed_field, field_serializer

from tradejournal.models.portfolio import Portfolio


def _finite_or_tag(value: float) -> Union[float, str]:
    """Render an unbounded ratio as the string ``"Infinity"`` for JSON."""
    if math.isinf(value):
        return "Infinity"
    return value


class Statistics(BaseModel):
    """Win/loss statistics over a set of closed trades.

    ``profit_factor`` is ``math.inf`` when there are wins but no losses.
    """

    total_trades: int = Field(default=0, ge=0)
    winning_trades: int = Field(default=0, ge=0)
    losing_trades: int = Field(default=0, ge=0)
    win_rate: float = Field(default=0.0, ge=0, le=100, description="Win rate percentage")
    total_profit_loss: float = Field(default=0.0)
    total_wins: float = Field(default=0.0, ge=0)
    total_losses: float = Field(default=0.0, ge=0, description="Magnitude of summed losses")
    average_win: float = Field(default=0.0)
    average_loss: float = Field(default=0.0)
    profit_factor: float = Field(default=0.0, ge=0)
    largest_win: float = Field(default=0.0)
    largest_loss: float = Field(default=0.0, description="Most negative trade P&L")

    model_config = {"frozen": True}

    @property
    def profit_factor_unbounded(self) -> bool:
        """True when every decided trade was a win."""
        return math.isinf(self.profit_factor)

    @field_serializer("profit_factor", when_used="json")
    def _serialize_profit_factor(self, value: float) -> Union[float, str]:
        return _finite_or_tag(value)


class BucketStats(BaseModel):
    """P&L totals for one time bucket."""

    trades: int = Field(default=0, ge=0)
    total_pnl: float = Field(default=0.0)
    wins: int = Field(default=0, ge=0)
    losses: int = Field(default=0, ge=0)

    model_config = {"frozen": True}

    @computed_field
    @property
    def avg_pnl(self) -> float:
        return self.total_pnl / self.trades if self.trades else 0.0

    def with_trade(self, pnl: float) -> "BucketStats":
        """Return a new bucket with one more trade folded in."""
        return BucketStats(
            trades=self.trades + 1,
            total_pnl=self.total_pnl + pnl,
            wins=self.wins + (1 if pnl > 0 else 0),
            losses=self.losses + (1 if pnl < 0 else 0),
        )


class EquityPoint(BaseModel):
    """One point of a cumulative P&L (equity) curve."""

    date: Optional[datetime]
    cumulative_pnl: float
    trade_pnl: float

    model_config = {"frozen": True}


class DailyPnL(BaseModel):
    """Net P&L realized on one calendar day."""

    date: date_type
    pnl: float = 0.0
    trades: int = Field(default=0, ge=0)

    model_config = {"frozen": True}


class DistributionBin(BaseModel):
    """Count of trades whose net P&L falls in ``[lower, upper)``."""

    lower: float
    upper: float
    count: int = Field(default=0, ge=0)
    percentage: float = Field(default=0.0, ge=0, le=100)

    model_config = {"frozen": True}

    @property
    def label(self) -> str:
        return f"{self.lower:g} to {self.upper:g}"


class DurationPoint(BaseModel):
    """Holding time against outcome for one trade."""

    trade_id: int
    symbol: str
    duration_hours: float
    pnl: float

    model_config = {"frozen": True}


class PortfolioStats(BaseModel):
    """Statistics for one portfolio with its reconciled balance."""

    portfolio: Portfolio
    statistics: Statistics
    current_balance: float
    total_gross_pnl: float = 0.0
    total_commission: float = 0.0
    average_pnl: float = 0.0

    model_config = {"frozen": True}


class BulkResult(BaseModel):
    """Outcome of a bulk trade reassignment."""

    message: str
    count: int = Field(..., ge=0)

    model_config = {"frozen": True}
