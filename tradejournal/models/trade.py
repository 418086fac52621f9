"""Trade data models."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Express a timestamp in UTC. Naive timestamps are taken to be UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class TradeSide(str, Enum):
    """Direction of a trade."""

    LONG = "LONG"
    SHORT = "SHORT"


class TradeStatus(str, Enum):
    """Lifecycle status of a trade."""

    OPEN = "OPEN"
    CLOSED = "CLOSED"
    CANCELLED = "CANCELLED"


class Trade(BaseModel):
    """Represents a journaled trade as persisted."""

    id: int = Field(..., description="Database ID")
    user_id: str = Field(..., min_length=1, description="Owning user")
    portfolio_id: Optional[int] = Field(default=None, description="Assigned portfolio")
    symbol: str = Field(..., min_length=1, description="Trading symbol")
    side: TradeSide = Field(..., description="Trade side (LONG/SHORT)")
    status: TradeStatus = Field(default=TradeStatus.OPEN, description="Lifecycle status")
    entry_price: float = Field(..., ge=0, description="Entry price")
    entry_date: datetime = Field(..., description="Entry timestamp")
    quantity: float = Field(..., gt=0, description="Quantity or lots")
    exit_price: Optional[float] = Field(default=None, description="Exit price")
    exit_date: Optional[datetime] = Field(default=None, description="Exit timestamp")
    stop_loss: Optional[float] = Field(default=None, description="Stop loss price")
    take_profit: Optional[float] = Field(default=None, description="Take profit price")
    commission: float = Field(default=0.0, description="Commission paid")
    swap: float = Field(default=0.0, description="Swap cost (negative for credit)")
    gross_pnl: Optional[float] = Field(default=None, description="Gross P&L")
    net_pnl: Optional[float] = Field(default=None, description="Net P&L after costs")
    notes: Optional[str] = Field(default=None, description="Entry notes")
    strategy: Optional[str] = Field(default=None, description="Strategy or setup")
    timeframe: Optional[str] = Field(default=None, description="Chart timeframe")
    exit_reason: Optional[str] = Field(default=None, description="Reason for exit")
    mistakes: Optional[str] = Field(default=None, description="Mistakes made")
    lessons_learned: Optional[str] = Field(default=None, description="Lessons learned")
    tags: list[str] = Field(default_factory=list, description="Tag names")
    created_at: Optional[datetime] = Field(default=None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(default=None, description="Last update timestamp")

    model_config = {"frozen": True}

    @field_validator("entry_date", "exit_date")
    @classmethod
    def _normalize_dates(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)

    @property
    def is_valued(self) -> bool:
        """True once gross and net P&L are both known."""
        return self.net_pnl is not None and self.gross_pnl is not None

    @property
    def pnl_percentage(self) -> Optional[float]:
        """Net P&L as a percentage of the entry notional."""
        notional = self.entry_price * self.quantity
        if self.net_pnl is None or notional <= 0:
            return None
        return self.net_pnl / notional * 100

    @property
    def risk_reward_ratio(self) -> Optional[float]:
        """Planned reward over planned risk, from take profit and stop loss."""
        if self.stop_loss is None or self.take_profit is None:
            return None
        risk = abs(self.entry_price - self.stop_loss)
        if risk == 0:
            return None
        return abs(self.take_profit - self.entry_price) / risk

    @property
    def duration_hours(self) -> Optional[float]:
        """Holding time in hours."""
        if self.exit_date is None:
            return None
        return (self.exit_date - self.entry_date).total_seconds() / 3600


class TradeInput(BaseModel):
    """Payload for journaling a new trade.

    ``net_pnl`` and ``gross_pnl`` are broker-supplied overrides. When
    ``net_pnl`` is given, it takes precedence over the price-based
    computation.
    """

    symbol: str = Field(..., min_length=1, description="Trading symbol")
    side: TradeSide = Field(..., description="Trade side (LONG/SHORT)")
    status: TradeStatus = Field(default=TradeStatus.OPEN, description="Lifecycle status")
    entry_price: float = Field(..., ge=0, description="Entry price")
    entry_date: datetime = Field(..., description="Entry timestamp")
    quantity: float = Field(..., gt=0, description="Quantity or lots")
    exit_price: Optional[float] = Field(default=None, description="Exit price")
    exit_date: Optional[datetime] = Field(default=None, description="Exit timestamp")
    stop_loss: Optional[float] = Field(default=None, description="Stop loss price")
    take_profit: Optional[float] = Field(default=None, description="Take profit price")
    commission: float = Field(default=0.0, description="Commission paid")
    swap: float = Field(default=0.0, description="Swap cost (negative for credit)")
    gross_pnl: Optional[float] = Field(default=None, description="Broker gross P&L")
    net_pnl: Optional[float] = Field(default=None, description="Broker net P&L")
    notes: Optional[str] = Field(default=None, description="Entry notes")
    strategy: Optional[str] = Field(default=None, description="Strategy or setup")
    timeframe: Optional[str] = Field(default=None, description="Chart timeframe")
    exit_reason: Optional[str] = Field(default=None, description="Reason for exit")
    mistakes: Optional[str] = Field(default=None, description="Mistakes made")
    lessons_learned: Optional[str] = Field(default=None, description="Lessons learned")
    portfolio_id: Optional[int] = Field(default=None, description="Assigned portfolio")
    tags: list[str] = Field(default_factory=list, description="Tag names")

    model_config = {"frozen": True}

    @field_validator("entry_date", "exit_date")
    @classmethod
    def _normalize_dates(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)


class TradeUpdate(BaseModel):
    """Partial update for an existing trade.

    Only fields set to a value are applied; None leaves a field unchanged.
    """

    symbol: Optional[str] = Field(default=None, min_length=1)
    side: Optional[TradeSide] = None
    status: Optional[TradeStatus] = None
    entry_price: Optional[float] = Field(default=None, ge=0)
    entry_date: Optional[datetime] = None
    quantity: Optional[float] = Field(default=None, gt=0)
    exit_price: Optional[float] = None
    exit_date: Optional[datetime] = None
    stop_loss: Optional[float] = None
    take_profit: Optional[float] = None
    commission: Optional[float] = None
    swap: Optional[float] = None
    gross_pnl: Optional[float] = None
    net_pnl: Optional[float] = None
    notes: Optional[str] = None
    strategy: Optional[str] = None
    timeframe: Optional[str] = None
    exit_reason: Optional[str] = None
    mistakes: Optional[str] = None
    lessons_learned: Optional[str] = None
    portfolio_id: Optional[int] = None
    tags: Optional[list[str]] = None

    model_config = {"frozen": True}

    @field_validator("entry_date", "exit_date")
    @classmethod
    def _normalize_dates(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)

    def changes(self) -> dict:
        """Fields the caller set to a value."""
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if getattr(self, name) is not None
        }
