"""Portfolio data model."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class AccountType(str, Enum):
    """Kind of trading account a portfolio tracks."""

    REAL = "REAL"
    DEMO = "DEMO"


class Portfolio(BaseModel):
    """Represents a trading account that trades can be assigned to.

    ``current_balance`` is never trusted from storage; the store fills it
    in from the trade ledger on every read.
    """

    id: int = Field(..., description="Database ID")
    user_id: str = Field(..., min_length=1, description="Owning user")
    name: str = Field(..., min_length=1, description="Portfolio name")
    description: Optional[str] = Field(default=None, description="Free text description")
    initial_balance: float = Field(..., ge=0, description="Starting balance")
    currency: str = Field(default="USD", description="Currency label (no conversion)")
    account_type: AccountType = Field(default=AccountType.DEMO, description="REAL or DEMO")
    trade_count: int = Field(default=0, ge=0, description="Number of assigned trades")
    current_balance: Optional[float] = Field(default=None, description="Reconciled balance")
    created_at: Optional[datetime] = Field(default=None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(default=None, description="Last update timestamp")

    model_config = {"frozen": True}
