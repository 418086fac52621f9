"""Tag data model."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class TagType(str, Enum):
    """Classification of a tag."""

    STRATEGY = "STRATEGY"
    MARKET = "MARKET"
    SETUP = "SETUP"
    TIMEFRAME = "TIMEFRAME"
    OTHER = "OTHER"


class Tag(BaseModel):
    """A user-scoped label attached to trades."""

    id: Optional[int] = Field(default=None, description="Database ID")
    user_id: str = Field(..., min_length=1, description="Owning user")
    name: str = Field(..., min_length=1, description="Tag name, unique per user")
    type: TagType = Field(default=TagType.OTHER, description="Tag classification")

    model_config = {"frozen": True}
