"""TradingSymbol and TradingSetup data models."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class TradingSymbol(BaseModel):
    """Represents a user-defined trading symbol."""

    id: str = Field(..., description="Symbol identifier")
    user_id: str = Field(..., description="Owning user identifier")
    name: str = Field(..., min_length=1, description="Symbol name (e.g., EURUSD)")
    created_at: datetime = Field(
        default_factory=datetime.now, description="Creation timestamp"
    )

    model_config = {"frozen": True}


class TradingSetup(BaseModel):
    """Represents a named trading setup."""

    id: str = Field(..., description="Setup identifier")
    user_id: str = Field(..., description="Owning user identifier")
    name: str = Field(..., min_length=1, description="Setup name")
    description: Optional[str] = Field(default=None, description="Setup description")
    created_at: datetime = Field(
        default_factory=datetime.now, description="Creation timestamp"
    )

    model_config = {"frozen": True}
