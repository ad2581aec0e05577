"""TradingAccount data model."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class TradingAccount(BaseModel):
    """Represents one trading account (one ledger).

    The initial balance is the only stored balance; every later balance
    is derived from the account's journal entries.
    """

    id: str = Field(..., description="Account identifier")
    user_id: str = Field(..., description="Owning user identifier")
    name: str = Field(..., min_length=1, description="Display name, unique per user")
    initial_balance: float = Field(..., description="Balance at account creation")
    currency: str = Field(..., min_length=1, description="Currency code (e.g., USD)")
    created_at: datetime = Field(
        default_factory=datetime.now, description="Creation timestamp"
    )
    updated_at: datetime = Field(
        default_factory=datetime.now, description="Last update timestamp"
    )

    model_config = {"frozen": True, "allow_inf_nan": False}


class AccountUpdate(BaseModel):
    """Fields that may be changed on an existing account."""

    name: Optional[str] = Field(default=None, min_length=1, description="New name")
    initial_balance: Optional[float] = Field(default=None, description="New initial balance")
    currency: Optional[str] = Field(default=None, min_length=1, description="New currency")

    model_config = {"frozen": True, "allow_inf_nan": False}
