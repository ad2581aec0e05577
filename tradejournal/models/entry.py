"""JournalEntry data model.

An entry is a tagged variant: a common envelope shared by every
operation type, plus a ``TradeDetails`` payload that only trades carry.
"""

from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field, model_validator

OperationType = Literal["trade", "deposit", "withdrawal"]
Direction = Literal["buy", "sell"]


class TradeDetails(BaseModel):
    """Trade-only fields of a journal entry."""

    symbol_id: Optional[str] = Field(default=None, description="Weak reference to a symbol")
    setup_id: Optional[str] = Field(default=None, description="Weak reference to a setup")
    direction: Optional[Direction] = Field(default=None, description="Trade direction")
    size: Optional[float] = Field(default=None, gt=0, description="Position size")
    risk_percentage: Optional[float] = Field(
        default=None, ge=0, le=100, description="Risk as percentage of balance"
    )
    entry_checklist_id: Optional[str] = Field(default=None, description="Entry checklist id")
    entry_checklist_results: Optional[dict[str, bool]] = Field(
        default=None, description="Frozen entry checklist results keyed by item id"
    )
    exit_checklist_id: Optional[str] = Field(default=None, description="Exit checklist id")
    exit_checklist_results: Optional[dict[str, bool]] = Field(
        default=None, description="Frozen exit checklist results keyed by item id"
    )
    entry_emotions: Optional[str] = Field(default=None, description="Emotions at entry")
    exit_emotions: Optional[str] = Field(default=None, description="Emotions at exit")
    entry_screenshot: Optional[str] = Field(default=None, description="Entry screenshot path")
    exit_screenshot: Optional[str] = Field(default=None, description="Exit screenshot path")
    exit_date: Optional[datetime] = Field(default=None, description="Exit timestamp")
    show_exit_time: bool = Field(default=False, description="Display exit time of day")
    gross_pnl: Optional[float] = Field(default=None, description="Gross P&L")
    commission: Optional[float] = Field(default=None, ge=0, description="Commission paid")
    swap: Optional[float] = Field(default=None, description="Swap (signed)")

    model_config = {"frozen": True, "allow_inf_nan": False}


class JournalEntry(BaseModel):
    """Represents one ledger event of a trading account.

    ``net_pnl`` is the entry's signed effect on the account balance.
    Deposits are never negative and withdrawals are never positive.
    """

    id: str = Field(..., description="Entry identifier")
    account_id: str = Field(..., description="Owning account identifier")
    user_id: str = Field(..., description="Owning user identifier")
    row_number: int = Field(..., ge=1, description="Sequence number within the account")
    operation_type: OperationType = Field(..., description="trade, deposit or withdrawal")
    entry_date: datetime = Field(..., description="Entry timestamp")
    show_entry_time: bool = Field(default=False, description="Display entry time of day")
    net_pnl: Optional[float] = Field(default=None, description="Signed balance effect")
    notes: Optional[str] = Field(default=None, description="User notes")
    trade: Optional[TradeDetails] = Field(default=None, description="Trade-only payload")
    created_at: datetime = Field(
        default_factory=datetime.now, description="Creation timestamp"
    )
    updated_at: datetime = Field(
        default_factory=datetime.now, description="Last update timestamp"
    )

    model_config = {"frozen": True, "allow_inf_nan": False}

    @model_validator(mode="after")
    def _check_variant(self) -> "JournalEntry":
        if self.operation_type != "trade" and self.trade is not None:
            raise ValueError(f"{self.operation_type} entries cannot carry trade details")
        if self.net_pnl is not None:
            if self.operation_type == "deposit" and self.net_pnl < 0:
                raise ValueError("deposit amount cannot be negative")
            if self.operation_type == "withdrawal" and self.net_pnl > 0:
                raise ValueError("withdrawal amount cannot be positive")
        return self

    @property
    def is_trade(self) -> bool:
        return self.operation_type == "trade"


class PnLBreakdown(BaseModel):
    """Realized P&L of a trade, entered either directly or decomposed.

    In detailed mode ``net_pnl = gross_pnl - commission + swap``, with the
    commission given as a positive magnitude and the swap signed.
    """

    net_pnl: Optional[float] = Field(default=None, description="Net P&L (simple mode)")
    gross_pnl: Optional[float] = Field(default=None, description="Gross P&L (detailed mode)")
    commission: Optional[float] = Field(default=None, ge=0, description="Commission paid")
    swap: Optional[float] = Field(default=None, description="Swap (signed)")

    model_config = {"frozen": True, "allow_inf_nan": False}

    @model_validator(mode="after")
    def _check_mode(self) -> "PnLBreakdown":
        if self.net_pnl is None and self.gross_pnl is None:
            raise ValueError("either net_pnl or gross_pnl is required")
        return self

    @property
    def is_detailed(self) -> bool:
        return self.gross_pnl is not None

    def resolve_net(self) -> float:
        """Return the net P&L applied to the balance."""
        if self.is_detailed:
            return self.gross_pnl - (self.commission or 0.0) + (self.swap or 0.0)
        return self.net_pnl
