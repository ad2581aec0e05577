"""Derived ledger models: entry views and account statistics."""

from typing import Literal, Optional
from pydantic import BaseModel, Field

from tradejournal.models.entry import JournalEntry

TradeOutcome = Literal["win", "loss", "neutral"]


class JournalEntryView(BaseModel):
    """A journal entry together with its derived fields."""

    entry: JournalEntry = Field(..., description="The stored entry")
    outcome: TradeOutcome = Field(..., description="Win/loss/neutral classification")
    entry_weekday: str = Field(..., description="Weekday label of the entry date")
    exit_weekday: Optional[str] = Field(default=None, description="Weekday label of the exit date")
    entry_score: int = Field(..., ge=0, description="Checked entry checklist items")
    exit_score: int = Field(..., ge=0, description="Checked exit checklist items")
    running_balance: float = Field(..., description="Balance after this entry")
    balance_change_percentage: float = Field(
        ..., description="Change versus the initial balance, in percent"
    )

    model_config = {"frozen": True}


class AccountStatistics(BaseModel):
    """Aggregate trade performance of one account.

    Loss figures are signed (zero or negative). ``profit_factor`` is
    None when the account has no losing trades.
    """

    total_trades: int = Field(..., ge=0, description="Number of trade entries")
    winning_trades: int = Field(..., ge=0, description="Trades classified as win")
    losing_trades: int = Field(..., ge=0, description="Trades classified as loss")
    neutral_trades: int = Field(..., ge=0, description="Trades classified as neutral")
    win_rate: float = Field(..., ge=0, le=100, description="Win rate percentage")
    total_pnl: float = Field(..., description="Sum of trade net P&L")
    current_balance: float = Field(..., description="Balance after the last entry")
    balance_change_percentage: float = Field(
        ..., description="Change of the current balance versus the initial balance"
    )
    average_win: float = Field(..., description="Mean net P&L of winning trades")
    average_loss: float = Field(..., description="Mean net P&L of losing trades")
    largest_win: float = Field(..., description="Largest winning net P&L")
    largest_loss: float = Field(..., description="Most negative losing net P&L")
    profit_factor: Optional[float] = Field(
        default=None, ge=0, description="Gross wins over gross losses"
    )

    model_config = {"frozen": True}


class LedgerReport(BaseModel):
    """Per-entry views and statistics for one account."""

    views: list[JournalEntryView] = Field(default_factory=list, description="Entry views")
    statistics: AccountStatistics = Field(..., description="Account statistics")

    model_config = {"frozen": True}
