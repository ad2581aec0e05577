"""Data models for TradeJournal."""

from tradejournal.models.account import AccountUpdate, TradingAccount
from tradejournal.models.checklist import Checklist, ChecklistItem
from tradejournal.models.entry import JournalEntry, PnLBreakdown, TradeDetails
from tradejournal.models.reference import TradingSetup, TradingSymbol
from tradejournal.models.stats import AccountStatistics, JournalEntryView, LedgerReport
from tradejournal.models.subscription import Subscription, TrialLimits

__all__ = [
    "AccountUpdate",
    "TradingAccount",
    "Checklist",
    "ChecklistItem",
    "JournalEntry",
    "PnLBreakdown",
    "TradeDetails",
    "TradingSetup",
    "TradingSymbol",
    "AccountStatistics",
    "JournalEntryView",
    "LedgerReport",
    "Subscription",
    "TrialLimits",
]
