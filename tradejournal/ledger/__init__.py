"""Ledger engine: running balances, outcomes and account statistics."""

from tradejournal.ledger.calculations import (
    DEFAULT_POLICY,
    OutcomePolicy,
    balance_change_percentage,
    build_entry_views,
    calculate_new_balance,
    calculate_outcome,
    checklist_score,
    derive_entry_view,
    entry_outcome,
    running_balances,
)
from tradejournal.ledger.statistics import build_ledger, compute_account_statistics

__all__ = [
    "DEFAULT_POLICY",
    "OutcomePolicy",
    "balance_change_percentage",
    "build_entry_views",
    "calculate_new_balance",
    "calculate_outcome",
    "checklist_score",
    "derive_entry_view",
    "entry_outcome",
    "running_balances",
    "build_ledger",
    "compute_account_statistics",
]
