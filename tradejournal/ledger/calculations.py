"""Running balance and per-entry calculations.

Everything here is a pure function of an account and its entries in
creation order. Missing values degrade to neutral results instead of
raising.
"""

from typing import Optional, Sequence

from pydantic import BaseModel, Field, model_validator

from tradejournal.ledger.formatting import weekday_label
from tradejournal.models import JournalEntry, JournalEntryView, TradingAccount
from tradejournal.models.stats import TradeOutcome


class OutcomePolicy(BaseModel):
    """Thresholds that classify a trade's net P&L.

    Both bounds are strict: a trade at exactly the threshold is neutral.
    The loss threshold may not be positive and the win threshold may not
    be negative, so a P&L of zero is always neutral.
    """

    win_threshold: float = Field(default=100.0, description="Net P&L above this is a win")
    loss_threshold: float = Field(default=-100.0, description="Net P&L below this is a loss")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_bounds(self) -> "OutcomePolicy":
        if not self.loss_threshold <= 0 <= self.win_threshold:
            raise ValueError(
                "Outcome thresholds must satisfy loss_threshold <= 0 <= win_threshold"
            )
        return self


DEFAULT_POLICY = OutcomePolicy()


def calculate_outcome(
    net_pnl: Optional[float], policy: OutcomePolicy = DEFAULT_POLICY
) -> TradeOutcome:
    """Classify a net P&L as win, loss or neutral.

    Args:
        net_pnl: Net P&L of the trade, or None when not yet known.
        policy: Classification thresholds.

    Returns:
        The trade outcome.
    """
    if net_pnl is None:
        return "neutral"
    if net_pnl > policy.win_threshold:
        return "win"
    if net_pnl < policy.loss_threshold:
        return "loss"
    return "neutral"


def entry_outcome(entry: JournalEntry, policy: OutcomePolicy = DEFAULT_POLICY) -> TradeOutcome:
    """Classify an entry; deposits and withdrawals are always neutral."""
    if not entry.is_trade:
        return "neutral"
    return calculate_outcome(entry.net_pnl, policy)


def checklist_score(results: Optional[dict[str, bool]]) -> int:
    """Count the checked items of a frozen checklist result map."""
    if not results:
        return 0
    return sum(1 for value in results.values() if value is True)


def running_balances(initial_balance: float, entries: Sequence[JournalEntry]) -> list[float]:
    """Compute the balance after each entry.

    Args:
        initial_balance: Account balance before any entry.
        entries: Entries in creation order.

    Returns:
        One balance per entry, ``initial_balance`` plus the prefix sum of
        ``net_pnl`` through that entry. Missing P&L counts as zero.
    """
    balances = []
    total = 0.0
    for entry in entries:
        total += entry.net_pnl or 0.0
        balances.append(initial_balance + total)
    return balances


def calculate_new_balance(
    initial_balance: float, entries: Sequence[JournalEntry], index: int
) -> float:
    """Balance after the entry at ``index`` (inclusive)."""
    return initial_balance + sum(e.net_pnl or 0.0 for e in entries[: index + 1])


def balance_change_percentage(initial_balance: float, balance: float) -> float:
    """Percentage change from the initial balance; 0 for a zero initial balance."""
    if initial_balance == 0:
        return 0.0
    return (balance - initial_balance) / initial_balance * 100


def derive_entry_view(
    entry: JournalEntry,
    initial_balance: float,
    prefix_sum: float,
    policy: OutcomePolicy = DEFAULT_POLICY,
    locale: str = "fa",
) -> JournalEntryView:
    """Build the derived view of one entry.

    Args:
        entry: The journal entry.
        initial_balance: Initial balance of the owning account.
        prefix_sum: Sum of ``net_pnl`` of all entries up to and including
            this one.
        policy: Outcome thresholds.
        locale: Locale of the weekday labels.

    Returns:
        The entry view.
    """
    running_balance = initial_balance + prefix_sum
    trade = entry.trade
    exit_date = trade.exit_date if trade else None

    return JournalEntryView(
        entry=entry,
        outcome=entry_outcome(entry, policy),
        entry_weekday=weekday_label(entry.entry_date, locale),
        exit_weekday=weekday_label(exit_date, locale) if exit_date else None,
        entry_score=checklist_score(trade.entry_checklist_results) if trade else 0,
        exit_score=checklist_score(trade.exit_checklist_results) if trade else 0,
        running_balance=running_balance,
        balance_change_percentage=balance_change_percentage(initial_balance, running_balance),
    )


def build_entry_views(
    account: TradingAccount,
    entries: Sequence[JournalEntry],
    policy: OutcomePolicy = DEFAULT_POLICY,
    locale: str = "fa",
) -> list[JournalEntryView]:
    """Derive views for all entries of an account, in the given order."""
    views = []
    prefix_sum = 0.0
    for entry in entries:
        prefix_sum += entry.net_pnl or 0.0
        views.append(
            derive_entry_view(entry, account.initial_balance, prefix_sum, policy, locale)
        )
    return views
