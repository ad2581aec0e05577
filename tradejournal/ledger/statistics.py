"""Account-level trade statistics."""

from typing import Sequence

from tradejournal.ledger.calculations import (
    DEFAULT_POLICY,
    OutcomePolicy,
    balance_change_percentage,
    build_entry_views,
    calculate_outcome,
)
from tradejournal.models import (
    AccountStatistics,
    JournalEntry,
    LedgerReport,
    TradingAccount,
)


def compute_account_statistics(
    account: TradingAccount,
    entries: Sequence[JournalEntry],
    policy: OutcomePolicy = DEFAULT_POLICY,
) -> AccountStatistics:
    """Aggregate trade performance for an account.

    Only trade entries count toward the trade figures; deposits and
    withdrawals move the balance but are not trades.

    Args:
        account: The trading account.
        entries: All entries of the account in creation order.
        policy: Outcome thresholds.

    Returns:
        Account statistics.
    """
    trade_pnls = [e.net_pnl or 0.0 for e in entries if e.is_trade]
    wins = [p for p in trade_pnls if calculate_outcome(p, policy) == "win"]
    losses = [p for p in trade_pnls if calculate_outcome(p, policy) == "loss"]

    total_trades = len(trade_pnls)
    total_wins = sum(wins)
    total_losses = sum(losses)

    current_balance = account.initial_balance + sum(e.net_pnl or 0.0 for e in entries)

    return AccountStatistics(
        total_trades=total_trades,
        winning_trades=len(wins),
        losing_trades=len(losses),
        neutral_trades=total_trades - len(wins) - len(losses),
        win_rate=(len(wins) / total_trades * 100) if total_trades > 0 else 0.0,
        total_pnl=sum(trade_pnls),
        current_balance=current_balance,
        balance_change_percentage=balance_change_percentage(
            account.initial_balance, current_balance
        ),
        average_win=(total_wins / len(wins)) if wins else 0.0,
        average_loss=(total_losses / len(losses)) if losses else 0.0,
        largest_win=max(wins) if wins else 0.0,
        largest_loss=min(losses) if losses else 0.0,
        profit_factor=(total_wins / abs(total_losses)) if total_losses != 0 else None,
    )


def build_ledger(
    account: TradingAccount,
    entries: Sequence[JournalEntry],
    policy: OutcomePolicy = DEFAULT_POLICY,
    locale: str = "fa",
) -> LedgerReport:
    """Derive entry views and statistics for one account in a single pass."""
    return LedgerReport(
        views=build_entry_views(account, entries, policy, locale),
        statistics=compute_account_statistics(account, entries, policy),
    )
