"""Property-based tests for journal data models.

**Feature: trade-journal**
"""

import math
from datetime import datetime, timedelta

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st
from pydantic import ValidationError

from tradejournal.models import (
    AccountUpdate,
    Checklist,
    ChecklistItem,
    JournalEntry,
    PnLBreakdown,
    Subscription,
    TradeDetails,
    TradingAccount,
    TrialLimits,
)
from tradejournal.models.subscription import MAX_TRIAL_ACCOUNTS, MAX_TRIAL_TRADES


def entry_kwargs(**overrides) -> dict:
    values = {
        "id": "entry-1",
        "account_id": "acc-1",
        "user_id": "user-1",
        "row_number": 1,
        "operation_type": "trade",
        "entry_date": datetime(2024, 3, 4, 9, 30),
    }
    values.update(overrides)
    return values


positive = st.floats(min_value=0.01, max_value=1e6, allow_nan=False, allow_infinity=False)


class TestCashMovementSigns:
    """
    **Feature: trade-journal, Property 8: Cash Movement Signs**

    *For any* positive amount, a deposit may carry it and a withdrawal
    may carry its negation, never the other way round.
    """

    @given(amount=positive)
    @settings(max_examples=50)
    def test_valid_signs(self, amount: float):
        deposit = JournalEntry(**entry_kwargs(operation_type="deposit", net_pnl=amount))
        withdrawal = JournalEntry(**entry_kwargs(operation_type="withdrawal", net_pnl=-amount))

        assert deposit.net_pnl == amount
        assert withdrawal.net_pnl == -amount
        assert not deposit.is_trade

    @given(amount=positive)
    @settings(max_examples=50)
    def test_wrong_signs_rejected(self, amount: float):
        with pytest.raises(ValidationError):
            JournalEntry(**entry_kwargs(operation_type="deposit", net_pnl=-amount))
        with pytest.raises(ValidationError):
            JournalEntry(**entry_kwargs(operation_type="withdrawal", net_pnl=amount))

    def test_trade_details_only_on_trades(self):
        with pytest.raises(ValidationError, match="cannot carry trade details"):
            JournalEntry(
                **entry_kwargs(operation_type="deposit", net_pnl=100.0, trade=TradeDetails())
            )

        entry = JournalEntry(**entry_kwargs(trade=TradeDetails(direction="buy")))
        assert entry.is_trade
        assert entry.trade.direction == "buy"


class TestTradeDetails:
    def test_field_bounds(self):
        with pytest.raises(ValidationError):
            TradeDetails(size=0)
        with pytest.raises(ValidationError):
            TradeDetails(risk_percentage=120)
        with pytest.raises(ValidationError):
            TradeDetails(commission=-1)
        with pytest.raises(ValidationError):
            TradeDetails(direction="long")

    def test_row_number_starts_at_one(self):
        with pytest.raises(ValidationError):
            JournalEntry(**entry_kwargs(row_number=0))


class TestFiniteAmounts:
    @pytest.mark.parametrize("value", [math.inf, -math.inf, math.nan])
    def test_money_fields_reject_non_finite(self, value: float):
        with pytest.raises(ValidationError):
            JournalEntry(**entry_kwargs(operation_type="deposit", net_pnl=value))
        with pytest.raises(ValidationError):
            TradeDetails(gross_pnl=value)
        with pytest.raises(ValidationError):
            TradeDetails(swap=value)
        with pytest.raises(ValidationError):
            PnLBreakdown(net_pnl=value)
        with pytest.raises(ValidationError):
            TradingAccount(
                id="acc-1", user_id="user-1", name="Main", initial_balance=value, currency="USD"
            )
        with pytest.raises(ValidationError):
            AccountUpdate(initial_balance=value)


class TestPnLBreakdown:
    """
    **Feature: trade-journal, Property 9: Detailed P&L Derivation**

    *For any* gross P&L, commission and swap, the net P&L equals
    gross - commission + swap.
    """

    @given(
        gross=st.floats(min_value=-1e6, max_value=1e6, allow_nan=False),
        commission=st.floats(min_value=0, max_value=1e3, allow_nan=False),
        swap=st.floats(min_value=-1e3, max_value=1e3, allow_nan=False),
    )
    @settings(max_examples=100)
    def test_net_from_components(self, gross, commission, swap):
        pnl = PnLBreakdown(gross_pnl=gross, commission=commission, swap=swap)

        assert pnl.is_detailed
        assert pnl.resolve_net() == pytest.approx(gross - commission + swap)

    def test_simple_mode(self):
        pnl = PnLBreakdown(net_pnl=-75.0)

        assert not pnl.is_detailed
        assert pnl.resolve_net() == -75.0

    def test_missing_components_count_as_zero(self):
        assert PnLBreakdown(gross_pnl=270.0).resolve_net() == 270.0
        assert PnLBreakdown(gross_pnl=270.0, commission=20.0, swap=-5.0).resolve_net() == 245.0

    def test_requires_a_value(self):
        with pytest.raises(ValidationError):
            PnLBreakdown()
        with pytest.raises(ValidationError):
            PnLBreakdown(commission=5.0)


class TestChecklistSnapshot:
    def make_checklist(self) -> Checklist:
        return Checklist(
            id="chk-1",
            user_id="user-1",
            kind="entry",
            name="Basics",
            items=[
                ChecklistItem(id="b", text="Risk <= 1%", order=1),
                ChecklistItem(id="a", text="Trend aligned", order=0),
                ChecklistItem(id="c", text="News checked", order=2),
            ],
        )

    def test_ordered_items(self):
        checklist = self.make_checklist()

        assert [item.id for item in checklist.ordered_items()] == ["a", "b", "c"]

    def test_snapshot_covers_every_item(self):
        results = self.make_checklist().snapshot_results({"a", "c"})

        assert results == {"a": True, "b": False, "c": True}

    def test_kind_is_restricted(self):
        with pytest.raises(ValidationError):
            Checklist(id="x", user_id="u", kind="other", name="X")


class TestTrialLimits:
    """
    **Feature: trade-journal, Property 10: Trial Limits**

    *For any* account and trade counts, a trial user may add an account
    below one account and a trade below ten trades; subscribers always may.
    """

    @given(
        accounts=st.integers(min_value=0, max_value=20),
        trades=st.integers(min_value=0, max_value=50),
    )
    @settings(max_examples=100)
    def test_trial_caps(self, accounts: int, trades: int):
        trial = TrialLimits.evaluate(False, accounts, trades)
        subscribed = TrialLimits.evaluate(True, accounts, trades)

        assert trial.can_add_account == (accounts < MAX_TRIAL_ACCOUNTS)
        assert trial.can_add_trade == (trades < MAX_TRIAL_TRADES)
        assert subscribed.can_add_account
        assert subscribed.can_add_trade

    def test_caps(self):
        assert MAX_TRIAL_ACCOUNTS == 1
        assert MAX_TRIAL_TRADES == 10


class TestSubscription:
    def test_days_remaining(self):
        start = datetime(2024, 1, 1)
        sub = Subscription(
            id="sub-1",
            user_id="user-1",
            plan_name="pro",
            start_date=start,
            end_date=start + timedelta(days=30),
        )

        assert sub.days_remaining(start) == 30
        assert sub.days_remaining(start + timedelta(days=10)) == 20
        assert sub.days_remaining(start + timedelta(days=10, hours=1)) == 20
        assert sub.days_remaining(start + timedelta(days=40)) == 0

    @pytest.mark.parametrize(
        "days_left, expiring",
        [(30, False), (8, False), (7, True), (1, True), (0, True)],
    )
    def test_expiring_within_a_week(self, days_left: int, expiring: bool):
        now = datetime(2024, 6, 1)
        sub = Subscription(
            id="sub-1",
            user_id="user-1",
            plan_name="pro",
            start_date=datetime(2024, 1, 1),
            end_date=now + timedelta(days=days_left),
        )

        assert sub.is_expiring_soon(now) is expiring
