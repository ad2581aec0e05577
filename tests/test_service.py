"""Tests for the journal service guards and entry workflows.

**Feature: trade-journal**
"""

import math
import tempfile
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from tradejournal.db.store import JournalStore
from tradejournal.errors import (
    AuthenticationError,
    DuplicateNameError,
    LimitReachedError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from tradejournal.journal.service import JournalService
from tradejournal.ledger import OutcomePolicy
from tradejournal.models import AccountUpdate, PnLBreakdown

MONDAY = datetime(2024, 3, 4, 9, 30)


@pytest.fixture
def store():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield JournalStore(Path(tmpdir) / "test.db")


@pytest.fixture
def service(store: JournalStore):
    return JournalService(store, user_id="alice", locale="en")


@pytest.fixture
def account(service: JournalService):
    return service.create_account("Main", 10000.0, "usd")


def subscribe(store: JournalStore, user_id: str) -> None:
    now = datetime.now()
    store.add_subscription(user_id, "pro", now - timedelta(days=1), now + timedelta(days=30))


class TestAuthentication:
    def test_missing_user(self, store: JournalStore):
        anonymous = JournalService(store, user_id=None)

        with pytest.raises(AuthenticationError):
            anonymous.list_accounts()
        with pytest.raises(AuthenticationError):
            anonymous.create_account("Main", 0.0, "USD")

    def test_empty_user(self, store: JournalStore):
        with pytest.raises(AuthenticationError):
            JournalService(store, user_id="").check_trial_limits()


class TestOwnership:
    """
    **Feature: trade-journal, Property 14: Ownership Guards**

    Records of one user are never readable or writable by another.
    """

    def test_foreign_account(self, store: JournalStore, account):
        mallory = JournalService(store, user_id="mallory")

        with pytest.raises(PermissionDeniedError):
            mallory.get_account(account.id)
        with pytest.raises(PermissionDeniedError):
            mallory.delete_account(account.id)
        with pytest.raises(PermissionDeniedError):
            mallory.add_deposit(account.id, 100.0, MONDAY)
        assert mallory.list_accounts() == []

    def test_foreign_entry(self, store: JournalStore, service: JournalService, account):
        entry = service.add_trade(account.id, MONDAY)
        mallory = JournalService(store, user_id="mallory")

        with pytest.raises(PermissionDeniedError):
            mallory.set_trade_pnl(entry.id, PnLBreakdown(net_pnl=1.0))
        with pytest.raises(PermissionDeniedError):
            mallory.delete_entry(entry.id)

    def test_foreign_symbol_on_trade(self, store: JournalStore, service: JournalService, account):
        mallory = JournalService(store, user_id="mallory")
        symbol = mallory.create_symbol("gbpusd")

        with pytest.raises(PermissionDeniedError):
            service.add_trade(account.id, MONDAY, symbol_id=symbol.id)

    def test_unknown_ids(self, service: JournalService):
        with pytest.raises(NotFoundError):
            service.get_account("nope")
        with pytest.raises(NotFoundError):
            service.get_entry("nope")
        with pytest.raises(NotFoundError):
            service.find_account("Nope")


class TestAccounts:
    def test_create_normalizes_currency(self, account):
        assert account.currency == "USD"
        assert account.name == "Main"

    def test_required_fields(self, service: JournalService):
        with pytest.raises(ValidationError):
            service.create_account("", 100.0, "USD")
        with pytest.raises(ValidationError):
            service.create_account("Main", 100.0, "")

    def test_find_by_name_or_id(self, service: JournalService, account):
        assert service.find_account("Main").id == account.id
        assert service.find_account(account.id).id == account.id

    def test_update(self, service: JournalService, account):
        updated = service.update_account(
            account.id, AccountUpdate(name="Prop", initial_balance=5000.0, currency="eur")
        )

        assert updated.name == "Prop"
        assert updated.initial_balance == 5000.0
        assert updated.currency == "EUR"
        assert service.get_account(account.id).name == "Prop"

    def test_update_keeps_unset_fields(self, service: JournalService, account):
        updated = service.update_account(account.id, AccountUpdate(name="Renamed"))

        assert updated.initial_balance == 10000.0
        assert updated.currency == "USD"

    def test_delete_removes_entries(self, store: JournalStore, service: JournalService, account):
        service.add_deposit(account.id, 100.0, MONDAY)

        service.delete_account(account.id)

        assert service.list_accounts() == []
        assert store.get_account_entries(account.id) == []


class TestTrialLimits:
    """
    **Feature: trade-journal, Property 15: Trial Limits**

    Without a subscription a user may keep one account and record ten
    trades; with one there is no limit.
    """

    def test_second_account_needs_subscription(
        self, store: JournalStore, service: JournalService, account
    ):
        with pytest.raises(LimitReachedError):
            service.create_account("Second", 0.0, "USD")

        subscribe(store, "alice")

        assert service.create_account("Second", 0.0, "USD").name == "Second"

    def test_eleventh_trade_needs_subscription(
        self, store: JournalStore, service: JournalService, account
    ):
        for _ in range(10):
            service.add_trade(account.id, MONDAY)

        limits = service.check_trial_limits()
        assert limits.trade_count == 10
        assert not limits.can_add_trade

        with pytest.raises(LimitReachedError):
            service.add_trade(account.id, MONDAY)

        # Cash movements are not trades
        service.add_deposit(account.id, 50.0, MONDAY)

        subscribe(store, "alice")
        assert service.add_trade(account.id, MONDAY).row_number == 12

    def test_limits_are_per_user(self, store: JournalStore, account):
        bob = JournalService(store, user_id="bob")

        assert bob.check_trial_limits().can_add_account
        assert bob.create_account("Main", 0.0, "USD").user_id == "bob"


class TestSubscriptions:
    def test_trial_has_no_subscription(self, service: JournalService):
        assert service.get_subscription() is None
        assert not service.check_trial_limits().has_subscription

    def test_subscribe_lifts_limits(self, service: JournalService, account):
        sub = service.subscribe("monthly", 30)

        assert sub.plan_name == "monthly"
        assert service.get_subscription() == sub
        assert sub.days_remaining(datetime.now()) == 30
        assert service.check_trial_limits().can_add_account
        assert service.create_account("Second", 0.0, "USD").name == "Second"

    def test_renewal_extends_current_period(self, service: JournalService):
        first = service.subscribe("monthly", 30)
        second = service.subscribe("yearly", 365)

        assert second.start_date == first.end_date
        assert second.end_date == first.end_date + timedelta(days=365)
        assert service.get_subscription().plan_name == "yearly"

    @pytest.mark.parametrize("plan_name, days", [("", 30), ("  ", 30), ("monthly", 0)])
    def test_invalid_subscription(self, service: JournalService, plan_name: str, days: int):
        with pytest.raises(ValidationError):
            service.subscribe(plan_name, days)

        assert service.get_subscription() is None

    def test_per_user(self, store: JournalStore, service: JournalService):
        service.subscribe("monthly", 30)

        assert JournalService(store, user_id="bob").get_subscription() is None


class TestCashMovements:
    """
    **Feature: trade-journal, Property 16: Cash Movement Signs**

    Amounts are given as positive magnitudes; deposits add to and
    withdrawals subtract from the balance.
    """

    def test_signs(self, service: JournalService, account):
        deposit = service.add_deposit(account.id, 500.0, MONDAY)
        withdrawal = service.add_withdrawal(account.id, 200.0, MONDAY, notes="fees")

        assert deposit.net_pnl == 500.0
        assert withdrawal.net_pnl == -200.0
        assert withdrawal.notes == "fees"
        assert service.get_account_statistics(account.id).current_balance == 10300.0

    @pytest.mark.parametrize("amount", [0.0, -50.0])
    def test_non_positive_amounts(self, service: JournalService, account, amount: float):
        with pytest.raises(ValidationError):
            service.add_deposit(account.id, amount, MONDAY)
        with pytest.raises(ValidationError):
            service.add_withdrawal(account.id, amount, MONDAY)

    @pytest.mark.parametrize("amount", [math.inf, -math.inf, math.nan])
    def test_non_finite_amounts(self, service: JournalService, account, amount: float):
        with pytest.raises(ValidationError, match="finite"):
            service.add_deposit(account.id, amount, MONDAY)
        with pytest.raises(ValidationError, match="finite"):
            service.add_withdrawal(account.id, amount, MONDAY)

        assert service.get_ledger(account.id).views == []

    def test_non_finite_edits(self, service: JournalService, account):
        deposit = service.add_deposit(account.id, 500.0, MONDAY)
        trade = service.add_trade(account.id, MONDAY)

        with pytest.raises(ValidationError):
            service.update_entry(deposit.id, net_pnl=math.inf)
        with pytest.raises(ValidationError):
            service.update_entry(trade.id, net_pnl=math.nan)
        with pytest.raises(ValidationError):
            service.update_entry(trade.id, size=math.inf)

        assert service.get_account_statistics(account.id).current_balance == 10500.0

    def test_edit_with_wrong_sign(self, service: JournalService, account):
        deposit = service.add_deposit(account.id, 500.0, MONDAY)

        with pytest.raises(ValidationError):
            service.update_entry(deposit.id, net_pnl=-500.0)

    def test_trade_fields_rejected(self, service: JournalService, account):
        deposit = service.add_deposit(account.id, 500.0, MONDAY)

        with pytest.raises(ValidationError):
            service.update_entry(deposit.id, direction="buy")
        with pytest.raises(ValidationError):
            service.set_trade_pnl(deposit.id, PnLBreakdown(net_pnl=10.0))
        with pytest.raises(ValidationError):
            service.close_trade(deposit.id, MONDAY)


class TestTrades:
    def test_add_trade_with_references(self, service: JournalService, account):
        symbol = service.create_symbol(" eurusd ")
        setup = service.create_setup("Breakout", "Range breakout")

        entry = service.add_trade(
            account.id,
            MONDAY,
            show_entry_time=True,
            symbol_id=symbol.id,
            setup_id=setup.id,
            direction="buy",
            size=1.5,
            risk_percentage=1.0,
            entry_emotions="calm",
        )

        assert symbol.name == "EURUSD"
        assert entry.row_number == 1
        assert entry.trade.symbol_id == symbol.id
        assert entry.trade.direction == "buy"
        assert entry.net_pnl is None

    def test_invalid_trade_fields(self, service: JournalService, account):
        with pytest.raises(ValidationError):
            service.add_trade(account.id, MONDAY, size=-1.0)
        with pytest.raises(NotFoundError):
            service.add_trade(account.id, MONDAY, symbol_id="missing")

    def test_update_entry_fields(self, service: JournalService, account):
        entry = service.add_trade(account.id, MONDAY, direction="buy", notes="first")

        updated = service.update_entry(entry.id, direction="sell", notes=None, size=2.0)

        assert updated.trade.direction == "sell"
        assert updated.trade.size == 2.0
        assert updated.notes is None
        assert service.get_entry(entry.id).trade.direction == "sell"

    def test_unknown_field(self, service: JournalService, account):
        entry = service.add_trade(account.id, MONDAY)

        with pytest.raises(ValidationError):
            service.update_entry(entry.id, colour="blue")

    def test_find_entry_by_row(self, service: JournalService, account):
        service.add_deposit(account.id, 10.0, MONDAY)
        trade = service.add_trade(account.id, MONDAY)

        assert service.find_entry("Main", 2).id == trade.id
        with pytest.raises(NotFoundError):
            service.find_entry("Main", 9)

    def test_deleted_symbol_keeps_trade_editable(self, service: JournalService, account):
        symbol = service.create_symbol("XAUUSD")
        entry = service.add_trade(account.id, MONDAY, symbol_id=symbol.id)
        service.delete_symbol(symbol.id)

        updated = service.set_trade_pnl(entry.id, PnLBreakdown(net_pnl=150.0))

        assert updated.trade.symbol_id == symbol.id
        assert updated.net_pnl == 150.0


class TestTradePnL:
    """
    **Feature: trade-journal, Property 17: Detailed P&L**

    Detailed P&L derives net = gross - commission + swap and keeps the
    components; simple P&L clears them.
    """

    def test_detailed_then_simple(self, service: JournalService, account):
        entry = service.add_trade(account.id, MONDAY)

        detailed = service.set_trade_pnl(
            entry.id, PnLBreakdown(gross_pnl=270.0, commission=20.0, swap=-5.0)
        )
        assert detailed.net_pnl == 245.0
        assert detailed.trade.gross_pnl == 270.0
        assert detailed.trade.commission == 20.0
        assert detailed.trade.swap == -5.0

        simple = service.set_trade_pnl(entry.id, PnLBreakdown(net_pnl=-130.0))
        assert simple.net_pnl == -130.0
        assert simple.trade.gross_pnl is None
        assert simple.trade.commission is None

    def test_close_trade(self, service: JournalService, account):
        checklist = service.create_checklist("exit", "Exit", ["Target hit", "No revenge"])
        entry = service.add_trade(account.id, MONDAY)
        exit_date = MONDAY + timedelta(days=2, hours=5)

        closed = service.close_trade(
            entry.id,
            exit_date,
            show_exit_time=True,
            pnl=PnLBreakdown(net_pnl=320.0),
            exit_checklist_id=checklist.id,
            exit_checked=["2"],
            exit_emotions="relieved",
        )

        assert closed.trade.exit_date == exit_date
        assert closed.trade.show_exit_time
        assert closed.net_pnl == 320.0
        assert closed.trade.exit_checklist_results == {
            checklist.items[0].id: False,
            checklist.items[1].id: True,
        }

        view = service.get_ledger(account.id).views[0]
        assert view.exit_weekday == "Wednesday"
        assert view.exit_score == 1
        assert view.outcome == "win"

    def test_exit_before_entry(self, service: JournalService, account):
        entry = service.add_trade(account.id, MONDAY)

        with pytest.raises(ValidationError):
            service.close_trade(entry.id, MONDAY - timedelta(hours=1))

    def test_entry_date_past_exit(self, service: JournalService, account):
        entry = service.add_trade(account.id, MONDAY)
        service.close_trade(entry.id, MONDAY + timedelta(days=2))

        with pytest.raises(ValidationError, match="Exit date cannot be before the entry date"):
            service.update_entry(entry.id, entry_date=MONDAY + timedelta(days=3))
        with pytest.raises(ValidationError):
            service.update_entry(entry.id, exit_date=MONDAY - timedelta(days=1))

        moved = service.update_entry(entry.id, entry_date=MONDAY + timedelta(days=1))
        assert moved.entry_date == MONDAY + timedelta(days=1)
        assert service.get_entry(entry.id).trade.exit_date == MONDAY + timedelta(days=2)


class TestChecklistSnapshots:
    """
    **Feature: trade-journal, Property 18: Checklist Snapshot Independence**

    Editing or deleting a checklist never changes the results already
    recorded on trades.
    """

    def test_edit_does_not_touch_history(self, service: JournalService, account):
        checklist = service.create_checklist("entry", "Basics", ["Trend", "Risk", "News"])
        entry = service.add_trade(
            account.id, MONDAY, entry_checklist_id=checklist.id, entry_checked=["1", "3"]
        )
        before = entry.trade.entry_checklist_results

        service.update_checklist(checklist.id, name="Core", item_texts=["Only one"])
        service.delete_checklist(checklist.id)

        stored = service.get_entry(entry.id)
        assert stored.trade.entry_checklist_results == before
        assert sum(before.values()) == 2
        assert service.get_ledger(account.id).views[0].entry_score == 2

    def test_checked_by_item_id(self, service: JournalService, account):
        checklist = service.create_checklist("entry", "Basics", ["Trend", "Risk"])
        item_id = checklist.items[1].id

        entry = service.add_trade(
            account.id, MONDAY, entry_checklist_id=checklist.id, entry_checked=[item_id]
        )

        assert entry.trade.entry_checklist_results[item_id] is True

    def test_unknown_item(self, service: JournalService, account):
        checklist = service.create_checklist("entry", "Basics", ["Trend"])

        with pytest.raises(ValidationError):
            service.add_trade(
                account.id, MONDAY, entry_checklist_id=checklist.id, entry_checked=["4"]
            )

    def test_checked_without_checklist(self, service: JournalService, account):
        with pytest.raises(ValidationError):
            service.add_trade(account.id, MONDAY, entry_checked=["1"])

    def test_wrong_kind(self, service: JournalService, account):
        exit_checklist = service.create_checklist("exit", "Exit", ["Target"])

        with pytest.raises(NotFoundError):
            service.add_trade(account.id, MONDAY, entry_checklist_id=exit_checklist.id)

    def test_recheck_on_edit(self, service: JournalService, account):
        checklist = service.create_checklist("entry", "Basics", ["Trend", "Risk"])
        entry = service.add_trade(
            account.id, MONDAY, entry_checklist_id=checklist.id, entry_checked=["1"]
        )

        updated = service.update_entry(entry.id, entry_checked=["1", "2"])

        assert all(updated.trade.entry_checklist_results.values())

    def test_update_validation(self, service: JournalService):
        checklist = service.create_checklist("entry", "Basics", ["Trend"])

        with pytest.raises(ValidationError):
            service.update_checklist(checklist.id, item_texts=["  "])
        with pytest.raises(ValidationError):
            service.create_checklist("entry", "Empty", [])
        with pytest.raises(DuplicateNameError):
            service.create_checklist("entry", "Basics", ["Other"])


class TestLedger:
    def test_ledger_scenario(self, service: JournalService, account):
        for net in (500.0, -200.0, 300.0):
            entry = service.add_trade(account.id, MONDAY)
            service.set_trade_pnl(entry.id, PnLBreakdown(net_pnl=net))

        report = service.get_ledger(account.id)

        assert [v.running_balance for v in report.views] == [10500.0, 10300.0, 10600.0]
        assert round(report.statistics.win_rate, 2) == 66.67
        assert report.statistics.total_pnl == 600.0

    def test_delete_middle_entry(self, service: JournalService, account):
        entries = []
        for net in (500.0, -200.0, 300.0):
            entry = service.add_trade(account.id, MONDAY)
            entries.append(service.set_trade_pnl(entry.id, PnLBreakdown(net_pnl=net)))

        service.delete_entry(entries[1].id)
        report = service.get_ledger(account.id)

        assert [v.entry.row_number for v in report.views] == [1, 3]
        assert report.statistics.current_balance == 10800.0

    def test_custom_policy(self, store: JournalStore):
        strict = JournalService(
            store, user_id="carol", policy=OutcomePolicy(win_threshold=1000.0), locale="en"
        )
        acc = strict.create_account("Main", 0.0, "USD")
        entry = strict.add_trade(acc.id, MONDAY)
        strict.set_trade_pnl(entry.id, PnLBreakdown(net_pnl=500.0))

        stats = strict.get_account_statistics(acc.id)

        assert stats.winning_trades == 0
        assert stats.neutral_trades == 1
        assert stats.balance_change_percentage == 0
