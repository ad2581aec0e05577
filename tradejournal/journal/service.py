"""Journal service: guarded operations on a user's journal.

Every operation resolves the current user, checks that referenced
records exist and belong to that user, enforces the trial tier limits,
and only then touches the store.
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Iterable, Optional

from pydantic import ValidationError as PydanticValidationError

from tradejournal.db.store import JournalStore
from tradejournal.errors import (
    AuthenticationError,
    LimitReachedError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from tradejournal.ledger import DEFAULT_POLICY, OutcomePolicy, build_ledger
from tradejournal.models import (
    AccountStatistics,
    AccountUpdate,
    Checklist,
    JournalEntry,
    LedgerReport,
    PnLBreakdown,
    Subscription,
    TradeDetails,
    TradingAccount,
    TradingSetup,
    TradingSymbol,
    TrialLimits,
)

logger = logging.getLogger(__name__)

# Entry fields that are not part of the trade payload
ENVELOPE_FIELDS = {"entry_date", "show_entry_time", "net_pnl", "notes"}
CHECKED_FIELDS = {"entry_checked", "exit_checked"}


def _error_message(e: PydanticValidationError) -> str:
    return "; ".join(err["msg"] for err in e.errors())


class JournalService:
    """Operations on one user's trading journal."""

    def __init__(
        self,
        store: JournalStore,
        user_id: Optional[str],
        policy: OutcomePolicy = DEFAULT_POLICY,
        locale: str = "fa",
    ):
        """Initialize the service.

        Args:
            store: Persistence layer.
            user_id: Current user, or None when unauthenticated.
            policy: Outcome thresholds used for views and statistics.
            locale: Locale of weekday labels.
        """
        self._store = store
        self._user_id = user_id
        self._policy = policy
        self._locale = locale

    @property
    def user_id(self) -> str:
        if not self._user_id:
            raise AuthenticationError("Not logged in. Run 'tradejournal login' first.")
        return self._user_id

    @property
    def locale(self) -> str:
        return self._locale

    def _check_owner(self, record, kind: str) -> None:
        if record.user_id != self.user_id:
            raise PermissionDeniedError(f"{kind} belongs to another user")

    # ==================== Limits ====================

    def check_trial_limits(self) -> TrialLimits:
        """Report what the user may still create under the trial tier."""
        user_id = self.user_id
        return TrialLimits.evaluate(
            has_subscription=self._store.has_active_subscription(user_id),
            account_count=self._store.count_accounts(user_id),
            trade_count=self._store.count_trades(user_id),
        )

    # ==================== Subscriptions ====================

    def get_subscription(self) -> Optional[Subscription]:
        """The active subscription that ends last, or None on the trial tier."""
        return self._store.get_active_subscription(self.user_id)

    def subscribe(self, plan_name: str, days: int) -> Subscription:
        """Add a paid period of ``days`` days.

        When a subscription is still active the new period starts where it
        ends, so renewing early keeps the remaining days.

        Raises:
            ValidationError: If the plan name is empty or days is not positive.
        """
        if not plan_name.strip():
            raise ValidationError("Plan name is required")
        if days < 1:
            raise ValidationError("Subscription length must be at least one day")

        current = self.get_subscription()
        start = current.end_date if current is not None else datetime.now()
        subscription = self._store.add_subscription(
            self.user_id, plan_name.strip(), start, start + timedelta(days=days)
        )
        logger.info(
            "Subscribed %s to %s until %s",
            self.user_id,
            subscription.plan_name,
            subscription.end_date.isoformat(),
        )
        return subscription

    # ==================== Accounts ====================

    def list_accounts(self) -> list[TradingAccount]:
        return self._store.get_user_accounts(self.user_id)

    def get_account(self, account_id: str) -> TradingAccount:
        """Get an owned account.

        Raises:
            NotFoundError: If the account does not exist.
            PermissionDeniedError: If it belongs to another user.
        """
        account = self._store.get_account(account_id)
        if account is None:
            raise NotFoundError("Account", account_id)
        self._check_owner(account, "Account")
        return account

    def find_account(self, ref: str) -> TradingAccount:
        """Resolve an account by id or by name."""
        if self._store.get_account(ref) is not None:
            return self.get_account(ref)
        for account in self.list_accounts():
            if account.name == ref:
                return account
        raise NotFoundError("Account", ref)

    def create_account(self, name: str, initial_balance: float, currency: str) -> TradingAccount:
        """Create an account, subject to the trial account limit."""
        if not name or not currency:
            raise ValidationError("Name, initial balance and currency are required")
        if not math.isfinite(initial_balance):
            raise ValidationError("Initial balance must be a finite number")
        if not self.check_trial_limits().can_add_account:
            raise LimitReachedError(
                "Trial account limit reached. Subscribe to add more accounts."
            )
        return self._store.create_account(self.user_id, name, initial_balance, currency.upper())

    def update_account(self, account_id: str, changes: AccountUpdate) -> TradingAccount:
        account = self.get_account(account_id)
        values = changes.model_dump(exclude_none=True)
        if "currency" in values:
            values["currency"] = values["currency"].upper()
        return self._store.update_account(account.model_copy(update=values))

    def delete_account(self, account_id: str) -> None:
        """Delete an owned account together with all of its entries."""
        self.get_account(account_id)
        self._store.delete_account(account_id)

    # ==================== Symbols & Setups ====================

    def list_symbols(self) -> list[TradingSymbol]:
        return self._store.get_user_symbols(self.user_id)

    def create_symbol(self, name: str) -> TradingSymbol:
        if not name.strip():
            raise ValidationError("Symbol name is required")
        return self._store.create_symbol(self.user_id, name.strip().upper())

    def delete_symbol(self, symbol_id: str) -> None:
        symbol = self._store.get_symbol(symbol_id)
        if symbol is None:
            raise NotFoundError("Symbol", symbol_id)
        self._check_owner(symbol, "Symbol")
        self._store.delete_symbol(symbol_id)

    def find_symbol(self, ref: str) -> TradingSymbol:
        """Resolve a symbol by id or name (case-insensitive)."""
        for symbol in self.list_symbols():
            if ref == symbol.id or ref.upper() == symbol.name:
                return symbol
        raise NotFoundError("Symbol", ref)

    def find_setup(self, ref: str) -> TradingSetup:
        for setup in self.list_setups():
            if ref in (setup.id, setup.name):
                return setup
        raise NotFoundError("Setup", ref)

    def list_setups(self) -> list[TradingSetup]:
        return self._store.get_user_setups(self.user_id)

    def create_setup(self, name: str, description: Optional[str] = None) -> TradingSetup:
        if not name.strip():
            raise ValidationError("Setup name is required")
        return self._store.create_setup(self.user_id, name.strip(), description)

    def update_setup(
        self, setup_id: str, name: Optional[str] = None, description: Optional[str] = None
    ) -> TradingSetup:
        setup = self._get_setup(setup_id)
        values = {}
        if name is not None:
            values["name"] = name.strip()
        if description is not None:
            values["description"] = description
        return self._store.update_setup(setup.model_copy(update=values))

    def delete_setup(self, setup_id: str) -> None:
        self._get_setup(setup_id)
        self._store.delete_setup(setup_id)

    def _get_setup(self, setup_id: str) -> TradingSetup:
        setup = self._store.get_setup(setup_id)
        if setup is None:
            raise NotFoundError("Setup", setup_id)
        self._check_owner(setup, "Setup")
        return setup

    # ==================== Checklists ====================

    def list_checklists(self, kind: str) -> list[Checklist]:
        return self._store.get_user_checklists(self.user_id, kind)

    def get_checklist(self, checklist_id: str, kind: Optional[str] = None) -> Checklist:
        """Get an owned checklist, optionally requiring a kind."""
        checklist = self._store.get_checklist(checklist_id)
        if checklist is None or (kind is not None and checklist.kind != kind):
            raise NotFoundError(f"{(kind or '').capitalize()} checklist".strip(), checklist_id)
        self._check_owner(checklist, "Checklist")
        return checklist

    def find_checklist(self, kind: str, ref: str) -> Checklist:
        for checklist in self.list_checklists(kind):
            if ref in (checklist.id, checklist.name):
                return checklist
        raise NotFoundError(f"{kind.capitalize()} checklist", ref)

    def create_checklist(self, kind: str, name: str, item_texts: list[str]) -> Checklist:
        texts = [text.strip() for text in item_texts if text.strip()]
        if not name.strip() or not texts:
            raise ValidationError("Checklist name and items are required")
        return self._store.create_checklist(self.user_id, kind, name.strip(), texts)

    def update_checklist(
        self,
        checklist_id: str,
        name: Optional[str] = None,
        item_texts: Optional[list[str]] = None,
    ) -> Checklist:
        """Rename a checklist or replace its items.

        Items whose text is unchanged keep their id; new texts get new
        items. Entries keep the results they recorded earlier.
        """
        checklist = self.get_checklist(checklist_id)
        texts = None
        if name is not None:
            if not name.strip():
                raise ValidationError("Checklist name cannot be empty")
            checklist = checklist.model_copy(update={"name": name.strip()})
        if item_texts is not None:
            texts = [text.strip() for text in item_texts if text.strip()]
            if not texts:
                raise ValidationError("A checklist needs at least one item")
        return self._store.update_checklist(checklist, texts)

    def delete_checklist(self, checklist_id: str) -> None:
        self.get_checklist(checklist_id)
        self._store.delete_checklist(checklist_id)

    def _snapshot(
        self, checklist_id: Optional[str], checked: Optional[Iterable[str]], kind: str
    ) -> Optional[dict[str, bool]]:
        """Freeze checklist results against the checklist's current items.

        ``checked`` holds item ids or 1-based item positions.
        """
        if checklist_id is None:
            if checked:
                raise ValidationError(f"Checked {kind} items given without a {kind} checklist")
            return None
        checklist = self.get_checklist(checklist_id, kind)
        items = checklist.ordered_items()
        checked_ids = set()
        for ref in checked or []:
            ref = str(ref)
            if any(item.id == ref for item in items):
                checked_ids.add(ref)
            elif ref.isdigit() and 1 <= int(ref) <= len(items):
                checked_ids.add(items[int(ref) - 1].id)
            else:
                raise ValidationError(f"Unknown {kind} checklist item: {ref}")
        return checklist.snapshot_results(checked_ids)

    # ==================== Entries ====================

    def _get_entry(self, entry_id: str) -> JournalEntry:
        entry = self._store.get_entry(entry_id)
        if entry is None:
            raise NotFoundError("Entry", entry_id)
        self._check_owner(entry, "Entry")
        return entry

    def get_entry(self, entry_id: str) -> JournalEntry:
        return self._get_entry(entry_id)

    def find_entry(self, account_ref: str, row_number: int) -> JournalEntry:
        """Resolve an entry by account and row number."""
        account = self.find_account(account_ref)
        entry = self._store.get_entry_by_row(account.id, row_number)
        if entry is None:
            raise NotFoundError("Entry", f"{account.name}#{row_number}")
        return entry

    def _check_references(
        self, details: TradeDetails, fields: Iterable[str] = ("symbol_id", "setup_id")
    ) -> None:
        """Check that referenced symbol and setup exist and are owned.

        Only the named fields are checked, so an entry whose symbol or
        setup was deleted later stays editable.
        """
        if "symbol_id" in fields and details.symbol_id is not None:
            symbol = self._store.get_symbol(details.symbol_id)
            if symbol is None:
                raise NotFoundError("Symbol", details.symbol_id)
            self._check_owner(symbol, "Symbol")
        if "setup_id" in fields and details.setup_id is not None:
            self._get_setup(details.setup_id)

    def add_trade(
        self,
        account_id: str,
        entry_date: datetime,
        show_entry_time: bool = False,
        symbol_id: Optional[str] = None,
        setup_id: Optional[str] = None,
        direction: Optional[str] = None,
        size: Optional[float] = None,
        risk_percentage: Optional[float] = None,
        entry_checklist_id: Optional[str] = None,
        entry_checked: Optional[Iterable[str]] = None,
        entry_emotions: Optional[str] = None,
        entry_screenshot: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> JournalEntry:
        """Record a new trade, subject to the trial trade limit.

        Returns:
            The created entry.

        Raises:
            LimitReachedError: If the trial trade limit is reached.
            ValidationError: If the trade fields are invalid.
        """
        account = self.get_account(account_id)
        if not self.check_trial_limits().can_add_trade:
            raise LimitReachedError("Trial trade limit reached. Subscribe to add more trades.")

        try:
            details = TradeDetails(
                symbol_id=symbol_id,
                setup_id=setup_id,
                direction=direction,
                size=size,
                risk_percentage=risk_percentage,
                entry_checklist_id=entry_checklist_id,
                entry_checklist_results=self._snapshot(entry_checklist_id, entry_checked, "entry"),
                entry_emotions=entry_emotions,
                entry_screenshot=entry_screenshot,
            )
        except PydanticValidationError as e:
            raise ValidationError(_error_message(e)) from e
        self._check_references(details)

        return self._store.create_entry(
            account_id=account.id,
            user_id=self.user_id,
            operation_type="trade",
            entry_date=entry_date,
            show_entry_time=show_entry_time,
            notes=notes,
            trade=details,
        )

    def _add_cash_movement(
        self,
        operation_type: str,
        account_id: str,
        amount: float,
        entry_date: datetime,
        show_entry_time: bool,
        notes: Optional[str],
    ) -> JournalEntry:
        account = self.get_account(account_id)
        if not math.isfinite(amount):
            raise ValidationError(f"{operation_type.capitalize()} amount must be a finite number")
        if amount <= 0:
            raise ValidationError(f"{operation_type.capitalize()} amount must be positive")
        net_pnl = amount if operation_type == "deposit" else -amount
        return self._store.create_entry(
            account_id=account.id,
            user_id=self.user_id,
            operation_type=operation_type,
            entry_date=entry_date,
            show_entry_time=show_entry_time,
            net_pnl=net_pnl,
            notes=notes,
        )

    def add_deposit(
        self,
        account_id: str,
        amount: float,
        entry_date: datetime,
        show_entry_time: bool = False,
        notes: Optional[str] = None,
    ) -> JournalEntry:
        """Record a deposit; ``amount`` is a positive magnitude."""
        return self._add_cash_movement(
            "deposit", account_id, amount, entry_date, show_entry_time, notes
        )

    def add_withdrawal(
        self,
        account_id: str,
        amount: float,
        entry_date: datetime,
        show_entry_time: bool = False,
        notes: Optional[str] = None,
    ) -> JournalEntry:
        """Record a withdrawal; ``amount`` is a positive magnitude."""
        return self._add_cash_movement(
            "withdrawal", account_id, amount, entry_date, show_entry_time, notes
        )

    def update_entry(self, entry_id: str, **changes) -> JournalEntry:
        """Edit fields of an entry.

        Envelope fields (``entry_date``, ``show_entry_time``, ``net_pnl``,
        ``notes``) apply to every entry; any other field is a trade field
        and is only accepted on trades. Only the given fields change, and
        passing None clears a field. Passing ``entry_checked`` or
        ``exit_checked`` re-snapshots the checklist results.

        Raises:
            ValidationError: If a field does not fit the entry.
        """
        entry = self._get_entry(entry_id)
        envelope = {key: changes.pop(key) for key in list(changes) if key in ENVELOPE_FIELDS}

        unknown = set(changes) - set(TradeDetails.model_fields) - CHECKED_FIELDS
        if unknown:
            raise ValidationError("Unknown entry fields: " + ", ".join(sorted(unknown)))
        if changes and not entry.is_trade:
            raise ValidationError(
                f"{entry.operation_type.capitalize()} entries have no trade fields: "
                + ", ".join(sorted(changes))
            )

        trade = entry.trade
        if entry.is_trade:
            current = trade.model_dump() if trade else {}
            for kind in ("entry", "exit"):
                checked = changes.pop(f"{kind}_checked", None)
                checklist_key = f"{kind}_checklist_id"
                if checked is not None or checklist_key in changes:
                    checklist_id = changes.get(checklist_key, current.get(checklist_key))
                    current[f"{kind}_checklist_results"] = self._snapshot(
                        checklist_id, checked, kind
                    )
            current.update(changes)
            try:
                trade = TradeDetails.model_validate(current)
            except PydanticValidationError as e:
                raise ValidationError(_error_message(e)) from e
            self._check_references(trade, fields=set(changes))

        data = entry.model_dump()
        data.update(envelope)
        data["trade"] = trade.model_dump() if trade else None
        try:
            updated = JournalEntry.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(_error_message(e)) from e
        if updated.trade and updated.trade.exit_date and updated.trade.exit_date < updated.entry_date:
            raise ValidationError("Exit date cannot be before the entry date")

        logger.debug("Updating entry %s with %s", entry_id, sorted(envelope) + sorted(changes))
        return self._store.update_entry(updated)

    def set_trade_pnl(self, entry_id: str, pnl: PnLBreakdown) -> JournalEntry:
        """Record the realized P&L of a trade.

        Simple mode sets ``net_pnl`` only; detailed mode also stores the
        gross/commission/swap decomposition and derives ``net_pnl``.
        """
        entry = self._get_entry(entry_id)
        if not entry.is_trade:
            raise ValidationError("P&L can only be recorded on trades")
        return self.update_entry(
            entry_id,
            net_pnl=pnl.resolve_net(),
            gross_pnl=pnl.gross_pnl,
            commission=pnl.commission,
            swap=pnl.swap,
        )

    def close_trade(
        self,
        entry_id: str,
        exit_date: datetime,
        show_exit_time: bool = False,
        pnl: Optional[PnLBreakdown] = None,
        exit_checklist_id: Optional[str] = None,
        exit_checked: Optional[Iterable[str]] = None,
        exit_emotions: Optional[str] = None,
        exit_screenshot: Optional[str] = None,
    ) -> JournalEntry:
        """Fill in the exit side of a trade."""
        entry = self._get_entry(entry_id)
        if not entry.is_trade:
            raise ValidationError("Only trades can be closed")
        changes = {"exit_date": exit_date, "show_exit_time": show_exit_time}
        if exit_checklist_id is not None:
            changes["exit_checklist_id"] = exit_checklist_id
        if exit_checked is not None:
            changes["exit_checked"] = list(exit_checked)
        if exit_emotions is not None:
            changes["exit_emotions"] = exit_emotions
        if exit_screenshot is not None:
            changes["exit_screenshot"] = exit_screenshot
        if pnl is not None:
            changes.update(
                net_pnl=pnl.resolve_net(),
                gross_pnl=pnl.gross_pnl,
                commission=pnl.commission,
                swap=pnl.swap,
            )
        return self.update_entry(entry_id, **changes)

    def delete_entry(self, entry_id: str) -> None:
        self._get_entry(entry_id)
        self._store.delete_entry(entry_id)

    # ==================== Ledger ====================

    def get_ledger(self, account_id: str) -> LedgerReport:
        """Entry views and statistics of an owned account."""
        account = self.get_account(account_id)
        entries = self._store.get_account_entries(account.id)
        return build_ledger(account, entries, self._policy, self._locale)

    def get_account_statistics(self, account_id: str) -> AccountStatistics:
        return self.get_ledger(account_id).statistics
