"""SQLite data store for TradeJournal."""

import json
import logging
import sqlite3
import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional

from tradejournal.errors import DuplicateNameError, NotFoundError
from tradejournal.models import (
    Checklist,
    ChecklistItem,
    JournalEntry,
    Subscription,
    TradeDetails,
    TradingAccount,
    TradingSetup,
    TradingSymbol,
)

logger = logging.getLogger(__name__)

TRADE_COLUMNS = [
    "symbol_id",
    "setup_id",
    "direction",
    "size",
    "risk_percentage",
    "entry_checklist_id",
    "entry_checklist_results",
    "exit_checklist_id",
    "exit_checklist_results",
    "entry_emotions",
    "exit_emotions",
    "entry_screenshot",
    "exit_screenshot",
    "exit_date",
    "show_exit_time",
    "gross_pnl",
    "commission",
    "swap",
]

ENTRY_COLUMNS = [
    "id",
    "account_id",
    "user_id",
    "row_number",
    "operation_type",
    "entry_date",
    "show_entry_time",
    "net_pnl",
    "notes",
    *TRADE_COLUMNS,
    "created_at",
    "updated_at",
]


def _new_id() -> str:
    return str(uuid.uuid4())


def _dump_results(results: Optional[dict[str, bool]]) -> Optional[str]:
    return json.dumps(results) if results is not None else None


def _load_results(raw: Optional[str]) -> Optional[dict[str, bool]]:
    return json.loads(raw) if raw else None


class JournalStore:
    """SQLite-based data store for TradeJournal."""

    REQUIRED_TABLES = [
        "trading_accounts",
        "trading_symbols",
        "trading_setups",
        "checklists",
        "journal_entries",
        "subscriptions",
    ]

    def __init__(self, db_path: Path):
        """Initialize the data store.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = db_path
        self._ensure_db_dir()
        self._init_schema()

    def _ensure_db_dir(self) -> None:
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection with foreign keys enforced."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def _init_schema(self) -> None:
        """Initialize database schema on first run."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()

            # entry_seq only grows, so row numbers are never reused
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS trading_accounts (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    initial_balance REAL NOT NULL,
                    currency TEXT NOT NULL,
                    entry_seq INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    UNIQUE(user_id, name)
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS trading_symbols (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    UNIQUE(user_id, name)
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS trading_setups (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    description TEXT,
                    created_at TEXT NOT NULL,
                    UNIQUE(user_id, name)
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS checklists (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    kind TEXT NOT NULL,
                    name TEXT NOT NULL,
                    items TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    UNIQUE(user_id, kind, name)
                )
            """)

            # Symbol, setup and checklist ids are weak references (no FK)
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS journal_entries (
                    id TEXT PRIMARY KEY,
                    account_id TEXT NOT NULL
                        REFERENCES trading_accounts(id) ON DELETE CASCADE,
                    user_id TEXT NOT NULL,
                    row_number INTEGER NOT NULL,
                    operation_type TEXT NOT NULL,
                    entry_date TEXT NOT NULL,
                    show_entry_time INTEGER NOT NULL DEFAULT 0,
                    net_pnl REAL,
                    notes TEXT,
                    symbol_id TEXT,
                    setup_id TEXT,
                    direction TEXT,
                    size REAL,
                    risk_percentage REAL,
                    entry_checklist_id TEXT,
                    entry_checklist_results TEXT,
                    exit_checklist_id TEXT,
                    exit_checklist_results TEXT,
                    entry_emotions TEXT,
                    exit_emotions TEXT,
                    entry_screenshot TEXT,
                    exit_screenshot TEXT,
                    exit_date TEXT,
                    show_exit_time INTEGER NOT NULL DEFAULT 0,
                    gross_pnl REAL,
                    commission REAL,
                    swap REAL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    UNIQUE(account_id, row_number)
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS subscriptions (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    plan_name TEXT NOT NULL,
                    start_date TEXT NOT NULL,
                    end_date TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'active'
                )
            """)

            conn.commit()
        finally:
            conn.close()

    def get_tables(self) -> list[str]:
        """Get list of all tables in the database."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
            )
            return [row["name"] for row in cursor.fetchall()]
        finally:
            conn.close()

    def _execute_unique(self, sql: str, params: tuple, duplicate_message: str) -> None:
        """Run a write that may hit a per-user unique name constraint."""
        conn = self._get_connection()
        try:
            conn.execute(sql, params)
            conn.commit()
        except sqlite3.IntegrityError as e:
            if "UNIQUE" in str(e):
                raise DuplicateNameError(duplicate_message) from e
            raise
        finally:
            conn.close()

    # ==================== Accounts ====================

    @staticmethod
    def _row_to_account(row: sqlite3.Row) -> TradingAccount:
        return TradingAccount(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            initial_balance=row["initial_balance"],
            currency=row["currency"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def create_account(
        self, user_id: str, name: str, initial_balance: float, currency: str
    ) -> TradingAccount:
        """Create a trading account.

        Args:
            user_id: Owning user.
            name: Account name, unique per user.
            initial_balance: Starting balance.
            currency: Currency code.

        Returns:
            The created account.

        Raises:
            DuplicateNameError: If the user already has an account with this name.
        """
        account = TradingAccount(
            id=_new_id(),
            user_id=user_id,
            name=name,
            initial_balance=initial_balance,
            currency=currency,
        )
        self._execute_unique(
            """
            INSERT INTO trading_accounts
            (id, user_id, name, initial_balance, currency, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                account.id,
                account.user_id,
                account.name,
                account.initial_balance,
                account.currency,
                account.created_at.isoformat(),
                account.updated_at.isoformat(),
            ),
            f"An account named '{name}' already exists",
        )
        logger.info("Created account %s for user_id=%s", account.id, user_id)
        return account

    def get_account(self, account_id: str) -> Optional[TradingAccount]:
        """Get an account by ID.

        Returns:
            Account if found, None otherwise.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM trading_accounts WHERE id = ?", (account_id,))
            row = cursor.fetchone()
            return self._row_to_account(row) if row else None
        finally:
            conn.close()

    def get_user_accounts(self, user_id: str) -> list[TradingAccount]:
        """Get all accounts of a user, newest first."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT * FROM trading_accounts WHERE user_id = ? ORDER BY created_at DESC",
                (user_id,),
            )
            return [self._row_to_account(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def update_account(self, account: TradingAccount) -> TradingAccount:
        """Persist name, initial balance and currency of an account."""
        updated = account.model_copy(update={"updated_at": datetime.now()})
        self._execute_unique(
            """
            UPDATE trading_accounts
            SET name = ?, initial_balance = ?, currency = ?, updated_at = ?
            WHERE id = ?
            """,
            (
                updated.name,
                updated.initial_balance,
                updated.currency,
                updated.updated_at.isoformat(),
                updated.id,
            ),
            f"An account named '{updated.name}' already exists",
        )
        return updated

    def delete_account(self, account_id: str) -> None:
        """Delete an account and, by cascade, all of its entries."""
        conn = self._get_connection()
        try:
            conn.execute("DELETE FROM trading_accounts WHERE id = ?", (account_id,))
            conn.commit()
            logger.info("Deleted account %s", account_id)
        finally:
            conn.close()

    def count_accounts(self, user_id: str) -> int:
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT COUNT(*) AS count FROM trading_accounts WHERE user_id = ?",
                (user_id,),
            )
            return cursor.fetchone()["count"]
        finally:
            conn.close()

    # ==================== Symbols ====================

    def create_symbol(self, user_id: str, name: str) -> TradingSymbol:
        """Create a trading symbol; names are unique per user."""
        symbol = TradingSymbol(id=_new_id(), user_id=user_id, name=name)
        self._execute_unique(
            "INSERT INTO trading_symbols (id, user_id, name, created_at) VALUES (?, ?, ?, ?)",
            (symbol.id, symbol.user_id, symbol.name, symbol.created_at.isoformat()),
            f"Symbol '{name}' already exists",
        )
        return symbol

    def get_symbol(self, symbol_id: str) -> Optional[TradingSymbol]:
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM trading_symbols WHERE id = ?", (symbol_id,))
            row = cursor.fetchone()
            if row:
                return TradingSymbol(
                    id=row["id"],
                    user_id=row["user_id"],
                    name=row["name"],
                    created_at=datetime.fromisoformat(row["created_at"]),
                )
            return None
        finally:
            conn.close()

    def get_user_symbols(self, user_id: str) -> list[TradingSymbol]:
        """Get all symbols of a user, sorted by name."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT * FROM trading_symbols WHERE user_id = ? ORDER BY name",
                (user_id,),
            )
            return [
                TradingSymbol(
                    id=row["id"],
                    user_id=row["user_id"],
                    name=row["name"],
                    created_at=datetime.fromisoformat(row["created_at"]),
                )
                for row in cursor.fetchall()
            ]
        finally:
            conn.close()

    def delete_symbol(self, symbol_id: str) -> None:
        """Delete a symbol. Entries keep their dangling reference."""
        conn = self._get_connection()
        try:
            conn.execute("DELETE FROM trading_symbols WHERE id = ?", (symbol_id,))
            conn.commit()
        finally:
            conn.close()

    # ==================== Setups ====================

    @staticmethod
    def _row_to_setup(row: sqlite3.Row) -> TradingSetup:
        return TradingSetup(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            description=row["description"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def create_setup(
        self, user_id: str, name: str, description: Optional[str] = None
    ) -> TradingSetup:
        """Create a trading setup; names are unique per user."""
        setup = TradingSetup(id=_new_id(), user_id=user_id, name=name, description=description)
        self._execute_unique(
            """
            INSERT INTO trading_setups (id, user_id, name, description, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (setup.id, setup.user_id, setup.name, setup.description, setup.created_at.isoformat()),
            f"Setup '{name}' already exists",
        )
        return setup

    def get_setup(self, setup_id: str) -> Optional[TradingSetup]:
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM trading_setups WHERE id = ?", (setup_id,))
            row = cursor.fetchone()
            return self._row_to_setup(row) if row else None
        finally:
            conn.close()

    def get_user_setups(self, user_id: str) -> list[TradingSetup]:
        """Get all setups of a user, sorted by name."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT * FROM trading_setups WHERE user_id = ? ORDER BY name",
                (user_id,),
            )
            return [self._row_to_setup(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def update_setup(self, setup: TradingSetup) -> TradingSetup:
        self._execute_unique(
            "UPDATE trading_setups SET name = ?, description = ? WHERE id = ?",
            (setup.name, setup.description, setup.id),
            f"Setup '{setup.name}' already exists",
        )
        return setup

    def delete_setup(self, setup_id: str) -> None:
        """Delete a setup. Entries keep their dangling reference."""
        conn = self._get_connection()
        try:
            conn.execute("DELETE FROM trading_setups WHERE id = ?", (setup_id,))
            conn.commit()
        finally:
            conn.close()

    # ==================== Checklists ====================

    @staticmethod
    def _row_to_checklist(row: sqlite3.Row) -> Checklist:
        return Checklist(
            id=row["id"],
            user_id=row["user_id"],
            kind=row["kind"],
            name=row["name"],
            items=[ChecklistItem(**item) for item in json.loads(row["items"])],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def create_checklist(
        self, user_id: str, kind: str, name: str, item_texts: list[str]
    ) -> Checklist:
        """Create an entry or exit checklist.

        Args:
            user_id: Owning user.
            kind: 'entry' or 'exit'.
            name: Checklist name, unique per user and kind.
            item_texts: Item texts in display order.

        Returns:
            The created checklist.
        """
        checklist = Checklist(
            id=_new_id(),
            user_id=user_id,
            kind=kind,
            name=name,
            items=[
                ChecklistItem(id=_new_id(), text=text, order=index)
                for index, text in enumerate(item_texts)
            ],
        )
        self._execute_unique(
            """
            INSERT INTO checklists (id, user_id, kind, name, items, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                checklist.id,
                checklist.user_id,
                checklist.kind,
                checklist.name,
                json.dumps([item.model_dump() for item in checklist.items]),
                checklist.created_at.isoformat(),
                checklist.updated_at.isoformat(),
            ),
            f"A {kind} checklist named '{name}' already exists",
        )
        return checklist

    def get_checklist(self, checklist_id: str) -> Optional[Checklist]:
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM checklists WHERE id = ?", (checklist_id,))
            row = cursor.fetchone()
            return self._row_to_checklist(row) if row else None
        finally:
            conn.close()

    def get_user_checklists(self, user_id: str, kind: str) -> list[Checklist]:
        """Get all checklists of one kind for a user, sorted by name."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT * FROM checklists WHERE user_id = ? AND kind = ? ORDER BY name",
                (user_id, kind),
            )
            return [self._row_to_checklist(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def update_checklist(
        self, checklist: Checklist, item_texts: Optional[list[str]] = None
    ) -> Checklist:
        """Persist name and, optionally, a new item list of a checklist.

        Items whose text is unchanged keep their id; other texts get new
        ids. Entries that already reference the checklist keep their
        frozen results.
        """
        values = {"updated_at": datetime.now()}
        if item_texts is not None:
            existing = {item.text: item.id for item in checklist.items}
            items = []
            for index, text in enumerate(item_texts):
                item_id = existing.pop(text, None) or _new_id()
                items.append(ChecklistItem(id=item_id, text=text, order=index))
            values["items"] = items
        updated = checklist.model_copy(update=values)
        self._execute_unique(
            "UPDATE checklists SET name = ?, items = ?, updated_at = ? WHERE id = ?",
            (
                updated.name,
                json.dumps([item.model_dump() for item in updated.items]),
                updated.updated_at.isoformat(),
                updated.id,
            ),
            f"A {updated.kind} checklist named '{updated.name}' already exists",
        )
        return updated

    def delete_checklist(self, checklist_id: str) -> None:
        """Delete a checklist. Entries keep their id and frozen results."""
        conn = self._get_connection()
        try:
            conn.execute("DELETE FROM checklists WHERE id = ?", (checklist_id,))
            conn.commit()
        finally:
            conn.close()

    # ==================== Journal Entries ====================

    @staticmethod
    def _entry_to_params(entry: JournalEntry) -> dict:
        trade = entry.trade
        params = {
            "id": entry.id,
            "account_id": entry.account_id,
            "user_id": entry.user_id,
            "row_number": entry.row_number,
            "operation_type": entry.operation_type,
            "entry_date": entry.entry_date.isoformat(),
            "show_entry_time": 1 if entry.show_entry_time else 0,
            "net_pnl": entry.net_pnl,
            "notes": entry.notes,
            "created_at": entry.created_at.isoformat(),
            "updated_at": entry.updated_at.isoformat(),
        }
        for column in TRADE_COLUMNS:
            params[column] = getattr(trade, column) if trade else None
        if trade:
            params["entry_checklist_results"] = _dump_results(trade.entry_checklist_results)
            params["exit_checklist_results"] = _dump_results(trade.exit_checklist_results)
            params["exit_date"] = trade.exit_date.isoformat() if trade.exit_date else None
            params["show_exit_time"] = 1 if trade.show_exit_time else 0
        else:
            params["show_exit_time"] = 0
        return params

    @staticmethod
    def _row_to_entry(row: sqlite3.Row) -> JournalEntry:
        trade = None
        if row["operation_type"] == "trade":
            trade = TradeDetails(
                symbol_id=row["symbol_id"],
                setup_id=row["setup_id"],
                direction=row["direction"],
                size=row["size"],
                risk_percentage=row["risk_percentage"],
                entry_checklist_id=row["entry_checklist_id"],
                entry_checklist_results=_load_results(row["entry_checklist_results"]),
                exit_checklist_id=row["exit_checklist_id"],
                exit_checklist_results=_load_results(row["exit_checklist_results"]),
                entry_emotions=row["entry_emotions"],
                exit_emotions=row["exit_emotions"],
                entry_screenshot=row["entry_screenshot"],
                exit_screenshot=row["exit_screenshot"],
                exit_date=datetime.fromisoformat(row["exit_date"]) if row["exit_date"] else None,
                show_exit_time=bool(row["show_exit_time"]),
                gross_pnl=row["gross_pnl"],
                commission=row["commission"],
                swap=row["swap"],
            )
        return JournalEntry(
            id=row["id"],
            account_id=row["account_id"],
            user_id=row["user_id"],
            row_number=row["row_number"],
            operation_type=row["operation_type"],
            entry_date=datetime.fromisoformat(row["entry_date"]),
            show_entry_time=bool(row["show_entry_time"]),
            net_pnl=row["net_pnl"],
            notes=row["notes"],
            trade=trade,
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def create_entry(
        self,
        account_id: str,
        user_id: str,
        operation_type: str,
        entry_date: datetime,
        show_entry_time: bool = False,
        net_pnl: Optional[float] = None,
        notes: Optional[str] = None,
        trade: Optional[TradeDetails] = None,
    ) -> JournalEntry:
        """Create a journal entry with the account's next row number.

        The row number comes from a per-account counter that is bumped in
        the same transaction as the insert.

        Returns:
            The created entry.

        Raises:
            NotFoundError: If the account does not exist.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE trading_accounts SET entry_seq = entry_seq + 1 WHERE id = ?",
                (account_id,),
            )
            if cursor.rowcount == 0:
                raise NotFoundError("Account", account_id)
            cursor.execute(
                "SELECT entry_seq FROM trading_accounts WHERE id = ?", (account_id,)
            )
            row_number = cursor.fetchone()["entry_seq"]

            entry = JournalEntry(
                id=_new_id(),
                account_id=account_id,
                user_id=user_id,
                row_number=row_number,
                operation_type=operation_type,
                entry_date=entry_date,
                show_entry_time=show_entry_time,
                net_pnl=net_pnl,
                notes=notes,
                trade=trade,
            )
            columns = ", ".join(ENTRY_COLUMNS)
            placeholders = ", ".join(f":{column}" for column in ENTRY_COLUMNS)
            cursor.execute(
                f"INSERT INTO journal_entries ({columns}) VALUES ({placeholders})",
                self._entry_to_params(entry),
            )
            conn.commit()
            logger.info(
                "Created %s entry #%d in account %s", operation_type, row_number, account_id
            )
            return entry
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def get_entry(self, entry_id: str) -> Optional[JournalEntry]:
        """Get an entry by ID.

        Returns:
            Entry if found, None otherwise.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM journal_entries WHERE id = ?", (entry_id,))
            row = cursor.fetchone()
            return self._row_to_entry(row) if row else None
        finally:
            conn.close()

    def get_entry_by_row(self, account_id: str, row_number: int) -> Optional[JournalEntry]:
        """Get an entry by its row number within an account."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT * FROM journal_entries WHERE account_id = ? AND row_number = ?",
                (account_id, row_number),
            )
            row = cursor.fetchone()
            return self._row_to_entry(row) if row else None
        finally:
            conn.close()

    def get_account_entries(self, account_id: str) -> list[JournalEntry]:
        """Get all entries of an account in creation order."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT * FROM journal_entries WHERE account_id = ? ORDER BY row_number",
                (account_id,),
            )
            return [self._row_to_entry(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def update_entry(self, entry: JournalEntry) -> JournalEntry:
        """Persist every mutable field of an entry.

        The row number, owner and account are never changed.
        """
        updated = entry.model_copy(update={"updated_at": datetime.now()})
        params = self._entry_to_params(updated)
        mutable = [
            column
            for column in ENTRY_COLUMNS
            if column not in ("id", "account_id", "user_id", "row_number", "created_at")
        ]
        assignments = ", ".join(f"{column} = :{column}" for column in mutable)
        conn = self._get_connection()
        try:
            conn.execute(
                f"UPDATE journal_entries SET {assignments} WHERE id = :id",
                params,
            )
            conn.commit()
            return updated
        finally:
            conn.close()

    def delete_entry(self, entry_id: str) -> None:
        """Delete an entry. Row numbers of other entries are unchanged."""
        conn = self._get_connection()
        try:
            conn.execute("DELETE FROM journal_entries WHERE id = ?", (entry_id,))
            conn.commit()
            logger.info("Deleted entry %s", entry_id)
        finally:
            conn.close()

    def count_trades(self, user_id: str) -> int:
        """Count trade entries of a user across all accounts."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT COUNT(*) AS count FROM journal_entries
                WHERE user_id = ? AND operation_type = 'trade'
                """,
                (user_id,),
            )
            return cursor.fetchone()["count"]
        finally:
            conn.close()

    # ==================== Subscriptions ====================

    @staticmethod
    def _row_to_subscription(row: sqlite3.Row) -> Subscription:
        return Subscription(
            id=row["id"],
            user_id=row["user_id"],
            plan_name=row["plan_name"],
            start_date=datetime.fromisoformat(row["start_date"]),
            end_date=datetime.fromisoformat(row["end_date"]),
            status=row["status"],
        )

    def add_subscription(
        self,
        user_id: str,
        plan_name: str,
        start_date: datetime,
        end_date: datetime,
        status: str = "active",
    ) -> Subscription:
        """Record a subscription for a user."""
        subscription = Subscription(
            id=_new_id(),
            user_id=user_id,
            plan_name=plan_name,
            start_date=start_date,
            end_date=end_date,
            status=status,
        )
        conn = self._get_connection()
        try:
            conn.execute(
                """
                INSERT INTO subscriptions (id, user_id, plan_name, start_date, end_date, status)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    subscription.id,
                    subscription.user_id,
                    subscription.plan_name,
                    subscription.start_date.isoformat(),
                    subscription.end_date.isoformat(),
                    subscription.status,
                ),
            )
            conn.commit()
            return subscription
        finally:
            conn.close()

    def get_active_subscription(
        self, user_id: str, moment: Optional[datetime] = None
    ) -> Optional[Subscription]:
        """Get the active subscription that ends last, if any."""
        moment = moment or datetime.now()
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT * FROM subscriptions
                WHERE user_id = ? AND status = 'active' AND end_date > ?
                ORDER BY end_date DESC
                LIMIT 1
                """,
                (user_id, moment.isoformat()),
            )
            row = cursor.fetchone()
            return self._row_to_subscription(row) if row else None
        finally:
            conn.close()

    def has_active_subscription(self, user_id: str, moment: Optional[datetime] = None) -> bool:
        return self.get_active_subscription(user_id, moment) is not None

    # ==================== Stats ====================

    def get_stats(self) -> dict:
        """Get database statistics.

        Returns:
            Dictionary with table record counts.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            stats = {}
            for table in self.REQUIRED_TABLES:
                cursor.execute(f"SELECT COUNT(*) as count FROM {table}")
                stats[table] = cursor.fetchone()["count"]
            return stats
        finally:
            conn.close()
