"""SQLite data store for TradeJournal."""

import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

from tradejournal.analytics.balance import (
    Reassignment,
    assign_unassigned,
    current_balance,
    ensure_deletable,
    reassign_trades,
)
from tradejournal.analytics.valuation import revaluate, valuate
from tradejournal.errors import ForbiddenError, NotFoundError
from tradejournal.models import (
    AccountType,
    Portfolio,
    Tag,
    TagType,
    Trade,
    TradeInput,
    TradeSide,
    TradeStatus,
    TradeUpdate,
)
from tradejournal.models.trade import as_utc

logger = logging.getLogger(__name__)

# Separator for tag names packed by GROUP_CONCAT
_TAG_SEP = "\x1f"

_TRADE_COLUMNS = (
    "portfolio_id",
    "symbol",
    "side",
    "status",
    "entry_price",
    "entry_date",
    "quantity",
    "exit_price",
    "exit_date",
    "stop_loss",
    "take_profit",
    "commission",
    "swap",
    "gross_pnl",
    "net_pnl",
    "notes",
    "strategy",
    "timeframe",
    "exit_reason",
    "mistakes",
    "lessons_learned",
)

SORTABLE_TRADE_FIELDS = ("entry_date", "exit_date", "gross_pnl", "net_pnl", "created_at")

_PORTFOLIO_FIELDS = ("name", "description", "initial_balance", "currency", "account_type")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _to_db(value):
    """Convert a model value to its SQLite representation."""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (TradeSide, TradeStatus, AccountType, TagType)):
        return value.value
    return value


def _parse_dt(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


class JournalStore:
    """SQLite-based store for trades, portfolios and tags.

    Every read and write is scoped to a user id. Looking up a record
    owned by somebody else raises ``ForbiddenError``; a missing record
    raises ``NotFoundError``.
    """

    REQUIRED_TABLES = [
        "portfolios",
        "trades",
        "tags",
        "trade_tags",
    ]

    def __init__(self, db_path: Path):
        """Initialize the data store.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = Path(db_path)
        self._ensure_db_dir()
        self._init_schema()

    def _ensure_db_dir(self) -> None:
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def _init_schema(self) -> None:
        """Initialize database schema on first run."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()

            # Portfolios table; current balance is derived, never stored
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS portfolios (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    description TEXT,
                    initial_balance REAL NOT NULL,
                    currency TEXT NOT NULL DEFAULT 'USD',
                    account_type TEXT NOT NULL DEFAULT 'DEMO',
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

            # Trades table
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS trades (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    portfolio_id INTEGER REFERENCES portfolios(id),
                    symbol TEXT NOT NULL,
                    side TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'OPEN',
                    entry_price REAL NOT NULL,
                    entry_date TEXT NOT NULL,
                    quantity REAL NOT NULL,
                    exit_price REAL,
                    exit_date TEXT,
                    stop_loss REAL,
                    take_profit REAL,
                    commission REAL NOT NULL DEFAULT 0,
                    swap REAL NOT NULL DEFAULT 0,
                    gross_pnl REAL,
                    net_pnl REAL,
                    notes TEXT,
                    strategy TEXT,
                    timeframe TEXT,
                    exit_reason TEXT,
                    mistakes TEXT,
                    lessons_learned TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

            # Tags table
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS tags (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    type TEXT NOT NULL DEFAULT 'OTHER',
                    UNIQUE(user_id, name)
                )
            """)

            # Trade <-> tag links
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS trade_tags (
                    trade_id INTEGER NOT NULL REFERENCES trades(id) ON DELETE CASCADE,
                    tag_id INTEGER NOT NULL REFERENCES tags(id) ON DELETE CASCADE,
                    PRIMARY KEY (trade_id, tag_id)
                )
            """)

            cursor.execute(
                "CREATE INDEX IF NOT EXISTS idx_trades_user ON trades(user_id, portfolio_id)"
            )

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

    # ==================== Trades ====================

    def _row_to_trade(self, row: sqlite3.Row) -> Trade:
        tag_names = row["tag_names"]
        return Trade(
            id=row["id"],
            user_id=row["user_id"],
            portfolio_id=row["portfolio_id"],
            symbol=row["symbol"],
            side=row["side"],
            status=row["status"],
            entry_price=row["entry_price"],
            entry_date=_parse_dt(row["entry_date"]),
            quantity=row["quantity"],
            exit_price=row["exit_price"],
            exit_date=_parse_dt(row["exit_date"]),
            stop_loss=row["stop_loss"],
            take_profit=row["take_profit"],
            commission=row["commission"],
            swap=row["swap"],
            gross_pnl=row["gross_pnl"],
            net_pnl=row["net_pnl"],
            notes=row["notes"],
            strategy=row["strategy"],
            timeframe=row["timeframe"],
            exit_reason=row["exit_reason"],
            mistakes=row["mistakes"],
            lessons_learned=row["lessons_learned"],
            tags=sorted(tag_names.split(_TAG_SEP)) if tag_names else [],
            created_at=_parse_dt(row["created_at"]),
            updated_at=_parse_dt(row["updated_at"]),
        )

    def _select_trades(
        self,
        conn: sqlite3.Connection,
        where: str,
        params: tuple,
        order_by: str = "t.id",
    ) -> list[Trade]:
        cursor = conn.cursor()
        cursor.execute(
            f"""
            SELECT t.*,
                (SELECT GROUP_CONCAT(g.name, char(31))
                 FROM trade_tags tt JOIN tags g ON g.id = tt.tag_id
                 WHERE tt.trade_id = t.id) AS tag_names
            FROM trades t
            WHERE {where}
            ORDER BY {order_by}
            """,
            params,
        )
        return [self._row_to_trade(row) for row in cursor.fetchall()]

    def _fetch_trade(self, conn: sqlite3.Connection, user_id: str, trade_id: int) -> Trade:
        trades = self._select_trades(conn, "t.id = ?", (trade_id,))
        if not trades:
            raise NotFoundError("Trade", trade_id)
        trade = trades[0]
        if trade.user_id != user_id:
            raise ForbiddenError("You do not have access to this trade")
        return trade

    def _link_tags(
        self, conn: sqlite3.Connection, user_id: str, trade_id: int, names: Iterable[str]
    ) -> None:
        cursor = conn.cursor()
        cursor.execute("DELETE FROM trade_tags WHERE trade_id = ?", (trade_id,))
        for name in names:
            cursor.execute(
                "INSERT OR IGNORE INTO tags (user_id, name, type) VALUES (?, ?, ?)",
                (user_id, name, TagType.OTHER.value),
            )
            cursor.execute(
                "SELECT id FROM tags WHERE user_id = ? AND name = ?", (user_id, name)
            )
            tag_id = cursor.fetchone()["id"]
            cursor.execute(
                "INSERT OR IGNORE INTO trade_tags (trade_id, tag_id) VALUES (?, ?)",
                (trade_id, tag_id),
            )

    def create_trade(self, user_id: str, data: TradeInput) -> Trade:
        """Journal a new trade, valuing it if it has an exit or broker P&L.

        Args:
            user_id: Owner of the trade.
            data: Trade payload.

        Returns:
            The stored trade.
        """
        valuation = valuate(
            side=data.side,
            entry_price=data.entry_price,
            exit_price=data.exit_price,
            quantity=data.quantity,
            commission=data.commission,
            swap=data.swap,
            explicit_net_pnl=data.net_pnl,
            explicit_gross_pnl=data.gross_pnl,
        )

        values = data.model_dump(include=set(_TRADE_COLUMNS))
        values["gross_pnl"] = valuation.gross_pnl
        values["net_pnl"] = valuation.net_pnl

        conn = self._get_connection()
        try:
            if data.portfolio_id is not None:
                self._fetch_portfolio_row(conn, user_id, data.portfolio_id)

            now = _now()
            columns = ("user_id",) + _TRADE_COLUMNS + ("created_at", "updated_at")
            row = (user_id,) + tuple(_to_db(values[c]) for c in _TRADE_COLUMNS) + (now, now)
            cursor = conn.cursor()
            cursor.execute(
                f"INSERT INTO trades ({', '.join(columns)}) "
                f"VALUES ({', '.join('?' for _ in columns)})",
                row,
            )
            trade_id = cursor.lastrowid
            self._link_tags(conn, user_id, trade_id, data.tags)
            conn.commit()

            logger.info(
                "Created trade %s %s %s (%s valuation)",
                trade_id,
                data.side.value,
                data.symbol,
                valuation.source.value,
            )
            return self._fetch_trade(conn, user_id, trade_id)
        finally:
            conn.close()

    def get_trade(self, user_id: str, trade_id: int) -> Trade:
        """Get one of the user's trades.

        Raises:
            NotFoundError: If the trade does not exist.
            ForbiddenError: If it belongs to another user.
        """
        conn = self._get_connection()
        try:
            return self._fetch_trade(conn, user_id, trade_id)
        finally:
            conn.close()

    def update_trade(self, user_id: str, trade_id: int, update: TradeUpdate) -> Trade:
        """Apply a partial update, revaluing P&L when its inputs change.

        Args:
            user_id: Requesting user.
            trade_id: Trade to update.
            update: Fields to change; unset fields keep their stored values.

        Returns:
            The updated trade.
        """
        conn = self._get_connection()
        try:
            current = self._fetch_trade(conn, user_id, trade_id)
            changes = update.changes()
            tags = changes.pop("tags", None)

            if changes.get("portfolio_id") is not None:
                self._fetch_portfolio_row(conn, user_id, changes["portfolio_id"])

            valuation = revaluate(current, changes)
            if valuation is not None:
                changes["gross_pnl"] = valuation.gross_pnl
                changes["net_pnl"] = valuation.net_pnl

            cursor = conn.cursor()
            if changes:
                columns = [c for c in _TRADE_COLUMNS if c in changes]
                assignments = ", ".join(f"{c} = ?" for c in columns)
                cursor.execute(
                    f"UPDATE trades SET {assignments}, updated_at = ? WHERE id = ?",
                    tuple(_to_db(changes[c]) for c in columns) + (_now(), trade_id),
                )
            if tags is not None:
                self._link_tags(conn, user_id, trade_id, tags)
            conn.commit()

            logger.info("Updated trade %s (%s)", trade_id, ", ".join(sorted(changes)) or "tags")
            return self._fetch_trade(conn, user_id, trade_id)
        finally:
            conn.close()

    def delete_trade(self, user_id: str, trade_id: int) -> None:
        """Hard-delete one of the user's trades."""
        conn = self._get_connection()
        try:
            self._fetch_trade(conn, user_id, trade_id)
            conn.execute("DELETE FROM trades WHERE id = ?", (trade_id,))
            conn.commit()
            logger.info("Deleted trade %s", trade_id)
        finally:
            conn.close()

    def get_trades(
        self,
        user_id: str,
        symbol: Optional[str] = None,
        side: Optional[TradeSide] = None,
        status: Optional[TradeStatus] = None,
        portfolio_id: Optional[int] = None,
        unassigned: bool = False,
        strategy: Optional[str] = None,
        from_date: Optional[datetime] = None,
        to_date: Optional[datetime] = None,
        profitability: Optional[str] = None,
        sort_by: str = "entry_date",
        sort_order: str = "desc",
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[Trade]:
        """Get the user's trades, optionally filtered.

        Args:
            user_id: Owner of the trades.
            symbol: Case-insensitive substring of the symbol.
            side: LONG or SHORT.
            status: OPEN, CLOSED or CANCELLED.
            portfolio_id: Only trades assigned to this portfolio.
            unassigned: Only trades without a portfolio.
            strategy: Case-insensitive substring of the strategy.
            from_date: Earliest entry date (inclusive).
            to_date: Latest entry date (inclusive).
            profitability: "winning" or "losing" by net P&L.
            sort_by: One of SORTABLE_TRADE_FIELDS.
            sort_order: "asc" or "desc".
            limit: Maximum number of trades.
            offset: Number of trades to skip.

        Returns:
            List of trades.
        """
        if sort_by not in SORTABLE_TRADE_FIELDS:
            raise ValueError(f"Cannot sort trades by {sort_by!r}")
        if sort_order.lower() not in ("asc", "desc"):
            raise ValueError(f"Sort order must be 'asc' or 'desc', got {sort_order!r}")

        clauses = ["t.user_id = ?"]
        params: list = [user_id]
        if symbol:
            clauses.append("t.symbol LIKE ?")
            params.append(f"%{symbol}%")
        if side:
            clauses.append("t.side = ?")
            params.append(TradeSide(side).value)
        if status:
            clauses.append("t.status = ?")
            params.append(TradeStatus(status).value)
        if unassigned:
            clauses.append("t.portfolio_id IS NULL")
        elif portfolio_id is not None:
            clauses.append("t.portfolio_id = ?")
            params.append(portfolio_id)
        if strategy:
            clauses.append("t.strategy LIKE ?")
            params.append(f"%{strategy}%")
        if from_date:
            clauses.append("t.entry_date >= ?")
            params.append(as_utc(from_date).isoformat())
        if to_date:
            clauses.append("t.entry_date <= ?")
            params.append(as_utc(to_date).isoformat())
        if profitability == "winning":
            clauses.append("t.net_pnl > 0")
        elif profitability == "losing":
            clauses.append("t.net_pnl < 0")
        elif profitability is not None:
            raise ValueError(f"Profitability must be 'winning' or 'losing', got {profitability!r}")

        order_by = f"t.{sort_by} {sort_order.upper()}, t.id"
        if limit is not None:
            order_by += " LIMIT ? OFFSET ?"
            params.extend([limit, offset])

        conn = self._get_connection()
        try:
            return self._select_trades(conn, " AND ".join(clauses), tuple(params), order_by)
        finally:
            conn.close()

    def count_unassigned_trades(self, user_id: str) -> int:
        """Number of the user's trades without a portfolio."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT COUNT(*) AS count FROM trades WHERE user_id = ? AND portfolio_id IS NULL",
                (user_id,),
            )
            return cursor.fetchone()["count"]
        finally:
            conn.close()

    # ==================== Portfolios ====================

    def _fetch_portfolio_row(
        self, conn: sqlite3.Connection, user_id: str, portfolio_id: int
    ) -> sqlite3.Row:
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM portfolios WHERE id = ?", (portfolio_id,))
        row = cursor.fetchone()
        if row is None:
            raise NotFoundError("Portfolio", portfolio_id)
        if row["user_id"] != user_id:
            raise ForbiddenError("Access denied")
        return row

    def _build_portfolio(self, conn: sqlite3.Connection, row: sqlite3.Row) -> Portfolio:
        trades = self._select_trades(conn, "t.portfolio_id = ?", (row["id"],))
        portfolio = Portfolio(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            description=row["description"],
            initial_balance=row["initial_balance"],
            currency=row["currency"],
            account_type=row["account_type"],
            trade_count=len(trades),
            created_at=_parse_dt(row["created_at"]),
            updated_at=_parse_dt(row["updated_at"]),
        )
        return portfolio.model_copy(
            update={"current_balance": current_balance(portfolio, trades)}
        )

    def create_portfolio(
        self,
        user_id: str,
        name: str,
        initial_balance: float,
        description: Optional[str] = None,
        currency: str = "USD",
        account_type: AccountType = AccountType.DEMO,
    ) -> Portfolio:
        """Create a portfolio.

        Returns:
            The stored portfolio.
        """
        if initial_balance < 0:
            raise ValueError("Initial balance cannot be negative")

        conn = self._get_connection()
        try:
            now = _now()
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO portfolios
                (user_id, name, description, initial_balance, currency, account_type,
                 created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    user_id,
                    name,
                    description,
                    initial_balance,
                    currency,
                    AccountType(account_type).value,
                    now,
                    now,
                ),
            )
            conn.commit()
            portfolio_id = cursor.lastrowid
            logger.info("Created portfolio %s (%s)", portfolio_id, name)
            return self._build_portfolio(conn, self._fetch_portfolio_row(conn, user_id, portfolio_id))
        finally:
            conn.close()

    def get_portfolio(self, user_id: str, portfolio_id: int) -> Portfolio:
        """Get one of the user's portfolios with its reconciled balance.

        Raises:
            NotFoundError: If the portfolio does not exist.
            ForbiddenError: If it belongs to another user.
        """
        conn = self._get_connection()
        try:
            return self._build_portfolio(conn, self._fetch_portfolio_row(conn, user_id, portfolio_id))
        finally:
            conn.close()

    def get_portfolios(
        self, user_id: str, account_type: Optional[AccountType] = None
    ) -> list[Portfolio]:
        """Get the user's portfolios, newest first."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            if account_type:
                cursor.execute(
                    "SELECT * FROM portfolios WHERE user_id = ? AND account_type = ? "
                    "ORDER BY created_at DESC, id DESC",
                    (user_id, AccountType(account_type).value),
                )
            else:
                cursor.execute(
                    "SELECT * FROM portfolios WHERE user_id = ? ORDER BY created_at DESC, id DESC",
                    (user_id,),
                )
            return [self._build_portfolio(conn, row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def update_portfolio(self, user_id: str, portfolio_id: int, **fields) -> Portfolio:
        """Update portfolio attributes.

        Args:
            user_id: Requesting user.
            portfolio_id: Portfolio to update.
            **fields: Any of name, description, initial_balance, currency,
                account_type. None values are ignored.

        Returns:
            The updated portfolio.
        """
        unknown = set(fields) - set(_PORTFOLIO_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update portfolio field(s): {', '.join(sorted(unknown))}")
        changes = {k: v for k, v in fields.items() if v is not None}
        if changes.get("initial_balance", 0) < 0:
            raise ValueError("Initial balance cannot be negative")

        conn = self._get_connection()
        try:
            self._fetch_portfolio_row(conn, user_id, portfolio_id)
            if changes:
                columns = list(changes)
                assignments = ", ".join(f"{c} = ?" for c in columns)
                conn.execute(
                    f"UPDATE portfolios SET {assignments}, updated_at = ? WHERE id = ?",
                    tuple(_to_db(changes[c]) for c in columns) + (_now(), portfolio_id),
                )
                conn.commit()
                logger.info("Updated portfolio %s (%s)", portfolio_id, ", ".join(columns))
            return self._build_portfolio(conn, self._fetch_portfolio_row(conn, user_id, portfolio_id))
        finally:
            conn.close()

    def delete_portfolio(self, user_id: str, portfolio_id: int) -> None:
        """Delete an empty portfolio.

        Raises:
            PortfolioNotEmptyError: If trades are still assigned to it.
        """
        conn = self._get_connection()
        try:
            self._fetch_portfolio_row(conn, user_id, portfolio_id)
            cursor = conn.cursor()
            cursor.execute(
                "SELECT COUNT(*) AS count FROM trades WHERE portfolio_id = ?", (portfolio_id,)
            )
            ensure_deletable(portfolio_id, cursor.fetchone()["count"])
            cursor.execute("DELETE FROM portfolios WHERE id = ?", (portfolio_id,))
            conn.commit()
            logger.info("Deleted portfolio %s", portfolio_id)
        finally:
            conn.close()

    def _apply_reassignment(
        self,
        user_id: str,
        from_portfolio_id: Optional[int],
        to_portfolio_id: int,
    ) -> Reassignment:
        conn = self._get_connection()
        try:
            if from_portfolio_id is not None:
                self._fetch_portfolio_row(conn, user_id, from_portfolio_id)
            self._fetch_portfolio_row(conn, user_id, to_portfolio_id)

            # Read and write under one write lock so no trade is missed
            conn.execute("BEGIN IMMEDIATE")
            if from_portfolio_id is None:
                trades = self._select_trades(
                    conn, "t.user_id = ? AND t.portfolio_id IS NULL", (user_id,)
                )
                result = assign_unassigned(to_portfolio_id, trades)
            else:
                trades = self._select_trades(
                    conn, "t.user_id = ? AND t.portfolio_id = ?", (user_id, from_portfolio_id)
                )
                result = reassign_trades(from_portfolio_id, to_portfolio_id, trades)

            now = _now()
            conn.executemany(
                "UPDATE trades SET portfolio_id = ?, updated_at = ? WHERE id = ?",
                [(to_portfolio_id, now, trade_id) for trade_id in result.moved_ids],
            )
            conn.commit()
            return result
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def move_trades(self, user_id: str, from_portfolio_id: int, to_portfolio_id: int) -> Reassignment:
        """Move every trade in one portfolio to another.

        Raises:
            NotFoundError: If either portfolio does not exist.
            ForbiddenError: If either belongs to another user.
        """
        return self._apply_reassignment(user_id, from_portfolio_id, to_portfolio_id)

    def assign_unassigned_trades(self, user_id: str, portfolio_id: int) -> Reassignment:
        """Assign every trade without a portfolio to ``portfolio_id``."""
        return self._apply_reassignment(user_id, None, portfolio_id)

    # ==================== Tags ====================

    def create_tag(self, user_id: str, name: str, tag_type: TagType = TagType.OTHER) -> Tag:
        """Create a tag, or update the type of an existing one with that name."""
        conn = self._get_connection()
        try:
            conn.execute(
                """
                INSERT INTO tags (user_id, name, type) VALUES (?, ?, ?)
                ON CONFLICT(user_id, name) DO UPDATE SET type = excluded.type
                """,
                (user_id, name, TagType(tag_type).value),
            )
            conn.commit()
            cursor = conn.cursor()
            cursor.execute(
                "SELECT id, user_id, name, type FROM tags WHERE user_id = ? AND name = ?",
                (user_id, name),
            )
            row = cursor.fetchone()
            return Tag(id=row["id"], user_id=row["user_id"], name=row["name"], type=row["type"])
        finally:
            conn.close()

    def get_tags(self, user_id: str) -> list[Tag]:
        """Get the user's tags, sorted by name."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT id, user_id, name, type FROM tags WHERE user_id = ? ORDER BY name",
                (user_id,),
            )
            return [
                Tag(id=row["id"], user_id=row["user_id"], name=row["name"], type=row["type"])
                for row in cursor.fetchall()
            ]
        finally:
            conn.close()

    def delete_tag(self, user_id: str, name: str) -> None:
        """Delete a tag and detach it from all trades."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM tags WHERE user_id = ? AND name = ?", (user_id, name))
            if cursor.rowcount == 0:
                raise NotFoundError("Tag", name)
            conn.commit()
        finally:
            conn.close()

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
