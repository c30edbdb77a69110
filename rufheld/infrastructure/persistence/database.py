"""
SQLite Database Repository - Order Persistence
===============================================

Stores review removal orders. The `selected_reviews` column holds the
reviews as JSON: encoded once on insert and decoded once in `_row_to_order`,
so every reader gets a list of dicts.
"""

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional

from ...domain import Order, format_price

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 100


class Database:
    """
    SQLite database for orders.

    Usage:
        db = Database("orders.db")
        db.init()

        db.add_order(order)
        recent = db.list_orders(limit=100)
        order = db.get_order("RH-1718000000000-abc123xyz")
    """

    def __init__(self, db_path: str):
        self.db_path = db_path

    @contextmanager
    def _get_connection(self):
        """Get database connection with context manager."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def init(self):
        """Initialize database tables."""
        parent = Path(self.db_path).parent
        if str(parent) not in ("", "."):
            parent.mkdir(parents=True, exist_ok=True)

        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS orders (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    order_id VARCHAR(50) UNIQUE NOT NULL,
                    business_name TEXT NOT NULL,
                    business_place_id TEXT NOT NULL,
                    customer_name TEXT NOT NULL,
                    customer_email TEXT NOT NULL,
                    customer_phone TEXT NOT NULL,
                    selected_reviews JSON NOT NULL,
                    total_price DECIMAL(10,2) NOT NULL,
                    review_count INTEGER NOT NULL,
                    status VARCHAR(20) DEFAULT 'pending',
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_orders_created_at ON orders (created_at)"
            )

            logger.info(f"Database initialized: {self.db_path}")

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        try:
            with self._get_connection() as conn:
                conn.execute("SELECT 1").fetchone()
            return True
        except sqlite3.Error as e:
            logger.warning(f"Database ping failed: {e}")
            return False

    # ── Order CRUD ─────────────────────────────────────────────────

    def add_order(self, order: Order) -> int:
        """
        Insert an order and return its row id.

        Raises:
            sqlite3.IntegrityError: order_id already exists.
        """
        with self._get_connection() as conn:
            cursor = conn.execute(
                """INSERT INTO orders (
                       order_id, business_name, business_place_id,
                       customer_name, customer_email, customer_phone,
                       selected_reviews, total_price, review_count, status
                   ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    order.order_id,
                    order.business_name,
                    order.business_place_id,
                    order.customer_name,
                    order.customer_email,
                    order.customer_phone,
                    self._encode_reviews(order.selected_reviews),
                    format_price(order.total_price),
                    order.review_count,
                    order.status,
                )
            )
            return cursor.lastrowid

    def list_orders(self, limit: int = DEFAULT_LIST_LIMIT) -> List[Order]:
        """Most recent orders first."""
        with self._get_connection() as conn:
            rows = conn.execute(
                "SELECT * FROM orders ORDER BY created_at DESC, id DESC LIMIT ?", (limit,)
            ).fetchall()
            return [self._row_to_order(row) for row in rows]

    def get_order(self, order_id: str) -> Optional[Order]:
        """Get order by its public order id."""
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM orders WHERE order_id = ?", (order_id,)
            ).fetchone()
            return self._row_to_order(row) if row else None

    def list_raw_reviews(self, limit: int = 5) -> List[Dict[str, Any]]:
        """Stored selected_reviews column as-is, for diagnostics."""
        with self._get_connection() as conn:
            rows = conn.execute(
                """SELECT id, order_id, selected_reviews FROM orders
                   ORDER BY created_at DESC, id DESC LIMIT ?""",
                (limit,)
            ).fetchall()
            return [dict(row) for row in rows]

    # ── Row mapping ────────────────────────────────────────────────

    @staticmethod
    def _encode_reviews(reviews: List[Dict[str, Any]]) -> str:
        return json.dumps(reviews, ensure_ascii=False)

    @staticmethod
    def _decode_reviews(raw: Any) -> List[Dict[str, Any]]:
        if raw is None:
            return []
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return json.loads(raw)

    @staticmethod
    def _parse_timestamp(value: Any) -> Optional[datetime]:
        """CURRENT_TIMESTAMP values are UTC without an offset."""
        if not value:
            return None
        parsed = value if isinstance(value, datetime) else datetime.fromisoformat(str(value))
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    def _row_to_order(self, row: sqlite3.Row) -> Order:
        """Convert database row to Order object."""
        return Order(
            id=row["id"],
            order_id=row["order_id"],
            business_name=row["business_name"],
            business_place_id=row["business_place_id"],
            customer_name=row["customer_name"],
            customer_email=row["customer_email"],
            customer_phone=row["customer_phone"],
            selected_reviews=self._decode_reviews(row["selected_reviews"]),
            total_price=Decimal(str(row["total_price"])),
            review_count=row["review_count"],
            status=row["status"] or "pending",
            created_at=self._parse_timestamp(row["created_at"]),
            updated_at=self._parse_timestamp(row["updated_at"]),
        )


def create_database(db_path: Optional[str]) -> Optional[Database]:
    """Build and initialize the database, or return None when storage is disabled."""
    if not db_path:
        logger.warning("No DATABASE_URL found - database features disabled")
        return None

    db = Database(db_path)
    try:
        db.init()
    except sqlite3.Error as e:
        # Keep the handle: writes stay best-effort and reporting reports 500
        logger.exception(f"Database initialization failed: {e}")
    return db
