"""
SQLite implementation of OrderRepository.

Each order is one row holding its JSON document. save_all() replaces the
collection inside a single SQLite transaction, so readers never see a
half-written collection.
"""

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Dict, List, Union

from .interface import OrderRepository
from . import queries as Q
from domain.exceptions import StorageError

logger = logging.getLogger(__name__)


class SQLiteOrderStore(OrderRepository):
    """
    SQLite implementation of OrderRepository.

    Features:
    - Schema created on initialization
    - Collection order kept in a position column
    - client_id/status columns denormalized for ad-hoc queries
    """

    def __init__(self, db_path: Union[Path, str]):
        """
        Initialize SQLite store.

        Args:
            db_path: Path to SQLite database file (created if not exists),
                or ":memory:"
        """
        super().__init__()
        self.db_path = str(db_path)
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        try:
            self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self.conn.row_factory = sqlite3.Row
            self.conn.executescript(Q.CREATE_SCHEMA)
            self.conn.commit()
        except sqlite3.Error as e:
            raise StorageError(
                f"Failed to open order database: {e}",
                details={"path": self.db_path},
            )
        logger.info(f"SQLite order store initialized at {self.db_path}")

    def load_all(self) -> List[Dict[str, Any]]:
        """Load all orders in collection order."""
        try:
            cursor = self.conn.cursor()
            cursor.execute(Q.SELECT_ALL_ORDERS)
            rows = cursor.fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to read orders: {e}")

        try:
            return [json.loads(row["document"]) for row in rows]
        except json.JSONDecodeError as e:
            raise StorageError(f"Stored order document is not valid JSON: {e}")

    def save_all(self, orders: List[Dict[str, Any]]) -> None:
        """Replace all orders in one transaction."""
        try:
            with self.conn:
                self.conn.execute(Q.DELETE_ALL_ORDERS)
                self.conn.executemany(
                    Q.INSERT_ORDER,
                    [
                        (
                            order["id"],
                            position,
                            order.get("clientId"),
                            order.get("status"),
                            json.dumps(order, ensure_ascii=False),
                            order.get("updatedAt"),
                        )
                        for position, order in enumerate(orders)
                    ],
                )
        except (sqlite3.Error, KeyError, TypeError, ValueError) as e:
            raise StorageError(f"Failed to save orders: {e}")

    def count(self) -> int:
        """Number of stored orders."""
        cursor = self.conn.cursor()
        cursor.execute(Q.COUNT_ORDERS)
        return cursor.fetchone()[0]

    def close(self):
        """Close database connection."""
        self.conn.close()
        logger.debug(f"Closed SQLite order store {self.db_path}")
