"""
Order Repository Interface - Abstract Base Class for order storage.

This module defines the contract for all order storage implementations.
Any backend (JSON file, SQLite, ...) must implement load_all() and save_all();
the whole order collection is loaded and saved at once.

Operations never call load_all()/save_all() directly. They use:
- snapshot(): read-only copy of the collection
- transaction(): locked read-modify-write cycle over an id-indexed dict
"""

import logging
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List

from domain.exceptions import StorageError

logger = logging.getLogger(__name__)


class OrderRepository(ABC):
    """
    Abstract base class for order storage.

    Orders are stored as JSON-compatible dicts (camelCase keys), in
    insertion order.
    """

    def __init__(self):
        self._lock = threading.RLock()

    # ==================== Backend Operations ====================

    @abstractmethod
    def load_all(self) -> List[Dict[str, Any]]:
        """
        Load the whole order collection.

        A collection that does not exist yet is returned as an empty list.

        Returns:
            List of order dicts

        Raises:
            StorageError: If the collection exists but cannot be read
        """
        pass

    @abstractmethod
    def save_all(self, orders: List[Dict[str, Any]]) -> None:
        """
        Replace the whole order collection.

        Args:
            orders: List of order dicts, in collection order

        Raises:
            StorageError: If the collection cannot be written
        """
        pass

    def close(self) -> None:
        """Release backend resources (no-op by default)."""

    # ==================== Access Helpers ====================

    def snapshot(self) -> List[Dict[str, Any]]:
        """Load the collection under the repository lock."""
        with self._lock:
            return self.load_all()

    @contextmanager
    def transaction(self) -> Iterator[Dict[str, Dict[str, Any]]]:
        """
        Exclusive read-modify-write cycle.

        Yields the collection as a dict keyed by order id (insertion order
        preserved). Changes are saved when the block exits normally; if it
        raises, nothing is written.

        Example:
            >>> with repo.transaction() as orders:
            ...     orders[order["id"]] = order
        """
        with self._lock:
            indexed = {}
            for order in self.load_all():
                order_id = order.get("id")
                if not order_id:
                    raise StorageError(
                        "Stored order without id",
                        details={"order": order},
                    )
                indexed[order_id] = order

            yield indexed

            self.save_all(list(indexed.values()))
            logger.debug(f"Saved {len(indexed)} orders")
