"""
JSON file implementation of OrderRepository.

The whole collection lives in one pretty-printed JSON array. A missing file
is an empty collection; any other read/write failure raises StorageError.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Union

from .interface import OrderRepository
from domain.exceptions import StorageError

logger = logging.getLogger(__name__)


class JsonOrderStore(OrderRepository):
    """
    Order collection stored as a single JSON file.

    Writes go to a temporary sibling file that replaces the target, so a
    crash mid-write leaves the previous collection intact.
    """

    def __init__(self, file_path: Union[Path, str]):
        """
        Initialize JSON store.

        Args:
            file_path: Path to the orders file (created on first save)
        """
        super().__init__()
        self.file_path = Path(file_path)
        logger.info(f"JSON order store at {self.file_path}")

    def load_all(self) -> List[Dict[str, Any]]:
        """Load all orders from the JSON file."""
        try:
            content = self.file_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug(f"No orders file yet at {self.file_path}")
            return []
        except OSError as e:
            raise StorageError(
                f"Failed to read orders: {e}",
                details={"path": str(self.file_path)},
            )

        if not content.strip():
            return []

        try:
            orders = json.loads(content)
        except json.JSONDecodeError as e:
            raise StorageError(
                f"Orders file is not valid JSON: {e}",
                details={"path": str(self.file_path)},
            )

        if not isinstance(orders, list):
            raise StorageError(
                "Orders file must contain a JSON array",
                details={"path": str(self.file_path)},
            )
        return orders

    def save_all(self, orders: List[Dict[str, Any]]) -> None:
        """Write all orders to the JSON file."""
        tmp_path = self.file_path.with_suffix(self.file_path.suffix + ".tmp")
        try:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(
                json.dumps(orders, indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
            os.replace(tmp_path, self.file_path)
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(
                f"Failed to save orders: {e}",
                details={"path": str(self.file_path)},
            )
