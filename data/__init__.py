"""
Data layer for Desintesa.

This module provides order storage through the OrderRepository abstraction.
Use create_repository() factory function to get a repository instance.
"""

from pathlib import Path
from typing import Literal, Union

from .interface import OrderRepository
from .json_store import JsonOrderStore
from .sqlite_db import SQLiteOrderStore


def create_repository(
    backend: Literal["json", "sqlite"] = "json",
    path: Union[str, Path] = "./orders.json",
) -> OrderRepository:
    """
    Factory function to create an order repository.

    Args:
        backend: Storage backend to use ("json" or "sqlite")
        path: Path to the orders file / database file

    Returns:
        OrderRepository implementation

    Example:
        >>> repo = create_repository("sqlite", ":memory:")
        >>> orders = repo.snapshot()
    """
    if backend == "json":
        return JsonOrderStore(path)
    elif backend == "sqlite":
        return SQLiteOrderStore(path)
    else:
        raise ValueError(f"Unknown storage backend: {backend}")


__all__ = [
    "OrderRepository",
    "JsonOrderStore",
    "SQLiteOrderStore",
    "create_repository",
]
