"""
Path Configuration for Desintesa.

Centralized path management for order storage, the chemical catalog and
rendered certificates.
"""

from pathlib import Path
import logging
import sys

from .constants import (
    CERTIFICATES_DIR,
    DATA_DIR,
    DEFAULT_CATALOG_FILE,
    DEFAULT_DATABASE_NAME,
    DEFAULT_ORDERS_FILE,
)

logger = logging.getLogger(__name__)


def get_app_root() -> Path:
    """
    Get application root directory.

    Returns:
        - Frozen executable: directory where the executable is located
        - Development (script): project root
    """
    if getattr(sys, 'frozen', False):
        app_root = Path(sys.executable).parent
        logger.debug(f"Running frozen, app root: {app_root}")
    else:
        # __file__ = .../config/paths.py, parent.parent = project root
        app_root = Path(__file__).parent.parent
        logger.debug(f"Running as script, app root: {app_root}")

    return app_root


def _get_data_path() -> Path:
    """Working data directory (./desintesa_data, not created here)."""
    return Path.cwd() / DATA_DIR


def get_orders_path(backend: str = "json") -> Path:
    """
    Default order storage file for a backend.

    Args:
        backend: "json" or "sqlite"

    Returns:
        desintesa_data/orders.json or desintesa_data/orders.db
    """
    name = DEFAULT_DATABASE_NAME if backend == "sqlite" else DEFAULT_ORDERS_FILE
    return _get_data_path() / name


def get_certificates_path() -> Path:
    """Directory for rendered certificate PDFs (./certificates)."""
    return Path.cwd() / CERTIFICATES_DIR


def get_default_catalog_path() -> Path:
    """
    Seed chemical catalog shipped with the application.

    Located at {app_root}/data/seed/chemicals.json
    """
    return get_app_root() / "data" / "seed" / DEFAULT_CATALOG_FILE
