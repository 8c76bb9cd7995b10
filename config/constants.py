"""
Application constants for Desintesa.

Centralized location for all application-wide constants.
"""

from pathlib import Path

# ==================== Application Info ====================

APP_NAME = "Desintesa - Service Orders"
APP_VERSION = "1.0.0"

ENV_PREFIX = "DESINTESA_"

# ==================== Default Values ====================

DEFAULT_ORDERS_FILE = "orders.json"
DEFAULT_DATABASE_NAME = "orders.db"
DEFAULT_CATALOG_FILE = "chemicals.json"
DEFAULT_STORAGE_BACKEND = "json"  # "json" or "sqlite"
STORAGE_BACKENDS = ("json", "sqlite")

# ==================== Paths ====================

# Relative to working directory
DATA_DIR = Path("desintesa_data")
CERTIFICATES_DIR = Path("certificates")

# ==================== Exit Codes ====================

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_VALIDATION = 2
EXIT_NOT_FOUND = 3
EXIT_INVALID_STATE = 4
EXIT_STORAGE = 5

# ==================== Error Messages ====================

ERROR_MESSAGES = {
    "file_not_found": "File not found: {path}",
    "invalid_payload": "Invalid JSON payload: {error}",
    "storage_error": "Storage error: {error}",
    "validation_error": "Validation failed:\n{errors}",
    "not_found": "Order not found: {order_id}",
    "invalid_state": "{error}",
    "catalog_error": "Catalog error: {error}",
}
