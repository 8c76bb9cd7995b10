"""
SQL queries as constants for better maintainability.

All queries are defined here to avoid SQL string literals scattered
throughout the codebase.
"""

# ==================== Schema ====================

CREATE_SCHEMA = """
    CREATE TABLE IF NOT EXISTS service_orders (
        id TEXT PRIMARY KEY,
        position INTEGER NOT NULL,
        client_id TEXT,
        status TEXT,
        document TEXT NOT NULL,
        updated_at TEXT
    );

    CREATE INDEX IF NOT EXISTS idx_service_orders_client
        ON service_orders (client_id);
"""

# ==================== Order Queries ====================

SELECT_ALL_ORDERS = """
    SELECT document
    FROM service_orders
    ORDER BY position
"""

DELETE_ALL_ORDERS = """
    DELETE FROM service_orders
"""

INSERT_ORDER = """
    INSERT INTO service_orders (id, position, client_id, status, document, updated_at)
    VALUES (?, ?, ?, ?, ?, ?)
"""

COUNT_ORDERS = """
    SELECT COUNT(*) FROM service_orders
"""
