"""
Operations layer for Desintesa.

Business logic operations - plain functions with dependency injection.
Order operations take the OrderRepository as first argument; query
operations are pure functions over a list of orders.
"""

from .order_ops import (
    create_order,
    get_order,
    list_orders,
    update_order,
    delete_order,
    issue_certificate,
    get_certificate,
)

from .query_ops import (
    get_agenda,
    get_client_dashboard,
    get_stats,
    group_agenda_by_week,
    get_daily_kpis,
    filter_orders,
)

from .intake_ops import (
    empty_order_form,
    next_step,
    validate_intake_step,
    build_order_payload,
    order_to_form,
)

from .catalog_ops import (
    load_catalog,
    find_catalog_entry,
    calculate_product_dosage,
    get_order_dosage,
    dosage_to_dict,
)

__all__ = [
    # Order operations
    "create_order",
    "get_order",
    "list_orders",
    "update_order",
    "delete_order",
    "issue_certificate",
    "get_certificate",
    # Query operations
    "get_agenda",
    "get_client_dashboard",
    "get_stats",
    "group_agenda_by_week",
    "get_daily_kpis",
    "filter_orders",
    # Intake operations
    "empty_order_form",
    "next_step",
    "validate_intake_step",
    "build_order_payload",
    "order_to_form",
    # Catalog operations
    "load_catalog",
    "find_catalog_entry",
    "calculate_product_dosage",
    "get_order_dosage",
    "dosage_to_dict",
]
