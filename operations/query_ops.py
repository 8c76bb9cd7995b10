"""
Query Operations for Desintesa.

Read-only derivations over the order collection: agenda, client
dashboard, fleet statistics, week grouping and daily KPIs.
Pure functions - no repository access, no side effects. Callers load the
orders (list_orders) and pass them in, together with a reference "now"
where the result depends on the date.

All sorts are stable: ties keep collection order. Orders without a usable
date sort after dated ones.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional, Union

from domain.models import (
    ServiceOrder,
    STATUS_CANCELLED,
    STATUS_COMPLETED,
    STATUS_SCHEDULED,
)

logger = logging.getLogger(__name__)


WEEK_GROUPS = ("this_week", "upcoming", "past")


def _as_date(value: Union[date, datetime]) -> date:
    return value.date() if isinstance(value, datetime) else value


def _ascending_key(value: Optional[date]):
    return (value is None, value or date.min)


def sort_by_next_visit(orders: List[ServiceOrder]) -> List[ServiceOrder]:
    """Ascending by next-visit date."""
    return sorted(orders, key=lambda o: _ascending_key(o.next_visit_date))


def sort_by_application_date_desc(orders: List[ServiceOrder]) -> List[ServiceOrder]:
    """
    Descending by application date.

    Implemented as a stable sort on the negated ordinal so equal dates keep
    collection order.
    """
    return sorted(
        orders,
        key=lambda o: (
            o.application_date is None,
            -o.application_date.toordinal() if o.application_date else 0,
        ),
    )


def get_agenda(orders: List[ServiceOrder]) -> List[ServiceOrder]:
    """
    Get the visit agenda.

    Returns:
        All non-cancelled orders, ascending by next-visit date
    """
    active = [o for o in orders if o.status != STATUS_CANCELLED]
    return sort_by_next_visit(active)


def get_client_dashboard(orders: List[ServiceOrder], client_id: str) -> Dict[str, Any]:
    """
    Get dashboard data for one client.

    Args:
        orders: Full order collection
        client_id: Client to show

    Returns:
        Dict with:
        - client_id
        - pending_certificates: completed orders without certificate
        - visit_history: all completed orders
        Both lists newest application date first.
    """
    client_orders = [o for o in orders if o.client_id == client_id]

    pending = [o for o in client_orders if o.has_pending_certificate]
    history = [o for o in client_orders if o.is_completed]

    return {
        "client_id": client_id,
        "pending_certificates": sort_by_application_date_desc(pending),
        "visit_history": sort_by_application_date_desc(history),
    }


def get_stats(orders: List[ServiceOrder]) -> Dict[str, int]:
    """
    Count orders by status and certificate state.

    Returns:
        Dict with total, completed, scheduled, cancelled, certified
    """
    return {
        "total": len(orders),
        "completed": sum(1 for o in orders if o.status == STATUS_COMPLETED),
        "scheduled": sum(1 for o in orders if o.status == STATUS_SCHEDULED),
        "cancelled": sum(1 for o in orders if o.status == STATUS_CANCELLED),
        "certified": sum(1 for o in orders if o.certificate.issued),
    }


def end_of_week(reference: Union[date, datetime]) -> date:
    """Sunday of the reference date's (Monday-first) week."""
    today = _as_date(reference)
    return today + timedelta(days=6 - today.weekday())


def group_agenda_by_week(
    orders: List[ServiceOrder],
    now: Union[date, datetime],
) -> Dict[str, List[ServiceOrder]]:
    """
    Bucket upcoming (non-cancelled) orders by next-visit date.

    Buckets:
        - past: next visit before today
        - this_week: from today up to and including Sunday of this week
        - upcoming: later
    Orders without a next-visit date are left out.

    Args:
        orders: Orders to group (cancelled ones are skipped)
        now: Reference date/time supplied by the caller

    Returns:
        Dict with keys "this_week", "upcoming", "past"; each list keeps
        agenda order
    """
    today = _as_date(now)
    week_end = end_of_week(today)

    groups = {name: [] for name in WEEK_GROUPS}
    for order in get_agenda(orders):
        visit = order.next_visit_date
        if visit is None:
            continue
        if visit < today:
            groups["past"].append(order)
        elif visit <= week_end:
            groups["this_week"].append(order)
        else:
            groups["upcoming"].append(order)

    return groups


def days_until(value: Optional[date], now: Union[date, datetime]) -> Optional[int]:
    """Whole days from now's date to value (negative if past), None without value."""
    if value is None:
        return None
    return (value - _as_date(now)).days


def get_daily_kpis(orders: List[ServiceOrder], now: Union[date, datetime]) -> Dict[str, Any]:
    """
    Operational KPIs for the day.

    Returns:
        Dict with:
        - services_today: non-cancelled orders applied today
        - reentry_alerts: completed orders applied today with any product
          carrying a re-entry interval
        - certificates_to_sign: completed orders without certificate
        - next_visit: the earliest agenda entry (or None)
        - days_until_next_visit: days until that visit (or None)
    """
    today = _as_date(now)

    services_today = sum(
        1 for o in orders if o.application_date == today and not o.is_cancelled
    )
    reentry_alerts = sum(
        1
        for o in orders
        if o.is_completed and o.application_date == today and o.requires_reentry_wait
    )
    certificates_to_sign = sum(1 for o in orders if o.has_pending_certificate)

    agenda = [o for o in get_agenda(orders) if o.next_visit_date is not None]
    next_visit = agenda[0] if agenda else None

    return {
        "services_today": services_today,
        "reentry_alerts": reentry_alerts,
        "certificates_to_sign": certificates_to_sign,
        "next_visit": next_visit,
        "days_until_next_visit": days_until(next_visit.next_visit_date, today) if next_visit else None,
    }


def filter_orders(
    orders: List[ServiceOrder],
    status: Optional[str] = None,
    search: Optional[str] = None,
) -> List[ServiceOrder]:
    """
    Filter the order list the way the order screen does.

    Args:
        orders: Orders to filter
        status: Keep only this status (None or "all" keeps every status)
        search: Case-insensitive substring matched against client name,
            pest type and client id

    Returns:
        Matching orders, newest application date first
    """
    query = (search or "").strip().lower()

    def matches(order: ServiceOrder) -> bool:
        if status and status != "all" and order.status != status:
            return False
        if not query:
            return True
        return any(
            query in (value or "").lower()
            for value in (order.client_name, order.pest_type, order.client_id)
        )

    result = sort_by_application_date_desc([o for o in orders if matches(o)])
    logger.debug(f"Filtered {len(orders)} orders to {len(result)}")
    return result
