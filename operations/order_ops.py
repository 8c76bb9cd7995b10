"""
Order Operations for Desintesa.

Service-order lifecycle: create, read, update, delete, certificate
issuance and retrieval.
Functions with dependency injection - the repository is passed in.

Status is a plain field within its value set: any of scheduled, completed
and cancelled may follow any other through update_order(). The only gated
operations are certificate issuance and retrieval, which require a
completed order.
"""

import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from data.interface import OrderRepository
from domain.exceptions import InvalidStateError, NotFoundError, ValidationError
from domain.models import CertificateDocument, ServiceOrder, STATUS_SCHEDULED
from domain.rules import FOLIO_PREFIX, generate_folio, next_timestamp, utc_now
from domain.validators import validate_order_payload

logger = logging.getLogger(__name__)


# Fields a full update never changes
PROTECTED_FIELDS = ("id", "createdAt", "updatedAt", "certificate")

PENDING_FOLIO = "PENDING"


def _require_order(orders: Dict[str, Dict[str, Any]], order_id: str) -> Dict[str, Any]:
    """Get order document from an indexed collection or raise NotFoundError."""
    order = orders.get(order_id)
    if order is None:
        logger.warning(f"Order not found: {order_id}")
        raise NotFoundError(order_id)
    return order


def create_order(
    repo: OrderRepository,
    payload: Dict[str, Any],
    now: Optional[datetime] = None,
) -> ServiceOrder:
    """
    Create a new service order.

    The payload is validated in strict mode; on any violation nothing is
    stored.

    Args:
        repo: Order repository (injected)
        payload: Order fields (camelCase keys). status defaults to
            "scheduled"; id, timestamps and certificate are assigned here.
        now: Creation time (defaults to UTC now)

    Returns:
        Created ServiceOrder

    Raises:
        ValidationError: If the payload violates any rule
        StorageError: If the repository fails

    Example:
        >>> order = create_order(repo, payload)
        >>> order.status, order.certificate.issued
        ('scheduled', False)
    """
    errors = validate_order_payload(payload, partial=False)
    if errors:
        logger.info(f"Rejected new order: {len(errors)} validation error(s)")
        raise ValidationError(errors)

    timestamp = (now or utc_now()).isoformat()
    document = {
        "id": str(uuid.uuid4()),
        "clientId": payload.get("clientId"),
        "clientName": payload.get("clientName"),
        "location": payload.get("location"),
        "assignedTechnician": payload.get("assignedTechnician"),
        "pestType": payload.get("pestType"),
        "infestationLevel": payload.get("infestationLevel"),
        "chemicalsUsed": payload.get("chemicalsUsed"),
        "applicationDate": payload.get("applicationDate"),
        "nextVisitDate": payload.get("nextVisitDate"),
        "status": payload.get("status") or STATUS_SCHEDULED,
        "serviceNotes": payload.get("serviceNotes") or "",
        "certificate": {"issued": False, "issuedAt": None, "folio": None},
        "createdAt": timestamp,
        "updatedAt": timestamp,
    }
    order = ServiceOrder.from_dict(document)

    with repo.transaction() as orders:
        orders[order.id] = order.to_dict()

    logger.info(f"Created order {order.id} for client {order.client_id}")
    return order


def get_order(repo: OrderRepository, order_id: str) -> ServiceOrder:
    """
    Get a single order.

    Raises:
        NotFoundError: If no order has this id
    """
    for document in repo.snapshot():
        if document.get("id") == order_id:
            return ServiceOrder.from_dict(document)
    logger.warning(f"Order not found: {order_id}")
    raise NotFoundError(order_id)


def list_orders(
    repo: OrderRepository,
    client_id: Optional[str] = None,
    status: Optional[str] = None,
) -> List[ServiceOrder]:
    """
    List orders in collection order, optionally filtered.

    Args:
        repo: Order repository (injected)
        client_id: Only orders of this client
        status: Only orders with this status

    Returns:
        List of ServiceOrder
    """
    orders = [ServiceOrder.from_dict(d) for d in repo.snapshot()]
    return [
        order
        for order in orders
        if (not client_id or order.client_id == client_id)
        and (not status or order.status == status)
    ]


def update_order(
    repo: OrderRepository,
    order_id: str,
    patch: Dict[str, Any],
    now: Optional[datetime] = None,
) -> ServiceOrder:
    """
    Apply a full update to an order.

    The patch is merged over the stored order (location merged one level
    deep) and the merged candidate is validated in strict mode. id,
    createdAt and the certificate cannot be changed here.

    Args:
        repo: Order repository (injected)
        order_id: Order to update
        patch: Changed fields (camelCase keys)
        now: Update time (defaults to UTC now)

    Returns:
        Updated ServiceOrder

    Raises:
        NotFoundError: If no order has this id
        ValidationError: If the merged order violates any rule
    """
    ignored = [key for key in PROTECTED_FIELDS if key in patch]
    if ignored:
        logger.debug(f"Ignoring protected fields in update of {order_id}: {ignored}")

    with repo.transaction() as orders:
        existing = _require_order(orders, order_id)

        candidate = dict(existing)
        candidate.update(
            {key: value for key, value in patch.items() if key not in PROTECTED_FIELDS}
        )
        if isinstance(patch.get("location"), dict):
            candidate["location"] = {**(existing.get("location") or {}), **patch["location"]}

        errors = validate_order_payload(candidate, partial=False)
        if errors:
            logger.info(f"Rejected update of {order_id}: {len(errors)} validation error(s)")
            raise ValidationError(errors, details={"order_id": order_id})

        previous = ServiceOrder.from_dict(existing).updated_at
        candidate["updatedAt"] = next_timestamp(now or utc_now(), previous).isoformat()

        order = ServiceOrder.from_dict(candidate)
        orders[order_id] = order.to_dict()

    logger.info(f"Updated order {order_id} (status={order.status})")
    return order


def delete_order(repo: OrderRepository, order_id: str) -> ServiceOrder:
    """
    Remove an order from the collection.

    Returns:
        The deleted ServiceOrder

    Raises:
        NotFoundError: If no order has this id
    """
    with repo.transaction() as orders:
        _require_order(orders, order_id)
        deleted = orders.pop(order_id)

    logger.info(f"Deleted order {order_id}")
    return ServiceOrder.from_dict(deleted)


def issue_certificate(
    repo: OrderRepository,
    order_id: str,
    now: Optional[datetime] = None,
    folio_prefix: str = FOLIO_PREFIX,
) -> ServiceOrder:
    """
    Issue the regulatory certificate for a completed order.

    Calling this again on an already certified order issues a new folio
    and timestamp, replacing the previous certificate.

    Args:
        repo: Order repository (injected)
        order_id: Order to certify
        now: Issue time (defaults to UTC now)
        folio_prefix: Prefix for the generated folio

    Returns:
        Updated ServiceOrder with certificate issued

    Raises:
        NotFoundError: If no order has this id
        InvalidStateError: If the order is not completed (nothing changes)
    """
    with repo.transaction() as orders:
        order = ServiceOrder.from_dict(_require_order(orders, order_id))

        if not order.is_completed:
            logger.warning(f"Refused certificate for {order_id}: status is {order.status}")
            raise InvalidStateError(
                "Only completed services may be certified.",
                details={"order_id": order_id, "status": order.status},
            )

        if order.certificate.issued:
            logger.warning(
                f"Re-issuing certificate for {order_id}, replacing folio {order.certificate.folio}"
            )

        issued_at = now or utc_now()
        order.certificate.issued = True
        order.certificate.issued_at = issued_at
        order.certificate.folio = generate_folio(issued_at, prefix=folio_prefix)
        order.updated_at = next_timestamp(issued_at, order.updated_at)

        orders[order_id] = order.to_dict()

    logger.info(f"Issued certificate {order.certificate.folio} for order {order_id}")
    return order


def get_certificate(repo: OrderRepository, order_id: str) -> CertificateDocument:
    """
    Get certificate data for rendering.

    Args:
        repo: Order repository (injected)
        order_id: Order id

    Returns:
        CertificateDocument; folio is "PENDING" until issued

    Raises:
        NotFoundError: If no order has this id
        InvalidStateError: If the order is not completed
    """
    order = get_order(repo, order_id)

    if not order.is_completed:
        raise InvalidStateError(
            "The service must be completed to generate a certificate.",
            details={"order_id": order_id, "status": order.status},
        )

    return CertificateDocument(
        order=order,
        folio=order.certificate.folio or PENDING_FOLIO,
        issued_at=order.certificate.issued_at,
    )
