"""
Unit tests for order operations.

Tests cover the service-order lifecycle against a JSON-file repository.
"""

from datetime import datetime, timedelta, timezone

import pytest

from data import create_repository
from domain.exceptions import InvalidStateError, NotFoundError, ValidationError
from operations.order_ops import (
    PENDING_FOLIO,
    create_order,
    delete_order,
    get_certificate,
    get_order,
    issue_certificate,
    list_orders,
    update_order,
)


T0 = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def repo(tmp_path):
    """Create a JSON repository in a temporary directory."""
    repository = create_repository("json", tmp_path / "orders.json")
    yield repository
    repository.close()


def order_payload(**overrides):
    payload = {
        "clientId": "CLI-001",
        "clientName": "Restaurante El Sol",
        "location": {"address": "Av. Reforma 100", "gps": {"lat": 19.43, "lng": -99.13}},
        "assignedTechnician": "Juan Perez",
        "pestType": "Cockroach",
        "infestationLevel": "medium",
        "chemicalsUsed": [
            {
                "productId": "CHEM-001",
                "name": "Cipermetrina 25 EC",
                "sanitaryRegistry": "RSCO-001",
                "dosePerLiter": 2,
                "reentryHours": 4,
                "areaM2": 500,
                "appliedQuantity": 50,
                "dilution": "2 ml/L",
                "lot": "L-2025-01",
            }
        ],
        "applicationDate": "2025-03-01",
        "nextVisitDate": "2025-03-15",
    }
    payload.update(overrides)
    return payload


# ==================== create / read ====================


def test_create_order_defaults(repo):
    """Test a new order gets id, status, certificate and timestamps."""
    order = create_order(repo, order_payload(), now=T0)

    assert order.id
    assert order.status == "scheduled"
    assert order.certificate.issued is False
    assert order.certificate.folio is None
    assert order.created_at == T0
    assert order.updated_at == T0
    assert order.chemicals_used[0].product_id == "CHEM-001"

    stored = get_order(repo, order.id)
    assert stored == order


def test_create_order_reads_back_author_fields(repo):
    """Test the stored order equals the payload on every supplied field."""
    payload = order_payload()
    order = create_order(repo, payload, now=T0)

    stored = get_order(repo, order.id).to_dict()

    for key, value in payload.items():
        if key == "chemicalsUsed":
            for stored_chemical, chemical in zip(stored[key], value):
                assert {k: stored_chemical[k] for k in chemical} == chemical
        else:
            assert stored[key] == value, key
    assert stored["status"] == "scheduled"
    assert stored["certificate"]["issued"] is False


def test_create_order_rejects_timestamp_dates(repo):
    """Test same-day timestamps are refused instead of stored as equal dates."""
    with pytest.raises(ValidationError) as exc_info:
        create_order(
            repo,
            order_payload(
                applicationDate="2025-03-01T09:00:00Z",
                nextVisitDate="2025-03-01T10:00:00Z",
            ),
            now=T0,
        )

    assert exc_info.value.errors == [
        "The application date is invalid.",
        "The next visit date is invalid.",
    ]
    assert list_orders(repo) == []


def test_created_order_stays_updatable(repo):
    """Test an order that passed creation also passes re-validation on update."""
    order = create_order(
        repo, order_payload(applicationDate="2025-03-01", nextVisitDate="2025-03-02"), now=T0
    )

    updated = update_order(repo, order.id, {"serviceNotes": "x"}, now=T0)

    assert updated.service_notes == "x"
    assert updated.next_visit_date > updated.application_date


def test_create_order_ids_are_unique(repo):
    """Test ids never repeat."""
    first = create_order(repo, order_payload(), now=T0)
    second = create_order(repo, order_payload(), now=T0)
    assert first.id != second.id
    assert len(list_orders(repo)) == 2


def test_create_order_rejects_invalid_payload(repo):
    """Test validation failure stores nothing and reports every error."""
    with pytest.raises(ValidationError) as exc_info:
        create_order(repo, order_payload(clientId="", infestationLevel="extreme"))

    assert exc_info.value.errors == [
        "The field 'clientId' is required.",
        "The infestation level must be low, medium or high.",
    ]
    assert list_orders(repo) == []


def test_get_order_not_found(repo):
    """Test unknown id."""
    with pytest.raises(NotFoundError) as exc_info:
        get_order(repo, "missing")
    assert exc_info.value.order_id == "missing"


def test_list_orders_filters(repo):
    """Test client and status filters keep collection order."""
    a = create_order(repo, order_payload(), now=T0)
    b = create_order(repo, order_payload(clientId="CLI-002"), now=T0)
    c = create_order(repo, order_payload(status="completed"), now=T0)

    assert [o.id for o in list_orders(repo)] == [a.id, b.id, c.id]
    assert [o.id for o in list_orders(repo, client_id="CLI-001")] == [a.id, c.id]
    assert [o.id for o in list_orders(repo, status="completed")] == [c.id]


# ==================== update ====================


def test_update_order_merges_patch(repo):
    """Test patch fields overwrite, location merges one level deep."""
    order = create_order(repo, order_payload(), now=T0)

    updated = update_order(
        repo,
        order.id,
        {"pestType": "Rodent", "location": {"address": "Calle 5"}},
        now=T0 + timedelta(hours=1),
    )

    assert updated.pest_type == "Rodent"
    assert updated.location.address == "Calle 5"
    assert updated.location.gps.lat == 19.43
    assert updated.created_at == T0
    assert updated.updated_at == T0 + timedelta(hours=1)


def test_update_order_ignores_protected_fields(repo):
    """Test id, createdAt and certificate cannot be patched."""
    order = create_order(repo, order_payload(), now=T0)

    updated = update_order(
        repo,
        order.id,
        {
            "id": "hijack",
            "createdAt": "2000-01-01T00:00:00+00:00",
            "certificate": {"issued": True, "folio": "FAKE"},
            "serviceNotes": "Back door",
        },
        now=T0,
    )

    assert updated.id == order.id
    assert updated.created_at == T0
    assert updated.certificate.issued is False
    assert updated.service_notes == "Back door"


def test_update_order_rejects_invalid_merge(repo):
    """Test the merged order is validated and nothing is written."""
    order = create_order(repo, order_payload(), now=T0)

    with pytest.raises(ValidationError) as exc_info:
        update_order(repo, order.id, {"nextVisitDate": "2025-02-01"})

    assert exc_info.value.errors == ["The next visit date must be after the application date."]
    assert exc_info.value.details == {"order_id": order.id}
    assert get_order(repo, order.id).next_visit_date.isoformat() == "2025-03-15"


def test_update_order_not_found(repo):
    """Test update of unknown id."""
    with pytest.raises(NotFoundError):
        update_order(repo, "missing", {"pestType": "Rodent"})


def test_update_timestamp_never_moves_backwards(repo):
    """Test updatedAt is monotonic even with a clock behind it."""
    order = create_order(repo, order_payload(), now=T0)
    updated = update_order(repo, order.id, {"pestType": "Ant"}, now=T0 - timedelta(days=1))
    assert updated.updated_at == T0


def test_status_transitions_are_free(repo):
    """Test any status may follow any other while uncertified."""
    order = create_order(repo, order_payload(), now=T0)

    for status in ("cancelled", "completed", "scheduled", "completed"):
        order = update_order(repo, order.id, {"status": status}, now=T0)
        assert order.status == status


def test_certified_order_cannot_leave_completed(repo):
    """Test a certified order keeps the completed status."""
    order = create_order(repo, order_payload(status="completed"), now=T0)
    issue_certificate(repo, order.id, now=T0)

    with pytest.raises(ValidationError) as exc_info:
        update_order(repo, order.id, {"status": "scheduled"}, now=T0)

    assert exc_info.value.errors == ["A certified service must keep the completed status."]
    assert get_order(repo, order.id).status == "completed"


# ==================== delete ====================


def test_delete_order(repo):
    """Test delete returns the removed order."""
    keep = create_order(repo, order_payload(), now=T0)
    drop = create_order(repo, order_payload(), now=T0)

    deleted = delete_order(repo, drop.id)

    assert deleted.id == drop.id
    assert [o.id for o in list_orders(repo)] == [keep.id]
    with pytest.raises(NotFoundError):
        delete_order(repo, drop.id)


# ==================== certificates ====================


def test_issue_certificate(repo):
    """Test certificate issuance on a completed order."""
    order = create_order(repo, order_payload(status="completed"), now=T0)
    issued_at = datetime(2025, 3, 1, tzinfo=timezone.utc)

    certified = issue_certificate(repo, order.id, now=issued_at)

    assert certified.certificate.issued is True
    assert certified.certificate.issued_at == issued_at
    assert certified.certificate.folio == "DES-2025-200000"
    assert get_order(repo, order.id).certificate.folio == "DES-2025-200000"


def test_issue_certificate_custom_prefix(repo):
    """Test folio prefix is configurable."""
    order = create_order(repo, order_payload(status="completed"), now=T0)
    certified = issue_certificate(repo, order.id, now=T0, folio_prefix="QRO")
    assert certified.certificate.folio.startswith("QRO-2025-")


def test_issue_certificate_requires_completed(repo):
    """Test scheduled orders cannot be certified and stay unchanged."""
    order = create_order(repo, order_payload(), now=T0)

    with pytest.raises(InvalidStateError) as exc_info:
        issue_certificate(repo, order.id, now=T0 + timedelta(hours=1))

    assert exc_info.value.message == "Only completed services may be certified."
    assert get_order(repo, order.id) == order


def test_reissue_replaces_folio(repo):
    """Test issuing again generates a new folio and timestamp."""
    order = create_order(repo, order_payload(status="completed"), now=T0)

    first = issue_certificate(repo, order.id, now=T0)
    second = issue_certificate(repo, order.id, now=T0 + timedelta(milliseconds=1))

    assert second.certificate.folio != first.certificate.folio
    assert second.certificate.issued_at > first.certificate.issued_at


def test_issue_certificate_not_found(repo):
    """Test issuance for unknown id."""
    with pytest.raises(NotFoundError):
        issue_certificate(repo, "missing")


def test_get_certificate_pending(repo):
    """Test completed but uncertified order reports a pending folio."""
    order = create_order(repo, order_payload(status="completed"), now=T0)

    document = get_certificate(repo, order.id)

    assert document.folio == PENDING_FOLIO
    assert document.issued_at is None
    assert document.order.id == order.id


def test_get_certificate_issued(repo):
    """Test certificate data after issuance."""
    order = create_order(repo, order_payload(status="completed"), now=T0)
    certified = issue_certificate(repo, order.id, now=T0)

    document = get_certificate(repo, order.id)

    assert document.folio == certified.certificate.folio
    assert document.issued_at == T0
    assert document.to_dict()["order"]["clientName"] == "Restaurante El Sol"


def test_get_certificate_requires_completed(repo):
    """Test certificate data is refused for non-completed orders."""
    order = create_order(repo, order_payload(status="cancelled"), now=T0)

    with pytest.raises(InvalidStateError) as exc_info:
        get_certificate(repo, order.id)

    assert exc_info.value.message == "The service must be completed to generate a certificate."
