"""
Unit tests for domain validators.

Tests cover order payload rules (strict and partial) and the intake
form's per-step checks.
"""

from datetime import date

import pytest

from domain.validators import (
    REQUIRED_ORDER_FIELDS,
    validate_chemicals,
    validate_dates,
    validate_intake_step,
    validate_location,
    validate_order_payload,
)


def valid_chemical(**overrides):
    chemical = {
        "name": "Cipermetrina 25 EC",
        "sanitaryRegistry": "RSCO-001",
        "appliedQuantity": 50,
        "dilution": "2 ml/L",
        "lot": "L-2025-01",
    }
    chemical.update(overrides)
    return chemical


def valid_payload(**overrides):
    payload = {
        "clientId": "CLI-001",
        "clientName": "Restaurante El Sol",
        "location": {"address": "Av. Reforma 100", "gps": {"lat": 19.43, "lng": -99.13}},
        "assignedTechnician": "Juan Perez",
        "pestType": "Cockroach",
        "infestationLevel": "medium",
        "chemicalsUsed": [valid_chemical()],
        "applicationDate": "2025-03-01",
        "nextVisitDate": "2025-03-15",
    }
    payload.update(overrides)
    return payload


# ==================== validate_order_payload ====================


def test_valid_payload_has_no_errors():
    """Test a complete payload passes strict validation."""
    assert validate_order_payload(valid_payload()) == []


def test_empty_payload_reports_every_required_field():
    """Test strict mode lists every missing field, in order."""
    errors = validate_order_payload({})

    assert errors == [f"The field '{name}' is required." for name in REQUIRED_ORDER_FIELDS]


def test_empty_string_counts_as_missing():
    """Test empty strings fail the presence check."""
    errors = validate_order_payload(valid_payload(clientName=""))
    assert "The field 'clientName' is required." in errors


def test_partial_mode_skips_presence():
    """Test partial mode only validates supplied fields."""
    assert validate_order_payload({"pestType": "Rodent"}, partial=True) == []
    assert validate_order_payload({"status": "archived"}, partial=True) == [
        "The status must be scheduled, completed or cancelled."
    ]


def test_invalid_infestation_level():
    """Test infestation level outside the enum."""
    errors = validate_order_payload(valid_payload(infestationLevel="extreme"))
    assert errors == ["The infestation level must be low, medium or high."]


def test_invalid_status():
    """Test status outside the enum."""
    errors = validate_order_payload(valid_payload(status="archived"))
    assert errors == ["The status must be scheduled, completed or cancelled."]


def test_all_violations_reported_together():
    """Test several independent violations appear in rule order."""
    errors = validate_order_payload(
        valid_payload(
            infestationLevel="extreme",
            status="archived",
            nextVisitDate="2025-02-01",
        )
    )
    assert errors == [
        "The infestation level must be low, medium or high.",
        "The status must be scheduled, completed or cancelled.",
        "The next visit date must be after the application date.",
    ]


def test_empty_chemicals_list_in_partial_mode():
    """Test a supplied but empty chemicals list is rejected."""
    errors = validate_order_payload({"chemicalsUsed": []}, partial=True)
    assert errors == ["At least one chemical product must be included."]


def test_certified_order_must_stay_completed():
    """Test a certified order cannot carry another status."""
    certified = {"issued": True, "issuedAt": "2025-03-02T10:00:00+00:00", "folio": "DES-2025-1"}

    errors = validate_order_payload(valid_payload(status="scheduled", certificate=certified))
    assert "A certified service must keep the completed status." in errors

    assert validate_order_payload(valid_payload(status="completed", certificate=certified)) == []


def test_certified_order_without_status_in_strict_mode():
    """Test a missing status defaults to scheduled for the certificate rule."""
    certified = {"issued": True, "folio": "DES-2025-1"}
    errors = validate_order_payload(valid_payload(certificate=certified))
    assert errors == ["A certified service must keep the completed status."]


# ==================== validate_location ====================


def test_location_requires_address():
    """Test missing address."""
    errors = validate_location({"address": "", "gps": {"lat": 1.0, "lng": 2.0}})
    assert errors == ["The service address is required."]


@pytest.mark.parametrize(
    "gps",
    [
        None,
        {},
        {"lat": "19.4", "lng": -99.1},
        {"lat": 19.4},
        {"lat": float("nan"), "lng": 1.0},
        {"lat": True, "lng": 1.0},
    ],
)
def test_location_requires_numeric_gps(gps):
    """Test GPS must have finite numeric lat and lng."""
    errors = validate_location({"address": "Calle 1", "gps": gps})
    assert errors == ["GPS location must include numeric lat and lng."]


def test_location_zero_coordinates_are_valid():
    """Test 0.0 is an acceptable coordinate."""
    assert validate_location({"address": "Null Island", "gps": {"lat": 0, "lng": 0.0}}) == []


# ==================== validate_chemicals ====================


def test_chemicals_first_failure_only():
    """Test only the first failing chemical rule is reported."""
    chemicals = [
        valid_chemical(name=""),
        valid_chemical(appliedQuantity=None, lot=""),
    ]
    assert validate_chemicals(chemicals) == (
        "Each chemical product requires a name and sanitary registry."
    )


def test_chemicals_applied_quantity_zero_is_present():
    """Test 0 counts as a supplied applied quantity at repository level."""
    assert validate_chemicals([valid_chemical(appliedQuantity=0)]) is None


def test_chemicals_missing_applied_quantity():
    """Test missing applied quantity."""
    assert validate_chemicals([valid_chemical(appliedQuantity="")]) == (
        "Each chemical product requires an applied quantity."
    )


def test_chemicals_missing_dilution_or_lot():
    """Test missing dilution or lot."""
    assert validate_chemicals([valid_chemical(dilution="")]) == (
        "Each chemical product requires a dilution and lot."
    )


def test_chemicals_not_a_list():
    """Test non-list chemicals value."""
    assert validate_chemicals("Cipermetrina") == "At least one chemical product must be included."


# ==================== validate_dates ====================


def test_dates_skipped_when_both_missing():
    """Test date rules only run when a date is supplied."""
    assert validate_dates(None, "") == []


def test_dates_invalid():
    """Test unparseable dates."""
    assert validate_dates("not-a-date", "2025-03-15") == ["The application date is invalid."]
    assert validate_dates("2025-03-01", "31/03/2025") == ["The next visit date is invalid."]


def test_dates_same_day_rejected():
    """Test next visit on the application day is not strictly later."""
    assert validate_dates("2025-03-01", "2025-03-01") == [
        "The next visit date must be after the application date."
    ]


def test_dates_reject_timestamps():
    """Test timestamps are not calendar dates, even when ordered."""
    assert validate_dates("2025-03-01T09:00:00Z", "2025-03-01T10:00:00Z") == [
        "The application date is invalid.",
        "The next visit date is invalid.",
    ]
    assert validate_dates("2025-03-01", "2025-3-15") == ["The next visit date is invalid."]


def test_dates_accept_date_objects():
    """Test date objects compare as calendar dates."""
    assert validate_dates(date(2025, 3, 1), date(2025, 3, 2)) == []
    assert validate_dates(date(2025, 3, 1), date(2025, 3, 1)) == [
        "The next visit date must be after the application date."
    ]


# ==================== validate_intake_step ====================


def intake_form(**overrides):
    form = {
        "clientId": "CLI-001",
        "clientName": "Restaurante El Sol",
        "location": {"address": "Av. Reforma 100", "gps": {"lat": "19.43", "lng": "-99.13"}},
        "pestType": "Cockroach",
        "chemicalsUsed": [valid_chemical(appliedQuantity="50")],
        "assignedTechnician": "Juan Perez",
        "applicationDate": "2025-03-01",
        "nextVisitDate": "2025-03-15",
    }
    form.update(overrides)
    return form


def test_intake_step_one():
    """Test step 1 checks client and location."""
    errors = validate_intake_step({"location": {"gps": {}}}, 1)
    assert errors == [
        "Client ID and name are required.",
        "The address is required.",
        "GPS latitude and longitude are required.",
    ]


def test_intake_step_two_requires_positive_quantity():
    """Test intake rejects zero applied quantity."""
    form = intake_form(chemicalsUsed=[valid_chemical(appliedQuantity="0")])
    assert validate_intake_step(form, 2) == ["Product #1: invalid applied quantity."]


def test_intake_step_two_reports_every_product():
    """Test intake reports violations per product."""
    form = intake_form(
        chemicalsUsed=[valid_chemical(), valid_chemical(name="", lot="", appliedQuantity="")]
    )
    assert validate_intake_step(form, 2) == [
        "Product #2: name and sanitary registry required.",
        "Product #2: invalid applied quantity.",
        "Product #2: dilution and lot required.",
    ]


def test_intake_step_three_dates():
    """Test step 3 checks technician and date ordering."""
    form = intake_form(assignedTechnician="", nextVisitDate="2025-02-01")
    assert validate_intake_step(form, 3) == [
        "Assign a technician.",
        "The next visit must be after the application date.",
    ]


def test_intake_steps_are_cumulative():
    """Test step 3 also re-checks earlier steps."""
    form = intake_form(clientId="")
    assert "Client ID and name are required." in validate_intake_step(form, 3)
    assert validate_intake_step(intake_form(), 3) == []
