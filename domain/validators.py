"""
Input validators for Desintesa.

These validators ensure order data integrity before it reaches the
repository. They never raise: each returns the complete, ordered list of
violation messages (empty list = valid) and the caller decides whether
to block. Order create/update always block on any violation.

Two independent rule sets live here:
- validate_order_payload(): repository-level rules, strict or partial
- validate_intake_step(): the intake form's per-step checks

The intake checks are stricter (applied quantity must be > 0, GPS fields
must be filled) and are kept separate on purpose.
"""

from typing import Any, Dict, List, Optional

from .models import INFESTATION_LEVELS, ORDER_STATUSES, STATUS_COMPLETED, STATUS_SCHEDULED
from .rules import is_finite_number, is_supplied, parse_calendar_date, to_number


REQUIRED_ORDER_FIELDS = (
    "clientId",
    "clientName",
    "location",
    "assignedTechnician",
    "pestType",
    "infestationLevel",
    "chemicalsUsed",
    "applicationDate",
    "nextVisitDate",
)

INTAKE_STEPS = (1, 2, 3)


def validate_chemicals(chemicals: Any) -> Optional[str]:
    """
    Validate the chemical application list.

    Only the first failing rule is reported.

    Args:
        chemicals: Value of chemicalsUsed

    Returns:
        Violation message or None if valid
    """
    if not isinstance(chemicals, list) or len(chemicals) == 0:
        return "At least one chemical product must be included."

    for chemical in chemicals:
        if not isinstance(chemical, dict):
            return "Each chemical product requires a name and sanitary registry."
        if not chemical.get("name") or not chemical.get("sanitaryRegistry"):
            return "Each chemical product requires a name and sanitary registry."
        # Presence only; "> 0" is an intake-form rule
        if not is_supplied(chemical.get("appliedQuantity")):
            return "Each chemical product requires an applied quantity."
        if not chemical.get("dilution") or not chemical.get("lot"):
            return "Each chemical product requires a dilution and lot."

    return None


def validate_location(location: Any) -> List[str]:
    """Address must be non-empty, GPS lat/lng finite numbers."""
    errors = []
    if not isinstance(location, dict):
        location = {}

    if not location.get("address"):
        errors.append("The service address is required.")

    gps = location.get("gps")
    if (
        not isinstance(gps, dict)
        or not is_finite_number(gps.get("lat"))
        or not is_finite_number(gps.get("lng"))
    ):
        errors.append("GPS location must include numeric lat and lng.")

    return errors


def validate_dates(application_date: Any, next_visit_date: Any) -> List[str]:
    """
    Validate the scheduling dates.

    Only runs when at least one date is supplied; then both must be
    calendar dates (YYYY-MM-DD) and the next visit must be strictly later
    than the application date.
    """
    if not application_date and not next_visit_date:
        return []

    errors = []
    applied_on = parse_calendar_date(application_date)
    next_visit = parse_calendar_date(next_visit_date)

    if applied_on is None:
        errors.append("The application date is invalid.")
    if next_visit is None:
        errors.append("The next visit date is invalid.")
    if applied_on is not None and next_visit is not None and next_visit <= applied_on:
        errors.append("The next visit date must be after the application date.")

    return errors


def validate_order_payload(candidate: Dict[str, Any], partial: bool = False) -> List[str]:
    """
    Validate a service-order candidate.

    Every rule is evaluated; the result lists all violations in rule order.

    Args:
        candidate: Order payload (camelCase keys). For updates this is the
            merged order, not the raw patch.
        partial: If True, skip the required-field presence check and only
            validate fields that are supplied

    Returns:
        List of violation messages (empty = valid)

    Example:
        >>> validate_order_payload({"status": "archived"}, partial=True)
        ['The status must be scheduled, completed or cancelled.']
    """
    errors = []

    if not partial:
        for field_name in REQUIRED_ORDER_FIELDS:
            if not is_supplied(candidate.get(field_name)):
                errors.append(f"The field '{field_name}' is required.")

    level = candidate.get("infestationLevel")
    if level and level not in INFESTATION_LEVELS:
        errors.append("The infestation level must be low, medium or high.")

    status = candidate.get("status")
    if status and status not in ORDER_STATUSES:
        errors.append("The status must be scheduled, completed or cancelled.")

    if is_supplied(candidate.get("location")):
        errors.extend(validate_location(candidate["location"]))

    if "chemicalsUsed" in candidate:
        chemicals_error = validate_chemicals(candidate["chemicalsUsed"])
        if chemicals_error:
            errors.append(chemicals_error)

    errors.extend(
        validate_dates(candidate.get("applicationDate"), candidate.get("nextVisitDate"))
    )

    # A missing status defaults to scheduled on create
    effective_status = status if is_supplied(status) else (None if partial else STATUS_SCHEDULED)
    certificate = candidate.get("certificate")
    if isinstance(certificate, dict) and certificate.get("issued"):
        if effective_status is not None and effective_status != STATUS_COMPLETED:
            errors.append("A certified service must keep the completed status.")

    return errors


def validate_intake_step(form: Dict[str, Any], step: int) -> List[str]:
    """
    Validate the intake form up to and including a step.

    Steps are cumulative:
        1 - client and location
        2 - pest and dosing (applied quantity must be > 0)
        3 - closing (technician and dates)

    Args:
        form: Intake form values (raw strings allowed)
        step: Step number 1-3

    Returns:
        List of violation messages (empty = step may advance)
    """
    errors = []
    location = form.get("location") or {}
    gps = location.get("gps") or {}

    if step >= 1:
        if not form.get("clientId") or not form.get("clientName"):
            errors.append("Client ID and name are required.")
        if not location.get("address"):
            errors.append("The address is required.")
        if not is_supplied(gps.get("lat")) or not is_supplied(gps.get("lng")):
            errors.append("GPS latitude and longitude are required.")

    if step >= 2:
        chemicals = form.get("chemicalsUsed") or []
        if not form.get("pestType"):
            errors.append("Select the pest type.")
        if not chemicals:
            errors.append("Add at least one chemical product.")
        for index, chemical in enumerate(chemicals, start=1):
            if not chemical.get("name") or not chemical.get("sanitaryRegistry"):
                errors.append(f"Product #{index}: name and sanitary registry required.")
            quantity = chemical.get("appliedQuantity")
            if not is_supplied(quantity) or to_number(quantity) <= 0:
                errors.append(f"Product #{index}: invalid applied quantity.")
            if not chemical.get("dilution") or not chemical.get("lot"):
                errors.append(f"Product #{index}: dilution and lot required.")

    if step >= 3:
        application_date = form.get("applicationDate")
        next_visit_date = form.get("nextVisitDate")
        if not form.get("assignedTechnician"):
            errors.append("Assign a technician.")
        if not application_date or not next_visit_date:
            errors.append("Application and next visit dates are required.")
        else:
            applied_on = parse_calendar_date(application_date)
            next_visit = parse_calendar_date(next_visit_date)
            if applied_on and next_visit and next_visit <= applied_on:
                errors.append("The next visit must be after the application date.")

    return errors
