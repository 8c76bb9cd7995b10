"""
Intake Operations for Desintesa.

The three-step intake form used to create and edit orders:
    1. Client & location
    2. Pest & dosing
    3. Closing (technician, dates, status)

Form values are raw user input (strings). build_order_payload() turns a
completed form into the payload accepted by create_order()/update_order();
order_to_form() is the reverse, for editing.
"""

import logging
from typing import Any, Dict, List, Optional

from domain.models import DEFAULT_DOSE_UNIT, ServiceOrder, STATUS_SCHEDULED
from domain.rules import to_number
from domain.validators import INTAKE_STEPS, validate_intake_step

logger = logging.getLogger(__name__)


COMMON_PEST_TYPES = (
    "Cockroach",
    "Rodent",
    "Termite",
    "Mosquito",
    "Fly",
    "Wasp",
    "Ant",
    "Flea",
)

LAST_STEP = INTAKE_STEPS[-1]


def empty_chemical_application() -> Dict[str, Any]:
    """Blank chemical line for the intake form."""
    return {
        "productId": "",
        "name": "",
        "activeIngredient": "",
        "sanitaryRegistry": "",
        "dosePerLiter": 0,
        "doseUnit": DEFAULT_DOSE_UNIT,
        "reentryHours": 0,
        "areaM2": "",
        "tankLiters": "",
        "appliedQuantity": "",
        "dilution": "",
        "lot": "",
    }


def empty_order_form() -> Dict[str, Any]:
    """Blank intake form with one chemical line."""
    return {
        "clientId": "",
        "clientName": "",
        "location": {"address": "", "gps": {"lat": "", "lng": ""}},
        "assignedTechnician": "",
        "pestType": "",
        "infestationLevel": "low",
        "chemicalsUsed": [empty_chemical_application()],
        "applicationDate": "",
        "nextVisitDate": "",
        "status": STATUS_SCHEDULED,
        "serviceNotes": "",
    }


def next_step(form: Dict[str, Any], step: int) -> tuple:
    """
    Try to advance the intake form.

    Returns:
        (new_step, errors) - the step stays put while errors remain
    """
    errors = validate_intake_step(form, step)
    if errors:
        logger.debug(f"Intake step {step} blocked: {errors}")
        return step, errors
    return min(step + 1, LAST_STEP), []


def _blank_to_none(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return to_number(value)


def _text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def _chemical_payload(chemical: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "productId": chemical.get("productId") or "",
        "name": _text(chemical.get("name")),
        "activeIngredient": _text(chemical.get("activeIngredient")),
        "sanitaryRegistry": _text(chemical.get("sanitaryRegistry")),
        "dosePerLiter": to_number(chemical.get("dosePerLiter")),
        "doseUnit": chemical.get("doseUnit") or DEFAULT_DOSE_UNIT,
        "reentryHours": to_number(chemical.get("reentryHours")),
        "areaM2": _blank_to_none(chemical.get("areaM2")),
        "tankLiters": _blank_to_none(chemical.get("tankLiters")),
        "appliedQuantity": to_number(chemical.get("appliedQuantity")),
        "dilution": _text(chemical.get("dilution")),
        "lot": _text(chemical.get("lot")),
    }


def build_order_payload(form: Dict[str, Any]) -> Dict[str, Any]:
    """
    Convert an intake form into an order payload.

    Trims text fields, converts GPS and numeric inputs, and maps blank
    area/tank inputs to None. Does not validate; run
    validate_intake_step(form, 3) first.

    Args:
        form: Intake form values

    Returns:
        Payload dict for create_order()/update_order()
    """
    location = form.get("location") or {}
    gps = location.get("gps") or {}

    payload = dict(form)
    payload["location"] = {
        "address": location.get("address") or "",
        "gps": {"lat": to_number(gps.get("lat")), "lng": to_number(gps.get("lng"))},
    }
    payload["chemicalsUsed"] = [_chemical_payload(c) for c in form.get("chemicalsUsed") or []]
    return payload


def _form_value(value: Any) -> Any:
    return "" if value is None else value


def order_to_form(order: Optional[ServiceOrder]) -> Dict[str, Any]:
    """
    Build an intake form from a stored order (for editing).

    None gives an empty form.
    """
    if order is None:
        return empty_order_form()

    chemicals: List[Dict[str, Any]] = [
        {
            "productId": c.product_id,
            "name": c.name,
            "activeIngredient": c.active_ingredient,
            "sanitaryRegistry": c.sanitary_registry,
            "dosePerLiter": c.dose_per_liter,
            "doseUnit": c.dose_unit or DEFAULT_DOSE_UNIT,
            "reentryHours": c.reentry_hours,
            "areaM2": _form_value(c.area_m2),
            "tankLiters": _form_value(c.tank_liters),
            "appliedQuantity": "" if c.applied_quantity is None else str(c.applied_quantity),
            "dilution": c.dilution,
            "lot": c.lot,
        }
        for c in order.chemicals_used
    ]

    location = order.location
    return {
        "clientId": order.client_id,
        "clientName": order.client_name,
        "location": {
            "address": location.address if location else "",
            "gps": {
                "lat": location.gps.lat if location and location.gps else "",
                "lng": location.gps.lng if location and location.gps else "",
            },
        },
        "assignedTechnician": order.assigned_technician,
        "pestType": order.pest_type,
        "infestationLevel": order.infestation_level or "low",
        "chemicalsUsed": chemicals or [empty_chemical_application()],
        "applicationDate": order.application_date.isoformat() if order.application_date else "",
        "nextVisitDate": order.next_visit_date.isoformat() if order.next_visit_date else "",
        "status": order.status or STATUS_SCHEDULED,
        "serviceNotes": order.service_notes,
    }


__all__ = [
    "COMMON_PEST_TYPES",
    "empty_chemical_application",
    "empty_order_form",
    "next_step",
    "validate_intake_step",
    "build_order_payload",
    "order_to_form",
]
