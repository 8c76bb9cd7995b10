"""
Domain models for Desintesa.

These dataclasses represent the core business entities.
They are framework-agnostic and have no dependencies on database or UI.

Serialized form uses the camelCase keys of the order JSON documents
(``clientId``, ``chemicalsUsed``, ``nextVisitDate`` ...).
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from .rules import parse_date, parse_timestamp, to_number


# Allowed values
INFESTATION_LEVELS = ("low", "medium", "high")

STATUS_SCHEDULED = "scheduled"
STATUS_COMPLETED = "completed"
STATUS_CANCELLED = "cancelled"
ORDER_STATUSES = (STATUS_SCHEDULED, STATUS_COMPLETED, STATUS_CANCELLED)

DEFAULT_DOSE_UNIT = "ml"


def _optional_number(value: Any) -> Optional[float]:
    """None/blank stay None, anything else is coerced with to_number()."""
    if value is None or value == "":
        return None
    return to_number(value)


def _iso(value: Optional[Any]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass
class GpsPoint:
    """GPS coordinate pair, passed through untouched."""

    lat: float
    lng: float

    def to_dict(self) -> Dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}


@dataclass
class Location:
    """Service address plus GPS coordinates."""

    address: str
    gps: Optional[GpsPoint] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["Location"]:
        if not data:
            return None
        gps = data.get("gps") or {}
        point = None
        if gps.get("lat") is not None and gps.get("lng") is not None:
            point = GpsPoint(lat=gps["lat"], lng=gps["lng"])
        return cls(address=data.get("address") or "", gps=point)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "gps": self.gps.to_dict() if self.gps else None,
        }


@dataclass
class ChemicalCatalogEntry:
    """
    Reference description of a treatable chemical product.

    Read-only to the core; values are copied into ChemicalApplication
    when a product is selected.
    """

    id: str
    name: str
    active_ingredient: str = ""
    sanitary_registry: str = ""
    dose_per_liter: float = 0.0
    dose_unit: str = DEFAULT_DOSE_UNIT
    reentry_hours: float = 0.0

    def __post_init__(self):
        """Validate catalog entry."""
        if not self.id:
            raise ValueError("id cannot be empty")
        if not self.name:
            raise ValueError("name cannot be empty")
        self.dose_per_liter = to_number(self.dose_per_liter)
        self.reentry_hours = to_number(self.reentry_hours)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChemicalCatalogEntry":
        return cls(
            id=str(data.get("id") or ""),
            name=data.get("name") or "",
            active_ingredient=data.get("activeIngredient") or "",
            sanitary_registry=data.get("sanitaryRegistry") or "",
            dose_per_liter=data.get("dosePerLiter", 0),
            dose_unit=data.get("doseUnit") or DEFAULT_DOSE_UNIT,
            reentry_hours=data.get("reentryHours", 0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "activeIngredient": self.active_ingredient,
            "sanitaryRegistry": self.sanitary_registry,
            "dosePerLiter": self.dose_per_liter,
            "doseUnit": self.dose_unit,
            "reentryHours": self.reentry_hours,
        }


@dataclass
class ChemicalApplication:
    """
    One chemical line item of a service order.

    Dose, unit and re-entry interval are a snapshot of the catalog entry
    at selection time, so later catalog edits never alter history.
    """

    name: str = ""
    sanitary_registry: str = ""
    applied_quantity: Optional[float] = None
    dilution: str = ""
    lot: str = ""
    product_id: str = ""
    active_ingredient: str = ""
    dose_per_liter: float = 0.0
    dose_unit: str = DEFAULT_DOSE_UNIT
    reentry_hours: float = 0.0
    area_m2: Optional[float] = None
    tank_liters: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChemicalApplication":
        return cls(
            name=data.get("name") or "",
            sanitary_registry=data.get("sanitaryRegistry") or "",
            applied_quantity=_optional_number(data.get("appliedQuantity")),
            dilution=data.get("dilution") or "",
            lot=data.get("lot") or "",
            product_id=data.get("productId") or "",
            active_ingredient=data.get("activeIngredient") or "",
            dose_per_liter=to_number(data.get("dosePerLiter")),
            dose_unit=data.get("doseUnit") or DEFAULT_DOSE_UNIT,
            reentry_hours=to_number(data.get("reentryHours")),
            area_m2=_optional_number(data.get("areaM2")),
            tank_liters=_optional_number(data.get("tankLiters")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "productId": self.product_id,
            "name": self.name,
            "activeIngredient": self.active_ingredient,
            "sanitaryRegistry": self.sanitary_registry,
            "dosePerLiter": self.dose_per_liter,
            "doseUnit": self.dose_unit,
            "reentryHours": self.reentry_hours,
            "areaM2": self.area_m2,
            "tankLiters": self.tank_liters,
            "appliedQuantity": self.applied_quantity,
            "dilution": self.dilution,
            "lot": self.lot,
        }


@dataclass
class Certificate:
    """Regulatory certificate sub-record of an order."""

    issued: bool = False
    issued_at: Optional[datetime] = None
    folio: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Certificate":
        if not data:
            return cls()
        return cls(
            issued=bool(data.get("issued")),
            issued_at=parse_timestamp(data.get("issuedAt")),
            folio=data.get("folio"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "issued": self.issued,
            "issuedAt": _iso(self.issued_at),
            "folio": self.folio,
        }


@dataclass
class ServiceOrder:
    """
    One scheduled or completed pest-control service visit.

    Created through operations.order_ops.create_order(), which validates
    the payload before the model is built.
    """

    id: str
    client_id: str
    client_name: str
    location: Optional[Location]
    assigned_technician: str
    pest_type: str
    infestation_level: str
    chemicals_used: List[ChemicalApplication] = field(default_factory=list)
    application_date: Optional[date] = None
    next_visit_date: Optional[date] = None
    status: str = STATUS_SCHEDULED
    service_notes: str = ""
    certificate: Certificate = field(default_factory=Certificate)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_completed(self) -> bool:
        return self.status == STATUS_COMPLETED

    @property
    def is_cancelled(self) -> bool:
        return self.status == STATUS_CANCELLED

    @property
    def has_pending_certificate(self) -> bool:
        """Completed visit still waiting for its certificate."""
        return self.is_completed and not self.certificate.issued

    @property
    def requires_reentry_wait(self) -> bool:
        """True if any applied product has a re-entry interval."""
        return any(c.reentry_hours > 0 for c in self.chemicals_used)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServiceOrder":
        """Build an order from its stored JSON document."""
        app_date = parse_date(data.get("applicationDate"))
        next_date = parse_date(data.get("nextVisitDate"))
        return cls(
            id=data["id"],
            client_id=data.get("clientId") or "",
            client_name=data.get("clientName") or "",
            location=Location.from_dict(data.get("location")),
            assigned_technician=data.get("assignedTechnician") or "",
            pest_type=data.get("pestType") or "",
            infestation_level=data.get("infestationLevel") or "",
            chemicals_used=[
                ChemicalApplication.from_dict(c) for c in data.get("chemicalsUsed") or []
            ],
            application_date=app_date.date() if app_date else None,
            next_visit_date=next_date.date() if next_date else None,
            status=data.get("status") or STATUS_SCHEDULED,
            service_notes=data.get("serviceNotes") or "",
            certificate=Certificate.from_dict(data.get("certificate")),
            created_at=parse_timestamp(data.get("createdAt")),
            updated_at=parse_timestamp(data.get("updatedAt")),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the stored JSON document."""
        return {
            "id": self.id,
            "clientId": self.client_id,
            "clientName": self.client_name,
            "location": self.location.to_dict() if self.location else None,
            "assignedTechnician": self.assigned_technician,
            "pestType": self.pest_type,
            "infestationLevel": self.infestation_level,
            "chemicalsUsed": [c.to_dict() for c in self.chemicals_used],
            "applicationDate": _iso(self.application_date),
            "nextVisitDate": _iso(self.next_visit_date),
            "status": self.status,
            "serviceNotes": self.service_notes,
            "certificate": self.certificate.to_dict(),
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


@dataclass
class CertificateDocument:
    """
    Data handed to the certificate renderer.

    folio is "PENDING" while the certificate has not been issued.
    """

    order: ServiceOrder
    folio: str
    issued_at: Optional[datetime] = None

    @property
    def is_issued(self) -> bool:
        return self.issued_at is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "folio": self.folio,
            "issuedAt": _iso(self.issued_at),
            "order": self.order.to_dict(),
        }
