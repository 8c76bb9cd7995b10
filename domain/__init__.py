"""
Domain layer for Desintesa.

This module contains core business entities, rules, validators and the
dosage calculator. No dependencies on storage, CLI, or external frameworks.
"""

from .models import (
    GpsPoint,
    Location,
    ChemicalCatalogEntry,
    ChemicalApplication,
    Certificate,
    ServiceOrder,
    CertificateDocument,
    INFESTATION_LEVELS,
    ORDER_STATUSES,
    STATUS_SCHEDULED,
    STATUS_COMPLETED,
    STATUS_CANCELLED,
)

from .exceptions import (
    DesintesaError,
    ValidationError,
    NotFoundError,
    InvalidStateError,
    StorageError,
    CatalogError,
    ReportGenerationError,
)

from .validators import (
    validate_order_payload,
    validate_intake_step,
    validate_chemicals,
    validate_location,
    validate_dates,
    REQUIRED_ORDER_FIELDS,
)

from .rules import (
    to_number,
    is_supplied,
    parse_date,
    parse_calendar_date,
    parse_timestamp,
    generate_folio,
    utc_now,
)

from .dosage import (
    DosageResult,
    calculate_dosage,
    calculate_application_dosage,
    calculate_mix_liters,
    select_catalog_entry,
    suggested_applied_quantity,
    dose_gauge,
    AREA_TO_LITERS_FACTOR,
    SAFETY_TOLERANCE,
)

__all__ = [
    # Models
    "GpsPoint",
    "Location",
    "ChemicalCatalogEntry",
    "ChemicalApplication",
    "Certificate",
    "ServiceOrder",
    "CertificateDocument",
    "INFESTATION_LEVELS",
    "ORDER_STATUSES",
    "STATUS_SCHEDULED",
    "STATUS_COMPLETED",
    "STATUS_CANCELLED",
    # Exceptions
    "DesintesaError",
    "ValidationError",
    "NotFoundError",
    "InvalidStateError",
    "StorageError",
    "CatalogError",
    "ReportGenerationError",
    # Validators
    "validate_order_payload",
    "validate_intake_step",
    "validate_chemicals",
    "validate_location",
    "validate_dates",
    "REQUIRED_ORDER_FIELDS",
    # Rules
    "to_number",
    "is_supplied",
    "parse_date",
    "parse_calendar_date",
    "parse_timestamp",
    "generate_folio",
    "utc_now",
    # Dosage
    "DosageResult",
    "calculate_dosage",
    "calculate_application_dosage",
    "calculate_mix_liters",
    "select_catalog_entry",
    "suggested_applied_quantity",
    "dose_gauge",
    "AREA_TO_LITERS_FACTOR",
    "SAFETY_TOLERANCE",
]
