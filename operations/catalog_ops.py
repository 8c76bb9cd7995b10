"""
Catalog Operations for Desintesa.

Chemical catalog lookup and dosage helpers built on it.
The catalog is read-only reference data, loaded independently of orders.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from domain.dosage import (
    DosageResult,
    calculate_application_dosage,
    calculate_dosage,
    dose_gauge,
)
from domain.models import ChemicalCatalogEntry, ServiceOrder
from services.catalog_reader import CatalogReader

logger = logging.getLogger(__name__)


def load_catalog(path: Union[Path, str]) -> List[ChemicalCatalogEntry]:
    """
    Load the chemical catalog from file.

    Args:
        path: Catalog file (.json, .csv, .xlsx, .xls)

    Returns:
        List of ChemicalCatalogEntry

    Raises:
        CatalogError: If the file is missing or unreadable
    """
    entries = CatalogReader(path).read()
    logger.info(f"Catalog loaded: {len(entries)} products")
    return entries


def find_catalog_entry(
    catalog: List[ChemicalCatalogEntry],
    product_id: Optional[str],
) -> Optional[ChemicalCatalogEntry]:
    """Find catalog entry by id (None for empty id or no match)."""
    if not product_id:
        return None
    for entry in catalog:
        if entry.id == product_id:
            return entry
    return None


def calculate_product_dosage(
    catalog: List[ChemicalCatalogEntry],
    product_id: Optional[str],
    area_m2: Any = None,
    tank_liters: Any = None,
    applied_quantity: Any = None,
    now: Optional[datetime] = None,
) -> DosageResult:
    """
    calculate_dosage() for a catalog product id.

    An unknown id is treated like a free-text product (no recommendation).
    """
    entry = find_catalog_entry(catalog, product_id)
    if product_id and entry is None:
        logger.warning(f"Unknown catalog product: {product_id}")
    return calculate_dosage(
        area_m2=area_m2,
        tank_liters=tank_liters,
        applied_quantity=applied_quantity,
        entry=entry,
        now=now,
    )


def get_order_dosage(order: ServiceOrder, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    """
    Dosage check for every chemical of an order.

    Uses each application's own catalog snapshot.

    Returns:
        One dict per application with name, result and gauge
    """
    report = []
    for application in order.chemicals_used:
        result = calculate_application_dosage(application, now=now)
        report.append({
            "name": application.name,
            "result": result,
            "gauge": dose_gauge(result),
        })
    return report


def dosage_to_dict(result: DosageResult) -> Dict[str, Any]:
    """JSON-friendly view of a DosageResult."""
    return {
        "mixLiters": round(result.mix_liters, 2),
        "recommendedDose": round(result.recommended_dose, 2),
        "safetyLimit": round(result.safety_limit, 2),
        "appliedQuantity": result.applied_quantity,
        "doseUnit": result.dose_unit,
        "hasRecommendation": result.has_recommendation,
        "exceedsLimit": result.exceeds_limit,
        "isWithinSafeRange": result.is_within_safe_range,
        "reentryAt": result.reentry_at.isoformat() if result.reentry_at else None,
    }
