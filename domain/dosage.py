"""
Chemical dosage calculator.

Derives mix volume, recommended dose and safety limit for one chemical
application. All outputs are advisory: nothing here mutates an order.

Numeric inputs go through to_number(), so blank or non-numeric form
values count as 0 instead of raising.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Any, Optional

from .models import ChemicalApplication, ChemicalCatalogEntry, DEFAULT_DOSE_UNIT
from .rules import to_number, utc_now


# Liters of mix per square meter of treated area: 1 L covers 20 m²
AREA_TO_LITERS_FACTOR = 20

# Applied quantity may exceed the recommendation by 10%
SAFETY_TOLERANCE = 1.10

# Gauge turns "adequate" at 80% of the recommended dose
ADEQUATE_DOSE_RATIO = 0.8


@dataclass(frozen=True)
class DosageResult:
    """Outcome of calculate_dosage()."""

    mix_liters: float
    recommended_dose: float
    safety_limit: float
    applied_quantity: float
    reentry_at: Optional[datetime] = None
    dose_unit: str = DEFAULT_DOSE_UNIT

    @property
    def has_recommendation(self) -> bool:
        return self.recommended_dose > 0

    @property
    def exceeds_limit(self) -> bool:
        return self.has_recommendation and self.applied_quantity > self.safety_limit

    @property
    def is_within_safe_range(self) -> bool:
        return (
            self.has_recommendation
            and self.applied_quantity > 0
            and not self.exceeds_limit
        )


def calculate_mix_liters(area_m2: Any = None, tank_liters: Any = None) -> float:
    """
    Total mix volume in liters.

    Tank volume wins when given; otherwise the treated area is converted
    with AREA_TO_LITERS_FACTOR. Neither -> 0.
    """
    tank = to_number(tank_liters)
    if tank > 0:
        return tank
    area = to_number(area_m2)
    if area > 0:
        return area / AREA_TO_LITERS_FACTOR
    return 0.0


def calculate_dosage(
    area_m2: Any = None,
    tank_liters: Any = None,
    applied_quantity: Any = None,
    entry: Optional[ChemicalCatalogEntry] = None,
    now: Optional[datetime] = None,
) -> DosageResult:
    """
    Calculate recommended dose and safety classification.

    Args:
        area_m2: Treated area in m² (optional, any numeric-ish input)
        tank_liters: Tank volume in liters (optional)
        applied_quantity: Quantity the technician applied (optional)
        entry: Selected catalog entry, or None for free-text products
        now: Reference time for the re-entry timestamp (defaults to UTC now)

    Returns:
        DosageResult

    Example:
        >>> entry = ChemicalCatalogEntry(id="c1", name="X", dose_per_liter=2)
        >>> result = calculate_dosage(area_m2=500, applied_quantity=60, entry=entry)
        >>> result.mix_liters, result.recommended_dose, result.exceeds_limit
        (25.0, 50.0, True)
    """
    mix_liters = calculate_mix_liters(area_m2, tank_liters)
    dose_per_liter = entry.dose_per_liter if entry is not None else 0.0
    recommended = mix_liters * dose_per_liter if mix_liters > 0 else 0.0

    reentry_at = None
    if entry is not None:
        reference = now if now is not None else utc_now()
        reentry_at = reference + timedelta(hours=to_number(entry.reentry_hours))

    return DosageResult(
        mix_liters=mix_liters,
        recommended_dose=recommended,
        safety_limit=recommended * SAFETY_TOLERANCE,
        applied_quantity=to_number(applied_quantity),
        reentry_at=reentry_at,
        dose_unit=entry.dose_unit if entry is not None else DEFAULT_DOSE_UNIT,
    )


def calculate_application_dosage(
    application: ChemicalApplication,
    entry: Optional[ChemicalCatalogEntry] = None,
    now: Optional[datetime] = None,
) -> DosageResult:
    """
    calculate_dosage() for a stored application.

    Without an explicit catalog entry the application's own snapshot of
    dose-per-liter and re-entry hours is used, so results for historical
    orders do not depend on the current catalog.
    """
    if entry is None and application.dose_per_liter > 0:
        entry = ChemicalCatalogEntry(
            id=application.product_id or "snapshot",
            name=application.name or "snapshot",
            dose_per_liter=application.dose_per_liter,
            dose_unit=application.dose_unit,
            reentry_hours=application.reentry_hours,
        )
    return calculate_dosage(
        area_m2=application.area_m2,
        tank_liters=application.tank_liters,
        applied_quantity=application.applied_quantity,
        entry=entry,
        now=now,
    )


def suggested_applied_quantity(result: DosageResult) -> Optional[float]:
    """Recommended dose rounded to 2 decimals, None without a recommendation."""
    if not result.has_recommendation:
        return None
    return round(result.recommended_dose, 2)


def select_catalog_entry(
    application: ChemicalApplication,
    entry: Optional[ChemicalCatalogEntry],
) -> ChemicalApplication:
    """
    Copy a catalog entry into an application.

    Returns a new application; the input is not modified. Catalog values
    are snapshotted. When the mix volume is known the applied quantity is
    proposed as the new recommended dose, otherwise the previous applied
    quantity is kept. Passing None clears the catalog snapshot.
    """
    if entry is None:
        return replace(
            application,
            product_id="",
            name="",
            active_ingredient="",
            sanitary_registry="",
            dose_per_liter=0.0,
            dose_unit=DEFAULT_DOSE_UNIT,
            reentry_hours=0.0,
        )

    mix_liters = calculate_mix_liters(application.area_m2, application.tank_liters)
    proposed = mix_liters * entry.dose_per_liter if mix_liters > 0 else 0.0

    return replace(
        application,
        product_id=entry.id,
        name=entry.name,
        active_ingredient=entry.active_ingredient,
        sanitary_registry=entry.sanitary_registry,
        dose_per_liter=entry.dose_per_liter,
        dose_unit=entry.dose_unit,
        reentry_hours=entry.reentry_hours,
        applied_quantity=round(proposed, 2) if proposed > 0 else application.applied_quantity,
    )


def dose_gauge(result: DosageResult) -> Optional[dict]:
    """
    Fill level for a dose gauge.

    Returns:
        None without a recommendation, otherwise a dict with
        - percent: applied / safety limit, capped at 100
        - level: "exceeded", "adequate" (>= 80% of recommended) or "low"
    """
    if not result.has_recommendation:
        return None

    applied = result.applied_quantity
    percent = min(applied / result.safety_limit * 100, 100.0)

    if applied > result.safety_limit:
        level = "exceeded"
    elif applied >= result.recommended_dose * ADEQUATE_DOSE_RATIO:
        level = "adequate"
    else:
        level = "low"

    return {"percent": round(percent, 1), "level": level}
