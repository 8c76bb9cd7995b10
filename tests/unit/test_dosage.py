"""
Unit tests for the chemical dosage calculator.
"""

from datetime import datetime, timedelta, timezone

import pytest

from domain.dosage import (
    AREA_TO_LITERS_FACTOR,
    calculate_application_dosage,
    calculate_dosage,
    calculate_mix_liters,
    dose_gauge,
    select_catalog_entry,
    suggested_applied_quantity,
)
from domain.models import ChemicalApplication, ChemicalCatalogEntry


NOW = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def entry():
    return ChemicalCatalogEntry(
        id="CHEM-001",
        name="Cipermetrina 25 EC",
        active_ingredient="Cypermethrin 25%",
        sanitary_registry="RSCO-001",
        dose_per_liter=2,
        dose_unit="ml",
        reentry_hours=4,
    )


def test_mix_liters_prefers_tank():
    """Test tank volume wins over area."""
    assert calculate_mix_liters(area_m2=500, tank_liters=10) == 10
    assert calculate_mix_liters(area_m2=500) == 500 / AREA_TO_LITERS_FACTOR
    assert calculate_mix_liters() == 0


def test_mix_liters_ignores_bad_input():
    """Test blank and non-numeric inputs count as zero."""
    assert calculate_mix_liters(area_m2="abc", tank_liters="") == 0
    assert calculate_mix_liters(area_m2="400", tank_liters="-5") == 20


def test_dosage_for_area(entry):
    """Test 500 m2 at 2 ml/L: 25 L of mix, 50 ml recommended, 55 ml limit."""
    result = calculate_dosage(area_m2=500, entry=entry, now=NOW)

    assert result.mix_liters == 25
    assert result.recommended_dose == 50
    assert result.safety_limit == pytest.approx(55)
    assert result.has_recommendation


def test_dosage_exceeds_limit(entry):
    """Test applied quantity above the safety limit."""
    result = calculate_dosage(area_m2=500, applied_quantity=60, entry=entry, now=NOW)
    assert result.exceeds_limit
    assert not result.is_within_safe_range


def test_dosage_within_safe_range(entry):
    """Test applied quantity between zero and the limit."""
    result = calculate_dosage(area_m2=500, applied_quantity="52", entry=entry, now=NOW)
    assert result.is_within_safe_range
    assert not result.exceeds_limit


def test_dosage_zero_applied_is_neither(entry):
    """Test nothing applied is neither safe nor exceeding."""
    result = calculate_dosage(area_m2=500, applied_quantity=0, entry=entry, now=NOW)
    assert not result.is_within_safe_range
    assert not result.exceeds_limit


def test_dosage_without_catalog_entry():
    """Test free-text product: no recommendation, no re-entry time."""
    result = calculate_dosage(area_m2=500, applied_quantity=1000, now=NOW)

    assert result.recommended_dose == 0
    assert not result.has_recommendation
    assert not result.exceeds_limit
    assert not result.is_within_safe_range
    assert result.reentry_at is None


def test_dosage_reentry_time(entry):
    """Test re-entry is reference time plus re-entry hours."""
    result = calculate_dosage(tank_liters=10, entry=entry, now=NOW)
    assert result.reentry_at == NOW + timedelta(hours=4)
    assert result.dose_unit == "ml"


def test_suggested_applied_quantity(entry):
    """Test suggestion is the recommendation rounded to 2 decimals."""
    result = calculate_dosage(area_m2=333, entry=entry, now=NOW)
    assert suggested_applied_quantity(result) == 33.3
    assert suggested_applied_quantity(calculate_dosage(area_m2=333, now=NOW)) is None


def test_dose_gauge_levels(entry):
    """Test gauge classification."""
    low = dose_gauge(calculate_dosage(area_m2=500, applied_quantity=10, entry=entry, now=NOW))
    adequate = dose_gauge(calculate_dosage(area_m2=500, applied_quantity=40, entry=entry, now=NOW))
    exceeded = dose_gauge(calculate_dosage(area_m2=500, applied_quantity=80, entry=entry, now=NOW))

    assert low["level"] == "low"
    assert adequate["level"] == "adequate"
    assert exceeded == {"percent": 100.0, "level": "exceeded"}
    assert dose_gauge(calculate_dosage(area_m2=500, now=NOW)) is None


def test_select_catalog_entry_snapshots_and_proposes(entry):
    """Test selecting a product copies catalog values and proposes a dose."""
    application = ChemicalApplication(area_m2=500, applied_quantity=12, dilution="2 ml/L", lot="L1")

    selected = select_catalog_entry(application, entry)

    assert selected.product_id == "CHEM-001"
    assert selected.name == "Cipermetrina 25 EC"
    assert selected.sanitary_registry == "RSCO-001"
    assert selected.dose_per_liter == 2
    assert selected.reentry_hours == 4
    assert selected.applied_quantity == 50
    assert selected.lot == "L1"
    # Input untouched
    assert application.product_id == ""
    assert application.applied_quantity == 12


def test_select_catalog_entry_keeps_quantity_without_mix(entry):
    """Test the previous quantity stays when no mix volume is known."""
    application = ChemicalApplication(applied_quantity=12)
    assert select_catalog_entry(application, entry).applied_quantity == 12


def test_select_catalog_entry_none_clears(entry):
    """Test deselecting clears the catalog snapshot."""
    selected = select_catalog_entry(ChemicalApplication(area_m2=500), entry)
    cleared = select_catalog_entry(selected, None)

    assert cleared.product_id == ""
    assert cleared.name == ""
    assert cleared.dose_per_liter == 0
    assert cleared.area_m2 == 500


def test_application_dosage_uses_snapshot():
    """Test stored applications are checked against their own snapshot."""
    application = ChemicalApplication(
        name="Deltametrina",
        dose_per_liter=4,
        reentry_hours=2,
        tank_liters=10,
        applied_quantity=42,
    )
    result = calculate_application_dosage(application, now=NOW)

    assert result.recommended_dose == 40
    assert result.is_within_safe_range
    assert result.reentry_at == NOW + timedelta(hours=2)
