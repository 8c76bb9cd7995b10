"""
Chemical Catalog Reader Service.

Reads the chemical product catalog from:
- JSON (array of product objects)
- CSV
- Excel (.xlsx / .xls)

Uses pandas (and openpyxl for Excel) with flexible column matching, so
both English headers ("dosePerLiter") and the Spanish headers of the
supplier sheets ("dosisPorLitro", "registroSanitario") are accepted.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pandas as pd

from domain.exceptions import CatalogError
from domain.models import ChemicalCatalogEntry, DEFAULT_DOSE_UNIT

logger = logging.getLogger(__name__)


SUPPORTED_EXTENSIONS = [".json", ".csv", ".xlsx", ".xls"]

# Column name mappings for flexible matching
ID_VARIANTS = ["id", "productid", "product_id", "codigo", "code"]
NAME_VARIANTS = ["name", "nombre", "producto", "product"]
ACTIVE_INGREDIENT_VARIANTS = ["activeingredient", "active_ingredient", "ingredienteactivo", "ingrediente"]
REGISTRY_VARIANTS = ["sanitaryregistry", "sanitary_registry", "registrosanitario", "registro"]
DOSE_VARIANTS = ["doseperliter", "dose_per_liter", "dosisporlitro", "dosis_por_litro"]
UNIT_VARIANTS = ["doseunit", "dose_unit", "unidaddosis", "unidad_dosis", "unidad", "unit"]
REENTRY_VARIANTS = ["reentryhours", "reentry_hours", "tiemporeingreso", "tiempo_reingreso", "reingreso"]


class CatalogReader:
    """
    Catalog file reader.

    This class reads a catalog file into a pandas DataFrame and maps its
    columns onto ChemicalCatalogEntry fields.
    """

    def __init__(self, file_path: Union[Path, str]):
        """
        Initialize catalog reader.

        Args:
            file_path: Path to catalog file (.json, .csv, .xlsx or .xls)

        Raises:
            CatalogError: If file doesn't exist or has an unsupported type
        """
        self.file_path = Path(file_path)

        if not self.file_path.exists():
            raise CatalogError(
                f"Catalog file does not exist: {self.file_path}",
                details={"file_path": str(self.file_path)},
            )
        if self.file_path.suffix.lower() not in SUPPORTED_EXTENSIONS:
            raise CatalogError(
                f"Invalid catalog file extension: {self.file_path.suffix}. "
                f"Allowed: {SUPPORTED_EXTENSIONS}",
                details={"file_path": str(self.file_path)},
            )
        logger.info(f"Initialized catalog reader for: {self.file_path}")

    def _find_column(self, columns: List[str], search_terms: List[str]) -> Optional[str]:
        """
        Find column name using flexible matching.

        Tries exact match first, then partial match (case-insensitive).

        Args:
            columns: Available column names in DataFrame
            search_terms: List of possible column name variations

        Returns:
            Matched column name, or None if not found
        """
        for term in search_terms:
            for col in columns:
                if term == str(col).lower():
                    return col

        for term in search_terms:
            for col in columns:
                if term in str(col).lower():
                    logger.debug(f"Found partial match: '{col}' contains '{term}'")
                    return col

        return None

    def read_dataframe(self) -> pd.DataFrame:
        """
        Read catalog file into pandas DataFrame.

        Returns:
            DataFrame with empty rows removed and NaN replaced by None

        Raises:
            CatalogError: If file cannot be parsed
        """
        suffix = self.file_path.suffix.lower()
        try:
            if suffix == ".json":
                df = pd.read_json(self.file_path, orient="records", dtype=False)
            elif suffix == ".csv":
                df = pd.read_csv(self.file_path)
            else:
                df = pd.read_excel(self.file_path, sheet_name=0)
        except (ValueError, OSError, ImportError) as e:
            raise CatalogError(
                f"Could not read catalog file: {e}",
                details={"file": str(self.file_path), "error": str(e)},
            )

        df = df.dropna(how="all")
        df = df.astype(object).where(pd.notnull(df), None)
        logger.debug(f"Read {len(df)} rows from {self.file_path.name}")
        return df

    def _safe_str(self, value: Any, default: str = "") -> str:
        """
        Convert value to string safely, handling None/NaN.

        Whole floats lose their ".0" so numeric ids read from Excel stay
        "101" instead of "101.0".
        """
        if value is None:
            return default
        if pd.isna(value):
            return default
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value).strip()

    def _safe_float(self, value: Any) -> float:
        if value is None or pd.isna(value):
            return 0.0
        try:
            return float(value)
        except (TypeError, ValueError):
            return 0.0

    def read(self) -> List[ChemicalCatalogEntry]:
        """
        Read catalog entries.

        Rows without id or name are skipped.

        Returns:
            List of ChemicalCatalogEntry in file order

        Raises:
            CatalogError: If id or name columns cannot be found
        """
        df = self.read_dataframe()
        if df.empty:
            logger.warning(f"Catalog file {self.file_path.name} is empty")
            return []

        columns = list(df.columns)
        mapping = {
            "id": self._find_column(columns, ID_VARIANTS),
            "name": self._find_column(columns, NAME_VARIANTS),
            "active_ingredient": self._find_column(columns, ACTIVE_INGREDIENT_VARIANTS),
            "sanitary_registry": self._find_column(columns, REGISTRY_VARIANTS),
            "dose_per_liter": self._find_column(columns, DOSE_VARIANTS),
            "dose_unit": self._find_column(columns, UNIT_VARIANTS),
            "reentry_hours": self._find_column(columns, REENTRY_VARIANTS),
        }

        missing = [field for field in ("id", "name") if mapping[field] is None]
        if missing:
            raise CatalogError(
                f"Missing columns in catalog: {', '.join(missing)}",
                details={
                    "file": str(self.file_path),
                    "missing": missing,
                    "available": columns,
                },
            )

        logger.info(f"Catalog column mapping: {mapping}")

        def value(row: Dict[str, Any], field: str) -> Any:
            column = mapping[field]
            return row.get(column) if column else None

        entries = []
        for idx, row in enumerate(df.to_dict(orient="records")):
            product_id = self._safe_str(value(row, "id"))
            name = self._safe_str(value(row, "name"))
            if not product_id or not name:
                logger.warning(f"Skipping catalog row {idx}: missing id or name")
                continue

            entries.append(
                ChemicalCatalogEntry(
                    id=product_id,
                    name=name,
                    active_ingredient=self._safe_str(value(row, "active_ingredient")),
                    sanitary_registry=self._safe_str(value(row, "sanitary_registry")),
                    dose_per_liter=self._safe_float(value(row, "dose_per_liter")),
                    dose_unit=self._safe_str(value(row, "dose_unit"), DEFAULT_DOSE_UNIT),
                    reentry_hours=self._safe_float(value(row, "reentry_hours")),
                )
            )

        logger.info(f"Loaded {len(entries)} catalog entries from {self.file_path.name}")
        return entries
