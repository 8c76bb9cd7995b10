"""
Application Context for Desintesa.

Centralized application state and dependency injection.
"""

from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import List, Optional

from data import create_repository
from data.interface import OrderRepository
from domain.exceptions import CatalogError
from domain.models import ChemicalCatalogEntry
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """
    Centralized application context.

    Holds the order repository, settings and the lazily loaded chemical
    catalog. Passed to operations by the CLI.

    Example:
        >>> from config.app_context import create_app_context
        >>> ctx = create_app_context()
        >>> from operations import list_orders
        >>> orders = list_orders(ctx.repository)
    """

    repository: OrderRepository
    settings: Settings = field(default_factory=get_settings)
    _catalog: Optional[List[ChemicalCatalogEntry]] = field(default=None, repr=False)

    @property
    def certificates_dir(self) -> Path:
        return self.settings.certificates_dir

    @property
    def folio_prefix(self) -> str:
        return self.settings.folio_prefix

    @property
    def catalog(self) -> List[ChemicalCatalogEntry]:
        """
        Chemical catalog, loaded on first access.

        Raises:
            CatalogError: If the configured catalog cannot be read
        """
        if self._catalog is None:
            from operations.catalog_ops import load_catalog

            self._catalog = load_catalog(self.settings.catalog_path)
        return self._catalog

    def try_catalog(self) -> List[ChemicalCatalogEntry]:
        """Catalog, or an empty list if it cannot be loaded."""
        try:
            return self.catalog
        except CatalogError as e:
            logger.warning(f"Catalog unavailable: {e}")
            return []

    def close(self):
        self.repository.close()


def create_app_context(
    settings: Optional[Settings] = None,
    repository: Optional[OrderRepository] = None,
) -> AppContext:
    """
    Factory function to create AppContext.

    Args:
        settings: Settings instance (defaults to global settings)
        repository: Order repository (defaults to one built from settings)

    Returns:
        AppContext instance
    """
    if settings is None:
        settings = get_settings()

    if repository is None:
        repository = create_repository(settings.storage_backend, path=settings.orders_path)

    return AppContext(repository=repository, settings=settings)
