"""
Application settings for Desintesa.

Loads settings from environment variables or uses defaults.
Provides centralized configuration management.
"""

import os
from pathlib import Path
from typing import Optional
from dataclasses import dataclass, field

from domain.rules import FOLIO_PREFIX

from .constants import (
    APP_VERSION,
    DEFAULT_STORAGE_BACKEND,
    ENV_PREFIX,
    STORAGE_BACKENDS,
)
from .paths import get_certificates_path, get_default_catalog_path, get_orders_path


@dataclass
class Settings:
    """
    Application settings.

    Can be loaded from environment variables or initialized with defaults.
    Directories are not created here; storage and the PDF renderer create
    them on first write.
    """

    app_version: str = APP_VERSION

    # Storage
    storage_backend: str = DEFAULT_STORAGE_BACKEND
    orders_path: Path = field(default_factory=lambda: get_orders_path(DEFAULT_STORAGE_BACKEND))

    # Reference data and output
    catalog_path: Path = field(default_factory=get_default_catalog_path)
    certificates_dir: Path = field(default_factory=get_certificates_path)

    # Certificates
    folio_prefix: str = FOLIO_PREFIX

    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR

    def __post_init__(self):
        if self.storage_backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"Unknown storage backend: {self.storage_backend}. "
                f"Allowed: {', '.join(STORAGE_BACKENDS)}"
            )
        self.orders_path = Path(self.orders_path)
        self.catalog_path = Path(self.catalog_path)
        self.certificates_dir = Path(self.certificates_dir)

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Load settings from environment variables.

        Environment variables:
        - DESINTESA_STORAGE_BACKEND: "json" (default) or "sqlite"
        - DESINTESA_ORDERS_PATH: Order file (default desintesa_data/orders.json or orders.db)
        - DESINTESA_CATALOG_PATH: Chemical catalog file (.json/.csv/.xlsx)
        - DESINTESA_CERTIFICATES_DIR: Output directory for certificate PDFs
        - DESINTESA_FOLIO_PREFIX: Certificate folio prefix (default "DES")
        - DESINTESA_LOG_LEVEL: Logging level (DEBUG/INFO/WARNING/ERROR)

        Returns:
            Settings instance with values from environment or defaults
        """
        backend = os.getenv(f"{ENV_PREFIX}STORAGE_BACKEND", DEFAULT_STORAGE_BACKEND).lower()
        return cls(
            storage_backend=backend,
            orders_path=Path(os.getenv(f"{ENV_PREFIX}ORDERS_PATH", str(get_orders_path(backend)))),
            catalog_path=Path(os.getenv(f"{ENV_PREFIX}CATALOG_PATH", str(get_default_catalog_path()))),
            certificates_dir=Path(os.getenv(f"{ENV_PREFIX}CERTIFICATES_DIR", str(get_certificates_path()))),
            folio_prefix=os.getenv(f"{ENV_PREFIX}FOLIO_PREFIX", FOLIO_PREFIX),
            log_level=os.getenv(f"{ENV_PREFIX}LOG_LEVEL", "INFO").upper(),
        )

    def to_dict(self) -> dict:
        """Convert settings to dictionary for serialization."""
        return {
            "app_version": self.app_version,
            "storage_backend": self.storage_backend,
            "orders_path": str(self.orders_path),
            "catalog_path": str(self.catalog_path),
            "certificates_dir": str(self.certificates_dir),
            "folio_prefix": self.folio_prefix,
            "log_level": self.log_level,
        }


# Global settings instance (lazy-loaded)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get global settings instance.

    Lazy-loaded on first call. Loads from environment variables.

    Example:
        >>> from config.settings import get_settings
        >>> settings = get_settings()
        >>> print(settings.orders_path)
    """
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def reset_settings():
    """
    Reset global settings instance.

    Useful for testing - forces reload from environment on next get_settings() call.
    """
    global _settings
    _settings = None
