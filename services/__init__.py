"""
Services layer for Desintesa.

Infrastructure services that support the operations layer.
"""

from .catalog_reader import CatalogReader
from .certificate_pdf import (
    certificate_filename,
    read_certificate_folio,
    render_certificate_pdf,
)

__all__ = [
    # Catalog Reader
    "CatalogReader",
    # Certificate PDF
    "certificate_filename",
    "render_certificate_pdf",
    "read_certificate_folio",
]
