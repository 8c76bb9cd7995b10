"""
Certificate PDF Service.

Renders the regulatory service certificate for a completed order and
reads the folio back from a rendered file.

Every page is stamped bottom-left with a discreet marker
##FOLIO:{folio}##SID:{page}/{total}## so certificates can be matched
to their order later (read_certificate_folio).
"""

import logging
import re
from io import BytesIO
from pathlib import Path
from typing import List, Optional, Union

from pypdf import PdfReader, PdfWriter
from pypdf.errors import PdfReadError
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from domain.exceptions import ReportGenerationError
from domain.models import CertificateDocument

logger = logging.getLogger(__name__)


COMPANY_NAME = "DESINTESA"
CERTIFICATE_TITLE = f"{COMPANY_NAME} - SERVICE CERTIFICATE"
COMPLIANCE_NOTE = (
    "Regulatory compliance: service performed under the environmental "
    "sanitation protocol and integrated pest management."
)

FOLIO_MARKER_PREFIX = "##FOLIO:"
PAGE_MARKER_PREFIX = "##SID:"
END_MARKER = "##"
FOLIO_MARKER_PATTERN = re.compile(r"##FOLIO:(.+?)##")
SUBJECT_PREFIX = "Folio "

HEADER_RGB = (11 / 255, 78 / 255, 169 / 255)
TEXT_RGB = (15 / 255, 23 / 255, 42 / 255)
RULE_RGB = (21 / 255, 128 / 255, 61 / 255)

LEFT = 14 * mm
VALUE_X = 70 * mm
LINE_HEIGHT = 8 * mm
BOTTOM_MARGIN = 20 * mm


def certificate_filename(document: CertificateDocument) -> str:
    """Default file name: certificate_{folio or order id}.pdf"""
    folio = document.folio if document.is_issued else document.order.id
    safe = re.sub(r'[/\\:*?"<>|\s]', "_", folio)
    return f"certificate_{safe}.pdf"


def _field_lines(document: CertificateDocument) -> List[tuple]:
    order = document.order
    location = order.location
    gps = location.gps if location else None
    issued = document.issued_at.strftime("%Y-%m-%d %H:%M UTC") if document.issued_at else "Pending"

    return [
        ("Folio", document.folio),
        ("Client", order.client_name),
        ("Client ID", order.client_id),
        ("Address", location.address if location else None),
        ("GPS location", f"{gps.lat}, {gps.lng}" if gps else None),
        ("Pest type", order.pest_type),
        ("Infestation level", order.infestation_level),
        ("Application date", order.application_date.isoformat() if order.application_date else None),
        ("Next visit", order.next_visit_date.isoformat() if order.next_visit_date else None),
        ("Assigned technician", order.assigned_technician),
        ("Issue date", issued),
    ]


def _chemical_lines(document: CertificateDocument) -> List[str]:
    lines = []
    for index, chemical in enumerate(document.order.chemicals_used, start=1):
        quantity = chemical.applied_quantity if chemical.applied_quantity is not None else "N/A"
        lines.append(
            f"{index}. {chemical.name} | Registry: {chemical.sanitary_registry} | "
            f"Quantity: {quantity} {chemical.dose_unit or ''} | "
            f"Dilution: {chemical.dilution or 'N/A'} | Lot: {chemical.lot or 'N/A'}"
        )
    return lines


class _CertificateCanvas:
    """Top-down writer over a reportlab canvas with automatic page breaks."""

    def __init__(self, output_path: Path, title: str, subject: str):
        self.width, self.height = A4
        self.canvas = canvas.Canvas(str(output_path), pagesize=A4)
        self.canvas.setTitle(title)
        self.canvas.setSubject(subject)
        self.canvas.setAuthor(COMPANY_NAME)
        self.y = self.height - 38 * mm

    def header(self):
        c = self.canvas
        c.setFillColorRGB(*HEADER_RGB)
        c.rect(0, self.height - 26 * mm, self.width, 26 * mm, stroke=0, fill=1)
        c.setFillColorRGB(1, 1, 1)
        c.setFont("Helvetica-Bold", 18)
        c.drawString(LEFT, self.height - 16 * mm, CERTIFICATE_TITLE)
        c.setFillColorRGB(*TEXT_RGB)
        c.setFont("Helvetica", 11)

    def ensure_space(self, needed: float):
        if self.y - needed < BOTTOM_MARGIN:
            self.canvas.showPage()
            self.header()
            self.y = self.height - 38 * mm

    def field(self, label: str, value: Optional[object]):
        self.ensure_space(LINE_HEIGHT)
        c = self.canvas
        c.setFont("Helvetica-Bold", 11)
        c.drawString(LEFT, self.y, f"{label}:")
        c.setFont("Helvetica", 11)
        c.drawString(VALUE_X, self.y, str(value) if value not in (None, "") else "N/A")
        self.y -= LINE_HEIGHT

    def paragraph(self, text: str, font: str = "Helvetica", size: int = 11, leading: float = 7 * mm):
        width = self.width - 2 * LEFT
        for line in simpleSplit(text, font, size, width):
            self.ensure_space(leading)
            self.canvas.setFont(font, size)
            self.canvas.drawString(LEFT, self.y, line)
            self.y -= leading

    def rule(self):
        self.ensure_space(8 * mm)
        c = self.canvas
        c.setStrokeColorRGB(*RULE_RGB)
        c.line(LEFT, self.y, self.width - LEFT, self.y)
        c.setStrokeColorRGB(0, 0, 0)
        self.y -= 8 * mm

    def save(self):
        self.canvas.save()


def _stamp_pages(pdf_path: Path, folio: str) -> None:
    """Re-open the rendered file and stamp folio markers on every page."""
    reader = PdfReader(str(pdf_path))
    writer = PdfWriter()
    total = len(reader.pages)

    for page_num, page in enumerate(reader.pages, 1):
        width = float(page.mediabox.width)
        height = float(page.mediabox.height)

        packet = BytesIO()
        overlay = canvas.Canvas(packet, pagesize=(width, height))
        overlay.setFont("Helvetica", 6)
        overlay.setFillColorRGB(0.7, 0.7, 0.7)
        overlay.drawString(
            10,
            10,
            f"{FOLIO_MARKER_PREFIX}{folio}{PAGE_MARKER_PREFIX}{page_num}/{total}{END_MARKER}",
        )
        overlay.save()
        packet.seek(0)

        page.merge_page(PdfReader(packet).pages[0])
        writer.add_page(page)

    writer.add_metadata(reader.metadata or {})
    with open(pdf_path, "wb") as output:
        writer.write(output)
    logger.debug(f"Stamped {total} page(s) of {pdf_path.name} with folio {folio}")


def render_certificate_pdf(
    document: CertificateDocument,
    output_dir: Union[Path, str],
    filename: Optional[str] = None,
) -> Path:
    """
    Render a service certificate to PDF.

    Args:
        document: Certificate data (from get_certificate)
        output_dir: Directory to write into (created if missing)
        filename: File name (default: certificate_{folio}.pdf)

    Returns:
        Path to the written PDF

    Raises:
        ReportGenerationError: If the PDF cannot be written
    """
    output_dir = Path(output_dir)
    output_path = output_dir / (filename or certificate_filename(document))

    try:
        output_dir.mkdir(parents=True, exist_ok=True)

        pdf = _CertificateCanvas(
            output_path,
            title=CERTIFICATE_TITLE,
            subject=f"{SUBJECT_PREFIX}{document.folio}",
        )
        pdf.header()

        for label, value in _field_lines(document):
            pdf.field(label, value)

        pdf.y -= 5 * mm
        pdf.paragraph("Chemical products and sanitary registry", font="Helvetica-Bold")
        for line in _chemical_lines(document):
            pdf.paragraph(line, size=9, leading=5 * mm)

        pdf.y -= 4 * mm
        pdf.rule()
        pdf.paragraph(COMPLIANCE_NOTE, size=10, leading=5 * mm)
        pdf.save()

        _stamp_pages(output_path, document.folio)

    except (OSError, ValueError, PdfReadError) as e:
        raise ReportGenerationError(
            f"Failed to render certificate: {e}",
            details={"order_id": document.order.id, "path": str(output_path)},
        )

    logger.info(f"Certificate {document.folio} written to {output_path}")
    return output_path


def read_certificate_folio(pdf_path: Union[Path, str]) -> Optional[str]:
    """
    Read the folio stamped on a certificate PDF.

    Args:
        pdf_path: Rendered certificate

    Returns:
        Folio string, or None if no marker is found

    Raises:
        ReportGenerationError: If the file cannot be read as PDF
    """
    pdf_path = Path(pdf_path)
    try:
        reader = PdfReader(str(pdf_path))
        for page in reader.pages:
            match = FOLIO_MARKER_PATTERN.search(page.extract_text() or "")
            if match:
                return match.group(1)

        # No text marker: fall back to the document subject
        subject = reader.metadata.subject if reader.metadata else None
        if subject and subject.startswith(SUBJECT_PREFIX):
            return subject[len(SUBJECT_PREFIX):]
    except (OSError, PdfReadError) as e:
        raise ReportGenerationError(
            f"Could not read certificate PDF: {e}",
            details={"path": str(pdf_path)},
        )

    logger.warning(f"No folio marker found in {pdf_path.name}")
    return None
