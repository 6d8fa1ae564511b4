"""PDF catalog renderer.

render_catalog() turns a list of CatalogItem rows plus CompanyInfo into a
paginated A4 PDF:
- Centered company name, then a centered "Product Catalog - dd/mm/yyyy" subtitle
- A grid table Product | Category | Price, header row repeated on every page
- A footer on every page: phone on the left, email on the right, each only
  when present

The function is pure with respect to its inputs: rows are rendered in the
given order, nothing is mutated, and the PDF is produced in reportlab's
invariant mode so the same inputs and date always yield the same bytes.
"""

from __future__ import annotations

import io
from collections.abc import Sequence
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from xml.sax.saxutils import escape

import structlog
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfgen.canvas import Canvas
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from src.catalog.products.schemas import CatalogItem, CompanyInfo

logger = structlog.get_logger(__name__)

CATALOG_MEDIA_TYPE = "application/pdf"

TABLE_HEADER = ("Product", "Category", "Price")
MISSING_CATEGORY = "-"

# A table row cannot span pages; longer cell text is clipped.
MAX_CELL_CHARS = 300
CLIP_MARKER = "..."
SUBTITLE_PREFIX = "Product Catalog"
DATE_FORMAT = "%d/%m/%Y"

PAGE_SIZE = A4
SIDE_MARGIN = 20 * mm
FOOTER_Y = 20 * mm
COLUMN_WIDTHS = (100 * mm, 40 * mm, 30 * mm)

HEADER_FILL = colors.Color(41 / 255, 128 / 255, 185 / 255)
HEADER_TEXT = colors.white
GRID_COLOR = colors.HexColor("#BDC3C7")

_CENTS = Decimal("0.01")


# ── Formatting ──────────────────────────────────────────────────────────────


def format_price(amount: Decimal | float | int, currency_prefix: str = "R$") -> str:
    """Format an amount as '<prefix> <amount fixed to 2 decimals>'."""
    value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    return f"{currency_prefix} {value.quantize(_CENTS, rounding=ROUND_HALF_UP)}"


def format_subtitle(day: date) -> str:
    return f"{SUBTITLE_PREFIX} - {day.strftime(DATE_FORMAT)}"


def clip_cell(text: str, limit: int = MAX_CELL_CHARS) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - len(CLIP_MARKER)].rstrip() + CLIP_MARKER


def table_rows(
    products: Sequence[CatalogItem], currency_prefix: str = "R$"
) -> list[tuple[str, str, str]]:
    """Plain-text table body, one row per product, in input order."""
    return [
        (
            clip_cell(product.name),
            clip_cell(product.category or MISSING_CATEGORY),
            format_price(product.price, currency_prefix),
        )
        for product in products
    ]


# ── Styles ──────────────────────────────────────────────────────────────────


def _build_styles() -> dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()
    return {
        "title": ParagraphStyle(
            "CatalogTitle",
            parent=base["Title"],
            fontName="Helvetica-Bold",
            fontSize=20,
            leading=24,
            alignment=TA_CENTER,
            spaceAfter=4 * mm,
        ),
        "subtitle": ParagraphStyle(
            "CatalogSubtitle",
            parent=base["Normal"],
            fontName="Helvetica",
            fontSize=12,
            leading=15,
            alignment=TA_CENTER,
        ),
        "cell": ParagraphStyle(
            "CatalogCell",
            parent=base["Normal"],
            fontName="Helvetica",
            fontSize=10,
            leading=12,
        ),
        "head": ParagraphStyle(
            "CatalogHead",
            parent=base["Normal"],
            fontName="Helvetica-Bold",
            fontSize=10,
            leading=12,
            textColor=HEADER_TEXT,
        ),
    }


def _table_style() -> TableStyle:
    return TableStyle(
        [
            ("BACKGROUND", (0, 0), (-1, 0), HEADER_FILL),
            ("TEXTCOLOR", (0, 0), (-1, 0), HEADER_TEXT),
            ("GRID", (0, 0), (-1, -1), 0.5, GRID_COLOR),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ("LEFTPADDING", (0, 0), (-1, -1), 5),
            ("RIGHTPADDING", (0, 0), (-1, -1), 5),
            ("TOPPADDING", (0, 0), (-1, -1), 5),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 5),
        ]
    )


# ── Footer ──────────────────────────────────────────────────────────────────


def _footer_drawer(company: CompanyInfo):
    """Return an onPage callback drawing the contact footer."""
    phone = company.contact_phone
    email = company.contact_email

    def draw_footer(canvas: Canvas, doc: SimpleDocTemplate) -> None:
        if not phone and not email:
            return
        page_width = doc.pagesize[0]
        canvas.saveState()
        canvas.setFont("Helvetica", 10)
        if phone:
            canvas.drawString(SIDE_MARGIN, FOOTER_Y, f"Tel: {phone}")
        if email:
            canvas.drawRightString(page_width - SIDE_MARGIN, FOOTER_Y, f"Email: {email}")
        canvas.restoreState()

    return draw_footer


# ── Renderer ────────────────────────────────────────────────────────────────


def render_catalog(
    products: Sequence[CatalogItem],
    company: CompanyInfo,
    *,
    today: date | None = None,
    currency_prefix: str = "R$",
) -> bytes:
    """Render the product catalog PDF.

    Args:
        products: Rows in display order; the caller sorts and filters.
        company: Branding for the header and footer.
        today: Date printed in the subtitle; defaults to the current date.
        currency_prefix: Prefix for the price column.

    Returns:
        The PDF document bytes. An empty product list yields a
        header-only table.
    """
    day = today or date.today()
    styles = _build_styles()
    buffer = io.BytesIO()

    doc = SimpleDocTemplate(
        buffer,
        pagesize=PAGE_SIZE,
        leftMargin=SIDE_MARGIN,
        rightMargin=SIDE_MARGIN,
        topMargin=15 * mm,
        bottomMargin=30 * mm,
        title=f"{company.company_name} - {SUBTITLE_PREFIX}",
        author=company.company_name,
        invariant=1,
    )

    data = [[Paragraph(escape(label), styles["head"]) for label in TABLE_HEADER]]
    for name, category, price in table_rows(products, currency_prefix):
        data.append(
            [
                Paragraph(escape(name), styles["cell"]),
                Paragraph(escape(category), styles["cell"]),
                Paragraph(escape(price), styles["cell"]),
            ]
        )

    table = Table(data, colWidths=COLUMN_WIDTHS, repeatRows=1)
    table.setStyle(_table_style())

    story = [
        Paragraph(escape(company.company_name), styles["title"]),
        Paragraph(escape(format_subtitle(day)), styles["subtitle"]),
        Spacer(1, 6 * mm),
        table,
    ]

    footer = _footer_drawer(company)
    doc.build(story, onFirstPage=footer, onLaterPages=footer)

    pdf_bytes = buffer.getvalue()
    logger.info(
        "catalog_pdf.rendered",
        product_count=len(products),
        size_bytes=len(pdf_bytes),
    )
    return pdf_bytes
