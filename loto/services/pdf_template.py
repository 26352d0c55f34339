"""Generator for a fillable LOTO PDF template.

Production deployments ship their own pre-formatted ``LOTO.pdf``; this
module lays out a plain single-page form carrying every field name the
exporter expects, for development and tests
(``python scripts/build_pdf_template.py``).
"""

from __future__ import annotations

import fitz

from loto.services.pdf_export_service import (
    SCALAR_FIELDS,
    SOURCE_SLOT_FIELDS,
    TEMPLATE_SOURCE_SLOTS,
)

PAGE_WIDTH, PAGE_HEIGHT = fitz.paper_size("letter-l")
MARGIN = 36
ROW_HEIGHT = 18


def template_field_names() -> list[str]:
    names = list(SCALAR_FIELDS)
    for slot in range(1, TEMPLATE_SOURCE_SLOTS + 1):
        names.extend(f"{prefix}_{slot}" for prefix in SOURCE_SLOT_FIELDS)
    return names


def _add_text_field(page: "fitz.Page", name: str, rect: "fitz.Rect") -> None:
    widget = fitz.Widget()
    widget.field_name = name
    widget.field_type = fitz.PDF_WIDGET_TYPE_TEXT
    widget.rect = rect
    widget.text_fontsize = 8
    page.add_widget(widget)


def build_template(path: str) -> None:
    """Write a one-page template with all scalar fields and six source rows."""
    doc = fitz.open()
    page = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
    page.insert_text((MARGIN, MARGIN), "Lockout/Tagout Procedure", fontsize=14)

    # Scalar fields: two columns of label + box
    col_width = (PAGE_WIDTH - 2 * MARGIN) / 2
    y = MARGIN + 20
    for index, name in enumerate(SCALAR_FIELDS):
        x = MARGIN + (index % 2) * col_width
        if index and index % 2 == 0:
            y += ROW_HEIGHT + 4
        page.insert_text((x, y + 12), name, fontsize=7)
        _add_text_field(page, name, fitz.Rect(x + 90, y, x + col_width - 8, y + ROW_HEIGHT))

    # Source table: one row per slot, one column per slot field
    y += 2 * ROW_HEIGHT + 8
    cell_width = (PAGE_WIDTH - 2 * MARGIN) / len(SOURCE_SLOT_FIELDS)
    for col, prefix in enumerate(SOURCE_SLOT_FIELDS):
        page.insert_text((MARGIN + col * cell_width, y), prefix, fontsize=8)
    for slot in range(1, TEMPLATE_SOURCE_SLOTS + 1):
        y += ROW_HEIGHT + 2
        for col, prefix in enumerate(SOURCE_SLOT_FIELDS):
            x = MARGIN + col * cell_width
            _add_text_field(page, f"{prefix}_{slot}", fitz.Rect(x, y, x + cell_width - 4, y + ROW_HEIGHT))

    doc.save(path)
    doc.close()
