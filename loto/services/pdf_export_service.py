"""PDF export for LOTO procedures.

The export fills a fixed-layout PDF template whose interactive form fields
carry well-known names. Field names must exist verbatim in the template:

  Scalar fields  Description, ProcedureNumber, Facility, Location, Revision,
                 RevisionDate, OriginDate, IsolationPoints, Notes, MachineStop,
                 Isolate, AdditionalNotes, Company, CompletedBy, ApprovedBy,
                 ApprovalDate
  Source slots   ID_n, Source_n, Device_n, Location_n, Method_n, Check_n
                 for n = 1..6

The template defines exactly six source slots. Slots are filled only when
the procedure has between 1 and 6 sources; with 0 or more than 6 sources
no slot is touched.

Loading or filling failures never propagate: the caller gets the unfilled
template bytes instead, or None when the template itself is unreadable.
"""

from __future__ import annotations

import logging
import re
from datetime import date

import fitz

logger = logging.getLogger(__name__)

TEMPLATE_SOURCE_SLOTS = 6
DATE_FORMAT = "%m/%d/%y"


def format_pdf_date(value: date | None) -> str:
    return value.strftime(DATE_FORMAT) if value else ""


# Template field name → accessor on Procedure
SCALAR_FIELDS = {
    "Description": lambda p: p.form_description,
    "ProcedureNumber": lambda p: p.procedure_number,
    "Facility": lambda p: p.facility,
    "Location": lambda p: p.location,
    "Revision": lambda p: p.revision,
    "RevisionDate": lambda p: format_pdf_date(p.revision_date),
    "OriginDate": lambda p: format_pdf_date(p.origin_date),
    "IsolationPoints": lambda p: p.isolation_points,
    "Notes": lambda p: p.notes,
    "MachineStop": lambda p: p.machine_stop_sequence,
    "Isolate": lambda p: p.isolate_sequence,
    "AdditionalNotes": lambda p: p.additional_notes,
    "Company": lambda p: p.approved_by_company,
    "CompletedBy": lambda p: p.completed_by,
    "ApprovedBy": lambda p: p.approved_by,
    "ApprovalDate": lambda p: format_pdf_date(p.approval_date),
}

# Slot field prefix → accessor on Source
SOURCE_SLOT_FIELDS = {
    "ID": lambda s: s.source_id,
    "Source": lambda s: s.source_type.label,
    "Device": lambda s: s.source_device,
    "Location": lambda s: s.source_location,
    "Method": lambda s: s.source_method,
    "Check": lambda s: s.source_check,
}


def build_field_values(procedure) -> dict[str, str]:
    """Map a procedure onto template field names."""
    values = {name: (getter(procedure) or "") for name, getter in SCALAR_FIELDS.items()}

    sources = list(procedure.sources)
    if 1 <= len(sources) <= TEMPLATE_SOURCE_SLOTS:
        for slot, source in enumerate(sources, start=1):
            for prefix, getter in SOURCE_SLOT_FIELDS.items():
                values[f"{prefix}_{slot}"] = getter(source) or ""
    elif sources:
        logger.info(
            "Procedure %s has %d sources; template holds %d, source slots left blank",
            procedure.id, len(sources), TEMPLATE_SOURCE_SLOTS,
        )
    return values


def fill_document(doc: "fitz.Document", values: dict[str, str]) -> int:
    """Write ``values`` into matching widgets. Returns the number of fields set."""
    filled = 0
    for page in doc:
        for widget in page.widgets():
            if widget.field_name in values:
                widget.field_value = values[widget.field_name]
                widget.update()
                filled += 1
    return filled


def _read_template(template_path: str) -> bytes | None:
    try:
        with open(template_path, "rb") as fh:
            return fh.read()
    except OSError as exc:
        logger.warning("PDF template unreadable at %s: %s", template_path, exc)
        return None


def fill_template(procedure, template_path: str) -> bytes | None:
    """Return the filled PDF for ``procedure``.

    Falls back to the unfilled template bytes when the template cannot be
    opened as a PDF or filling fails; returns None when the file is missing.
    """
    raw = _read_template(template_path)
    if raw is None:
        return None

    try:
        with fitz.open(stream=raw, filetype="pdf") as doc:
            filled = fill_document(doc, build_field_values(procedure))
            data = doc.tobytes()
    except Exception as exc:
        logger.warning("PDF fill failed for procedure %s, returning blank template: %s",
                       procedure.id, exc)
        return raw

    logger.info("Exported procedure %s (%d fields filled)", procedure.id, filled)
    return data


_UNSAFE_FILENAME_RE = re.compile(r"[\\/:*?\"<>|]+")


def export_filename(procedure) -> str:
    name = _UNSAFE_FILENAME_RE.sub("", procedure.form_name or "").strip()
    return f"{name or 'procedure'}.pdf"