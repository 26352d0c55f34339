"""Procedure service layer.

All business logic for the add/edit/duplicate/delete flows of LOTO
procedures and their sources lives here.

Rules:
  - db.session.commit() happens only in this file (via commit_or_rollback).
  - Every mutation of a procedure or one of its sources re-stamps
    procedure.date_edited; a no-op edit leaves it alone.
  - Soft deletion goes through the application's DeletionHistory so it
    can be undone; hard deletion removes the rows and the history entries.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from functools import partial

from flask import current_app

from loto.core.exceptions import NotFoundError, SourceLimitError, ValidationError
from loto.models import db
from loto.models.enums import Favorite, SourceType, Status
from loto.models.procedure import MAX_SOURCES, Procedure, Source
from loto.services import list_pipeline
from loto.services.deletion_history import DeletionHistory
from loto.services.form_rules import UNTITLED_NAME, is_valid_name, sanitize_field
from loto.utils.helpers import commit_or_rollback, parse_date_input

logger = logging.getLogger(__name__)

HISTORY_EXTENSION = "loto_history"


def _now() -> datetime:
    return datetime.now()


# ── History ──────────────────────────────────────────────────────────────────


def _load_procedure(procedure_id: str) -> Procedure | None:
    return db.session.get(Procedure, procedure_id)


def init_history(app) -> DeletionHistory:
    """Attach a DeletionHistory to the app (one per process)."""
    history = DeletionHistory(loader=_load_procedure)
    app.extensions[HISTORY_EXTENSION] = history
    return history


def get_history() -> DeletionHistory:
    return current_app.extensions[HISTORY_EXTENSION]


# ── Lookups ──────────────────────────────────────────────────────────────────


def get_procedure(procedure_id: str, include_deleted: bool = False) -> Procedure:
    """Return a procedure by id.

    Raises:
        NotFoundError: Unknown id, or soft-deleted and include_deleted is False.
    """
    procedure = db.session.get(Procedure, procedure_id)
    if procedure is None or (procedure.deleted and not include_deleted):
        raise NotFoundError(resource="Procedure", resource_id=procedure_id)
    return procedure


def get_source(procedure: Procedure, source_id: str) -> Source:
    for source in procedure.sources:
        if source.id == source_id:
            return source
    raise NotFoundError(resource="Source", resource_id=source_id)


def list_procedures(
    search: str = "",
    filter_by=list_pipeline.ListFilter.ALL,
    sort_by=list_pipeline.SortField.NAME,
    direction=list_pipeline.SortDirection.FORWARD,
    today: date | None = None,
) -> list[Procedure]:
    """Run the list pipeline over every non-deleted procedure."""
    procedures = Procedure.query_active().all()
    return list_pipeline.run_pipeline(
        procedures,
        search=search,
        filter_by=filter_by,
        sort_by=sort_by,
        direction=direction,
        today=today,
    )


# ── Field helpers ────────────────────────────────────────────────────────────


def _parse_enum(enum_cls, field: str, value):
    try:
        return enum_cls.from_value(value)
    except ValueError as exc:
        raise ValidationError(str(exc), details={field: "invalid value"}) from exc


def _parse_date_field(field: str, value) -> date:
    try:
        parsed = parse_date_input(value)
    except ValueError as exc:
        raise ValidationError(str(exc), details={field: "invalid date"}) from exc
    return parsed or date.today()


def _require_valid_name(name) -> None:
    if not is_valid_name(name):
        raise ValidationError(
            "Form name must be at least 5 characters of letters, digits, "
            "spaces or - . ' # :",
            details={"form_name": "invalid"},
        )


def _write_changes(record, values: dict) -> list[str]:
    """Assign the parsed ``values`` that differ from ``record``; return their names."""
    changed = [field for field, value in values.items() if getattr(record, field) != value]
    for field in changed:
        setattr(record, field, values[field])
    return changed


def _parse_source_fields(data: dict) -> dict:
    values = {
        field: sanitize_field(field, data[field])
        for field in Source.TEXT_FIELDS
        if field in data
    }
    if "source_type" in data:
        values["source_type"] = _parse_enum(SourceType, "source_type", data["source_type"])
    return values


def _apply_source_fields(source: Source, data: dict) -> bool:
    """Set source fields present in ``data``. Returns True if anything changed.

    Every value is parsed before the first assignment, so a rejected payload
    leaves the source untouched.
    """
    return bool(_write_changes(source, _parse_source_fields(data)))


def _build_source(data: dict | None = None) -> Source:
    source = Source(
        source_id="",
        source_type=SourceType.ELECTRICAL,
        source_device="",
        source_location="",
        source_method="",
        source_check="",
    )
    _apply_source_fields(source, data or {})
    return source


# ── Add flow ─────────────────────────────────────────────────────────────────


def create_procedure(data: dict) -> Procedure:
    """Create a procedure from the add form.

    Raises:
        ValidationError: Invalid name, enum or date values.
        SourceLimitError: More than MAX_SOURCES sources supplied.
    """
    name = data.get("form_name", UNTITLED_NAME)
    _require_valid_name(name)

    source_payloads = data.get("sources") or []
    if not isinstance(source_payloads, list) or not all(
        isinstance(payload, dict) for payload in source_payloads
    ):
        raise ValidationError(
            "sources must be a list of objects", details={"sources": "invalid"},
        )
    if len(source_payloads) > MAX_SOURCES:
        raise SourceLimitError(MAX_SOURCES)

    now = _now()
    procedure = Procedure(
        form_name=name,
        status=Status.IN_PROGRESS,
        favorite=Favorite.NOT_FAVORITE,
        date_added=now,
        date_edited=now,
        deleted=False,
    )
    for field in Procedure.TEXT_FIELDS:
        if field != "form_name":
            setattr(procedure, field, sanitize_field(field, data.get(field, "")))
    for field in Procedure.DATE_FIELDS:
        setattr(procedure, field, _parse_date_field(field, data.get(field)))
    if "status" in data:
        procedure.status = _parse_enum(Status, "status", data["status"])
    if "favorite" in data:
        procedure.favorite = _parse_enum(Favorite, "favorite", data["favorite"])

    procedure.sources = [_build_source(payload) for payload in source_payloads]
    procedure.renumber_sources()

    db.session.add(procedure)
    commit_or_rollback("create procedure")
    logger.info("Procedure created id=%s name=%r sources=%d",
                procedure.id, procedure.form_name, len(procedure.sources))
    return procedure


# ── Edit flow ────────────────────────────────────────────────────────────────


def update_procedure(procedure: Procedure, data: dict) -> Procedure:
    """Apply a field-by-field edit.

    Only keys present in ``data`` are considered, and only values that
    actually change are written. Any change bumps date_edited.

    Raises:
        ValidationError: Invalid name (close-edit gate), enum or date values.
    """
    if "form_name" in data:
        _require_valid_name(data["form_name"])

    # Parse everything first: a rejected edit must not leave the record dirty.
    values = {
        field: sanitize_field(field, data[field])
        for field in Procedure.TEXT_FIELDS
        if field in data
    }
    for field in Procedure.DATE_FIELDS:
        if field in data:
            values[field] = _parse_date_field(field, data[field])
    if "status" in data:
        values["status"] = _parse_enum(Status, "status", data["status"])
    if "favorite" in data:
        values["favorite"] = _parse_enum(Favorite, "favorite", data["favorite"])

    changed = _write_changes(procedure, values)
    if changed:
        procedure.touch()
        commit_or_rollback("update procedure")
        logger.info("Procedure updated id=%s fields=%s", procedure.id, ",".join(changed))
    return procedure


def reset_date_to_today(procedure: Procedure, field: str) -> Procedure:
    """Reset one of the user-editable date fields to today."""
    if field not in Procedure.DATE_FIELDS:
        raise ValidationError(
            f"field must be one of: {', '.join(Procedure.DATE_FIELDS)}",
            details={"field": field},
        )
    return update_procedure(procedure, {field: date.today()})


def toggle_favorite(procedure: Procedure) -> Procedure:
    return update_procedure(procedure, {"favorite": procedure.favorite.toggled()})


# ── Sources ──────────────────────────────────────────────────────────────────


def add_source(procedure: Procedure, data: dict | None = None) -> Source:
    """Append a source (defaults: electrical, empty text fields).

    Raises:
        SourceLimitError: The procedure already has MAX_SOURCES sources.
    """
    if len(procedure.sources) >= MAX_SOURCES:
        raise SourceLimitError(MAX_SOURCES)
    source = _build_source(data)
    procedure.sources.append(source)
    procedure.renumber_sources()
    procedure.touch()
    commit_or_rollback("add source")
    logger.info("Source added procedure=%s source=%s type=%s",
                procedure.id, source.id, source.source_type.name)
    return source


def update_source(procedure: Procedure, source: Source, data: dict) -> Source:
    if _apply_source_fields(source, data):
        procedure.touch()
        commit_or_rollback("update source")
    return source


def remove_source(procedure: Procedure, source: Source) -> None:
    procedure.sources.remove(source)
    procedure.renumber_sources()
    procedure.touch()
    commit_or_rollback("remove source")
    logger.info("Source removed procedure=%s source=%s", procedure.id, source.id)


def set_source_photo(procedure: Procedure, source: Source, blob: bytes | None) -> Source:
    """Attach (or clear, with None) the single photo of a source."""
    if source.source_photo != blob:
        source.source_photo = blob
        procedure.touch()
        commit_or_rollback("set source photo")
    return source


# ── Duplicate / delete ───────────────────────────────────────────────────────


def duplicate_procedure(procedure: Procedure) -> Procedure:
    copy = procedure.duplicate()
    db.session.add(copy)
    commit_or_rollback("duplicate procedure")
    logger.info("Procedure duplicated source=%s copy=%s", procedure.id, copy.id)
    return copy


def soft_delete_procedure(procedure: Procedure) -> Procedure:
    get_history().mark_deleted(procedure, commit=partial(commit_or_rollback, "delete procedure"))
    logger.info("Procedure soft-deleted id=%s", procedure.id)
    return procedure


def undo_delete() -> Procedure | None:
    procedure = get_history().undo(commit=partial(commit_or_rollback, "undo delete"))
    if procedure is not None:
        logger.info("Procedure restored id=%s", procedure.id)
    return procedure


def redo_delete() -> Procedure | None:
    procedure = get_history().redo(commit=partial(commit_or_rollback, "redo delete"))
    if procedure is not None:
        logger.info("Procedure deleted again id=%s", procedure.id)
    return procedure


def hard_delete_procedure(procedure: Procedure) -> None:
    """Remove the procedure and its sources permanently."""
    procedure_id = procedure.id
    db.session.delete(procedure)
    commit_or_rollback("hard delete procedure")
    get_history().forget(procedure_id)
    logger.info("Procedure hard-deleted id=%s", procedure_id)
