"""List pipeline for the procedure overview.

Given the active (non-deleted) procedures, produce the display order:

    search → filter → sort → direction

The order of the four stages is fixed. Sorting by a date field is
descending (newest first); the BACKWARD direction then reverses whatever
the sort produced, so BACKWARD on a date sort reads oldest first.
"""

from __future__ import annotations

import logging
from datetime import date
from enum import Enum

from loto.core.exceptions import ValidationError
from loto.models.enums import Favorite, SourceType, Status

logger = logging.getLogger(__name__)


class _SelectorMixin:
    @classmethod
    def parse(cls, value, default=None):
        """Parse a query-string selector (case-insensitive, '-' or '_').

        Raises:
            ValidationError: Unknown selector value.
        """
        if value is None or value == "":
            return default if default is not None else cls.default()
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace("-", "_")
        for member in cls:
            if member.value == key:
                return member
        raise ValidationError(
            f"Unknown {cls.__name__} '{value}'",
            details={"allowed": [m.value for m in cls]},
        )


class ListFilter(_SelectorMixin, Enum):
    ALL = "all"
    FAVORITES = "favorites"
    IN_PROGRESS = "in_progress"
    AWAITING_APPROVAL = "awaiting_approval"
    COMPLETED = "completed"
    ADDED_TODAY = "added_today"
    SOURCE_ELECTRICAL = "source_electrical"
    SOURCE_AIR = "source_air"
    SOURCE_WATER = "source_water"
    SOURCE_GAS = "source_gas"
    SOURCE_GRAVITY = "source_gravity"
    SOURCE_OTHER = "source_other"

    @classmethod
    def default(cls):
        return cls.ALL


class SortField(_SelectorMixin, Enum):
    NAME = "name"
    DESCRIPTION = "description"
    PROCEDURE_NUMBER = "procedure_number"
    DATE_ADDED = "date_added"
    DATE_EDITED = "date_edited"
    FAVORITE = "favorite"
    SOURCE_TYPE = "source_type"

    @classmethod
    def default(cls):
        return cls.NAME


class SortDirection(_SelectorMixin, Enum):
    FORWARD = "forward"
    BACKWARD = "backward"

    @classmethod
    def default(cls):
        return cls.FORWARD


_STATUS_FILTERS = {
    ListFilter.IN_PROGRESS: Status.IN_PROGRESS,
    ListFilter.AWAITING_APPROVAL: Status.AWAITING_APPROVAL,
    ListFilter.COMPLETED: Status.COMPLETED,
}

_SOURCE_FILTERS = {
    ListFilter.SOURCE_ELECTRICAL: SourceType.ELECTRICAL,
    ListFilter.SOURCE_AIR: SourceType.AIR,
    ListFilter.SOURCE_WATER: SourceType.WATER,
    ListFilter.SOURCE_GAS: SourceType.GAS,
    ListFilter.SOURCE_GRAVITY: SourceType.GRAVITY,
    ListFilter.SOURCE_OTHER: SourceType.OTHER,
}


# ── Stage 1: search ──────────────────────────────────────────────────────────


def matches_search(procedure, search: str) -> bool:
    """Substring match on name/description/number, or exact source-type label."""
    if not search:
        return True
    needle = search.lower()
    for text in (procedure.form_name, procedure.form_description, procedure.procedure_number):
        if text and needle in text.lower():
            return True
    return any(s.source_type.label.lower() == needle for s in procedure.sources)


def search_procedures(procedures, search: str) -> list:
    return [p for p in procedures if matches_search(p, search)]


# ── Stage 2: filter ──────────────────────────────────────────────────────────


def matches_filter(procedure, filter_by: ListFilter, today: date) -> bool:
    if filter_by is ListFilter.ALL:
        return True
    if filter_by is ListFilter.FAVORITES:
        return procedure.favorite is Favorite.IS_FAVORITE
    if filter_by in _STATUS_FILTERS:
        return procedure.status == _STATUS_FILTERS[filter_by]
    if filter_by is ListFilter.ADDED_TODAY:
        return procedure.date_added is not None and procedure.date_added.date() == today
    kind = _SOURCE_FILTERS[filter_by]
    return any(s.source_type == kind for s in procedure.sources)


def filter_procedures(procedures, filter_by: ListFilter, today: date | None = None) -> list:
    today = today or date.today()
    return [p for p in procedures if matches_filter(p, filter_by, today)]


# ── Stage 3: sort ────────────────────────────────────────────────────────────


def _first_source_rank(procedure) -> int:
    if not procedure.sources:
        return 0
    return int(procedure.sources[0].source_type)


def sort_procedures(procedures, sort_by: SortField) -> list:
    """Sort by one field. String comparisons are plain code-point order."""
    if sort_by is SortField.NAME:
        return sorted(procedures, key=lambda p: p.form_name)
    if sort_by is SortField.DESCRIPTION:
        return sorted(procedures, key=lambda p: p.form_description)
    if sort_by is SortField.PROCEDURE_NUMBER:
        return sorted(procedures, key=lambda p: p.procedure_number)
    if sort_by is SortField.DATE_ADDED:
        return sorted(procedures, key=lambda p: p.date_added, reverse=True)
    if sort_by is SortField.DATE_EDITED:
        return sorted(procedures, key=lambda p: p.date_edited, reverse=True)
    if sort_by is SortField.FAVORITE:
        return sorted(
            procedures,
            key=lambda p: (0 if p.favorite is Favorite.IS_FAVORITE else 1, p.form_name),
        )
    return sorted(procedures, key=_first_source_rank)


# ── Pipeline ─────────────────────────────────────────────────────────────────


def run_pipeline(
    procedures,
    search: str = "",
    filter_by: ListFilter = ListFilter.ALL,
    sort_by: SortField = SortField.NAME,
    direction: SortDirection = SortDirection.FORWARD,
    today: date | None = None,
) -> list:
    """Return the procedures to display, in display order."""
    found = search_procedures(procedures, search or "")
    kept = filter_procedures(found, filter_by, today)
    ordered = sort_procedures(kept, sort_by)
    if direction is SortDirection.BACKWARD:
        ordered.reverse()
    logger.debug(
        "List pipeline search=%r filter=%s sort=%s direction=%s: %d of %d",
        search, filter_by.value, sort_by.value, direction.value, len(ordered), len(procedures),
    )
    return ordered
