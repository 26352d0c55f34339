"""
Tests: list pipeline (search → filter → sort → direction).

Uses transient Procedure/Source instances; nothing touches the database.
"""

from datetime import date, datetime

import pytest

from loto.core.exceptions import ValidationError
from loto.models.enums import Favorite, SourceType, Status
from loto.models.procedure import Procedure, Source
from loto.services.list_pipeline import (
    ListFilter,
    SortDirection,
    SortField,
    filter_procedures,
    matches_search,
    run_pipeline,
    sort_procedures,
)

TODAY = date(2024, 3, 10)


def _proc(name, *, description="", number="", favorite=False, status=Status.IN_PROGRESS,
          added=datetime(2024, 3, 1, 9, 0), edited=None, sources=()):
    return Procedure(
        form_name=name,
        form_description=description,
        procedure_number=number,
        favorite=Favorite.IS_FAVORITE if favorite else Favorite.NOT_FAVORITE,
        status=status,
        date_added=added,
        date_edited=edited or added,
        deleted=False,
        sources=[Source(source_type=t, source_id="") for t in sources],
    )


def _names(procedures):
    return [p.form_name for p in procedures]


# ── Search ───────────────────────────────────────────────────────────────────


def test_search_is_case_insensitive_substring():
    p = _proc("Main Pump", description="Cooling water loop", number="042")
    assert matches_search(p, "pump")
    assert matches_search(p, "COOLING")
    assert matches_search(p, "04")
    assert not matches_search(p, "press")


def test_search_matches_source_type_label_exactly():
    p = _proc("Main Pump", sources=[SourceType.WATER, SourceType.ELECTRICAL])
    assert matches_search(p, "water")
    assert matches_search(p, "Electrical")
    # labels are compared whole, not as substrings
    assert not matches_search(p, "elec")


def test_empty_search_keeps_everything():
    procs = [_proc("Alpha one"), _proc("Bravo two")]
    assert run_pipeline(procs, search="") == sorted(procs, key=lambda p: p.form_name)


# ── Filter ───────────────────────────────────────────────────────────────────


def test_filter_by_status_and_favorites():
    a = _proc("Alpha one", status=Status.COMPLETED, favorite=True)
    b = _proc("Bravo two", status=Status.AWAITING_APPROVAL)
    c = _proc("Charlie three")
    procs = [a, b, c]
    assert filter_procedures(procs, ListFilter.COMPLETED, TODAY) == [a]
    assert filter_procedures(procs, ListFilter.AWAITING_APPROVAL, TODAY) == [b]
    assert filter_procedures(procs, ListFilter.IN_PROGRESS, TODAY) == [c]
    assert filter_procedures(procs, ListFilter.FAVORITES, TODAY) == [a]
    assert filter_procedures(procs, ListFilter.ALL, TODAY) == procs


def test_filter_added_today_uses_calendar_day():
    early = _proc("Alpha one", added=datetime(2024, 3, 10, 0, 5))
    late = _proc("Bravo two", added=datetime(2024, 3, 10, 23, 55))
    yesterday = _proc("Charlie three", added=datetime(2024, 3, 9, 23, 59))
    result = filter_procedures([early, late, yesterday], ListFilter.ADDED_TODAY, TODAY)
    assert result == [early, late]


def test_filter_by_source_type_matches_any_source():
    a = _proc("Alpha one", sources=[SourceType.ELECTRICAL, SourceType.GAS])
    b = _proc("Bravo two", sources=[SourceType.AIR])
    c = _proc("Charlie three")
    assert filter_procedures([a, b, c], ListFilter.SOURCE_GAS, TODAY) == [a]
    assert filter_procedures([a, b, c], ListFilter.SOURCE_AIR, TODAY) == [b]
    assert filter_procedures([a, b, c], ListFilter.SOURCE_OTHER, TODAY) == []


# ── Sort ─────────────────────────────────────────────────────────────────────


def test_sort_by_name_is_code_point_order():
    procs = [_proc("bravo two"), _proc("Alpha one"), _proc("Charlie three")]
    assert _names(sort_procedures(procs, SortField.NAME)) == [
        "Alpha one", "Charlie three", "bravo two",
    ]


def test_sort_by_date_added_is_newest_first():
    old = _proc("Alpha one", added=datetime(2024, 1, 1))
    new = _proc("Bravo two", added=datetime(2024, 3, 1))
    assert sort_procedures([old, new], SortField.DATE_ADDED) == [new, old]


def test_backward_on_date_sort_reads_oldest_first():
    old = _proc("Alpha one", edited=datetime(2024, 1, 1))
    new = _proc("Bravo two", edited=datetime(2024, 3, 1))
    result = run_pipeline(
        [old, new], sort_by=SortField.DATE_EDITED, direction=SortDirection.BACKWARD, today=TODAY,
    )
    assert result == [old, new]


def test_favorite_sort_forward_and_backward():
    procs = [
        _proc("Bravo two", favorite=True),
        _proc("Delta four"),
        _proc("Alpha one", favorite=True),
        _proc("Charlie three"),
    ]
    forward = run_pipeline(procs, sort_by=SortField.FAVORITE, today=TODAY)
    assert _names(forward) == ["Alpha one", "Bravo two", "Charlie three", "Delta four"]

    backward = run_pipeline(
        procs, sort_by=SortField.FAVORITE, direction=SortDirection.BACKWARD, today=TODAY,
    )
    assert _names(backward) == ["Delta four", "Charlie three", "Bravo two", "Alpha one"]


def test_sort_by_first_source_type_treats_no_sources_as_lowest():
    gas = _proc("Alpha one", sources=[SourceType.GAS, SourceType.ELECTRICAL])
    air = _proc("Bravo two", sources=[SourceType.AIR])
    empty = _proc("Charlie three")
    assert sort_procedures([gas, air, empty], SortField.SOURCE_TYPE) == [empty, air, gas]


def test_sort_by_procedure_number_and_description():
    a = _proc("Alpha one", number="200", description="zeta")
    b = _proc("Bravo two", number="010", description="eta")
    assert sort_procedures([a, b], SortField.PROCEDURE_NUMBER) == [b, a]
    assert sort_procedures([a, b], SortField.DESCRIPTION) == [b, a]


# ── Full pipeline ────────────────────────────────────────────────────────────


def test_pipeline_applies_all_stages_in_order():
    procs = [
        _proc("Pump house A", status=Status.COMPLETED, sources=[SourceType.WATER]),
        _proc("Pump house B", status=Status.IN_PROGRESS),
        _proc("Press line", status=Status.COMPLETED),
        _proc("Pump skid C", status=Status.COMPLETED),
    ]
    result = run_pipeline(
        procs,
        search="pump",
        filter_by=ListFilter.COMPLETED,
        sort_by=SortField.NAME,
        direction=SortDirection.BACKWARD,
        today=TODAY,
    )
    assert _names(result) == ["Pump skid C", "Pump house A"]


# ── Selector parsing ─────────────────────────────────────────────────────────


def test_selector_parse_is_lenient_about_case_and_dashes():
    assert ListFilter.parse("Source-Gas") is ListFilter.SOURCE_GAS
    assert SortField.parse("DATE_EDITED") is SortField.DATE_EDITED
    assert SortDirection.parse(None) is SortDirection.FORWARD
    assert ListFilter.parse("") is ListFilter.ALL


def test_selector_parse_rejects_unknown_values():
    with pytest.raises(ValidationError) as exc:
        SortField.parse("colour")
    assert "name" in exc.value.details["allowed"]
