from datetime import date, datetime, timedelta

import pytest

from loto.core.exceptions import (
    NotFoundError,
    PersistenceError,
    SourceLimitError,
    ValidationError,
)
from loto.models import db as _db
from loto.models.enums import Favorite, SourceType, Status
from loto.models.procedure import Procedure, Source
from loto.services import procedure_service as svc


def _age(procedure, days=2):
    """Push both timestamps into the past so a later touch is observable."""
    past = datetime.now() - timedelta(days=days)
    procedure.date_added = past
    procedure.date_edited = past
    _db.session.commit()
    return past


def test_create_defaults(make_procedure):
    p = make_procedure()
    assert p.id
    assert p.status is Status.IN_PROGRESS
    assert p.favorite is Favorite.NOT_FAVORITE
    assert p.deleted is False
    assert p.revision_date == date.today()
    assert p.date_added == p.date_edited
    assert p.sources == []


def test_create_without_name_uses_untitled():
    p = svc.create_procedure({})
    assert p.form_name == "Untitled Procedure"


def test_create_rejects_invalid_name():
    with pytest.raises(ValidationError):
        svc.create_procedure({"form_name": "Pump"})
    assert Procedure.query.count() == 0


def test_create_sanitizes_numeric_fields(make_procedure):
    p = make_procedure(procedure_number="A12-34", revision="r7", isolation_points="x")
    assert (p.procedure_number, p.revision, p.isolation_points) == ("123", "7", "")


def test_create_with_sources_keeps_order(make_procedure):
    p = make_procedure(sources=[
        {"source_type": "air", "source_id": "90 psi"},
        {"source_type": "gravity"},
    ])
    assert [s.source_type for s in p.sources] == [SourceType.AIR, SourceType.GRAVITY]
    assert [s.position for s in p.sources] == [0, 1]


def test_create_rejects_more_than_eight_sources(make_procedure):
    with pytest.raises(SourceLimitError):
        make_procedure(sources=[{}] * 9)


def test_create_rejects_bad_enum_and_date(make_procedure):
    with pytest.raises(ValidationError):
        make_procedure(status="archived")
    with pytest.raises(ValidationError):
        make_procedure(origin_date="not a date")


def test_get_procedure_hides_soft_deleted(make_procedure):
    p = make_procedure()
    svc.soft_delete_procedure(p)
    with pytest.raises(NotFoundError):
        svc.get_procedure(p.id)
    assert svc.get_procedure(p.id, include_deleted=True) is p


def test_update_bumps_date_edited(make_procedure):
    p = make_procedure()
    past = _age(p)

    svc.update_procedure(p, {"facility": "Plant 9"})
    assert p.facility == "Plant 9"
    assert p.date_edited > past
    assert p.date_added == past


def test_noop_update_leaves_date_edited(make_procedure):
    p = make_procedure(facility="Plant 2")
    past = _age(p)

    svc.update_procedure(p, {"facility": "Plant 2", "form_name": "Conveyor Line 1"})
    assert p.date_edited == past


def test_update_rejects_invalid_name_without_writing(make_procedure):
    p = make_procedure()
    with pytest.raises(ValidationError):
        svc.update_procedure(p, {"form_name": "bad/name", "facility": "Elsewhere"})
    assert p.form_name == "Conveyor Line 1"
    assert p.facility == ""


def test_touch_never_goes_backwards(make_procedure):
    p = make_procedure()
    before = p.date_edited
    p.touch(before - timedelta(hours=1))
    assert p.date_edited == before


def test_status_and_favorite(make_procedure):
    p = make_procedure()
    svc.update_procedure(p, {"status": "completed"})
    assert p.status is Status.COMPLETED
    svc.toggle_favorite(p)
    assert p.favorite is Favorite.IS_FAVORITE
    svc.toggle_favorite(p)
    assert p.favorite is Favorite.NOT_FAVORITE


def test_reset_date_to_today(make_procedure):
    p = make_procedure(approval_date="2020-01-01")
    svc.reset_date_to_today(p, "approval_date")
    assert p.approval_date == date.today()
    with pytest.raises(ValidationError):
        svc.reset_date_to_today(p, "date_added")


def test_source_lifecycle(make_procedure):
    p = make_procedure()
    past = _age(p)

    first = svc.add_source(p)
    assert first.source_type is SourceType.ELECTRICAL
    assert p.date_edited > past

    second = svc.add_source(p, {"source_type": "water", "source_id": "150 psi"})
    svc.update_source(p, second, {"source_device": "Valve V-31"})
    assert second.display_label == "Water - 150 psi"

    svc.remove_source(p, first)
    assert [s.id for s in p.sources] == [second.id]
    assert second.position == 0
    assert Source.query.count() == 1


def test_add_source_stops_at_eight(make_procedure):
    p = make_procedure(sources=[{}] * 8)
    with pytest.raises(SourceLimitError):
        svc.add_source(p)
    assert len(p.sources) == 8


def test_set_and_clear_photo(make_procedure):
    p = make_procedure(sources=[{}])
    source = p.sources[0]
    svc.set_source_photo(p, source, b"\x89PNG...")
    assert source.source_photo == b"\x89PNG..."
    svc.set_source_photo(p, source, None)
    assert source.source_photo is None


def test_duplicate_is_a_deep_copy(make_procedure):
    p = make_procedure(
        favorite=True,
        status="awaiting_approval",
        sources=[{"source_type": "gas", "source_id": "NG"}],
    )
    _age(p)

    copy = svc.duplicate_procedure(p)
    assert copy.id != p.id
    assert copy.form_name == "Conveyor Line 1 copy"
    assert copy.status is Status.AWAITING_APPROVAL
    assert copy.favorite is Favorite.IS_FAVORITE
    assert copy.date_added > p.date_added
    assert copy.sources[0].id != p.sources[0].id
    assert copy.sources[0].source_type is SourceType.GAS

    svc.update_source(copy, copy.sources[0], {"source_id": "LP"})
    assert p.sources[0].source_id == "NG"


def test_list_excludes_soft_deleted(make_procedure):
    keep = make_procedure(form_name="Alpha line")
    gone = make_procedure(form_name="Bravo line")
    svc.soft_delete_procedure(gone)
    assert svc.list_procedures() == [keep]


def test_undo_redo_round_trip(make_procedure):
    p = make_procedure()
    svc.soft_delete_procedure(p)
    assert svc.get_history().can_undo

    assert svc.undo_delete() is p
    assert p.deleted is False
    assert svc.list_procedures() == [p]

    assert svc.redo_delete() is p
    assert p.deleted is True
    assert svc.list_procedures() == []


def test_undo_with_empty_history_is_noop():
    assert svc.undo_delete() is None
    assert svc.redo_delete() is None


def test_hard_delete_removes_rows_and_history(make_procedure):
    p = make_procedure(sources=[{}, {}])
    svc.soft_delete_procedure(p)
    svc.hard_delete_procedure(p)

    assert Procedure.query.count() == 0
    assert Source.query.count() == 0
    assert svc.get_history().can_undo is False


def test_create_rejects_malformed_sources():
    with pytest.raises(ValidationError):
        svc.create_procedure({"form_name": "Conveyor Line 1", "sources": {"source_type": "air"}})
    with pytest.raises(ValidationError):
        svc.create_procedure({"form_name": "Conveyor Line 1", "sources": [1, 2]})
    assert Procedure.query.count() == 0


def test_rejected_edit_does_not_leak_into_next_commit(make_procedure):
    p = make_procedure(notes="orig")

    with pytest.raises(ValidationError):
        svc.update_procedure(p, {"notes": "leaked", "status": "bogus"})
    assert p.notes == "orig"

    svc.toggle_favorite(p)
    _db.session.expire_all()
    assert _db.session.get(Procedure, p.id).notes == "orig"


def test_rejected_source_edit_leaves_source_untouched(make_procedure):
    p = make_procedure(sources=[{"source_id": "480V"}])
    source = p.sources[0]

    with pytest.raises(ValidationError):
        svc.update_source(p, source, {"source_id": "leaked", "source_type": "steam"})
    assert source.source_id == "480V"


def _fail_commits(monkeypatch):
    def _boom():
        raise RuntimeError("disk full")

    monkeypatch.setattr(_db.session, "commit", _boom)


def test_failed_soft_delete_leaves_history_untouched(make_procedure, monkeypatch):
    p = make_procedure()
    _fail_commits(monkeypatch)

    with pytest.raises(PersistenceError):
        svc.soft_delete_procedure(p)

    monkeypatch.undo()
    assert svc.get_history().to_dict()["deleted"] == 0
    assert svc.get_procedure(p.id).deleted is False


def test_failed_undo_keeps_entry_on_deleted_stack(make_procedure, monkeypatch):
    p = make_procedure()
    svc.soft_delete_procedure(p)
    _fail_commits(monkeypatch)

    with pytest.raises(PersistenceError):
        svc.undo_delete()

    monkeypatch.undo()
    history = svc.get_history()
    assert history.deleted_stack == [p.id]
    assert history.recovered_stack == []
    assert svc.get_procedure(p.id, include_deleted=True).deleted is True

    assert svc.undo_delete() is p
    assert p.deleted is False


def test_failed_redo_keeps_entry_on_recovered_stack(make_procedure, monkeypatch):
    p = make_procedure()
    svc.soft_delete_procedure(p)
    svc.undo_delete()
    _fail_commits(monkeypatch)

    with pytest.raises(PersistenceError):
        svc.redo_delete()

    monkeypatch.undo()
    history = svc.get_history()
    assert history.recovered_stack == [p.id]
    assert history.deleted_stack == []
    assert svc.get_procedure(p.id).deleted is False
