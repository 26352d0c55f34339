"""Tests: two-stack undo/redo history for soft deletion."""

import pytest

from loto.services.deletion_history import DeletionHistory


class _Record:
    def __init__(self, record_id):
        self.id = record_id
        self.deleted = False

    def soft_delete(self):
        self.deleted = True

    def restore(self):
        self.deleted = False


def _history(*records):
    store = {r.id: r for r in records}
    return DeletionHistory(loader=store.get), store


def test_fresh_history_has_nothing_to_undo_or_redo():
    history, _ = _history()
    assert history.can_undo is False
    assert history.can_redo is False
    assert history.undo() is None
    assert history.redo() is None


def test_delete_then_undo_restores():
    a = _Record("a")
    history, _ = _history(a)

    history.mark_deleted(a)
    assert a.deleted is True
    assert history.deleted_stack == ["a"]

    assert history.undo() is a
    assert a.deleted is False
    assert history.deleted_stack == []
    assert history.recovered_stack == ["a"]


def test_undo_is_lifo_and_redo_replays():
    a, b = _Record("a"), _Record("b")
    history, _ = _history(a, b)
    history.mark_deleted(a)
    history.mark_deleted(b)

    assert history.undo() is b
    assert (a.deleted, b.deleted) == (True, False)

    assert history.redo() is b
    assert b.deleted is True
    assert history.deleted_stack == ["a", "b"]
    assert history.recovered_stack == []


def test_new_delete_does_not_clear_redo_stack():
    a, b = _Record("a"), _Record("b")
    history, _ = _history(a, b)
    history.mark_deleted(a)
    history.undo()
    history.mark_deleted(b)

    assert history.recovered_stack == ["a"]
    assert history.can_redo is True


def test_unresolvable_entry_is_dropped():
    a = _Record("a")
    history, store = _history(a)
    history.mark_deleted(a)
    del store["a"]

    assert history.undo() is None
    assert history.can_undo is False
    assert history.recovered_stack == []


def test_forget_removes_entries_from_both_stacks():
    a, b = _Record("a"), _Record("b")
    history, _ = _history(a, b)
    history.mark_deleted(a)
    history.mark_deleted(b)
    history.undo()

    history.forget("b")
    assert history.deleted_stack == ["a"]
    assert history.recovered_stack == []


def test_to_dict_summary():
    a = _Record("a")
    history, _ = _history(a)
    history.mark_deleted(a)
    assert history.to_dict() == {
        "can_undo": True, "can_redo": False, "deleted": 1, "recovered": 0,
    }


def _failing_commit():
    raise RuntimeError("commit failed")


def test_failed_commit_leaves_stacks_unchanged():
    a = _Record("a")
    history, _ = _history(a)

    with pytest.raises(RuntimeError):
        history.mark_deleted(a, commit=_failing_commit)
    assert history.deleted_stack == []

    history.mark_deleted(a)
    with pytest.raises(RuntimeError):
        history.undo(commit=_failing_commit)
    assert history.deleted_stack == ["a"]
    assert history.recovered_stack == []

    history.undo()
    with pytest.raises(RuntimeError):
        history.redo(commit=_failing_commit)
    assert history.deleted_stack == []
    assert history.recovered_stack == ["a"]


def test_successful_commit_moves_entry():
    a = _Record("a")
    history, _ = _history(a)
    commits = []

    history.mark_deleted(a, commit=lambda: commits.append("delete"))
    history.undo(commit=lambda: commits.append("undo"))

    assert commits == ["delete", "undo"]
    assert history.recovered_stack == ["a"]
