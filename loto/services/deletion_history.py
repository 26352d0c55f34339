"""Undo/redo history for soft deletion of procedures.

Two unbounded stacks of procedure ids:

    mark_deleted(p)  p.deleted = True,  push on deleted_stack
    undo()           pop deleted_stack,   deleted = False, push on recovered_stack
    redo()           pop recovered_stack, deleted = True,  push on deleted_stack

Only whole-record delete/restore is tracked; field edits are not undoable.
Ids are resolved against the store on every undo/redo so the history never
holds ORM instances across sessions. When a ``commit`` callable is passed,
the stacks change only after it returns.
"""

from __future__ import annotations

import logging
from typing import Callable

logger = logging.getLogger(__name__)


class DeletionHistory:
    """Linear two-stack history of soft deletions."""

    def __init__(self, loader: Callable[[str], object | None]) -> None:
        self._loader = loader
        self.deleted_stack: list[str] = []
        self.recovered_stack: list[str] = []

    @property
    def can_undo(self) -> bool:
        return bool(self.deleted_stack)

    @property
    def can_redo(self) -> bool:
        return bool(self.recovered_stack)

    def mark_deleted(self, procedure, commit: Callable[[], None] | None = None) -> None:
        procedure.soft_delete()
        self._settle(commit)
        self.deleted_stack.append(procedure.id)

    def undo(self, commit: Callable[[], None] | None = None):
        """Restore the most recently deleted procedure; None if nothing to undo."""
        procedure = self._peek(self.deleted_stack)
        if procedure is None:
            return None
        procedure.restore()
        self._settle(commit)
        self.recovered_stack.append(self.deleted_stack.pop())
        return procedure

    def redo(self, commit: Callable[[], None] | None = None):
        """Delete again the most recently restored procedure; None if nothing to redo."""
        procedure = self._peek(self.recovered_stack)
        if procedure is None:
            return None
        procedure.soft_delete()
        self._settle(commit)
        self.deleted_stack.append(self.recovered_stack.pop())
        return procedure

    def forget(self, procedure_id: str) -> None:
        """Drop every history entry for a hard-deleted procedure."""
        self.deleted_stack = [pid for pid in self.deleted_stack if pid != procedure_id]
        self.recovered_stack = [pid for pid in self.recovered_stack if pid != procedure_id]

    def clear(self) -> None:
        self.deleted_stack.clear()
        self.recovered_stack.clear()

    @staticmethod
    def _settle(commit) -> None:
        # Raises before any stack moves, so a failed commit leaves the history as it was.
        if commit is not None:
            commit()

    def _peek(self, stack: list[str]):
        """Resolve the top entry of ``stack``; unresolvable entries are popped and dropped."""
        if not stack:
            return None
        procedure = self._loader(stack[-1])
        if procedure is None:
            logger.warning("Deletion history entry %s no longer resolves; dropped", stack.pop())
        return procedure

    def to_dict(self) -> dict:
        return {
            "can_undo": self.can_undo,
            "can_redo": self.can_redo,
            "deleted": len(self.deleted_stack),
            "recovered": len(self.recovered_stack),
        }
