"""
Soft delete for LOTO records.

A boolean ``deleted`` column marks a row as removed from the list without
dropping it, so the deletion history can flip it back. Callers commit.

    procedure.soft_delete()
    Procedure.query_active()   # excludes deleted rows
    procedure.restore()
"""

from loto.models import db


class SoftDeleteMixin:
    deleted = db.Column(db.Boolean, nullable=False, default=False, index=True)

    def soft_delete(self):
        self.deleted = True

    def restore(self):
        self.deleted = False

    @classmethod
    def query_active(cls):
        """Query over rows whose ``deleted`` flag is clear."""
        return cls.query.filter(cls.deleted.is_(False))
