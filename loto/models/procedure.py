"""LOTO procedure domain models.

Two models:
  Procedure: one Lockout/Tagout form (general data, shutdown sequence,
    completion/approval block, status, favorite, timestamps).
  Source: an energy source to isolate; owned by exactly one Procedure
    and never shared. Deleted together with its owner.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime

from loto.models import db
from loto.models.enums import Favorite, SourceType, Status
from loto.models.soft_delete import SoftDeleteMixin
from loto.services.form_rules import display_title
from loto.utils.helpers import format_relative_datetime

MAX_SOURCES = 8


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now()


def _today() -> date:
    return date.today()


# ── Procedure ────────────────────────────────────────────────────────────────


class Procedure(SoftDeleteMixin, db.Model):
    """A Lockout/Tagout procedure form.

    Timestamps are naive local datetimes: "added today" filtering and the
    relative display strings are calendar-day based on the device clock.
    """

    __tablename__ = "procedures"

    id = db.Column(db.String(36), primary_key=True, default=_new_id)

    # ── General data ──
    form_name = db.Column(db.String(200), nullable=False)
    form_description = db.Column(db.Text, nullable=False, default="")
    procedure_number = db.Column(db.String(3), nullable=False, default="")
    facility = db.Column(db.String(200), nullable=False, default="")
    location = db.Column(db.String(200), nullable=False, default="")
    revision = db.Column(db.String(1), nullable=False, default="")
    revision_date = db.Column(db.Date, nullable=False, default=_today)
    origin_date = db.Column(db.Date, nullable=False, default=_today)
    isolation_points = db.Column(db.String(1), nullable=False, default="")
    notes = db.Column(db.Text, nullable=False, default="")

    # ── Shutdown sequence ──
    machine_stop_sequence = db.Column(db.Text, nullable=False, default="")
    isolate_sequence = db.Column(db.Text, nullable=False, default="")

    additional_notes = db.Column(db.Text, nullable=False, default="")

    # ── Completion and approval ──
    completed_by = db.Column(db.String(200), nullable=False, default="")
    approved_by = db.Column(db.String(200), nullable=False, default="")
    approved_by_company = db.Column(db.String(200), nullable=False, default="")
    approval_date = db.Column(db.Date, nullable=False, default=_today)

    status = db.Column(
        db.Enum(Status, name="procedure_status"),
        nullable=False,
        default=Status.IN_PROGRESS,
    )
    favorite = db.Column(
        db.Enum(Favorite, name="procedure_favorite"),
        nullable=False,
        default=Favorite.NOT_FAVORITE,
    )

    date_added = db.Column(db.DateTime, nullable=False, default=_now)
    date_edited = db.Column(db.DateTime, nullable=False, default=_now)

    sources = db.relationship(
        "Source",
        back_populates="procedure",
        order_by="Source.position",
        lazy="select",
        cascade="all, delete-orphan",
    )

    # Mutable scalar fields accepted by the edit flow.
    TEXT_FIELDS = (
        "form_name",
        "form_description",
        "procedure_number",
        "facility",
        "location",
        "revision",
        "isolation_points",
        "notes",
        "machine_stop_sequence",
        "isolate_sequence",
        "additional_notes",
        "completed_by",
        "approved_by",
        "approved_by_company",
    )
    DATE_FIELDS = ("revision_date", "origin_date", "approval_date")

    def touch(self, when: datetime | None = None) -> None:
        """Re-stamp date_edited; never earlier than date_added or the previous stamp."""
        when = when or _now()
        for floor in (self.date_added, self.date_edited):
            if floor is not None and when < floor:
                when = floor
        self.date_edited = when

    def renumber_sources(self) -> None:
        for index, source in enumerate(self.sources):
            source.position = index

    def duplicate(self) -> "Procedure":
        """Deep copy with fresh ids and timestamps; name suffixed " copy"."""
        now = _now()
        return Procedure(
            id=_new_id(),
            form_name=self.form_name + " copy",
            form_description=self.form_description,
            procedure_number=self.procedure_number,
            facility=self.facility,
            location=self.location,
            revision=self.revision,
            revision_date=self.revision_date,
            origin_date=self.origin_date,
            isolation_points=self.isolation_points,
            notes=self.notes,
            sources=[s.duplicate() for s in self.sources],
            machine_stop_sequence=self.machine_stop_sequence,
            isolate_sequence=self.isolate_sequence,
            additional_notes=self.additional_notes,
            completed_by=self.completed_by,
            approved_by=self.approved_by,
            approved_by_company=self.approved_by_company,
            approval_date=self.approval_date,
            status=self.status,
            favorite=self.favorite,
            date_added=now,
            date_edited=now,
            deleted=False,
        )

    def to_dict(self, include_sources: bool = True) -> dict:
        """Serialize for API responses, with display helpers."""
        data = {
            "id": self.id,
            "form_name": self.form_name,
            "title": display_title(self.form_name),
            "form_description": self.form_description,
            "procedure_number": self.procedure_number,
            "facility": self.facility,
            "location": self.location,
            "revision": self.revision,
            "revision_date": self.revision_date.isoformat() if self.revision_date else None,
            "origin_date": self.origin_date.isoformat() if self.origin_date else None,
            "isolation_points": self.isolation_points,
            "notes": self.notes,
            "machine_stop_sequence": self.machine_stop_sequence,
            "isolate_sequence": self.isolate_sequence,
            "additional_notes": self.additional_notes,
            "completed_by": self.completed_by,
            "approved_by": self.approved_by,
            "approved_by_company": self.approved_by_company,
            "approval_date": self.approval_date.isoformat() if self.approval_date else None,
            "status": self.status.name.lower() if self.status else None,
            "status_label": self.status.label if self.status else None,
            "favorite": self.favorite.is_true if self.favorite else False,
            "favorite_label": self.favorite.label if self.favorite else None,
            "source_count": len(self.sources),
            "date_added": self.date_added.isoformat() if self.date_added else None,
            "date_edited": self.date_edited.isoformat() if self.date_edited else None,
            "date_added_display": format_relative_datetime(self.date_added),
            "date_edited_display": format_relative_datetime(self.date_edited),
            "deleted": bool(self.deleted),
        }
        if include_sources:
            data["sources"] = [s.to_dict() for s in self.sources]
        return data

    def __repr__(self) -> str:
        return f"<Procedure {self.id}: {self.form_name}>"


# ── Source ───────────────────────────────────────────────────────────────────


class Source(db.Model):
    """An energy source listed on a procedure (0..8 per procedure)."""

    __tablename__ = "procedure_sources"

    TEXT_FIELDS = (
        "source_id",
        "source_device",
        "source_location",
        "source_method",
        "source_check",
    )

    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    procedure_id = db.Column(
        db.String(36),
        db.ForeignKey("procedures.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position = db.Column(db.Integer, nullable=False, default=0)

    source_id = db.Column(
        db.String(200), nullable=False, default="",
        comment="Free-text label, e.g. a voltage or pressure spec.",
    )
    source_type = db.Column(
        db.Enum(SourceType, name="source_type"),
        nullable=False,
        default=SourceType.ELECTRICAL,
    )
    source_device = db.Column(db.String(200), nullable=False, default="")
    source_location = db.Column(db.String(200), nullable=False, default="")
    source_method = db.Column(db.Text, nullable=False, default="")
    source_check = db.Column(db.Text, nullable=False, default="")
    source_photo = db.Column(db.LargeBinary, nullable=True)

    procedure = db.relationship("Procedure", back_populates="sources")

    @property
    def display_label(self) -> str:
        label = self.source_type.label
        return f"{label} - {self.source_id}" if self.source_id else label

    def duplicate(self) -> "Source":
        return Source(
            id=_new_id(),
            position=self.position,
            source_id=self.source_id,
            source_type=self.source_type,
            source_device=self.source_device,
            source_location=self.source_location,
            source_method=self.source_method,
            source_check=self.source_check,
            source_photo=self.source_photo,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "procedure_id": self.procedure_id,
            "position": self.position,
            "source_id": self.source_id,
            "source_type": self.source_type.name.lower(),
            "source_type_label": self.source_type.label,
            "source_type_icon": self.source_type.icon,
            "display_label": self.display_label,
            "source_device": self.source_device,
            "source_location": self.source_location,
            "source_method": self.source_method,
            "source_check": self.source_check,
            "has_photo": self.source_photo is not None,
        }

    def __repr__(self) -> str:
        return f"<Source {self.id}: {self.source_type.name}>"
