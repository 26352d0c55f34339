"""Enumerated value types for LOTO procedures.

Three closed enums:
  Status: in_progress < awaiting_approval < completed
  SourceType: electrical, air, water, gas, gravity, other (declaration order)
  Favorite: not_favorite | is_favorite

Display metadata (label, icon, color) lives in lookup tables next to each
enum so the domain logic never depends on presentation strings.
"""

from __future__ import annotations

from enum import Enum, IntEnum


class _DisplayMixin:
    """Shared label/icon/color lookups and lenient parsing."""

    _DISPLAY: dict = {}

    @property
    def label(self) -> str:
        return self._DISPLAY[self][0]

    @property
    def icon(self) -> str:
        return self._DISPLAY[self][1]

    @property
    def color(self) -> str:
        return self._DISPLAY[self][2]

    @classmethod
    def from_value(cls, value):
        """Resolve a member from its name, integer value or display label.

        Raises:
            ValueError: If nothing matches.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip()
            for member in cls:
                if key.lower() in (member.name.lower(), member.label.lower()):
                    return member
            if key.isdigit():
                value = int(key)
        if isinstance(value, int) and not isinstance(value, bool):
            for member in cls:
                if member.value == value:
                    return member
        raise ValueError(f"{value!r} is not a valid {cls.__name__}")


class Status(_DisplayMixin, IntEnum):
    IN_PROGRESS = 1
    AWAITING_APPROVAL = 2
    COMPLETED = 3


Status._DISPLAY = {
    Status.IN_PROGRESS: ("In Progress", "smallcircle.filled.circle", "red"),
    Status.AWAITING_APPROVAL: ("Awaiting Approval", "circle.dashed.inset.filled", "purple"),
    Status.COMPLETED: ("Completed", "checkmark.circle.fill", "green"),
}


class SourceType(_DisplayMixin, IntEnum):
    ELECTRICAL = 1
    AIR = 2
    WATER = 3
    GAS = 4
    GRAVITY = 5
    OTHER = 6


SourceType._DISPLAY = {
    SourceType.ELECTRICAL: ("Electrical", "bolt.fill", "yellow"),
    SourceType.AIR: ("Air", "wind", "teal"),
    SourceType.WATER: ("Water", "drop.fill", "green"),
    SourceType.GAS: ("Gas", "fuelpump.fill", "red"),
    SourceType.GRAVITY: ("Gravity", "globe.americas.fill", "purple"),
    SourceType.OTHER: ("Other", "diamond.inset.filled", "primary"),
}


class Favorite(_DisplayMixin, Enum):
    NOT_FAVORITE = "not_favorite"
    IS_FAVORITE = "is_favorite"

    @property
    def is_true(self) -> bool:
        return self is Favorite.IS_FAVORITE

    def toggled(self) -> "Favorite":
        return Favorite.NOT_FAVORITE if self.is_true else Favorite.IS_FAVORITE

    @classmethod
    def from_value(cls, value):
        if isinstance(value, bool):
            return cls.IS_FAVORITE if value else cls.NOT_FAVORITE
        return super().from_value(value)


Favorite._DISPLAY = {
    Favorite.NOT_FAVORITE: ("Not Favorite", "star.slash", "gray"),
    Favorite.IS_FAVORITE: ("Favorite", "star.fill", "yellow"),
}
