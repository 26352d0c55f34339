"""Shared utility functions.

parse_date:                returns None on bad input
parse_date_input:          raises ValueError on bad input (request bodies)
format_relative_datetime:  "Today at 3:05 PM" style display strings
commit_or_rollback:        single commit path for the service layer
"""
import logging
from datetime import date, datetime, timedelta

from loto.core.exceptions import PersistenceError
from loto.models import db

logger = logging.getLogger(__name__)


def parse_date(value):
    """Parse a date string (ISO or MM/DD/YYYY) to a date object.

    Returns None for empty/invalid input. Supports:
    - YYYY-MM-DD (ISO format)
    - YYYY-MM-DDTHH:MM:SS (datetime ISO → .date())
    - MM/DD/YYYY and MM/DD/YY
    """
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except (ValueError, TypeError):
        pass
    try:
        return datetime.fromisoformat(str(value)).date()
    except (ValueError, TypeError):
        pass
    for fmt in ("%m/%d/%Y", "%m/%d/%y"):
        try:
            return datetime.strptime(str(value), fmt).date()
        except (ValueError, TypeError):
            continue
    return None


def parse_date_input(value):
    """Parse a date string, raising ValueError on bad input.

    Same as parse_date() but raises ValueError instead of returning None,
    so callers can report the offending field.
    """
    parsed = parse_date(value)
    if value and parsed is None:
        raise ValueError("Invalid date format. Use YYYY-MM-DD or MM/DD/YYYY.")
    return parsed


def _clock(dt: datetime) -> str:
    return dt.strftime("%I:%M %p").lstrip("0")


def format_relative_datetime(dt, now=None):
    """Render a timestamp the way the form list shows it.

    - same calendar day       → "Today at 3:05 PM"
    - previous calendar day   → "Yesterday at 3:05 PM"
    - within the past 6 days  → "Monday at 3:05 PM"
    - anything older          → "March 4, 2024 at 3:05 PM"
    """
    if dt is None:
        return None
    now = now or datetime.now()
    start_of_today = datetime.combine(now.date(), datetime.min.time())

    if dt.date() == now.date():
        return f"Today at {_clock(dt)}"
    if start_of_today - timedelta(days=1) <= dt < start_of_today:
        return f"Yesterday at {_clock(dt)}"
    if start_of_today - timedelta(days=6) <= dt < start_of_today:
        return f"{dt.strftime('%A')} at {_clock(dt)}"
    return f"{dt.strftime('%B')} {dt.day}, {dt.year} at {_clock(dt)}"


# ── Database commit helper ───────────────────────────────────────────────────

def commit_or_rollback(action="commit"):
    """Commit the current SQLAlchemy session, rolling back on failure.

    IntegrityError / OperationalError / anything else → rollback, log,
    and re-raise as PersistenceError so blueprints answer with a JSON 500
    instead of leaving the session in a failed state.
    """
    from sqlalchemy.exc import IntegrityError, OperationalError

    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        logger.warning("Integrity error on %s: %s", action, exc.orig)
        raise PersistenceError(action) from exc
    except OperationalError as exc:
        db.session.rollback()
        logger.exception("Database operational error on %s", action)
        raise PersistenceError(action) from exc
    except Exception as exc:
        db.session.rollback()
        logger.exception("Unexpected database error on %s", action)
        raise PersistenceError(action) from exc
