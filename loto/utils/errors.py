"""JSON error bodies for the procedure API.

Every error response has the same shape::

    {"error": "<message>", "code": "ERR_...", "details": {...}}

``details`` is omitted when empty. Views and blueprint error handlers
return ``api_error(E.X, "...")`` directly.
"""

from __future__ import annotations

from flask import jsonify


class E:
    """Machine-readable error codes."""

    VALIDATION_REQUIRED = "ERR_VALIDATION_REQUIRED"  # missing request field
    FORM_RULE = "ERR_FORM_RULE"                      # name, enum, date or source-limit rule
    NOT_FOUND = "ERR_NOT_FOUND"
    TEMPLATE_MISSING = "ERR_TEMPLATE_MISSING"
    PHOTO_UNAVAILABLE = "ERR_PHOTO_UNAVAILABLE"
    DATABASE = "ERR_DATABASE"
    INTERNAL = "ERR_INTERNAL"


STATUS_BY_CODE: dict[str, int] = {
    E.VALIDATION_REQUIRED: 400,
    E.FORM_RULE: 422,
    E.NOT_FOUND: 404,
    E.TEMPLATE_MISSING: 404,
    E.PHOTO_UNAVAILABLE: 404,
    E.DATABASE: 500,
    E.INTERNAL: 500,
}


def api_error(code: str, message: str, *, status: int | None = None, details: dict | None = None):
    """Build ``(response, status)`` for an error.

    ``status`` overrides the code's default; unknown codes default to 400.
    """
    body = {"error": message, "code": code}
    if details:
        body["details"] = details
    return jsonify(body), status or STATUS_BY_CODE.get(code, 400)
