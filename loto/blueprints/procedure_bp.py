"""Procedure blueprint: REST API for LOTO procedure forms.

Endpoint groups:
  Listing            GET    /api/v1/procedures?search=&filter=&sort=&direction=
  Add / edit         POST   /api/v1/procedures
                     GET    /api/v1/procedures/<id>
                     PUT    /api/v1/procedures/<id>
                     POST   /api/v1/procedures/<id>/reset-date
                     POST   /api/v1/procedures/<id>/favorite
                     POST   /api/v1/procedures/<id>/duplicate
  Deletion           DELETE /api/v1/procedures/<id>          (soft, undoable)
                     DELETE /api/v1/procedures/<id>/hard
                     POST   /api/v1/procedures/undo
                     POST   /api/v1/procedures/redo
                     GET    /api/v1/procedures/history
  Sources            POST   /api/v1/procedures/<id>/sources
                     PUT    /api/v1/procedures/<id>/sources/<sid>
                     DELETE /api/v1/procedures/<id>/sources/<sid>
  Photos             GET    /api/v1/procedures/<id>/sources/<sid>/photo
                     PUT    /api/v1/procedures/<id>/sources/<sid>/photo
                     DELETE /api/v1/procedures/<id>/sources/<sid>/photo
                     GET    /api/v1/procedures/<id>/sources/<sid>/photo/preview
  Export             GET    /api/v1/procedures/<id>/export

Service layer owns all business logic and commits.
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from loto.core.exceptions import NotFoundError, PersistenceError, ValidationError
from loto.services import pdf_export_service, photo_service
from loto.services import procedure_service as svc
from loto.services.list_pipeline import ListFilter, SortDirection, SortField
from loto.utils.errors import E, api_error

logger = logging.getLogger(__name__)

procedure_bp = Blueprint("procedures", __name__, url_prefix="/api/v1/procedures")


# ── Error handlers ────────────────────────────────────────────────────────────


@procedure_bp.errorhandler(NotFoundError)
def _handle_not_found(error: NotFoundError):
    return api_error(E.NOT_FOUND, str(error))


@procedure_bp.errorhandler(ValidationError)
def _handle_validation(error: ValidationError):
    return api_error(E.FORM_RULE, str(error), details=error.details)


@procedure_bp.errorhandler(PersistenceError)
def _handle_persistence(error: PersistenceError):
    return api_error(E.DATABASE, "Database error")


@procedure_bp.errorhandler(Exception)
def _handle_unexpected(error: Exception):
    if isinstance(error, HTTPException):
        return error
    logger.exception("Unexpected error in procedure_bp endpoint=%s", request.endpoint)
    return api_error(E.INTERNAL, "Internal server error")


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


# ═════════════════════════════════════════════════════════════════════════
# Listing
# ═════════════════════════════════════════════════════════════════════════


@procedure_bp.route("", methods=["GET"])
def list_procedures():
    """List active procedures through the search/filter/sort pipeline.

    Query params: search, filter, sort, direction (all optional)
    """
    procedures = svc.list_procedures(
        search=request.args.get("search", ""),
        filter_by=ListFilter.parse(request.args.get("filter")),
        sort_by=SortField.parse(request.args.get("sort")),
        direction=SortDirection.parse(request.args.get("direction")),
    )
    return jsonify([p.to_dict(include_sources=False) for p in procedures]), 200


# ═════════════════════════════════════════════════════════════════════════
# Add / edit
# ═════════════════════════════════════════════════════════════════════════


@procedure_bp.route("", methods=["POST"])
def create_procedure():
    """Create a procedure. Returns 422 when the name fails validation."""
    procedure = svc.create_procedure(_json_body())
    return jsonify(procedure.to_dict()), 201


@procedure_bp.route("/<procedure_id>", methods=["GET"])
def get_procedure(procedure_id):
    return jsonify(svc.get_procedure(procedure_id).to_dict()), 200


@procedure_bp.route("/<procedure_id>", methods=["PUT"])
def update_procedure(procedure_id):
    """Update only the supplied fields."""
    procedure = svc.get_procedure(procedure_id)
    svc.update_procedure(procedure, _json_body())
    return jsonify(procedure.to_dict()), 200


@procedure_bp.route("/<procedure_id>/reset-date", methods=["POST"])
def reset_date(procedure_id):
    """Body: {"field": "revision_date" | "origin_date" | "approval_date"}"""
    field = _json_body().get("field")
    if not field:
        return api_error(E.VALIDATION_REQUIRED, "field is required")
    procedure = svc.get_procedure(procedure_id)
    svc.reset_date_to_today(procedure, field)
    return jsonify(procedure.to_dict()), 200


@procedure_bp.route("/<procedure_id>/favorite", methods=["POST"])
def toggle_favorite(procedure_id):
    procedure = svc.get_procedure(procedure_id)
    svc.toggle_favorite(procedure)
    return jsonify(procedure.to_dict()), 200


@procedure_bp.route("/<procedure_id>/duplicate", methods=["POST"])
def duplicate_procedure(procedure_id):
    copy = svc.duplicate_procedure(svc.get_procedure(procedure_id))
    return jsonify(copy.to_dict()), 201


# ═════════════════════════════════════════════════════════════════════════
# Deletion and history
# ═════════════════════════════════════════════════════════════════════════


@procedure_bp.route("/<procedure_id>", methods=["DELETE"])
def delete_procedure(procedure_id):
    """Soft delete; can be undone with POST /undo."""
    svc.soft_delete_procedure(svc.get_procedure(procedure_id))
    return jsonify({"message": "Deleted", "history": svc.get_history().to_dict()}), 200


@procedure_bp.route("/<procedure_id>/hard", methods=["DELETE"])
def hard_delete_procedure(procedure_id):
    """Permanently remove a procedure, deleted or not."""
    svc.hard_delete_procedure(svc.get_procedure(procedure_id, include_deleted=True))
    return jsonify({"message": "Deleted permanently"}), 200


@procedure_bp.route("/undo", methods=["POST"])
def undo_delete():
    procedure = svc.undo_delete()
    return jsonify({
        "procedure": procedure.to_dict() if procedure else None,
        "history": svc.get_history().to_dict(),
    }), 200


@procedure_bp.route("/redo", methods=["POST"])
def redo_delete():
    procedure = svc.redo_delete()
    return jsonify({
        "procedure": procedure.to_dict() if procedure else None,
        "history": svc.get_history().to_dict(),
    }), 200


@procedure_bp.route("/history", methods=["GET"])
def history():
    return jsonify(svc.get_history().to_dict()), 200


# ═════════════════════════════════════════════════════════════════════════
# Sources
# ═════════════════════════════════════════════════════════════════════════


@procedure_bp.route("/<procedure_id>/sources", methods=["POST"])
def add_source(procedure_id):
    """Append a source. Returns 422 once the procedure holds 8 sources."""
    procedure = svc.get_procedure(procedure_id)
    source = svc.add_source(procedure, _json_body())
    return jsonify(source.to_dict()), 201


@procedure_bp.route("/<procedure_id>/sources/<source_id>", methods=["PUT"])
def update_source(procedure_id, source_id):
    procedure = svc.get_procedure(procedure_id)
    source = svc.update_source(procedure, svc.get_source(procedure, source_id), _json_body())
    return jsonify(source.to_dict()), 200


@procedure_bp.route("/<procedure_id>/sources/<source_id>", methods=["DELETE"])
def remove_source(procedure_id, source_id):
    procedure = svc.get_procedure(procedure_id)
    svc.remove_source(procedure, svc.get_source(procedure, source_id))
    return jsonify(procedure.to_dict()), 200


# ── Photos ───────────────────────────────────────────────────────────────────


@procedure_bp.route("/<procedure_id>/sources/<source_id>/photo", methods=["GET"])
def get_photo(procedure_id, source_id):
    """Return the stored photo bytes, base64-encoded."""
    procedure = svc.get_procedure(procedure_id)
    source = svc.get_source(procedure, source_id)
    if source.source_photo is None:
        return api_error(E.PHOTO_UNAVAILABLE, "Source has no photo")
    return jsonify({"photo": photo_service.encode_photo(source.source_photo)}), 200


@procedure_bp.route("/<procedure_id>/sources/<source_id>/photo", methods=["PUT"])
def set_photo(procedure_id, source_id):
    """Body: {"photo": "<base64 image bytes>"}"""
    blob = photo_service.decode_photo(_json_body().get("photo"))
    procedure = svc.get_procedure(procedure_id)
    source = svc.set_source_photo(procedure, svc.get_source(procedure, source_id), blob)
    return jsonify(source.to_dict()), 200


@procedure_bp.route("/<procedure_id>/sources/<source_id>/photo", methods=["DELETE"])
def clear_photo(procedure_id, source_id):
    procedure = svc.get_procedure(procedure_id)
    source = svc.set_source_photo(procedure, svc.get_source(procedure, source_id), None)
    return jsonify(source.to_dict()), 200


@procedure_bp.route("/<procedure_id>/sources/<source_id>/photo/preview", methods=["GET"])
def photo_preview(procedure_id, source_id):
    procedure = svc.get_procedure(procedure_id)
    source = svc.get_source(procedure, source_id)
    size = current_app.config.get("LOTO_PHOTO_PREVIEW_SIZE", 320)
    preview = photo_service.make_preview(source.source_photo, (size, size))
    if preview is None:
        return api_error(E.PHOTO_UNAVAILABLE, "No photo preview available")
    return Response(preview, mimetype="image/png")


# ═════════════════════════════════════════════════════════════════════════
# Export
# ═════════════════════════════════════════════════════════════════════════


@procedure_bp.route("/<procedure_id>/export", methods=["GET"])
def export_procedure(procedure_id):
    """Return the filled PDF template as an attachment."""
    procedure = svc.get_procedure(procedure_id)
    data = pdf_export_service.fill_template(procedure, current_app.config["LOTO_PDF_TEMPLATE"])
    if data is None:
        return api_error(E.TEMPLATE_MISSING, "PDF template not found")
    filename = pdf_export_service.export_filename(procedure)
    return Response(
        data,
        mimetype="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
