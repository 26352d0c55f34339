"""
Health endpoints.

    GET /api/v1/health/ready  process is up (no dependency checks)
    GET /api/v1/health/live   database round-trip, PDF template presence,
                              record counts and undo/redo depth
"""

import logging
import os
import time

from flask import Blueprint, current_app, jsonify
from sqlalchemy.exc import SQLAlchemyError

from loto.models import db

logger = logging.getLogger(__name__)

health_bp = Blueprint("health_bp", __name__, url_prefix="/api/v1/health")


@health_bp.route("/ready", methods=["GET"])
def ready():
    return jsonify({"status": "ok"}), 200


def _check_database() -> dict:
    from loto.models.procedure import Procedure

    started = time.perf_counter()
    try:
        active = Procedure.query_active().count()
        total = Procedure.query.count()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.error("Health check: database unavailable: %s", exc)
        return {"status": "error", "detail": str(exc)}
    return {
        "status": "ok",
        "latency_ms": round((time.perf_counter() - started) * 1000, 1),
        "procedures": active,
        "soft_deleted": total - active,
    }


def _check_template() -> dict:
    # Export degrades to a 404 without the template; the service stays up.
    path = current_app.config.get("LOTO_PDF_TEMPLATE") or ""
    return {"status": "ok" if os.path.isfile(path) else "missing", "path": path}


@health_bp.route("/live", methods=["GET"])
def live():
    from loto.services.procedure_service import get_history

    checks = {
        "database": _check_database(),
        "pdf_template": _check_template(),
        "history": get_history().to_dict(),
    }
    healthy = checks["database"]["status"] == "ok"
    return jsonify({
        "status": "healthy" if healthy else "degraded",
        "checks": checks,
    }), 200 if healthy else 503
