"""
LOTO Forms service.

    from loto import create_app
    app = create_app()           # APP_ENV, else "development"
    app = create_app("testing")
"""

import logging
import os

import click
from flask import Flask, request
from flask_cors import CORS
from flask_migrate import Migrate

from loto.config import config
from loto.models import db
from loto.middleware.logging_config import configure_logging
from loto.middleware.timing import init_request_timing

logger = logging.getLogger(__name__)

migrate = Migrate()


def create_app(config_name=None):
    """Build a configured Flask application.

    Args:
        config_name: "development", "testing" or "production".

    Raises:
        RuntimeError: Production settings are incomplete.
    """
    config_name = config_name or os.getenv("APP_ENV", "development")

    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config[config_name]())

    configure_logging(app)

    db.init_app(app)
    migrate.init_app(app, db)
    origins = app.config.get("CORS_ORIGINS") or ""
    if origins and origins != "*":
        CORS(app, origins=[o.strip() for o in origins.split(",") if o.strip()])
    elif origins == "*":
        CORS(app)

    init_request_timing(app)

    from loto.services.procedure_service import init_history
    init_history(app)

    # Model import registers the tables on db.metadata
    from loto.models import procedure as _procedure_models  # noqa: F401

    # The database is the only store; failing to create it is fatal.
    with app.app_context():
        if app.config["SQLALCHEMY_DATABASE_URI"].startswith("sqlite:///") and not app.testing:
            os.makedirs(app.instance_path, exist_ok=True)
        db.create_all()
        logger.debug("Tables ensured on %s", db.engine.url.render_as_string(hide_password=True))

    from loto.blueprints.health_bp import health_bp
    from loto.blueprints.procedure_bp import procedure_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(procedure_bp)

    _register_cli(app)
    _register_error_handlers(app)
    return app


def _register_cli(app):
    @app.cli.command("seed-demo")
    def seed_demo_cmd():
        """Insert the sample LOTO procedures that are not present yet."""
        from loto.services.demo_seed import seed_demo_procedures

        click.echo(f"Created {seed_demo_procedures()} demo procedures.")

    @app.cli.command("export-procedure")
    @click.argument("procedure_id")
    @click.argument("output", type=click.Path(dir_okay=False, writable=True))
    def export_procedure_cmd(procedure_id, output):
        """Write the filled PDF for PROCEDURE_ID to OUTPUT."""
        from loto.core.exceptions import NotFoundError
        from loto.services import pdf_export_service
        from loto.services.procedure_service import get_procedure

        try:
            procedure = get_procedure(procedure_id)
        except NotFoundError as exc:
            raise click.ClickException(str(exc)) from exc
        data = pdf_export_service.fill_template(procedure, app.config["LOTO_PDF_TEMPLATE"])
        if data is None:
            raise click.ClickException("PDF template not found")
        with open(output, "wb") as fh:
            fh.write(data)
        click.echo(f"Wrote {output} ({len(data)} bytes)")


def _register_error_handlers(app):
    # Blueprint handlers cover service exceptions; these catch routing-level errors.
    @app.errorhandler(404)
    def not_found(e):
        return {"error": "Not found", "code": "ERR_NOT_FOUND", "path": request.path}, 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return {"error": "Method not allowed", "code": "ERR_METHOD"}, 405

    @app.errorhandler(413)
    def too_large(e):
        return {"error": "Request body too large", "code": "ERR_TOO_LARGE"}, 413

    @app.errorhandler(500)
    def server_error(e):
        logger.error("Unhandled server error: %s", e, exc_info=True)
        return {"error": "Internal server error", "code": "ERR_INTERNAL"}, 500
