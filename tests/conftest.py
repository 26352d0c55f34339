"""
Shared pytest fixtures for the LOTO Forms test suite.

Provides:
    - app: Flask application (session-scoped)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test DB cleanup w/ rollback + recreate (autouse)
    - client: Flask test client (function-scoped)
    - pdf_template: Fillable template written to tmp_path and wired into config
    - make_procedure: Factory for persisted procedures via the service layer
"""

import pytest

from loto import create_app
from loto.models import db as _db
from loto.services.procedure_service import get_history


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    application = create_app("testing")
    return application


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        # The deletion history is process-wide; ids must not leak across tests.
        get_history().clear()
        yield
        get_history().clear()
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


# ── Convenience fixtures ─────────────────────────────────────────────────


@pytest.fixture()
def pdf_template(app, tmp_path):
    """Build a fillable template and point LOTO_PDF_TEMPLATE at it."""
    from loto.services.pdf_template import build_template

    path = tmp_path / "LOTO.pdf"
    build_template(str(path))
    previous = app.config["LOTO_PDF_TEMPLATE"]
    app.config["LOTO_PDF_TEMPLATE"] = str(path)
    yield str(path)
    app.config["LOTO_PDF_TEMPLATE"] = previous


@pytest.fixture()
def make_procedure():
    """Return a factory creating procedures through the service layer."""
    from loto.services import procedure_service

    def _make(**overrides):
        payload = {"form_name": "Conveyor Line 1"}
        payload.update(overrides)
        return procedure_service.create_procedure(payload)

    return _make
