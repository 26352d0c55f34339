"""
Configuration objects for ``create_app``.

``APP_ENV`` picks one of the classes in ``config``; individual settings
come from environment variables with local-development defaults.
"""

import os
import secrets

basedir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))

_DEV_DB = "sqlite:///" + os.path.join(basedir, "instance", "loto_dev.db")
_TEMPLATE = os.path.join(os.path.dirname(__file__), "assets", "LOTO.pdf")


def _database_url(default):
    raw = os.getenv("DATABASE_URL", "")
    # SQLAlchemy 2 only accepts the postgresql:// scheme
    return raw.replace("postgres://", "postgresql://", 1) if raw else default


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY") or secrets.token_hex(32)
    DEBUG = False
    TESTING = False

    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True}

    # Comma-separated list, or "*" for any origin
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")

    # Pre-formatted fillable form used by the PDF export
    LOTO_PDF_TEMPLATE = os.getenv("LOTO_PDF_TEMPLATE", _TEMPLATE)
    # Longest edge, in pixels, of generated photo previews
    LOTO_PHOTO_PREVIEW_SIZE = int(os.getenv("LOTO_PHOTO_PREVIEW_SIZE", "320"))

    # Photos travel base64-encoded in JSON bodies
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_CONTENT_LENGTH", str(16 * 1024 * 1024)))


class DevelopmentConfig(Config):
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = _database_url(_DEV_DB)


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")


class ProductionConfig(Config):
    SQLALCHEMY_DATABASE_URI = _database_url(None)
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "")

    def __init__(self):
        if not self.SQLALCHEMY_DATABASE_URI:
            raise RuntimeError("DATABASE_URL must be set in production")
        if not os.getenv("SECRET_KEY"):
            raise RuntimeError("SECRET_KEY must be set in production")


config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}
