"""
LOTO Forms Service
SQLAlchemy database instance.

All model modules import ``db`` from here:

    from loto.models import db
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
