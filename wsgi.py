"""
WSGI / Flask-Migrate entry point.

Usage:
    flask --app wsgi db upgrade
    flask --app wsgi seed-demo
    flask --app wsgi run
"""

from loto import create_app

app = create_app()
