#!/usr/bin/env python3
"""Show DB record counts for the LOTO tables."""
import sys
sys.path.insert(0, ".")

from loto import create_app
from loto.models import db

TABLES = ["procedures", "procedure_sources"]

app = create_app()
with app.app_context():
    total = 0
    for t in TABLES:
        c = db.session.execute(db.text(f"SELECT COUNT(*) FROM {t}")).scalar()
        total += c
        print(f"    {t:.<30} {c}")
    deleted = db.session.execute(
        db.text("SELECT COUNT(*) FROM procedures WHERE deleted = :d"), {"d": True}
    ).scalar()
    print(f"    {'soft-deleted procedures':.<30} {deleted}")
    print(f"    {'TOTAL':.<30} {total}")
