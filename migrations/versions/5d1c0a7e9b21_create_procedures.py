"""create_procedures

Creates the LOTO form tables:
  - procedures: one row per Lockout/Tagout procedure (soft-deletable)
  - procedure_sources: energy sources owned by a procedure (0..8, ordered)

Tables created conditionally (IF NOT EXISTS semantics) to support idempotent
execution against databases that already received these tables via
db.create_all() in a development environment.

Revision ID: 5d1c0a7e9b21
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect as sa_inspect


# revision identifiers, used by Alembic.
revision = "5d1c0a7e9b21"
down_revision = None
branch_labels = None
depends_on = None

STATUS = sa.Enum("IN_PROGRESS", "AWAITING_APPROVAL", "COMPLETED", name="procedure_status")
FAVORITE = sa.Enum("NOT_FAVORITE", "IS_FAVORITE", name="procedure_favorite")
SOURCE_TYPE = sa.Enum(
    "ELECTRICAL", "AIR", "WATER", "GAS", "GRAVITY", "OTHER", name="source_type",
)


def upgrade():
    bind = op.get_bind()
    inspector = sa_inspect(bind)
    existing_tables = set(inspector.get_table_names())

    if "procedures" not in existing_tables:
        op.create_table(
            "procedures",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("form_name", sa.String(length=200), nullable=False),
            sa.Column("form_description", sa.Text(), nullable=False),
            sa.Column("procedure_number", sa.String(length=3), nullable=False),
            sa.Column("facility", sa.String(length=200), nullable=False),
            sa.Column("location", sa.String(length=200), nullable=False),
            sa.Column("revision", sa.String(length=1), nullable=False),
            sa.Column("revision_date", sa.Date(), nullable=False),
            sa.Column("origin_date", sa.Date(), nullable=False),
            sa.Column("isolation_points", sa.String(length=1), nullable=False),
            sa.Column("notes", sa.Text(), nullable=False),
            sa.Column("machine_stop_sequence", sa.Text(), nullable=False),
            sa.Column("isolate_sequence", sa.Text(), nullable=False),
            sa.Column("additional_notes", sa.Text(), nullable=False),
            sa.Column("completed_by", sa.String(length=200), nullable=False),
            sa.Column("approved_by", sa.String(length=200), nullable=False),
            sa.Column("approved_by_company", sa.String(length=200), nullable=False),
            sa.Column("approval_date", sa.Date(), nullable=False),
            sa.Column("status", STATUS, nullable=False),
            sa.Column("favorite", FAVORITE, nullable=False),
            sa.Column("date_added", sa.DateTime(), nullable=False),
            sa.Column("date_edited", sa.DateTime(), nullable=False),
            sa.Column("deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_procedures_deleted", "procedures", ["deleted"])

    if "procedure_sources" not in existing_tables:
        op.create_table(
            "procedure_sources",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("procedure_id", sa.String(length=36), nullable=False),
            sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("source_id", sa.String(length=200), nullable=False),
            sa.Column("source_type", SOURCE_TYPE, nullable=False),
            sa.Column("source_device", sa.String(length=200), nullable=False),
            sa.Column("source_location", sa.String(length=200), nullable=False),
            sa.Column("source_method", sa.Text(), nullable=False),
            sa.Column("source_check", sa.Text(), nullable=False),
            sa.Column("source_photo", sa.LargeBinary(), nullable=True),
            sa.ForeignKeyConstraint(["procedure_id"], ["procedures.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(
            "ix_procedure_sources_procedure_id", "procedure_sources", ["procedure_id"],
        )


def downgrade():
    bind = op.get_bind()
    inspector = sa_inspect(bind)
    existing_tables = set(inspector.get_table_names())

    if "procedure_sources" in existing_tables:
        op.drop_index("ix_procedure_sources_procedure_id", table_name="procedure_sources")
        op.drop_table("procedure_sources")
    if "procedures" in existing_tables:
        op.drop_index("ix_procedures_deleted", table_name="procedures")
        op.drop_table("procedures")
