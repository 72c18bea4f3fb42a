"""Herd schema — lots, pens, pigs, pig_changes.

Revision ID: 001_herd_schema
Revises: None
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_herd_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "lots",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("code", sa.String(32), nullable=False),
        sa.Column("admission_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("admission_week", sa.Integer, nullable=True),
        sa.Column("initial_count", sa.Integer, nullable=False),
        sa.Column("current_live_count", sa.Integer, nullable=False),
        sa.Column("initial_average_weight", sa.Float, nullable=False),
        sa.Column("initial_min_weight", sa.Float, nullable=False),
        sa.Column("initial_max_weight", sa.Float, nullable=False),
        sa.Column("site", sa.String(16), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="ACTIVE"),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("finalized_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("initial_count > 0", name="ck_lots_initial_count_positive"),
        sa.CheckConstraint(
            "current_live_count >= 0 AND current_live_count <= initial_count",
            name="ck_lots_live_count_bounds",
        ),
        sa.CheckConstraint("site IN ('NURSERY', 'FINISHING')", name="ck_lots_site"),
        sa.CheckConstraint("status IN ('ACTIVE', 'FINALIZED')", name="ck_lots_status"),
    )
    op.create_index("ix_lots_code", "lots", ["code"], unique=True)
    op.create_index("ix_lots_status", "lots", ["status"])

    op.create_table(
        "pens",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("number", sa.String(16), nullable=False),
        sa.Column("lot_id", UUID(as_uuid=True), sa.ForeignKey("lots.id"), nullable=False),
        sa.Column("capacity", sa.Integer, nullable=False),
        sa.Column("occupancy", sa.Integer, nullable=False, server_default="0"),
        sa.Column("average_weight", sa.Float, nullable=False, server_default="0"),
        sa.Column("pen_type", sa.String(16), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("id", "lot_id", name="uq_pens_id_lot"),
        sa.CheckConstraint("capacity > 0", name="ck_pens_capacity_positive"),
        sa.CheckConstraint(
            "occupancy >= 0 AND occupancy <= capacity", name="ck_pens_occupancy_bounds",
        ),
        sa.CheckConstraint(
            "pen_type IN ('NURSERY', 'FINISHING', 'INFIRMARY')", name="ck_pens_type",
        ),
    )
    op.create_index("ix_pens_number", "pens", ["number"], unique=True)
    op.create_index("ix_pens_lot_id", "pens", ["lot_id"])

    op.create_table(
        "pigs",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("tag", sa.String(32), nullable=False),
        sa.Column("lot_id", UUID(as_uuid=True), sa.ForeignKey("lots.id"), nullable=False),
        sa.Column("pen_id", UUID(as_uuid=True), nullable=False),
        sa.Column("initial_weight", sa.Float, nullable=False),
        sa.Column("current_weight", sa.Float, nullable=False),
        sa.Column("admission_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("week_of_life", sa.Integer, nullable=True),
        sa.Column("state", sa.String(16), nullable=False, server_default="ACTIVE"),
        sa.Column("last_weighed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(
            ["pen_id", "lot_id"], ["pens.id", "pens.lot_id"], name="fk_pigs_pen_same_lot",
        ),
        sa.CheckConstraint("initial_weight > 0", name="ck_pigs_initial_weight_positive"),
        sa.CheckConstraint("current_weight > 0", name="ck_pigs_current_weight_positive"),
        sa.CheckConstraint("state IN ('ACTIVE', 'SICK', 'SOLD', 'DEAD')", name="ck_pigs_state"),
    )
    op.create_index("ix_pigs_tag", "pigs", ["tag"], unique=True)
    op.create_index("ix_pigs_lot_id", "pigs", ["lot_id"])
    op.create_index("ix_pigs_pen_id", "pigs", ["pen_id"])
    op.create_index("ix_pigs_state", "pigs", ["state"])

    op.create_table(
        "pig_changes",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "pig_id", UUID(as_uuid=True),
            sa.ForeignKey("pigs.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("sequence", sa.Integer, nullable=False),
        sa.Column("recorded_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("field", sa.String(16), nullable=False),
        sa.Column("old_value", sa.JSON, nullable=True),
        sa.Column("new_value", sa.JSON, nullable=False),
        sa.Column("note", sa.Text, nullable=True),
        sa.UniqueConstraint("pig_id", "sequence", name="uq_pig_changes_pig_sequence"),
    )
    op.create_index("ix_pig_changes_pig_id", "pig_changes", ["pig_id"])


def downgrade() -> None:
    op.drop_table("pig_changes")
    op.drop_table("pigs")
    op.drop_table("pens")
    op.drop_table("lots")
