"""create geoprocessing tasks table

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

from src.setup.store_config import get_task_store_settings

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

_TABLE = get_task_store_settings().TASKS_TABLE
_STATUS = sa.Enum("PENDING", "COMPLETED", "FAILED", name="gp_task_status")


def upgrade() -> None:
    op.create_table(
        _TABLE,
        sa.Column("service", sa.String(128), primary_key=True),
        sa.Column("id", sa.String(256), primary_key=True),
        sa.Column("location", sa.String(512), nullable=False),
        sa.Column("status", _STATUS, nullable=False),
        sa.Column("request_id", sa.String(128)),
        sa.Column("wss", sa.Text()),
        sa.Column("geometry_uri", sa.Text()),
        sa.Column("data", sa.JSON()),
        sa.Column("error", sa.Text()),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
        sa.Column("duration", sa.Integer()),
        sa.Column("estimate", sa.Integer()),
    )
    op.create_index(f"ix_{_TABLE}_updated_at", _TABLE, ["updated_at"])


def downgrade() -> None:
    op.drop_index(f"ix_{_TABLE}_updated_at", table_name=_TABLE)
    op.drop_table(_TABLE)
    _STATUS.drop(op.get_bind(), checkfirst=True)
