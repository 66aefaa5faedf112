"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Creates the events table. Owners are identities of the hosted auth
service, so user_id carries no foreign key.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "events",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("sport", sa.String(100), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("venues", sa.JSON, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_events_user_id", "events", ["user_id"])
    op.create_index("ix_events_date", "events", ["date"])


def downgrade() -> None:
    op.drop_index("ix_events_date", table_name="events")
    op.drop_index("ix_events_user_id", table_name="events")
    op.drop_table("events")
