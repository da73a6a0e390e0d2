"""Initial schema: admins and photos

Revision ID: 20240501_0001
Revises:
Create Date: 2024-05-01

"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "20240501_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "admins",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(), nullable=False),
        sa.Column("password", sa.String(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
        sa.UniqueConstraint("username", name="uq_admins_username"),
    )

    op.create_table(
        "photos",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("date", sa.String(), nullable=False),
        sa.Column("day", sa.String(), nullable=True),
        sa.Column("image_url", sa.Text(), nullable=False),
        sa.Column("public_id", sa.String(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
    )

    op.create_index("ix_photos_created_at", "photos", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_photos_created_at", table_name="photos")
    op.drop_table("photos")
    op.drop_table("admins")
