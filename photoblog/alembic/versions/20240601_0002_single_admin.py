"""admins: at most one row

Revision ID: 20240601_0002
Revises: 20240501_0001
Create Date: 2024-06-01

"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "20240601_0002"
down_revision = "20240501_0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    # SQLite cannot add a constraint in place; batch mode copies the table.
    with op.batch_alter_table("admins") as batch_op:
        batch_op.add_column(
            sa.Column(
                "singleton",
                sa.Integer(),
                nullable=False,
                server_default=sa.text("1"),
            )
        )
        batch_op.create_unique_constraint("uq_admins_singleton", ["singleton"])


def downgrade() -> None:
    with op.batch_alter_table("admins") as batch_op:
        batch_op.drop_constraint("uq_admins_singleton", type_="unique")
        batch_op.drop_column("singleton")
