"""Users and tasks collections.

Revision ID: 001_users_and_tasks
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_users_and_tasks"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("email", sa.Text, nullable=False),
        sa.Column("pending_tasks", sa.JSON, nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # no foreign key on assigned_user: the service layer owns the relationship
    op.create_table(
        "tasks",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("description", sa.Text, nullable=False, server_default=""),
        sa.Column("deadline", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("assigned_user", sa.String(36), nullable=False, server_default=""),
        sa.Column(
            "assigned_user_name", sa.Text, nullable=False,
            server_default="unassigned",
        ),
    )
    op.create_index("ix_tasks_assigned_user", "tasks", ["assigned_user"])


def downgrade() -> None:
    op.drop_index("ix_tasks_assigned_user", table_name="tasks")
    op.drop_table("tasks")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
