"""initial

Revision ID: 5b1c0a2e7d94
Revises:
Create Date: 2026-10-17 10:12:41.318204

"""

import sqlalchemy as sa
from alembic import op

from todo_api.types.sqlalchemy import TZDateTime

# revision identifiers, used by Alembic.
revision = "5b1c0a2e7d94"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "core_user",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("created_on", TZDateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_core_user_id"), "core_user", ["id"], unique=False)
    op.create_index(op.f("ix_core_user_email"), "core_user", ["email"], unique=True)

    op.create_table(
        "core_user_token",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("access", sa.String(), nullable=False),
        sa.Column("token", sa.String(), nullable=False),
        sa.Column("created_on", TZDateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["core_user.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_core_user_token_user_id"),
        "core_user_token",
        ["user_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_core_user_token_token"),
        "core_user_token",
        ["token"],
        unique=False,
    )

    op.create_table(
        "todo",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("text", sa.String(), nullable=False),
        sa.Column("completed", sa.Boolean(), nullable=False),
        sa.Column("completed_at", TZDateTime(), nullable=True),
        sa.Column("owner_id", sa.String(), nullable=False),
        sa.ForeignKeyConstraint(["owner_id"], ["core_user.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_todo_owner_id"), "todo", ["owner_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_todo_owner_id"), table_name="todo")
    op.drop_table("todo")
    op.drop_index(op.f("ix_core_user_token_token"), table_name="core_user_token")
    op.drop_index(op.f("ix_core_user_token_user_id"), table_name="core_user_token")
    op.drop_table("core_user_token")
    op.drop_index(op.f("ix_core_user_email"), table_name="core_user")
    op.drop_index(op.f("ix_core_user_id"), table_name="core_user")
    op.drop_table("core_user")
