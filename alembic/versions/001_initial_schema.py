"""Initial schema for the hydraulic scenario editor

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ==========================================================================
    # SAVED WORKTREES
    # ==========================================================================
    op.create_table(
        "saved_worktrees",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("active_branch_id", sa.String(32), nullable=False),
        sa.Column("branch_count", sa.Integer, nullable=False, server_default="1"),
        sa.Column("layout", sa.JSON, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("idx_saved_worktrees_created_at", "saved_worktrees", ["created_at"])


def downgrade() -> None:
    op.drop_index("idx_saved_worktrees_created_at", table_name="saved_worktrees")
    op.drop_table("saved_worktrees")
