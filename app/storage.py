"""
Saved worktree layouts.

Each row holds one JSON layout produced by ``dump_layout``.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, String, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SavedWorktree(Base):
    """A persisted editor session."""

    __tablename__ = "saved_worktrees"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    active_branch_id: Mapped[str] = mapped_column(String(32), nullable=False)
    branch_count: Mapped[int] = mapped_column(nullable=False, default=1)
    layout: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)


async def save_layout(db: AsyncSession, name: str, layout: dict[str, Any]) -> SavedWorktree:
    """Insert a layout and return the stored row."""
    row = SavedWorktree(
        id=uuid.uuid4().hex,
        name=name,
        active_branch_id=layout["active_branch_id"],
        branch_count=len(layout["branches"]),
        layout=layout,
        created_at=_utcnow(),
    )
    db.add(row)
    await db.commit()
    return row


async def get_saved_layout(db: AsyncSession, saved_id: str) -> Optional[SavedWorktree]:
    result = await db.execute(select(SavedWorktree).where(SavedWorktree.id == saved_id))
    return result.scalar_one_or_none()


async def list_saved_layouts(db: AsyncSession) -> list[SavedWorktree]:
    result = await db.execute(select(SavedWorktree).order_by(SavedWorktree.created_at.desc()))
    return list(result.scalars())
