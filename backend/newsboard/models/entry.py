from __future__ import annotations
from datetime import datetime
from enum import Enum
from sqlalchemy import String, DateTime, ForeignKey, Integer, Text, Index
from sqlalchemy.orm import Mapped, mapped_column
from newsboard.db.base import Base

class EntryKind(str, Enum):
    SUBMISSION = "submission"
    COMMENT = "comment"
    UPLOAD = "upload"

class Entry(Base):
    __tablename__ = "entries"
    __table_args__ = (
        Index("ix_entries_parent_id", "parent_id"),
        Index("ix_entries_kind_created_at", "kind", "created_at"),
    )
    id: Mapped[int] = mapped_column(Integer(), primary_key=True, autoincrement=True)
    kind: Mapped[str] = mapped_column(String(16), nullable=False, default=EntryKind.SUBMISSION.value)  # submission|comment|upload
    title: Mapped[str] = mapped_column(String(300), nullable=False, default="")
    url: Mapped[str] = mapped_column(String(2000), nullable=False, default="")
    body: Mapped[str] = mapped_column(Text(), nullable=False, default="")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    author_id: Mapped[int] = mapped_column(Integer(), ForeignKey("users.id"), nullable=False)
    # NULL for top-level submissions
    parent_id: Mapped[int | None] = mapped_column(Integer(), ForeignKey("entries.id"), nullable=True)
