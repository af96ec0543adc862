from __future__ import annotations
from sqlalchemy import ForeignKey, Integer, Index
from sqlalchemy.orm import Mapped, mapped_column
from newsboard.db.base import Base

class Vote(Base):
    __tablename__ = "votes"
    __table_args__ = (Index("ix_votes_user_id", "user_id"),)
    entry_id: Mapped[int] = mapped_column(Integer(), ForeignKey("entries.id", ondelete="CASCADE"), primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer(), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
