from __future__ import annotations
from sqlalchemy import String, Float, Integer
from sqlalchemy.orm import Mapped, mapped_column
from newsboard.db.base import Base

SITE_ID = 1

class Site(Base):
    __tablename__ = "site"
    id: Mapped[int] = mapped_column(Integer(), primary_key=True, default=SITE_ID)
    title: Mapped[str] = mapped_column(String(200), nullable=False, default="newsboard")
    description: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    gravity: Mapped[float] = mapped_column(Float(), nullable=False)
