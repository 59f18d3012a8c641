"""Headset binding model: which team and nickname a physical headset belongs to."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from arena.models.base import Base, utcnow


class TeamAssignment(Base):
    """Live binding for one headset. Not a roster: reassigning the headset overwrites the row."""

    __tablename__ = "team_assignments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    headset_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    team_name: Mapped[str] = mapped_column(String(30), nullable=False)
    nickname: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    last_updated: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
