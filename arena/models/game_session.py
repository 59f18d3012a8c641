"""Game session models: one played match with its ordered team entries."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from arena.models.base import Base, utcnow

# Maps available in the arena
MAPS = ("Desert", "Forest", "Urban", "Snow", "Factory")


class GameSession(Base):
    """Append-only match record. There is no updated_at: sessions are never rewritten."""

    __tablename__ = "game_sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    map_played: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    game_duration: Mapped[int] = mapped_column(Integer, nullable=False)  # minutes
    number_of_players: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False, index=True)

    teams: Mapped[list["SessionTeam"]] = relationship(
        "SessionTeam",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="SessionTeam.position",
        lazy="selectin",
    )

    @property
    def duration_hours(self) -> float:
        return round(self.game_duration / 60, 1)


class SessionTeam(Base):
    """Team entry inside a session, in submission order."""

    __tablename__ = "session_teams"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[int] = mapped_column(ForeignKey("game_sessions.id"), nullable=False, index=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    name: Mapped[str] = mapped_column(String(30), nullable=False)
    score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    won: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    session: Mapped["GameSession"] = relationship("GameSession", back_populates="teams")
    members: Mapped[list["SessionTeamPlayer"]] = relationship(
        "SessionTeamPlayer",
        back_populates="team",
        cascade="all, delete-orphan",
        order_by="SessionTeamPlayer.position",
        lazy="selectin",
    )

    @property
    def player_ids(self) -> list[int]:
        return [m.player_id for m in self.members]


class SessionTeamPlayer(Base):
    """Weak reference from a team entry to a player, by id only."""

    __tablename__ = "session_team_players"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    team_id: Mapped[int] = mapped_column(ForeignKey("session_teams.id"), nullable=False, index=True)
    player_id: Mapped[int] = mapped_column(ForeignKey("players.id"), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    team: Mapped["SessionTeam"] = relationship("SessionTeam", back_populates="members")
