"""Database models."""
from arena.models.base import Base, get_async_session, init_db
from arena.models.player import Player
from arena.models.team import TeamAssignment
from arena.models.game_session import MAPS, GameSession, SessionTeam, SessionTeamPlayer
from arena.models.account import Account

__all__ = [
    "Base",
    "Player",
    "TeamAssignment",
    "GameSession",
    "SessionTeam",
    "SessionTeamPlayer",
    "Account",
    "MAPS",
    "get_async_session",
    "init_db",
]
