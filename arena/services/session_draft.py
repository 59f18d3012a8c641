"""In-memory shapes of a session before it is persisted."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class TeamSubmission:
    """Team as submitted by a client: players named by nickname."""

    players: list[str]
    name: Optional[str] = None
    score: int = 0
    won: bool = False


@dataclass
class SessionSubmission:
    """Nickname-form submission. Missing top-level values get defaults during resolution."""

    teams: list[TeamSubmission]
    map_played: Optional[str] = None
    game_duration: Optional[int] = None
    number_of_players: Optional[int] = None


@dataclass
class TeamDraft:
    name: str
    score: int = 0
    won: bool = False
    player_ids: list[int] = field(default_factory=list)


@dataclass
class SessionDraft:
    """Session with every player reference resolved to a player id."""

    map_played: str
    game_duration: int
    number_of_players: int
    teams: list[TeamDraft] = field(default_factory=list)

    @property
    def resolved_player_count(self) -> int:
        return sum(len(t.player_ids) for t in self.teams)
