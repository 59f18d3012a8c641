"""Turn a nickname-form session submission into a draft of player ids."""
from __future__ import annotations

import logging
import random
import string
from typing import Optional

from arena.errors import UnknownPlayer
from arena.services.identity import IdentityStore
from arena.services.session_draft import SessionDraft, SessionSubmission, TeamDraft

logger = logging.getLogger("arena.sessions")

DEFAULT_MAP = "Desert"
DEFAULT_DURATION = 30
TEAM_NAME_PREFIX = "Team "
_LABEL_ALPHABET = string.ascii_lowercase + string.digits


def synthesize_team_name(rng: Optional[random.Random] = None) -> str:
    """Short throwaway label for an unnamed team. Not unique across sessions."""
    rng = rng or random
    return TEAM_NAME_PREFIX + "".join(rng.choice(_LABEL_ALPHABET) for _ in range(3))


class SessionResolver:
    """Resolves every nickname before anything is written. One unknown nickname rejects the whole submission."""

    def __init__(self, identity: IdentityStore, rng: Optional[random.Random] = None):
        self.identity = identity
        self.rng = rng

    async def resolve(self, submission: SessionSubmission) -> SessionDraft:
        wanted = [n.strip() for team in submission.teams for n in team.players]
        known = await self.identity.player_ids_by_nickname(wanted)

        teams: list[TeamDraft] = []
        # Team-major, player-minor: the first unknown in this order is the one reported
        for team in submission.teams:
            player_ids = []
            for nickname in team.players:
                player_id = known.get(nickname.strip())
                if player_id is None:
                    logger.info("Session rejected: unknown player %r", nickname)
                    raise UnknownPlayer(nickname)
                player_ids.append(player_id)
            teams.append(
                TeamDraft(
                    name=team.name if team.name else synthesize_team_name(self.rng),
                    score=team.score or 0,
                    won=bool(team.won),
                    player_ids=player_ids,
                )
            )

        number_of_players = submission.number_of_players
        if not number_of_players:
            number_of_players = sum(len(t.player_ids) for t in teams)
        return SessionDraft(
            map_played=submission.map_played or DEFAULT_MAP,
            game_duration=submission.game_duration or DEFAULT_DURATION,
            number_of_players=number_of_players,
            teams=teams,
        )
