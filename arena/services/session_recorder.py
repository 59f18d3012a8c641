"""Session recording workflow and session reads."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from arena.errors import InternalError, NotFound
from arena.models import GameSession, SessionTeam, SessionTeamPlayer
from arena.models.base import utcnow
from arena.services.session_draft import SessionDraft, SessionSubmission
from arena.services.session_resolver import SessionResolver
from arena.services.session_validator import validate_session

logger = logging.getLogger("arena.sessions")


class SessionRecorder:
    """Resolve, validate, then persist. A session is written whole or not at all."""

    def __init__(self, session: AsyncSession, resolver: SessionResolver):
        self.session = session
        self.resolver = resolver

    async def record_resolved(self, submission: SessionSubmission) -> GameSession:
        """Nickname form. Resolution comes first because the player-count rule needs resolved teams."""
        draft = await self.resolver.resolve(submission)
        validate_session(draft)
        return await self._persist(draft)

    async def record_raw(self, draft: SessionDraft) -> GameSession:
        """Raw-team form: names and scores only, no player references."""
        validate_session(draft, require_players=False)
        return await self._persist(draft)

    async def _persist(self, draft: SessionDraft) -> GameSession:
        game = GameSession(
            map_played=draft.map_played,
            game_duration=draft.game_duration,
            number_of_players=draft.number_of_players,
            created_at=utcnow(),
            teams=[
                SessionTeam(
                    position=i,
                    name=team.name.strip(),
                    score=team.score,
                    won=team.won,
                    members=[
                        SessionTeamPlayer(position=j, player_id=player_id)
                        for j, player_id in enumerate(team.player_ids)
                    ],
                )
                for i, team in enumerate(draft.teams)
            ],
        )
        self.session.add(game)
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception("Failed to save game session")
            raise InternalError("Failed to save game session") from e
        logger.info(
            "Recorded session %s: %s, %d min, %d players, %d teams",
            game.id, game.map_played, game.game_duration, game.number_of_players, len(game.teams),
        )
        return game


async def list_sessions(session: AsyncSession) -> list[GameSession]:
    """All sessions, newest first."""
    result = await session.execute(
        select(GameSession).order_by(GameSession.created_at.desc(), GameSession.id.desc())
    )
    return list(result.scalars().all())


async def get_session(session: AsyncSession, session_id: int) -> GameSession:
    game = await session.get(GameSession, session_id)
    if not game:
        raise NotFound("Game session not found", field="id")
    return game


async def query_sessions(
    session: AsyncSession,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    map_played: Optional[str] = None,
    page: int = 1,
    limit: int = 20,
) -> tuple[int, list[GameSession]]:
    """Filtered page of sessions, newest first. Returns (total matching, page rows)."""
    conditions = []
    if start:
        conditions.append(GameSession.created_at >= start)
    if end:
        conditions.append(GameSession.created_at <= end)
    if map_played:
        conditions.append(GameSession.map_played == map_played)
    total = await session.scalar(select(func.count(GameSession.id)).where(*conditions))
    result = await session.execute(
        select(GameSession)
        .where(*conditions)
        .order_by(GameSession.created_at.desc(), GameSession.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return total or 0, list(result.scalars().all())
