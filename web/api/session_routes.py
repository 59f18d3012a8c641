"""API routes for recording game sessions and reading session statistics."""
from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Any, Optional

import pydantic
from fastapi import APIRouter, Body, Depends, Query
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from arena.errors import NotFound, ValidationError
from arena.models import Account, get_async_session
from arena.services.identity import IdentityStore
from arena.services.session_draft import SessionDraft, SessionSubmission, TeamDraft, TeamSubmission
from arena.services.session_recorder import (
    SessionRecorder,
    get_session,
    list_sessions,
    query_sessions,
)
from arena.services.session_resolver import SessionResolver
from arena.services import stats
from web.api.utils import describe_validation_errors, session_to_dict
from web.auth import require_admin_account

logger = logging.getLogger("arena.sessions")

router = APIRouter(prefix="/api/game-sessions", tags=["game-sessions"])
admin_router = APIRouter(prefix="/api/admin/sessions", tags=["admin"])


# --- Pydantic schemas ---


class RawTeamIn(BaseModel):
    name: str = Field(strict=True)
    score: Optional[int] = Field(None, strict=True)


class RawSessionCreate(BaseModel):
    """Raw-team form: every top-level field required, teams carry names and scores only."""

    model_config = ConfigDict(populate_by_name=True)

    map_played: str = Field(alias="mapPlayed")
    game_duration: int = Field(alias="gameDuration", strict=True)
    number_of_players: int = Field(alias="numberOfPlayers", strict=True)
    teams: list[RawTeamIn]


class NicknameTeamIn(BaseModel):
    name: Optional[str] = None
    players: list[str]
    score: Optional[int] = Field(None, strict=True)
    won: Optional[bool] = None


class NicknameSessionCreate(BaseModel):
    """Nickname form: players named by nickname, top-level fields defaulted when absent."""

    model_config = ConfigDict(populate_by_name=True)

    map_played: Optional[str] = Field(None, alias="mapPlayed")
    game_duration: Optional[int] = Field(None, alias="gameDuration", strict=True)
    number_of_players: Optional[int] = Field(None, alias="numberOfPlayers", strict=True)
    teams: list[NicknameTeamIn]


def _parse(model: type[BaseModel], body: Any) -> BaseModel:
    try:
        return model.model_validate(body)
    except pydantic.ValidationError as e:
        field, message = describe_validation_errors(e.errors())
        raise ValidationError(field or "body", message) from e


def _uses_nicknames(body: dict) -> bool:
    teams = body.get("teams")
    if not isinstance(teams, list):
        return False
    return any(isinstance(t, dict) and "players" in t for t in teams)


def get_recorder(db: AsyncSession = Depends(get_async_session)) -> SessionRecorder:
    return SessionRecorder(db, SessionResolver(IdentityStore(db)))


async def _record_raw(body: dict, recorder: SessionRecorder):
    data = _parse(RawSessionCreate, body)
    draft = SessionDraft(
        map_played=data.map_played,
        game_duration=data.game_duration,
        number_of_players=data.number_of_players,
        teams=[TeamDraft(name=t.name, score=t.score or 0) for t in data.teams],
    )
    return await recorder.record_raw(draft)


async def _record_by_nickname(body: dict, recorder: SessionRecorder):
    data = _parse(NicknameSessionCreate, body)
    submission = SessionSubmission(
        map_played=data.map_played,
        game_duration=data.game_duration,
        number_of_players=data.number_of_players,
        teams=[
            TeamSubmission(players=t.players, name=t.name, score=t.score or 0, won=bool(t.won))
            for t in data.teams
        ],
    )
    return await recorder.record_resolved(submission)


def _created(game) -> dict:
    return {
        "success": True,
        "message": "Game session created successfully",
        "session": session_to_dict(game),
    }


# --- Recording ---


@router.post("", status_code=201)
async def create_session(
    body: dict[str, Any] = Body(...),
    recorder: SessionRecorder = Depends(get_recorder),
):
    """Create a session. Teams carrying a ``players`` list go through nickname resolution."""
    if _uses_nicknames(body):
        game = await _record_by_nickname(body, recorder)
    else:
        game = await _record_raw(body, recorder)
    return _created(game)


@router.post("/by-nickname", status_code=201)
async def create_session_by_nickname(
    body: dict[str, Any] = Body(...),
    recorder: SessionRecorder = Depends(get_recorder),
):
    """Create a session from nicknames only. Every nickname must resolve or nothing is written."""
    game = await _record_by_nickname(body, recorder)
    return _created(game)


# --- Reads ---


@router.get("")
async def get_sessions(db: AsyncSession = Depends(get_async_session)):
    """All sessions, newest first."""
    sessions = await list_sessions(db)
    return {
        "success": True,
        "count": len(sessions),
        "sessions": [session_to_dict(s) for s in sessions],
    }


@router.get("/stats")
async def get_stats(db: AsyncSession = Depends(get_async_session)):
    """Totals and map distribution over every recorded session."""
    sessions = await list_sessions(db)
    return {"success": True, "stats": stats.session_totals(sessions)}


@router.get("/reports/maps")
async def get_map_report(db: AsyncSession = Depends(get_async_session)):
    """Per-map rollup, most played first."""
    rows = stats.map_rollup(await list_sessions(db))
    if not rows:
        raise NotFound("No map data found")
    return {"success": True, "rows": rows}


@router.get("/reports/daily")
async def get_daily_report(db: AsyncSession = Depends(get_async_session)):
    """Per-day rollup, newest day first."""
    rows = stats.daily_rollup(await list_sessions(db))
    if not rows:
        raise NotFound("No daily data found")
    return {"success": True, "rows": rows}


@router.get("/{session_id}")
async def get_one_session(session_id: int, db: AsyncSession = Depends(get_async_session)):
    game = await get_session(db, session_id)
    return {"success": True, "session": session_to_dict(game)}


# --- Admin ---


@admin_router.get("")
async def admin_list_sessions(
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to"),
    map_played: Optional[str] = Query(None, alias="map"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=200),
    account: Account = Depends(require_admin_account),
    db: AsyncSession = Depends(get_async_session),
):
    """Filtered, paginated session listing for operators."""
    start = datetime.combine(date_from, time.min) if date_from else None
    end = datetime.combine(date_to, time.max) if date_to else None
    total, sessions = await query_sessions(db, start, end, map_played, page, limit)
    logger.debug("%s listed sessions map=%s page=%d: %d of %d", account.username, map_played, page, len(sessions), total)
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "sessions": [session_to_dict(s) for s in sessions],
    }
