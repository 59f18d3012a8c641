"""API routes for player registration, lookup and kill/death tracking."""
from __future__ import annotations

import re
from datetime import date, datetime, time

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, field_validator
from sqlalchemy.ext.asyncio import AsyncSession

from arena.errors import ValidationError
from arena.models import get_async_session
from arena.services.identity import IdentityStore
from arena.services.stats import player_performance, player_score
from web.api.utils import player_to_dict

router = APIRouter(prefix="/players", tags=["players"])

NICKNAME_RE = re.compile(r"^[a-zA-Z0-9_]+$")
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^\d{8,15}$")


def get_identity_store(db: AsyncSession = Depends(get_async_session)) -> IdentityStore:
    return IdentityStore(db)


# --- Pydantic schemas ---


class PlayerCreate(BaseModel):
    nickname: str
    name: str
    lastname: str
    email: str
    age: int
    phone: str
    region: str

    @field_validator("nickname")
    @classmethod
    def check_nickname(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Nickname is required")
        if len(v) > 20:
            raise ValueError("Nickname too long")
        if not NICKNAME_RE.match(v):
            raise ValueError("Nickname can only contain letters, numbers and underscores")
        return v

    @field_validator("name", "lastname")
    @classmethod
    def check_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Field is required")
        if len(v) > 50:
            raise ValueError("Too long (max 50 chars)")
        return v

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        v = v.strip().lower()
        if not EMAIL_RE.match(v):
            raise ValueError("Invalid email format")
        return v

    @field_validator("age")
    @classmethod
    def check_age(cls, v: int) -> int:
        if v < 13:
            raise ValueError("Player must be at least 13 years old")
        if v > 100:
            raise ValueError("Age must be reasonable")
        return v

    @field_validator("phone", mode="before")
    @classmethod
    def check_phone(cls, v):
        # Unity clients sometimes send the phone as a number
        if isinstance(v, int) and not isinstance(v, bool):
            v = str(v)
        if isinstance(v, str) and not PHONE_RE.match(v.strip()):
            raise ValueError("Phone must be 8-15 digits")
        return v.strip() if isinstance(v, str) else v

    @field_validator("region")
    @classmethod
    def check_region(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Region is required")
        return v


class HeadsetRename(BaseModel):
    headsetId: str
    nickname: str


# --- Registration and listing ---


@router.post("/add", status_code=201)
async def add_player(body: PlayerCreate, identity: IdentityStore = Depends(get_identity_store)):
    """Register a player. Nickname and email must both be unused."""
    player = await identity.create_player(**body.model_dump())
    return {"code": 0, "data": player_to_dict(player)}


@router.get("")
async def list_players(identity: IdentityStore = Depends(get_identity_store)):
    """All players, newest first."""
    players = await identity.list_players()
    return {"code": 0, "data": [player_to_dict(p) for p in players]}


@router.get("/nicknames")
async def list_nicknames(identity: IdentityStore = Depends(get_identity_store)):
    return {"code": 0, "data": await identity.list_nicknames()}


@router.get("/by-date")
async def players_by_date(
    date_from: date = Query(..., alias="from"),
    date_to: date = Query(..., alias="to"),
    identity: IdentityStore = Depends(get_identity_store),
):
    """Players registered between two dates, both days inclusive."""
    if date_to < date_from:
        raise ValidationError("to", "Date range end is before its start")
    players = await identity.list_players_created_between(
        datetime.combine(date_from, time.min),
        datetime.combine(date_to, time.max),
    )
    return {"code": 0, "data": [player_to_dict(p) for p in players]}


@router.get("/nickname/{nickname}")
async def get_player_by_nickname(nickname: str, identity: IdentityStore = Depends(get_identity_store)):
    player = await identity.find_player_by_nickname(nickname)
    return {"code": 0, "data": player_to_dict(player)}


@router.get("/by-headset/{headset_id}")
async def get_player_by_headset(headset_id: str, identity: IdentityStore = Depends(get_identity_store)):
    player = await identity.find_player_by_headset(headset_id)
    return {"code": 0, "data": player_to_dict(player)}


@router.post("/update-by-headset")
async def update_by_headset(body: HeadsetRename, identity: IdentityStore = Depends(get_identity_store)):
    """Rename whoever currently wears the headset."""
    player = await identity.rename_by_headset(body.headsetId, body.nickname)
    return {"success": True, "data": {"headsetId": player.headset_id, "nickname": player.nickname}}


# --- Stats ---


@router.get("/{nickname}/score")
async def get_score(nickname: str, identity: IdentityStore = Depends(get_identity_store)):
    """Kill/death ratio, recomputed from the current counters."""
    player = await identity.find_player_by_nickname(nickname)
    return {"code": 0, "score": player_score(player.kills, player.deaths)}


@router.get("/{nickname}/deaths")
async def get_deaths(nickname: str, identity: IdentityStore = Depends(get_identity_store)):
    player = await identity.find_player_by_nickname(nickname)
    return {"code": 0, "deaths": player.deaths or 0}


@router.get("/{nickname}/performance")
async def get_performance(nickname: str, identity: IdentityStore = Depends(get_identity_store)):
    player = await identity.find_player_by_nickname(nickname)
    return {"code": 0, "data": {"nickname": player.nickname, **player_performance(player.kills, player.deaths)}}


async def _increment(identity: IdentityStore, nickname: str, stat: str) -> dict:
    value = await identity.increment_stat(nickname, stat)
    return {"code": 0, stat: value, "msg": f"{stat} incremented successfully"}


@router.post("/{nickname}/increment-kills")
async def increment_kills(nickname: str, identity: IdentityStore = Depends(get_identity_store)):
    return await _increment(identity, nickname, "kills")


@router.post("/{nickname}/increment-deaths")
async def increment_deaths(nickname: str, identity: IdentityStore = Depends(get_identity_store)):
    return await _increment(identity, nickname, "deaths")
