"""API routes for headset/team bindings."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from arena.services.identity import IdentityStore
from web.api.player_routes import get_identity_store
from web.api.utils import binding_to_dict

router = APIRouter(prefix="/teams", tags=["teams"])


class AssignNickname(BaseModel):
    headsetId: str = Field(min_length=1, max_length=64)
    nickname: str = Field(min_length=1, max_length=20)
    TeamName: str = Field(min_length=1, max_length=30)


@router.post("/assign-nickname")
async def assign_nickname(body: AssignNickname, identity: IdentityStore = Depends(get_identity_store)):
    """Bind a headset to a nickname and team. Re-assigning a headset replaces its binding."""
    binding = await identity.upsert_headset_binding(body.headsetId, body.TeamName, body.nickname)
    return {
        "code": 0,
        "data": {
            "headsetId": binding.headset_id,
            "TeamName": binding.team_name,
            "nickname": binding.nickname,
        },
    }


@router.get("")
async def list_bindings(identity: IdentityStore = Depends(get_identity_store)):
    """Current headset bindings, most recently created first."""
    bindings = await identity.list_bindings()
    return {"code": 0, "data": [binding_to_dict(b) for b in bindings]}
