"""Identity store: players and headset bindings.

All uniqueness guarantees come from the database constraints on ``players``
and ``team_assignments``; the lookups done before a write only exist to
produce a precise error message. A racing writer that slips past the
lookup still trips the constraint and is reported as a conflict.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from arena.errors import (
    Conflict,
    DuplicateEmail,
    DuplicateNickname,
    NotFound,
    UnknownNickname,
    ValidationError,
)
from arena.models import Player, TeamAssignment
from arena.models.base import utcnow

logger = logging.getLogger("arena.identity")

STATS = ("kills", "deaths")


class IdentityStore:
    """Player and headset-binding persistence over one database session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    # --- Lookup ---

    async def find_player_by_nickname(self, nickname: str) -> Player:
        result = await self.session.execute(select(Player).where(Player.nickname == nickname))
        player = result.scalar_one_or_none()
        if not player:
            raise NotFound("Player not found", field="nickname")
        return player

    async def find_player_by_headset(self, headset_id: str) -> Player:
        result = await self.session.execute(select(Player).where(Player.headset_id == headset_id))
        player = result.scalar_one_or_none()
        if not player:
            raise NotFound("Player not found", field="headsetId")
        return player

    async def player_ids_by_nickname(self, nicknames: list[str]) -> dict[str, int]:
        """Map each known nickname to its player id. Unknown nicknames are simply absent."""
        if not nicknames:
            return {}
        result = await self.session.execute(
            select(Player.nickname, Player.id).where(Player.nickname.in_(set(nicknames)))
        )
        return {nickname: player_id for nickname, player_id in result.all()}

    async def list_players(self) -> list[Player]:
        result = await self.session.execute(
            select(Player).order_by(Player.created_at.desc(), Player.id.desc())
        )
        return list(result.scalars().all())

    async def list_nicknames(self) -> list[str]:
        result = await self.session.execute(select(Player.nickname).order_by(Player.nickname))
        return list(result.scalars().all())

    async def list_players_created_between(self, start: datetime, end: datetime) -> list[Player]:
        result = await self.session.execute(
            select(Player)
            .where(Player.created_at >= start, Player.created_at <= end)
            .order_by(Player.created_at.desc(), Player.id.desc())
        )
        return list(result.scalars().all())

    async def list_bindings(self) -> list[TeamAssignment]:
        result = await self.session.execute(
            select(TeamAssignment).order_by(TeamAssignment.created_at.desc(), TeamAssignment.id.desc())
        )
        return list(result.scalars().all())

    # --- Mutation ---

    async def create_player(
        self,
        *,
        nickname: str,
        name: str,
        lastname: str,
        email: str,
        age: int,
        phone: str,
        region: str,
    ) -> Player:
        """Register a player. Raises DuplicateNickname or DuplicateEmail."""
        nickname = nickname.strip()
        email = email.strip().lower()
        await self._ensure_unique(nickname, email)
        player = Player(
            nickname=nickname,
            name=name.strip(),
            lastname=lastname.strip(),
            email=email,
            age=age,
            phone=phone,
            region=region.strip(),
            kills=0,
            deaths=0,
        )
        self.session.add(player)
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            # Lost a race with a concurrent registration; report which key collided
            await self._ensure_unique(nickname, email)
            raise Conflict("Player already exists")
        await self.session.refresh(player)
        logger.info("Registered player %s", player.nickname)
        return player

    async def _ensure_unique(self, nickname: str, email: str) -> None:
        existing = await self.session.execute(select(Player.id).where(Player.nickname == nickname))
        if existing.first():
            raise DuplicateNickname(nickname)
        existing = await self.session.execute(select(Player.id).where(Player.email == email))
        if existing.first():
            raise DuplicateEmail(email)

    async def increment_stat(self, nickname: str, stat: str) -> int:
        """Atomically add one to kills or deaths and return the new value."""
        if stat not in STATS:
            raise ValidationError("stat", f"Unknown stat: {stat}")
        column = getattr(Player, stat)
        result = await self.session.execute(
            update(Player)
            .where(Player.nickname == nickname)
            .values({column: column + 1, Player.updated_at: utcnow()})
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await self.session.rollback()
            raise NotFound("Player not found", field="nickname")
        value = await self.session.scalar(select(column).where(Player.nickname == nickname))
        await self.session.commit()
        return value or 0

    async def upsert_headset_binding(self, headset_id: str, team_name: str, nickname: str) -> TeamAssignment:
        """Bind a headset to a team and nickname, replacing any previous binding for that headset.

        The player record is updated to carry the headset and team. Two concurrent
        assignments for the same headset resolve last-write-wins.
        """
        try:
            return await self._upsert_headset_binding(headset_id, team_name, nickname)
        except IntegrityError:
            # A concurrent first assignment created the row between our lookup and insert
            await self.session.rollback()
            logger.info("Headset %s binding raced, retrying as update", headset_id)
            return await self._upsert_headset_binding(headset_id, team_name, nickname)

    async def _upsert_headset_binding(self, headset_id: str, team_name: str, nickname: str) -> TeamAssignment:
        result = await self.session.execute(select(Player).where(Player.nickname == nickname))
        player = result.scalar_one_or_none()
        if not player:
            raise UnknownNickname(nickname)
        now = utcnow()
        result = await self.session.execute(
            select(TeamAssignment).where(TeamAssignment.headset_id == headset_id)
        )
        binding = result.scalar_one_or_none()
        if binding:
            binding.team_name = team_name
            binding.nickname = nickname
            binding.last_updated = now
        else:
            binding = TeamAssignment(
                headset_id=headset_id,
                team_name=team_name,
                nickname=nickname,
                created_at=now,
                last_updated=now,
            )
            self.session.add(binding)
        # The headset moves: whoever wore it before no longer does
        await self.session.execute(
            update(Player)
            .where(Player.headset_id == headset_id, Player.id != player.id)
            .values(headset_id=None, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        player.headset_id = headset_id
        player.team_name = team_name
        await self.session.commit()
        await self.session.refresh(binding)
        logger.info("Headset %s bound to %s (%s)", headset_id, nickname, team_name)
        return binding

    async def rename_by_headset(self, headset_id: str, nickname: Optional[str]) -> Player:
        """Change the nickname of whoever currently wears the headset."""
        player = await self.find_player_by_headset(headset_id)
        nickname = (nickname or "").strip()
        if not nickname:
            raise ValidationError("nickname", "Missing required field: nickname")
        if nickname == player.nickname:
            return player
        existing = await self.session.execute(select(Player.id).where(Player.nickname == nickname))
        if existing.first():
            raise DuplicateNickname(nickname)
        old = player.nickname
        player.nickname = nickname
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise DuplicateNickname(nickname) from e
        await self.session.refresh(player)
        logger.info("Headset %s renamed %s -> %s", headset_id, old, nickname)
        return player
