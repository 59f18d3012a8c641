"""Shared API utilities: record serialization and error message formatting."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from arena.models import GameSession, Player, TeamAssignment
from arena.services.stats import player_score

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
_LOC_SOURCES = ("body", "query", "path")


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.strftime(TIMESTAMP_FORMAT)


def player_to_dict(player: Player) -> dict:
    return {
        "id": player.id,
        "nickname": player.nickname,
        "name": player.name,
        "lastname": player.lastname,
        "email": player.email,
        "age": player.age,
        "phone": player.phone,
        "region": player.region,
        "kills": player.kills,
        "deaths": player.deaths,
        "score": player_score(player.kills, player.deaths),
        "headsetId": player.headset_id,
        "TeamName": player.team_name,
        "createdAt": format_timestamp(player.created_at),
        "updatedAt": format_timestamp(player.updated_at),
    }


def binding_to_dict(binding: TeamAssignment) -> dict:
    return {
        "headsetId": binding.headset_id,
        "TeamName": binding.team_name,
        "nickname": binding.nickname,
        "lastUpdated": format_timestamp(binding.last_updated),
    }


def session_to_dict(game: GameSession) -> dict:
    return {
        "id": game.id,
        "mapPlayed": game.map_played,
        "gameDuration": game.game_duration,
        "numberOfPlayers": game.number_of_players,
        "durationHours": game.duration_hours,
        "teams": [
            {
                "name": team.name,
                "players": team.player_ids,
                "score": team.score,
                "won": team.won,
            }
            for team in game.teams
        ],
        "createdAt": format_timestamp(game.created_at),
    }


def _format_loc(loc: tuple) -> str:
    """('body', 'teams', 0, 'name') -> 'teams[0].name'"""
    parts = [p for p in loc if p not in _LOC_SOURCES]
    out = ""
    for p in parts:
        if isinstance(p, int):
            out += f"[{p}]"
        else:
            out += f".{p}" if out else str(p)
    return out


def describe_validation_errors(errors: list[dict]) -> tuple[Optional[str], str]:
    """Collapse pydantic errors into (field, message) for a single user-facing reason.

    Missing top-level fields are reported together, anything else reports the first error.
    """
    if not errors:
        return None, "Invalid request"
    missing = [
        _format_loc(e["loc"]) for e in errors
        if e.get("type") == "missing" and len([p for p in e["loc"] if p not in _LOC_SOURCES]) == 1
    ]
    if missing:
        label = "field" if len(missing) == 1 else "fields"
        return missing[0], f"Missing required {label}: {', '.join(missing)}"
    first = errors[0]
    field = _format_loc(first["loc"])
    message = str(first.get("msg", "Invalid value"))
    # Custom validators raise ValueError, which pydantic prefixes
    message = message.removeprefix("Value error, ")
    return field or None, f"{field}: {message}" if field else message
