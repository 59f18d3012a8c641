"""Pre-write checks for a game session draft.

Rules run in a fixed order and the first violation is raised, so a caller
always sees the same error for the same draft. Nothing here touches the
database; the recorder calls ``validate_session`` before it writes.
"""
from __future__ import annotations

from arena.errors import ValidationError
from arena.models import MAPS
from arena.services.session_draft import SessionDraft

MIN_DURATION = 1
MAX_DURATION = 120
MIN_PLAYERS = 2
MAX_PLAYERS = 32
MIN_TEAMS = 2
MAX_TEAM_NAME = 30


def validate_session(draft: SessionDraft, require_players: bool = True) -> None:
    """Raise ValidationError on the first broken rule.

    ``require_players`` enables the player-count check. The raw-team form
    records teams without player lists and skips it.
    """
    if draft.map_played not in MAPS:
        raise ValidationError("mapPlayed", "Invalid map selection")

    if draft.game_duration < MIN_DURATION:
        raise ValidationError("gameDuration", "Duration must be at least 1 minute")
    if draft.game_duration > MAX_DURATION:
        raise ValidationError("gameDuration", f"Duration cannot exceed {MAX_DURATION} minutes")

    if draft.number_of_players < MIN_PLAYERS:
        raise ValidationError("numberOfPlayers", f"Minimum {MIN_PLAYERS} players required")
    if draft.number_of_players > MAX_PLAYERS:
        raise ValidationError("numberOfPlayers", f"Maximum {MAX_PLAYERS} players allowed")

    if len(draft.teams) < MIN_TEAMS:
        raise ValidationError("teams", f"At least {MIN_TEAMS} teams required")

    for i, team in enumerate(draft.teams):
        name = (team.name or "").strip()
        if not name:
            raise ValidationError(f"teams[{i}].name", "Team name is required")
        if len(name) > MAX_TEAM_NAME:
            raise ValidationError(f"teams[{i}].name", f"Team name too long (max {MAX_TEAM_NAME} chars)")

    for i, team in enumerate(draft.teams):
        if team.score < 0:
            raise ValidationError(f"teams[{i}].score", "Team score cannot be negative")

    if require_players:
        total = draft.resolved_player_count
        if total != draft.number_of_players:
            raise ValidationError(
                "numberOfPlayers",
                f"Player count ({draft.number_of_players}) doesn't match team assignments ({total})",
            )
