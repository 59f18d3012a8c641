"""Tests for the pre-write session checks."""
import pytest

from arena.errors import ValidationError
from arena.services.session_draft import SessionDraft, TeamDraft
from arena.services.session_validator import validate_session


def _draft(**overrides) -> SessionDraft:
    fields = {
        "map_played": "Desert",
        "game_duration": 30,
        "number_of_players": 4,
        "teams": [
            TeamDraft(name="Red", score=3, player_ids=[1, 2]),
            TeamDraft(name="Blue", score=1, player_ids=[3, 4]),
        ],
    }
    fields.update(overrides)
    return SessionDraft(**fields)


def test_valid_draft_passes():
    validate_session(_draft())


@pytest.mark.parametrize("map_name", ["Desert", "Forest", "Urban", "Snow", "Factory"])
def test_every_known_map_is_accepted(map_name):
    validate_session(_draft(map_played=map_name))


def test_unknown_map_rejected():
    with pytest.raises(ValidationError) as exc:
        validate_session(_draft(map_played="Moon"))
    assert exc.value.field == "mapPlayed"
    assert exc.value.reason == "Invalid map selection"


@pytest.mark.parametrize("duration, ok", [(0, False), (1, True), (120, True), (121, False)])
def test_duration_bounds(duration, ok):
    if ok:
        validate_session(_draft(game_duration=duration))
    else:
        with pytest.raises(ValidationError) as exc:
            validate_session(_draft(game_duration=duration))
        assert exc.value.field == "gameDuration"


@pytest.mark.parametrize("count", [1, 33])
def test_declared_player_count_bounds(count):
    with pytest.raises(ValidationError) as exc:
        validate_session(_draft(number_of_players=count))
    assert exc.value.field == "numberOfPlayers"


def test_single_team_rejected():
    with pytest.raises(ValidationError) as exc:
        validate_session(_draft(number_of_players=2, teams=[TeamDraft(name="Solo", player_ids=[1, 2])]))
    assert exc.value.field == "teams"
    assert "At least 2 teams" in exc.value.reason


def test_blank_team_name_rejected():
    teams = [TeamDraft(name="   ", player_ids=[1, 2]), TeamDraft(name="Blue", player_ids=[3, 4])]
    with pytest.raises(ValidationError) as exc:
        validate_session(_draft(teams=teams))
    assert exc.value.field == "teams[0].name"


def test_long_team_name_rejected():
    teams = [TeamDraft(name="Red", player_ids=[1, 2]), TeamDraft(name="B" * 31, player_ids=[3, 4])]
    with pytest.raises(ValidationError) as exc:
        validate_session(_draft(teams=teams))
    assert exc.value.field == "teams[1].name"
    assert "max 30" in exc.value.reason


def test_negative_score_rejected():
    teams = [TeamDraft(name="Red", score=-1, player_ids=[1, 2]), TeamDraft(name="Blue", player_ids=[3, 4])]
    with pytest.raises(ValidationError) as exc:
        validate_session(_draft(teams=teams))
    assert exc.value.field == "teams[0].score"


@pytest.mark.parametrize("declared", [3, 5])
def test_player_count_must_match_exactly(declared):
    with pytest.raises(ValidationError) as exc:
        validate_session(_draft(number_of_players=declared))
    assert exc.value.field == "numberOfPlayers"
    assert "doesn't match" in exc.value.reason


def test_player_count_skipped_for_raw_teams():
    teams = [TeamDraft(name="Red", score=3), TeamDraft(name="Blue", score=1)]
    validate_session(_draft(teams=teams), require_players=False)


def test_first_violation_wins():
    """Map is checked before duration, so a draft breaking both reports the map."""
    with pytest.raises(ValidationError) as exc:
        validate_session(_draft(map_played="Moon", game_duration=0, number_of_players=99))
    assert exc.value.field == "mapPlayed"
