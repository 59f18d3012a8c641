"""Read-side derivations over players and sessions. No side effects, nothing cached."""
from __future__ import annotations

from collections import Counter, defaultdict
from typing import Iterable


def player_score(kills: int, deaths: int) -> float:
    """Kill/death ratio to 2 decimals; plain kills when the player never died."""
    kills = kills or 0
    deaths = deaths or 0
    if deaths == 0:
        return kills
    return round(kills / deaths, 2)


def player_performance(kills: int, deaths: int) -> dict:
    kills = kills or 0
    deaths = deaths or 0
    return {
        "kills": kills,
        "deaths": deaths,
        "kdRatio": player_score(kills, deaths),
        "winRate": min(100, round(kills / max(kills + deaths, 1) * 100)),
    }


def _mean(values: list) -> float:
    return sum(values) / len(values) if values else 0.0


def session_totals(sessions: Iterable) -> dict:
    """Totals across all sessions plus how often each map was played."""
    sessions = list(sessions)
    maps = [s.map_played for s in sessions]
    distribution = dict(Counter(maps))
    if not sessions:
        return {"mapDistribution": distribution}
    return {
        "totalSessions": len(sessions),
        "avgDuration": round(_mean([s.game_duration for s in sessions]), 1),
        "totalPlayers": sum(s.number_of_players for s in sessions),
        "maps": maps,
        "mapDistribution": distribution,
    }


def map_rollup(sessions: Iterable) -> list[dict]:
    """Per-map aggregates, most played first (ties by map name)."""
    by_map = defaultdict(list)
    for s in sessions:
        by_map[s.map_played].append(s)

    rows = []
    for map_name, group in by_map.items():
        team_scores = [[t.score for t in s.teams] for s in group]
        rows.append({
            "map": map_name,
            "totalSessions": len(group),
            "avgDuration": round(_mean([s.game_duration for s in group]), 1),
            "totalPlayers": sum(s.number_of_players for s in group),
            "avgPlayers": round(_mean([s.number_of_players for s in group]), 1),
            "avgTeams": round(_mean([len(s.teams) for s in group]), 1),
            "totalScore": sum(sum(scores) for scores in team_scores),
            # Mean of each session's mean team score; sessions without teams are skipped
            "avgScore": round(_mean([_mean(scores) for scores in team_scores if scores]), 1),
        })
    rows.sort(key=lambda r: (-r["totalSessions"], r["map"]))
    return rows


def daily_rollup(sessions: Iterable) -> list[dict]:
    """Per-day aggregates keyed by the UTC creation date, newest day first."""
    by_day = defaultdict(list)
    for s in sessions:
        by_day[s.created_at.strftime("%Y-%m-%d")].append(s)

    rows = []
    for day, group in by_day.items():
        total_players = sum(s.number_of_players for s in group)
        rows.append({
            "date": day,
            "totalSessions": len(group),
            "totalPlayers": total_players,
            "totalDuration": sum(s.game_duration for s in group),
            "avgDuration": round(_mean([s.game_duration for s in group]), 1),
            "uniqueMapsCount": len({s.map_played for s in group}),
            "playersPerSession": round(total_players / len(group), 1),
        })
    rows.sort(key=lambda r: r["date"], reverse=True)
    return rows
