"""Season-to-date team metrics and player values for a Sleeper league"""
import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from src.core.models import LeagueUser, Matchup, PlayerIdentity, PlayerValue, Roster, TeamSummary
from src.core.valuation import (
    assign_power_ranks, assign_standings_ranks, baseline_starter_points,
    best_bench_points, luck_rating, optimal_lineup, optimal_lineup_points,
    points_left_on_bench, potential_win, power_rank_composite, replacement_points,
    self_inflicted_loss, value_over_baseline_starter, value_over_bench_player,
    value_over_replacement
)
from src.utils.monitoring import measure_performance
from config import STATS_POINTS_KEYS, RECENT_FORM_WEEKS


logger = logging.getLogger(__name__)


def fantasy_points(stat_line: Optional[Mapping], keys: Sequence[str] = STATS_POINTS_KEYS) -> float:
    """Fantasy points from a Sleeper stats or projections entry"""
    if not stat_line:
        return 0.0
    for key in keys:
        value = stat_line.get(key)
        if value is not None:
            try:
                return float(value)
            except (TypeError, ValueError):
                continue
    return 0.0


def pair_matchups(entries: Iterable[Mapping], week: int) -> List[Matchup]:
    """Pair Sleeper's per-roster matchup rows on their shared matchup_id.

    Rows without a matchup_id (byes) or without an opponent are dropped.
    """
    groups: Dict[int, List[Mapping]] = {}
    for entry in entries:
        matchup_id = entry.get("matchup_id")
        if matchup_id is None:
            continue
        groups.setdefault(matchup_id, []).append(entry)

    matchups = []
    for matchup_id, pair in groups.items():
        if len(pair) != 2:
            logger.debug(f"Week {week}: matchup {matchup_id} has {len(pair)} entries, skipping")
            continue
        home, away = pair
        matchups.append(Matchup(
            week=week,
            matchup_id=matchup_id,
            roster_id=str(home.get("roster_id")),
            opponent_roster_id=str(away.get("roster_id")),
            points=float(home.get("points") or 0.0),
            opponent_points=float(away.get("points") or 0.0),
            starters=list(home.get("starters") or []),
            opponent_starters=list(away.get("starters") or []),
            players_points=dict(home.get("players_points") or {}),
            opponent_players_points=dict(away.get("players_points") or {}),
        ))
    return matchups


def _team_weeks(roster_id: str,
                matchups_by_week: Mapping[int, Sequence[Matchup]]) -> List[Matchup]:
    """Played matchups involving one roster, in week order"""
    weeks = []
    for week in sorted(matchups_by_week):
        for matchup in matchups_by_week[week]:
            if matchup.involves(roster_id) and matchup.is_played:
                weeks.append(matchup)
                break
    return weeks


def _weekly_scores(matchups_by_week: Mapping[int, Sequence[Matchup]]) -> Dict[int, Dict[str, float]]:
    scores: Dict[int, Dict[str, float]] = {}
    for week, matchups in matchups_by_week.items():
        for matchup in matchups:
            if not matchup.is_played:
                continue
            week_scores = scores.setdefault(week, {})
            week_scores[matchup.roster_id] = matchup.points
            week_scores[matchup.opponent_roster_id] = matchup.opponent_points
    return scores


def expected_wins(roster_id: str, weekly_scores: Mapping[int, Mapping[str, float]]) -> float:
    """All-play expected wins: share of the league outscored each week"""
    expected = 0.0
    for scores in weekly_scores.values():
        if roster_id not in scores or len(scores) < 2:
            continue
        points = scores[roster_id]
        others = [p for rid, p in scores.items() if rid != roster_id]
        beaten = sum(1.0 for p in others if points > p) + 0.5 * sum(1 for p in others if points == p)
        expected += beaten / len(others)
    return expected


def _projected_lineup_points(players: Iterable[str], projections: Mapping[str, Mapping],
                             positions: Mapping[str, str]) -> float:
    projected = {p: fantasy_points(projections.get(p)) for p in players}
    lineup = optimal_lineup(projected, positions)
    return sum(projected[p] for p in lineup)


def _team_summary(roster: Roster, owner: str,
                  matchups_by_week: Mapping[int, Sequence[Matchup]],
                  weekly_scores: Mapping[int, Mapping[str, float]],
                  positions: Mapping[str, str],
                  projections_by_week: Optional[Mapping[int, Mapping[str, Mapping]]],
                  recent_weeks: int) -> TeamSummary:
    wins = losses = ties = 0
    actual = opponent = bench_points = 0.0
    self_inflicted = potential = 0
    optimal_totals = []
    weekly_points = []

    for matchup in _team_weeks(roster.roster_id, matchups_by_week):
        side = matchup.side(roster.roster_id)
        points, against = side["points"], side["opponent_points"]

        actual += points
        opponent += against
        weekly_points.append(points)
        if points > against:
            wins += 1
        elif points < against:
            losses += 1
        else:
            ties += 1

        optimal = optimal_lineup_points(side["players_points"], positions) if positions else 0.0
        if optimal > 0:
            optimal_totals.append(optimal)
            bench_points += max(points_left_on_bench(optimal, points), 0.0)
            if potential_win(optimal, points, against):
                potential += 1

        projections = (projections_by_week or {}).get(matchup.week)
        if projections and positions:
            players = side["players_points"].keys() or side["starters"]
            projected = _projected_lineup_points(players, projections, positions)
            if self_inflicted_loss(projected, points, against):
                self_inflicted += 1

    optimal_average = sum(optimal_totals) / len(optimal_totals) if optimal_totals else 0.0
    recent = weekly_points[-recent_weeks:] if recent_weeks > 0 else []
    recent_average = sum(recent) / len(recent) if recent else 0.0

    return TeamSummary(
        roster_id=roster.roster_id,
        owner=owner,
        wins=wins,
        losses=losses,
        ties=ties,
        actual_points=actual,
        opponent_points=opponent,
        power_rank_value=power_rank_composite(actual, optimal_average, recent_average),
        self_inflicted_losses=self_inflicted,
        potential_wins=potential,
        points_left_on_bench=bench_points,
        luck_rating=luck_rating(wins, expected_wins(roster.roster_id, weekly_scores), actual, opponent),
    )


@measure_performance("process_teams")
def process_teams(rosters: Sequence[Roster], users: Sequence[LeagueUser],
                  matchups_by_week: Optional[Mapping[int, Sequence[Matchup]]],
                  identities: Optional[Mapping[str, PlayerIdentity]] = None,
                  projections_by_week: Optional[Mapping[int, Mapping[str, Mapping]]] = None,
                  recent_weeks: int = RECENT_FORM_WEEKS) -> List[TeamSummary]:
    """Season summary for every owned roster, ordered by power rank.

    Without matchups every metric is zero; without projections there are
    no self-inflicted losses. Neither is an error.
    """
    matchups_by_week = matchups_by_week or {}
    names = {user.user_id: user.display_name for user in users}
    positions = {pid: i.position for pid, i in (identities or {}).items() if i.position}
    weekly_scores = _weekly_scores(matchups_by_week)

    teams = []
    for roster in rosters:
        owner = names.get(roster.owner_id)
        if not owner:
            logger.debug(f"Skipping roster {roster.roster_id}: no owner")
            continue
        teams.append(_team_summary(
            roster, owner, matchups_by_week, weekly_scores, positions,
            projections_by_week, recent_weeks
        ))

    assign_standings_ranks(teams)
    return assign_power_ranks(teams)


def _player_name(player_id: str, identity: PlayerIdentity) -> str:
    if identity.first_name and identity.last_name:
        return identity.full_name
    return identity.first_name or identity.last_name or f"Player {player_id}"


@measure_performance("process_player_values")
def process_player_values(rosters: Sequence[Roster], users: Sequence[LeagueUser],
                          identities: Mapping[str, PlayerIdentity],
                          stats: Optional[Mapping[str, Mapping]] = None,
                          teams: int = 10) -> List[PlayerValue]:
    """VORP, VORS and VOBP for every rostered player.

    VORP compares season points with a replacement-level total, VORS
    compares points per game with the last startable player, VOBP
    compares season points with the best player on the same bench.
    """
    names = {user.user_id: user.display_name for user in users}
    values = []

    for roster in rosters:
        owner = names.get(roster.owner_id)
        if not owner:
            continue

        bench_best = best_bench_points(
            fantasy_points(stats.get(p)) for p in roster.bench
        ) if stats else 0.0

        for player_id in roster.players:
            identity = identities.get(player_id)
            if identity is None:
                continue
            position = identity.position or 'UNK'

            if stats:
                stat_line = stats.get(player_id) or {}
                points = fantasy_points(stat_line)
                games = float(stat_line.get("gp") or 0)
                per_game = points / games if games > 0 else 0.0
                vorp = value_over_replacement(points, replacement_points(position))
                vors = value_over_baseline_starter(per_game, baseline_starter_points(position, teams))
                vobp = value_over_bench_player(points, bench_best)
            else:
                points = per_game = vorp = vors = vobp = 0.0

            values.append(PlayerValue(
                player_id=player_id,
                name=_player_name(player_id, identity),
                owner=owner,
                position=position,
                points=points,
                points_per_game=per_game,
                vorp=vorp,
                vors=vors,
                vobp=vobp,
            ))

    by_position: Dict[str, List[PlayerValue]] = {}
    for value in values:
        by_position.setdefault(value.position, []).append(value)
    for players in by_position.values():
        players.sort(key=lambda v: v.points, reverse=True)
        for rank, player in enumerate(players, 1):
            player.rank = rank

    if not stats:
        logger.info("No season stats available, player values are zero")
    return values
