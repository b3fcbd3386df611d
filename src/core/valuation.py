"""Value-over-baseline metrics, power rank and position tier scoring

Everything here is a pure function of already-resolved numbers. Missing
upstream data must be turned into 0 or None before it gets here.
"""
import logging
import re
from operator import attrgetter
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from src.core.models import NO_DATA
from config import (
    BASELINE_STARTER_POINTS, REPLACEMENT_POINTS, POWER_RANK_WEIGHTS,
    STARTER_REQUIREMENTS, TIER_WEIGHTS, POSITION_SCORE_WEIGHTS,
    TIER_RANK_OVERRIDES, LINEUP_SLOTS, FLEX_POSITIONS
)


logger = logging.getLogger(__name__)

_TRAILING_INT = re.compile(r'\d+$')
_LEADING_FLOAT = re.compile(r'\s*[+-]?(\d+\.?\d*|\.\d+)')


def value_over_replacement(player_points: float, replacement_points: float) -> float:
    """VORP: points above a waiver wire replacement at the position"""
    return player_points - replacement_points


def value_over_baseline_starter(player_points: float, baseline_points: float) -> float:
    """VORS: points above the last startable player at the position"""
    return player_points - baseline_points


def value_over_bench_player(player_points: float, best_bench_points: float) -> float:
    """VOBP: points above the best player on the same team's bench"""
    return player_points - best_bench_points


def best_bench_points(bench_points: Iterable[float]) -> float:
    return max(list(bench_points) + [0.0])


def baseline_starter_points(position: str, teams: int = 10,
                            table: Optional[Mapping[int, Mapping[str, float]]] = None) -> float:
    """Per-game baseline for a position, from the table for this league size.

    Leagues without their own table use the closest configured size.
    """
    table = table or BASELINE_STARTER_POINTS
    if not table:
        return 0.0
    size = teams if teams in table else min(table, key=lambda s: abs(s - teams))
    return float(table[size].get(position, 0.0))


def replacement_points(position: str, table: Optional[Mapping[str, float]] = None) -> float:
    table = table or REPLACEMENT_POINTS
    return float(table.get(position, 0.0))


def self_inflicted_loss(projected_points: float, actual_points: float,
                        opponent_points: float) -> bool:
    """The projected lineup would have won, but the lineup played lost"""
    return projected_points > opponent_points and actual_points < opponent_points


def potential_win(optimal_points: float, actual_points: float,
                  opponent_points: float) -> bool:
    """The hindsight-optimal lineup would have won, but the lineup played lost"""
    return optimal_points > opponent_points and actual_points < opponent_points


def points_left_on_bench(optimal_points: float, actual_points: float) -> float:
    return optimal_points - actual_points


def luck_rating(actual_wins: float, expected_wins: float,
                points_for: float, points_against: float) -> float:
    record_luck = actual_wins - expected_wins
    points_luck = (points_for - points_against) / 100
    return (record_luck + points_luck) / 2


def power_rank_composite(total_points: float, optimal_lineup_average: float,
                         recent_average: float,
                         weights: Optional[Mapping[str, float]] = None) -> float:
    weights = weights or POWER_RANK_WEIGHTS
    return (weights["total_points"] * total_points
            + weights["optimal_average"] * optimal_lineup_average
            + weights["recent_average"] * recent_average)


def assign_power_ranks(teams: List, key: Callable = attrgetter("power_rank_value")) -> List:
    """Set ``power_rank`` (1 = strongest) by descending composite value"""
    ordered = sorted(teams, key=key, reverse=True)
    for rank, team in enumerate(ordered, 1):
        team.power_rank = rank
    return ordered


def assign_standings_ranks(teams: List) -> List:
    """Set ``sleeper_rank`` the way league standings order teams"""
    ordered = sorted(teams, key=lambda t: (-t.wins, -t.actual_points))
    for rank, team in enumerate(ordered, 1):
        team.sleeper_rank = rank
    return ordered


def tier_value(tier: Union[str, int, float, None], name: Optional[str] = None,
               position: Optional[str] = None,
               overrides: Optional[Mapping[Tuple[str, str], float]] = None) -> float:
    """Numeric tier from a label like "QB1", "TE12" or "3"; 0 means no data"""
    overrides = TIER_RANK_OVERRIDES if overrides is None else overrides
    if name is not None and position is not None and (position, name) in overrides:
        return float(overrides[(position, name)])

    if isinstance(tier, (int, float)):
        return float(tier)
    if not tier or tier == NO_DATA:
        return 0.0

    tier = tier.strip()
    match = _TRAILING_INT.search(tier)
    if match:
        return float(match.group(0))
    match = _LEADING_FLOAT.match(tier)
    return float(match.group(0)) if match else 0.0


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def position_tier_average(values: Iterable[float], position: str,
                          starter_requirements: Optional[Mapping[str, int]] = None,
                          weights: Optional[Mapping[str, float]] = None) -> Optional[float]:
    """Weighted average tier for a team's players at one position.

    Only values > 0 count. The best N (by ascending tier) are starters,
    the rest bench. Starters are weighted 0.7 per player and bench 0.3
    per player; wide receivers use 0.6 for the top two, 0.2 for any other
    starter and 0.2 for bench. Returns None when there is nothing to
    average, so the position is left out of the overall score.
    """
    requirements = starter_requirements or STARTER_REQUIREMENTS
    weights = weights or TIER_WEIGHTS

    valid = sorted(v for v in values if v > 0)
    if not valid:
        return None

    required = requirements.get(position, 1)
    starters = valid[:required]
    bench = valid[required:]

    if position == "WR":
        groups = [
            (starters[:2], weights["wr_top_two"]),
            (starters[2:], weights["wr_other_starter"]),
            (bench, weights["wr_bench"]),
        ]
    else:
        groups = [
            (starters, weights["starter"]),
            (bench, weights["bench"]),
        ]

    weighted_sum = 0.0
    total_weight = 0.0
    for group, weight in groups:
        if not group:
            continue
        weighted_sum += _mean(group) * weight * len(group)
        total_weight += weight * len(group)

    return weighted_sum / total_weight if total_weight > 0 else None


def overall_team_score(position_averages: Mapping[str, Optional[float]],
                       weights: Optional[Mapping[str, float]] = None) -> Optional[float]:
    """Weighted mean of position averages, skipping positions without data"""
    weights = weights or POSITION_SCORE_WEIGHTS
    weighted_sum = 0.0
    total_weight = 0.0

    for position, average in position_averages.items():
        if average is None or position not in weights:
            continue
        weighted_sum += average * weights[position]
        total_weight += weights[position]

    return weighted_sum / total_weight if total_weight > 0 else None


def optimal_lineup(player_points: Mapping[str, float],
                   player_positions: Mapping[str, str],
                   slots: Optional[Mapping[str, int]] = None,
                   flex_positions: Sequence[str] = FLEX_POSITIONS) -> List[str]:
    """Best-scoring legal lineup: fill position slots by points, then FLEX"""
    slots = slots or LINEUP_SLOTS
    used: Dict[str, int] = {slot: 0 for slot in slots}
    lineup = []

    ranked = sorted(player_points.items(), key=lambda item: item[1], reverse=True)
    for player_id, _ in ranked:
        position = player_positions.get(player_id)
        if position in used and position != "FLEX" and used[position] < slots[position]:
            used[position] += 1
            lineup.append(player_id)
        elif position in flex_positions and used.get("FLEX", 0) < slots.get("FLEX", 0):
            used["FLEX"] += 1
            lineup.append(player_id)

    return lineup


def optimal_lineup_points(player_points: Mapping[str, float],
                          player_positions: Mapping[str, str],
                          slots: Optional[Mapping[str, int]] = None) -> float:
    lineup = optimal_lineup(player_points, player_positions, slots)
    return sum(player_points[p] for p in lineup)
