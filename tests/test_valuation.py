"""Tests for value metrics, power rank and tier scoring"""
from dataclasses import dataclass

import pytest

from src.core.valuation import (
    assign_power_ranks, assign_standings_ranks, baseline_starter_points,
    best_bench_points, luck_rating, optimal_lineup, optimal_lineup_points,
    overall_team_score, position_tier_average, potential_win,
    power_rank_composite, replacement_points, self_inflicted_loss, tier_value,
    value_over_baseline_starter, value_over_bench_player, value_over_replacement
)


@dataclass
class FakeTeam:
    name: str
    wins: int = 0
    actual_points: float = 0.0
    power_rank_value: float = 0.0
    power_rank: int = 0
    sleeper_rank: int = 0


class TestValueMetrics:
    """Test VORP, VORS and VOBP"""

    def test_differences(self):
        assert value_over_replacement(250.0, 200.0) == 50.0
        assert value_over_baseline_starter(12.0, 14.0) == -2.0
        assert value_over_bench_player(100.0, 80.5) == 19.5

    def test_best_bench_points(self):
        assert best_bench_points([10.0, 42.5, 3.0]) == 42.5
        assert best_bench_points([]) == 0.0

    def test_baseline_table(self):
        assert baseline_starter_points("QB") == 20.0
        assert baseline_starter_points("XX") == 0.0

    def test_baseline_closest_league_size(self):
        table = {10: {"RB": 14.0}, 12: {"RB": 12.0}}
        assert baseline_starter_points("RB", teams=12, table=table) == 12.0
        assert baseline_starter_points("RB", teams=14, table=table) == 12.0
        assert baseline_starter_points("RB", teams=8, table=table) == 14.0

    def test_replacement_points(self):
        assert replacement_points("TE") == 120.0
        assert replacement_points("LB") == 0.0


class TestLineupOutcomes:
    """Test per-week lineup decisions"""

    def test_self_inflicted_loss(self):
        assert self_inflicted_loss(110.0, 90.0, 100.0)
        assert not self_inflicted_loss(95.0, 90.0, 100.0)
        assert not self_inflicted_loss(110.0, 105.0, 100.0)

    def test_potential_win(self):
        assert potential_win(120.0, 95.0, 100.0)
        assert not potential_win(100.0, 95.0, 100.0)

    def test_luck_rating(self):
        # Two wins over 1.5 expected, +50 point differential
        assert luck_rating(2, 1.5, 550.0, 500.0) == pytest.approx(0.5)
        assert luck_rating(1, 1, 400.0, 400.0) == 0.0


class TestPowerRank:
    """Test composite power rank and ordering"""

    def test_composite_default_weights(self):
        assert power_rank_composite(1000.0, 120.0, 110.0) == pytest.approx(400.0 + 42.0 + 27.5)

    def test_composite_custom_weights(self):
        weights = {"total_points": 1.0, "optimal_average": 0.0, "recent_average": 0.0}
        assert power_rank_composite(10.0, 99.0, 99.0, weights) == 10.0

    def test_assign_power_ranks(self):
        teams = [FakeTeam("a", power_rank_value=1), FakeTeam("b", power_rank_value=3),
                 FakeTeam("c", power_rank_value=2)]
        ordered = assign_power_ranks(teams)
        assert [t.name for t in ordered] == ["b", "c", "a"]
        assert [t.power_rank for t in ordered] == [1, 2, 3]

    def test_standings_break_ties_on_points(self):
        teams = [FakeTeam("a", 5, 900.0), FakeTeam("b", 5, 950.0), FakeTeam("c", 6, 800.0)]
        ordered = assign_standings_ranks(teams)
        assert [t.name for t in ordered] == ["c", "b", "a"]
        assert teams[0].sleeper_rank == 3


class TestTierValue:
    """Test tier label parsing"""

    def test_labels(self):
        assert tier_value("QB1") == 1.0
        assert tier_value("TE12") == 12.0
        assert tier_value("3") == 3.0
        assert tier_value(4) == 4.0

    def test_missing(self):
        assert tier_value("") == 0.0
        assert tier_value(None) == 0.0
        assert tier_value("N/A") == 0.0
        assert tier_value("Tier") == 0.0

    def test_leading_float(self):
        assert tier_value("2.5 (late)") == 2.5

    def test_override(self):
        assert tier_value("DST1", "Green Bay Packers", "DEF") == 13.0
        assert tier_value("DST1", "Green Bay Packers", "DEF", overrides={}) == 1.0
        assert tier_value("DST1", "Denver Broncos", "DEF") == 1.0


class TestPositionTierAverage:
    """Test weighted tier averages"""

    def test_single_starter(self):
        assert position_tier_average([5], "QB") == 5.0

    def test_wide_receiver_weights(self):
        assert position_tier_average([20, 2, 10], "WR") == pytest.approx(8.0)

    def test_wide_receiver_extra_starters(self):
        requirements = {"WR": 3}
        # (1 + 3) * 0.6 + 5 * 0.2 + 7 * 0.2 over 1.6
        assert position_tier_average([1, 3, 5, 7], "WR", requirements) == pytest.approx(4.8 / 1.6)

    def test_starter_and_bench(self):
        # RB starters 1 and 3 at 0.7, bench 8 at 0.3
        assert position_tier_average([8, 1, 3], "RB") == pytest.approx((2.8 + 2.4) / 1.7)

    def test_only_positive_values(self):
        assert position_tier_average([0, 0, 4], "TE") == 4.0
        assert position_tier_average([0, 0], "TE") is None
        assert position_tier_average([], "K") is None

    def test_in_valid_range(self):
        values = [3, 9, 4, 12, 1]
        average = position_tier_average(values, "RB")
        assert min(values) <= average <= max(values)


class TestOverallTeamScore:
    """Test weighted team score"""

    def test_weighted_mean(self):
        weights = {"QB": 1.5, "RB": 2.0}
        assert overall_team_score({"QB": 5.0, "RB": 10.0}, weights) == pytest.approx(27.5 / 3.5)

    def test_excludes_missing_positions(self):
        score = overall_team_score({"QB": 4.0, "TE": None})
        assert score == 4.0

    def test_nothing_to_score(self):
        assert overall_team_score({"QB": None, "RB": None}) is None
        assert overall_team_score({}) is None


class TestOptimalLineup:
    """Test hindsight lineup building"""

    @pytest.fixture
    def positions(self):
        return {"qb1": "QB", "qb2": "QB", "rb1": "RB", "rb2": "RB", "rb3": "RB",
                "wr1": "WR", "te1": "TE", "k1": "K"}

    def test_fills_flex_with_best_remaining(self, positions):
        points = {"qb1": 20, "qb2": 25, "rb1": 15, "rb2": 12, "rb3": 10,
                  "wr1": 8, "te1": 6, "k1": 7}
        lineup = optimal_lineup(points, positions)

        assert "qb2" in lineup and "qb1" not in lineup
        assert {"rb1", "rb2", "rb3"} <= set(lineup)
        assert optimal_lineup_points(points, positions) == 25 + 15 + 12 + 10 + 8 + 6 + 7

    def test_quarterback_never_flexes(self, positions):
        points = {"qb1": 30, "qb2": 29}
        assert optimal_lineup(points, positions) == ["qb1"]

    def test_custom_slots(self, positions):
        points = {"rb1": 5, "rb2": 9, "wr1": 7}
        assert optimal_lineup(points, positions, slots={"RB": 1, "FLEX": 1}) == ["rb2", "wr1"]
