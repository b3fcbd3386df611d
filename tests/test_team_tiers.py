"""Tests for team tier scoring"""
import pytest

from src.core.models import DraftPick, PlayerIdentity, Roster, TeamValuation, NO_DATA
from src.core.draft_analyzer import analyze_picks, value_pick
from src.core.team_tiers import (
    aggregate_position, build_team_valuations, combine_team_players,
    rank_teams, roster_player_valuations, team_valuation
)
from helpers import record


@pytest.fixture
def pick_valuations(picks, users, identities, records):
    return analyze_picks(picks, users, identities, records)


class TestRosterPlayers:
    """Test roster players without draft picks"""

    def test_roster_player_fields(self, rosters, identities, records):
        players = roster_player_valuations(rosters[0], "Alpha", identities, records)

        assert [p.player_name for p in players] == [
            "Josh Allen", "Saquon Barkley", "Denver Broncos", "Brandon Aubrey"
        ]
        aubrey = players[-1]
        assert aubrey.pick_number == 0
        assert aubrey.tier == "K1"
        assert aubrey.roster_id == "1"

    def test_incomplete_identity_skipped(self, records):
        identities = {
            "1": PlayerIdentity("1", "Josh", "Allen", None),
            "2": PlayerIdentity("2", "", "Allen", "QB"),
        }
        roster = Roster("1", "u1", players=["1", "2", "3"])
        assert roster_player_valuations(roster, "Alpha", identities, records) == []

    def test_unmatched_roster_player(self, identities, records):
        roster = Roster("3", "u3", players=["9999"])
        players = roster_player_valuations(roster, "Charlie", identities, records)
        assert len(players) == 1
        assert not players[0].matched
        assert players[0].tier == NO_DATA


class TestCombine:
    """Test merging draft picks with roster players"""

    def test_draft_pick_wins(self):
        drafted = value_pick(DraftPick(5, 1, "1"), "Josh Allen", "QB",
                             record("Josh Allen", "QB", tier="QB1", adp=10), "Alpha")
        rostered = value_pick(DraftPick(0, 0, "1"), "Josh Allen", "QB",
                              record("Josh Allen", "QB", tier="QB2"), "Alpha")
        other = value_pick(DraftPick(0, 0, "2"), "Josh Allen", "RB",
                           record("Josh Allen", "RB", tier="RB4"), "Alpha")

        combined = combine_team_players([drafted], [rostered, other])
        assert combined == [drafted, other]

    def test_no_duplicate_keys(self, pick_valuations, rosters, identities, records):
        roster_players = roster_player_valuations(rosters[0], "Alpha", identities, records)
        combined = combine_team_players(pick_valuations, roster_players)
        keys = [(p.player_name, p.position) for p in combined]
        assert len(keys) == len(set(keys))


class TestAggregatePosition:
    """Test one position's tier aggregate"""

    def _player(self, name, position, tier):
        return value_pick(DraftPick(1, 1, name), name, position,
                          record(name, position, tier=tier), "Alpha")

    def test_best_player_and_average(self):
        players = [self._player("A", "RB", "RB3"), self._player("B", "RB", "RB1"),
                   self._player("C", "RB", "RB6")]
        aggregate = aggregate_position("RB", players)

        assert aggregate.best_player.player_name == "B"
        assert aggregate.total_players == 3
        assert aggregate.average_tier == pytest.approx((2.8 + 1.8) / 1.7)

    def test_no_tier_data(self):
        players = [self._player("A", "TE", ""), self._player("B", "TE", NO_DATA)]
        aggregate = aggregate_position("TE", players)
        assert aggregate.average_tier is None
        assert aggregate.best_player is None
        assert aggregate.total_players == 2

    def test_tier_override_applies_per_player(self):
        players = [self._player("Green Bay Packers", "DEF", "DST1")]
        assert aggregate_position("DEF", players).average_tier == 13.0
        assert aggregate_position("DEF", players, overrides={}).average_tier == 1.0


class TestTeamValuations:
    """Test league wide valuations"""

    def test_team_valuation(self, rosters, identities, records, pick_valuations):
        team = team_valuation(rosters[0], "Alpha", identities, records, pick_valuations)

        assert team.team_name == "Alpha"
        assert team.position_tiers["QB"].average_tier == 1.0
        assert team.position_tiers["K"].best_player.player_name == "Brandon Aubrey"
        assert team.position_tiers["WR"].average_tier is None
        assert team.overall_score == pytest.approx(1.0)

    def test_unmatched_pick_counted_but_not_scored(self, rosters, identities, records,
                                                   pick_valuations):
        team = team_valuation(rosters[1], "Bravo", identities, records, pick_valuations)
        wide_receivers = team.position_tiers["WR"]
        assert wide_receivers.total_players == 2
        assert wide_receivers.average_tier == 1.0

    def test_skips_ownerless_rosters(self, rosters, users, identities, records, pick_valuations):
        teams = build_team_valuations(rosters, users, identities, records, pick_valuations)
        assert sorted(t.team_name for t in teams) == ["Alpha", "Bravo"]
        assert sorted(t.rank for t in teams) == [1, 2]

    def test_rank_lowest_first_missing_last(self):
        teams = [
            TeamValuation("a", "1", "u1", {}, None),
            TeamValuation("b", "2", "u2", {}, 4.5),
            TeamValuation("c", "3", "u3", {}, 2.0),
        ]
        ordered = rank_teams(teams)
        assert [t.team_name for t in ordered] == ["c", "b", "a"]
        assert [t.rank for t in ordered] == [1, 2, 3]
