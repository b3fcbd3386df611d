"""End to end: ranking sheet text through draft analysis and team tiers"""
import pytest

from src.core.models import DraftPick, League, LeagueStatus, LeagueUser, PlayerIdentity, Roster, NO_DATA
from src.core.draft_analyzer import analyze_draft
from src.core.team_tiers import build_team_valuations
from src.sheets import load_rankings
from helpers import build_sheet_rows, defense_kicker_block, rows_to_csv, standard_block


@pytest.fixture
def sheet_file(tmp_path):
    rows = build_sheet_rows(
        qbs=[standard_block("Patrick Mahomes", "KC/6", "3", "30", "QB2", "3.05", "+ 0.50",
                            "80", "85", "90", "11%", "300")],
        rbs=[standard_block("Bijan Robinson", "ATL/5", "1", "2", "RB1", "1.03", "- 0.10",
                            "95", "98", "99", "16%", "340")],
        defenses=[defense_kicker_block("Pittsburgh Steelers", "PIT/5", "4", "40", "130", "DST2")],
    )
    path = tmp_path / "rankings.csv"
    path.write_text(rows_to_csv(rows))
    return path


@pytest.fixture
def league_data():
    identities = {
        "4046": PlayerIdentity("4046", "Patrick", "Mahomes", "QB", "KC"),
        "9509": PlayerIdentity("9509", "Bijan", "Robinson", "RB", "ATL"),
        "PIT": PlayerIdentity("PIT", "Pittsburgh", "Steelers", "DEF", "PIT"),
    }
    users = [LeagueUser("u1", "Alpha")]
    picks = [
        DraftPick(5, 1, "9509", picked_by="u1", roster_id="1"),
        DraftPick(20, 2, "4046", picked_by="u1", roster_id="1"),
        DraftPick(90, 9, "PIT", picked_by="u1", roster_id="1"),
    ]
    rosters = [Roster("1", "u1", players=["9509", "4046", "PIT"])]
    return identities, users, picks, rosters


def test_sheet_to_draft_analysis(sheet_file, league_data):
    identities, users, picks, _ = league_data
    records = load_rankings(sheet_file)
    assert [r.name for r in records] == ["Patrick Mahomes", "Bijan Robinson", "Pittsburgh Steelers"]

    league = League("1", "Pipeline League", "2025", LeagueStatus.COMPLETE, 1)
    analysis = analyze_draft(league, "d1", picks, users, identities, records)

    assert analysis.match_stats.match_rate == pytest.approx(100.0)
    robinson, mahomes, steelers = analysis.all_picks

    assert robinson.reach == -2
    assert robinson.is_reach
    assert mahomes.adp == 25
    assert mahomes.reach == 5
    assert mahomes.is_value_pick
    assert mahomes.playoff_share == "11%"

    assert steelers.matched
    assert steelers.adp == 0
    assert steelers.reach == 0
    assert steelers.playoff_share == NO_DATA
    assert steelers.tier == "DST2"

    assert analysis.efficiency.match_rate == pytest.approx(2 / 3 * 100)


def test_sheet_to_team_tiers(sheet_file, league_data):
    identities, users, picks, rosters = league_data
    records = load_rankings(sheet_file)
    league = League("1", "Pipeline League", "2025", LeagueStatus.COMPLETE, 1)
    valuations = analyze_draft(league, "d1", picks, users, identities, records).all_picks

    team = build_team_valuations(rosters, users, identities, records, valuations)[0]

    assert team.position_tiers["QB"].average_tier == 2.0
    assert team.position_tiers["RB"].average_tier == 1.0
    assert team.position_tiers["DEF"].average_tier == 2.0
    assert team.position_tiers["QB"].total_players == 1
    # (2 * 1.2 + 1 * 1.5 + 2 * 0.5) / (1.2 + 1.5 + 0.5)
    assert team.overall_score == pytest.approx(4.9 / 3.2)
    assert team.rank == 1
