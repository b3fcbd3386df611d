"""Shared fixtures for the dashboard tests"""
import pytest

from src.core.models import DraftPick, League, LeagueStatus, LeagueUser, PlayerIdentity, Roster
from src.core.sheet_parser import parse_sheet
from helpers import build_sheet_rows, defense_kicker_block, rows_to_csv, standard_block


@pytest.fixture
def sample_rows():
    return build_sheet_rows(
        qbs=[
            standard_block("Josh Allen", "BUF/7", "1", "1", "QB1", "3.03", "+ 2.04",
                           "89", "94", "100", "14%", "332"),
            standard_block("Lamar Jackson", "BAL/7", "2", "2", "QB1", "3.06", "- 0.50",
                           "85", "90", "98", "12%", "310"),
        ],
        rbs=[
            standard_block("Saquon Barkley", "PHI/9", "1", "1", "RB1", "1.02", "+ 0.10",
                           "95", "99", "100", "18%", "280"),
        ],
        wrs=[
            standard_block("Ja'Marr Chase", "CIN/10", "1", "1", "WR1", "1.01", "0",
                           "97", "100", "100", "17%", "350"),
        ],
        tes=[
            standard_block("Brock Bowers", "LV/8", "1", "1", "TE1", "2.08", "+ 1.00",
                           "80", "85", "90", "10%", "300"),
        ],
        defenses=[
            defense_kicker_block("Denver Broncos", "DEN/12", "1", "1", "156", "DST1"),
        ],
        kickers=[
            defense_kicker_block("Brandon Aubrey", "DAL/10", "1", "1", "165", "K1"),
        ],
    )


@pytest.fixture
def sample_csv(sample_rows):
    return rows_to_csv(sample_rows)


@pytest.fixture
def records(sample_csv):
    return parse_sheet(sample_csv)


@pytest.fixture
def league():
    return League("1180000000000000000", "Test League", "2025", LeagueStatus.IN_SEASON, 3)


@pytest.fixture
def identities():
    return {
        "4984": PlayerIdentity("4984", "Josh", "Allen", "QB", "BUF"),
        "4881": PlayerIdentity("4881", "Lamar", "Jackson", "QB", "BAL"),
        "4866": PlayerIdentity("4866", "Saquon", "Barkley", "RB", "PHI"),
        "7564": PlayerIdentity("7564", "Ja'Marr", "Chase", "WR", "CIN"),
        "11604": PlayerIdentity("11604", "Brock", "Bowers", "TE", "LV"),
        "DEN": PlayerIdentity("DEN", "Denver", "Broncos", "DEF", "DEN"),
        "8259": PlayerIdentity("8259", "Brandon", "Aubrey", "K", "DAL"),
        "9999": PlayerIdentity("9999", "Nobody", "Special", "WR", "FA"),
    }


@pytest.fixture
def users():
    return [LeagueUser("u1", "Alpha"), LeagueUser("u2", "Bravo")]


@pytest.fixture
def rosters():
    return [
        Roster("1", "u1", players=["4984", "4866", "DEN", "8259"], starters=["4984", "4866", "DEN"]),
        Roster("2", "u2", players=["4881", "7564", "11604"], starters=["4881", "7564"]),
        Roster("3", None, players=["9999"]),
    ]


@pytest.fixture
def picks():
    return [
        DraftPick(pick_no=1, round=1, player_id="7564", picked_by="u2", roster_id="2"),
        DraftPick(pick_no=2, round=1, player_id="4866", picked_by="u1", roster_id="1"),
        DraftPick(pick_no=15, round=2, player_id="4984", picked_by="u1", roster_id="1"),
        DraftPick(pick_no=30, round=3, player_id="4881", picked_by="u2", roster_id="2"),
        DraftPick(pick_no=40, round=4, player_id="DEN", picked_by="u1", roster_id="1"),
        DraftPick(pick_no=41, round=5, player_id="9999", picked_by="u2", roster_id="2"),
    ]
