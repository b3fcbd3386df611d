"""Configuration settings for the Sleeper league dashboard"""
import os
from pathlib import Path

# Project paths
BASE_DIR = Path(__file__).parent
DATA_DIR = BASE_DIR / "data"
CACHE_DIR = DATA_DIR / "cache"
OUTPUT_DIR = DATA_DIR / "output"

# Ensure directories exist
CACHE_DIR.mkdir(parents=True, exist_ok=True)
OUTPUT_DIR.mkdir(parents=True, exist_ok=True)

# Season settings
SEASON_YEAR = 2025
MAX_WEEKS = 18

# Default league settings (10 team, standard scoring)
DEFAULT_SETTINGS = {
    "scoring": "STANDARD",
    "teams": 10,
    "roster": {
        "QB": 1,
        "RB": 2,
        "WR": 2,
        "TE": 1,
        "FLEX": 1,
        "K": 1,
        "DEF": 1,
        "BENCH": 6
    }
}

# Starters that count towards position tier scores (FLEX excluded)
STARTER_REQUIREMENTS = {
    "QB": 1,
    "RB": 2,
    "WR": 2,
    "TE": 1,
    "K": 1,
    "DEF": 1
}

# Lineup slots used when building optimal lineups
LINEUP_SLOTS = {
    "QB": 1,
    "RB": 2,
    "WR": 2,
    "TE": 1,
    "FLEX": 1,
    "K": 1,
    "DEF": 1
}
FLEX_POSITIONS = ("RB", "WR", "TE")

# Ranking spreadsheet (MockoSheet CSV export)
SHEET_FILE = os.getenv('RANKINGS_SHEET_FILE', str(DATA_DIR / 'rankings.csv'))

# Fixed sheet layout. Row ranges are end-exclusive, None runs to the end.
SHEET_LAYOUT = {
    "header_row": 6,
    "header_tokens": ["Player"],
    "teams_per_round": 10,
    "sections": [
        {"title": "QUARTERBACKS", "position": "QB", "start_column": 0,
         "row_start": 7, "row_end": 41, "kind": "standard"},
        {"title": "RUNNINGBACKS", "position": "RB", "start_column": 16,
         "row_start": 7, "row_end": 74, "kind": "standard"},
        {"title": "Wide Receivers", "position": "WR", "start_column": 32,
         "row_start": 7, "row_end": 74, "kind": "standard"},
        {"title": "TIGHT ENDS", "position": "TE", "start_column": 0,
         "row_start": 41, "row_end": 74, "kind": "standard"},
        {"title": "DEFENSES", "position": "DEF", "start_column": 0,
         "row_start": 74, "row_end": None, "kind": "defense_kicker"},
        {"title": "KICKERS", "position": "K", "start_column": 7,
         "row_start": 74, "row_end": None, "kind": "defense_kicker"},
    ]
}

# Player matching
FUZZY_MATCH_THRESHOLD = 0.8

# Points per game of the last startable player, keyed by league size
BASELINE_STARTER_POINTS = {
    10: {
        "QB": 20.0,   # QB10
        "RB": 14.0,   # RB20
        "WR": 13.5,   # WR20
        "TE": 10.0,   # TE10
        "K": 9.0,     # K10
        "DEF": 8.0    # DEF10
    }
}

# Season points of a typical waiver wire replacement
REPLACEMENT_POINTS = {
    "QB": 200.0,
    "RB": 150.0,
    "WR": 140.0,
    "TE": 120.0,
    "K": 100.0,
    "DEF": 90.0
}

# Season stat keys tried in order when reading fantasy points
STATS_POINTS_KEYS = ["pts_std", "pts_half_ppr", "pts_ppr"]

# Power ranking composite
POWER_RANK_WEIGHTS = {
    "total_points": 0.40,
    "optimal_average": 0.35,
    "recent_average": 0.25
}
RECENT_FORM_WEEKS = 3

# Position tier weighting
TIER_WEIGHTS = {
    "starter": 0.7,
    "bench": 0.3,
    "wr_top_two": 0.6,
    "wr_other_starter": 0.2,
    "wr_bench": 0.2
}

# Weight of each position in the overall team score
POSITION_SCORE_WEIGHTS = {
    "QB": 1.2,
    "RB": 1.5,
    "WR": 1.5,
    "TE": 1.0,
    "K": 0.3,
    "DEF": 0.5
}

# Data-quality patches: (position, sheet name) -> forced tier value
TIER_RANK_OVERRIDES = {
    ("DEF", "Green Bay Packers"): 13
}

# Sleeper API
SLEEPER_API = {
    "base_url": "https://api.sleeper.app/v1",
    "timeout": 30,
    "retry_delay": 1.0,
    "max_attempts": 3,
    "players_cache_hours": 24
}

# Cache settings
CACHE_EXPIRY_HOURS = 6
MAX_CACHE_AGE_DAYS = 3

# Google Sheets settings
GOOGLE_SHEETS_SCOPES = [
    'https://www.googleapis.com/auth/spreadsheets.readonly',
    'https://www.googleapis.com/auth/drive.readonly'
]
SERVICE_ACCOUNT_FILE = os.getenv('GOOGLE_SERVICE_ACCOUNT_FILE', 'credentials/service_account.json')
