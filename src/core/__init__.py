"""Core parsing, matching and valuation for the Sleeper league dashboard"""
from .models import (
    Position, RankingRecord, PlayerIdentity, MatchResult, DraftPick,
    DraftPickValuation, DraftAnalysis, TeamValuation, TeamSummary, PlayerValue
)
from .sheet_parser import (
    SheetLayout, SheetSection, SheetParseError, SheetStructureError,
    parse_sheet, parse_rows, dedupe_records
)
from .matcher import normalize_name, match_identity, find_match
from .draft_analyzer import analyze_draft
from .team_tiers import build_team_valuations
from .season import process_teams, process_player_values

__all__ = [
    'Position', 'RankingRecord', 'PlayerIdentity', 'MatchResult', 'DraftPick',
    'DraftPickValuation', 'DraftAnalysis', 'TeamValuation', 'TeamSummary', 'PlayerValue',
    'SheetLayout', 'SheetSection', 'SheetParseError', 'SheetStructureError',
    'parse_sheet', 'parse_rows', 'dedupe_records',
    'normalize_name', 'match_identity', 'find_match',
    'analyze_draft', 'build_team_valuations', 'process_teams', 'process_player_values'
]
