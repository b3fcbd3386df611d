"""CSV exports of draft, tier and season analyses"""
import csv
import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from src.core.models import (
    DraftAnalysis, PlayerValue, TeamSummary, TeamValuation, UnmatchedPlayer
)
from config import OUTPUT_DIR


logger = logging.getLogger(__name__)

TIER_POSITIONS = ['QB', 'RB', 'WR', 'TE', 'K', 'DEF']


def _fmt(value: Optional[float], digits: int = 2) -> str:
    return '' if value is None else f"{value:.{digits}f}"


class CSVExporter:
    """Write each export to archive/<timestamp>/ and copy it into latest/"""

    def __init__(self, output_dir: Optional[Path] = None):
        self.output_dir = Path(output_dir or OUTPUT_DIR)
        self.latest_dir = self.output_dir / 'latest'
        self.archive_dir = self.output_dir / 'archive'
        self.latest_dir.mkdir(parents=True, exist_ok=True)
        self.archive_dir.mkdir(parents=True, exist_ok=True)
        self.timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    @property
    def export_dir(self) -> Path:
        path = self.archive_dir / self.timestamp
        path.mkdir(exist_ok=True)
        return path

    def _write(self, name: str, fieldnames: Sequence[str], rows: Iterable[Dict]) -> Path:
        filepath = self.export_dir / f"{name}_{self.timestamp}.csv"
        count = 0
        with open(filepath, 'w', newline='') as csvfile:
            writer = csv.DictWriter(csvfile, fieldnames=fieldnames)
            writer.writeheader()
            for row in rows:
                writer.writerow(row)
                count += 1

        shutil.copy2(filepath, self.latest_dir / f"{name}.csv")
        logger.info(f"Exported {count} rows to {filepath.name}")
        return filepath

    def export_draft_picks(self, analysis: DraftAnalysis) -> Path:
        fieldnames = [
            'Pick', 'Round', 'Team', 'Player', 'Position', 'ECR', 'ADP',
            'Reach', 'VAL-ADP', 'Tier', 'VAL', 'Playoff Share', 'Verdict', 'Matched'
        ]

        def verdict(pick):
            if pick.is_value_pick:
                return 'Value'
            if pick.is_reach:
                return 'Reach'
            return ''

        return self._write('draft_picks', fieldnames, (
            {
                'Pick': p.pick_number,
                'Round': p.round,
                'Team': p.team_name,
                'Player': p.player_name,
                'Position': p.position,
                'ECR': p.expert_rank or '',
                'ADP': _fmt(p.adp, 1) if p.adp else '',
                'Reach': _fmt(p.reach, 1),
                'VAL-ADP': p.value_over_adp,
                'Tier': p.tier,
                'VAL': _fmt(p.val_score, 1),
                'Playoff Share': p.playoff_share,
                'Verdict': verdict(p),
                'Matched': 'Y' if p.matched else 'N',
            }
            for p in analysis.all_picks
        ))

    def export_position_summary(self, analysis: DraftAnalysis) -> Path:
        fieldnames = [
            'Position', 'Picks', 'Average Reach', 'Value Picks', 'Reaches',
            'Best Value', 'Best Value Reach', 'Worst Reach', 'Worst Reach Amount'
        ]
        return self._write('position_summary', fieldnames, (
            {
                'Position': s.position,
                'Picks': s.total_picks,
                'Average Reach': _fmt(s.average_reach, 1),
                'Value Picks': s.value_picks,
                'Reaches': s.reach_picks,
                'Best Value': s.best_value.player_name if s.best_value else '',
                'Best Value Reach': _fmt(s.best_value.reach, 1) if s.best_value else '',
                'Worst Reach': s.worst_reach.player_name if s.worst_reach else '',
                'Worst Reach Amount': _fmt(s.worst_reach.reach, 1) if s.worst_reach else '',
            }
            for s in analysis.position_analysis
        ))

    def export_draft_analysis(self, analysis: DraftAnalysis) -> List[Path]:
        return [self.export_draft_picks(analysis), self.export_position_summary(analysis)]

    def export_team_tiers(self, teams: Sequence[TeamValuation]) -> Path:
        fieldnames = ['Rank', 'Team', 'Overall'] + TIER_POSITIONS + [f"Best {p}" for p in TIER_POSITIONS]

        def row(team: TeamValuation) -> Dict:
            data = {'Rank': team.rank, 'Team': team.team_name, 'Overall': _fmt(team.overall_score)}
            for position in TIER_POSITIONS:
                aggregate = team.position_tiers.get(position)
                data[position] = _fmt(aggregate.average_tier) if aggregate else ''
                best = aggregate.best_player if aggregate else None
                data[f"Best {position}"] = best.player_name if best else ''
            return data

        return self._write('team_tiers', fieldnames, (row(t) for t in teams))

    def export_season_overview(self, teams: Sequence[TeamSummary]) -> Path:
        fieldnames = [
            'Power Rank', 'Standings Rank', 'Owner', 'W', 'L', 'T', 'Points For',
            'Points Against', 'Power Value', 'Self-Inflicted Losses', 'Potential Wins',
            'Points Left On Bench', 'Luck'
        ]
        return self._write('season_overview', fieldnames, (
            {
                'Power Rank': t.power_rank,
                'Standings Rank': t.sleeper_rank,
                'Owner': t.owner,
                'W': t.wins,
                'L': t.losses,
                'T': t.ties,
                'Points For': _fmt(t.actual_points),
                'Points Against': _fmt(t.opponent_points),
                'Power Value': _fmt(t.power_rank_value),
                'Self-Inflicted Losses': t.self_inflicted_losses,
                'Potential Wins': t.potential_wins,
                'Points Left On Bench': _fmt(t.points_left_on_bench),
                'Luck': _fmt(t.luck_rating),
            }
            for t in teams
        ))

    def export_player_values(self, values: Sequence[PlayerValue]) -> Path:
        fieldnames = ['Position', 'Rank', 'Player', 'Owner', 'Points', 'PPG', 'VORP', 'VORS', 'VOBP']
        ordered = sorted(values, key=lambda v: (v.position, v.rank))
        return self._write('player_values', fieldnames, (
            {
                'Position': v.position,
                'Rank': v.rank,
                'Player': v.name,
                'Owner': v.owner,
                'Points': _fmt(v.points, 1),
                'PPG': _fmt(v.points_per_game),
                'VORP': _fmt(v.vorp, 1),
                'VORS': _fmt(v.vors),
                'VOBP': _fmt(v.vobp, 1),
            }
            for v in ordered
        ))

    def export_unmatched(self, players: Sequence[UnmatchedPlayer]) -> Path:
        fieldnames = ['Player ID', 'Player', 'Position', 'Team', 'Closest Sheet Name', 'Score']
        return self._write('unmatched_players', fieldnames, (
            {
                'Player ID': p.player_id,
                'Player': p.player_name,
                'Position': p.position,
                'Team': p.team,
                'Closest Sheet Name': p.suggestion or '',
                'Score': p.suggestion_score or '',
            }
            for p in players
        ))
