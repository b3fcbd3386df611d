"""Draft pick value and reach analysis against expert ADP"""
import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from src.core.models import (
    DraftAnalysis, DraftEfficiency, DraftPick, DraftPickValuation, League,
    LeagueUser, PlayerIdentity, PositionDraftSummary, RankingRecord, NO_DATA
)
from src.core.matcher import find_match, match_stats, pick_position
from src.utils.monitoring import measure_performance


logger = logging.getLogger(__name__)

NO_ADP_POSITIONS = ("K", "DEF")


def team_name(user_id: Optional[str], users: Iterable[LeagueUser]) -> str:
    """Display name of the user who made a pick, or "Team <id>" """
    for user in users:
        if user.user_id == user_id:
            return user.display_name
    return f"Team {user_id}"


def player_name(player_id: str, identities: Mapping[str, PlayerIdentity],
                fallback: Optional[str] = None) -> str:
    identity = identities.get(player_id)
    if identity:
        return identity.full_name
    return fallback or f"Unknown Player ({player_id})"


def value_pick(pick: DraftPick, name: str, position: str,
               record: Optional[RankingRecord], team: str) -> DraftPickValuation:
    """Join one draft pick with its ranking record.

    Reach is ADP minus the pick number: positive means the player went
    later than expected (a value pick), negative means earlier (a reach).
    Kickers and defenses have no ADP, so they are never either.
    """
    if record is None:
        return DraftPickValuation(
            pick_number=pick.pick_no,
            round=pick.round,
            player_id=pick.player_id,
            player_name=name,
            position=position,
            team_name=team,
            roster_id=pick.roster_id,
            expert_rank=0,
            adp=0.0,
            actual_pick=pick.pick_no,
            reach=0.0,
            value_over_adp=NO_DATA,
            tier=NO_DATA,
            val_score=0.0,
            playoff_share=NO_DATA,
            is_value_pick=False,
            is_reach=False,
            matched=False,
        )

    no_adp = position in NO_ADP_POSITIONS
    reach = 0.0 if no_adp else record.average_draft_position - pick.pick_no

    return DraftPickValuation(
        pick_number=pick.pick_no,
        round=pick.round,
        player_id=pick.player_id,
        player_name=name,
        position=position,
        team_name=team,
        roster_id=pick.roster_id,
        expert_rank=record.expert_consensus_rank,
        adp=0.0 if no_adp else record.average_draft_position,
        actual_pick=pick.pick_no,
        reach=reach,
        value_over_adp=NO_DATA if no_adp else record.value_over_adp,
        tier=record.position_tier,
        val_score=record.val,
        playoff_share=NO_DATA if no_adp else record.playoff_share,
        is_value_pick=reach > 0,
        is_reach=reach < 0,
        matched=True,
    )


def analyze_picks(picks: Iterable[DraftPick], users: Sequence[LeagueUser],
                  identities: Mapping[str, PlayerIdentity],
                  records: Sequence[RankingRecord]) -> List[DraftPickValuation]:
    valuations = []
    for pick in picks:
        position = pick_position(pick, identities)
        record = find_match(pick.player_id, position, identities, records)
        valuations.append(value_pick(
            pick,
            player_name(pick.player_id, identities, pick.metadata_name),
            position,
            record,
            team_name(pick.picked_by, users),
        ))
    return valuations


def _valid_picks(valuations: Iterable[DraftPickValuation]) -> List[DraftPickValuation]:
    """Picks with an ADP to compare against"""
    return [v for v in valuations if v.adp > 0 and v.position not in NO_ADP_POSITIONS]


def _best_value(valid: Sequence[DraftPickValuation]) -> Optional[DraftPickValuation]:
    values = [v for v in valid if v.is_value_pick]
    return min(values, key=lambda v: v.reach) if values else None


def _worst_reach(valid: Sequence[DraftPickValuation]) -> Optional[DraftPickValuation]:
    reaches = [v for v in valid if v.is_reach]
    return max(reaches, key=lambda v: v.reach) if reaches else None


def _average_reach(valid: Sequence[DraftPickValuation]) -> float:
    return sum(v.reach for v in valid) / len(valid) if valid else 0.0


def summarize_positions(valuations: Iterable[DraftPickValuation]) -> List[PositionDraftSummary]:
    """Per-position reach summary, in order of first appearance"""
    by_position: Dict[str, List[DraftPickValuation]] = {}
    for valuation in valuations:
        by_position.setdefault(valuation.position, []).append(valuation)

    summaries = []
    for position, picks in by_position.items():
        valid = _valid_picks(picks)
        summaries.append(PositionDraftSummary(
            position=position,
            total_picks=len(valid),
            average_reach=_average_reach(valid),
            value_picks=sum(1 for v in valid if v.is_value_pick),
            reach_picks=sum(1 for v in valid if v.is_reach),
            best_value=_best_value(valid),
            worst_reach=_worst_reach(valid),
            picks=picks,
        ))
    return summaries


def draft_efficiency(valuations: Sequence[DraftPickValuation]) -> DraftEfficiency:
    valid = _valid_picks(valuations)
    return DraftEfficiency(
        total_value_picks=sum(1 for v in valid if v.is_value_pick),
        total_reaches=sum(1 for v in valid if v.is_reach),
        average_reach=_average_reach(valid),
        best_value_pick=_best_value(valid),
        worst_reach=_worst_reach(valid),
        match_rate=(len(valid) / len(valuations)) * 100 if valuations else 0.0,
    )


@measure_performance("analyze_draft")
def analyze_draft(league: League, draft_id: str, picks: Sequence[DraftPick],
                  users: Sequence[LeagueUser],
                  identities: Mapping[str, PlayerIdentity],
                  records: Sequence[RankingRecord]) -> DraftAnalysis:
    """Value every pick of a draft and summarize by position"""
    valuations = analyze_picks(picks, users, identities, records)
    stats = match_stats(picks, identities, records)
    logger.info(
        f"Analyzed {len(valuations)} picks for {league.name} "
        f"({stats.matched_picks} matched, {stats.match_rate:.1f}%)"
    )

    return DraftAnalysis(
        league_id=league.league_id,
        league_name=league.name,
        draft_id=draft_id,
        total_picks=len(picks),
        position_analysis=summarize_positions(valuations),
        all_picks=valuations,
        efficiency=draft_efficiency(valuations),
        match_stats=stats,
    )
