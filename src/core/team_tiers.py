"""Per-team position tier scores from draft picks and current rosters"""
import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from src.core.models import (
    DraftPickValuation, LeagueUser, PlayerIdentity, Position,
    PositionTierAggregate, RankingRecord, Roster, TeamValuation, NO_DATA
)
from src.core.matcher import find_match
from src.core.valuation import tier_value, position_tier_average, overall_team_score
from src.utils.monitoring import measure_performance


logger = logging.getLogger(__name__)

POSITIONS = [p.value for p in Position]


def roster_player_valuations(roster: Roster, team_name: str,
                             identities: Mapping[str, PlayerIdentity],
                             records: Sequence[RankingRecord]) -> List[DraftPickValuation]:
    """Current roster players as pick-less valuations.

    Only players with a complete identity (first name, last name and
    position) are included; unmatched ones carry "N/A" tier data.
    """
    players = []
    for player_id in roster.players:
        identity = identities.get(player_id)
        if not identity or not (identity.first_name and identity.last_name and identity.position):
            continue

        record = find_match(player_id, identity.position, identities, records)
        players.append(DraftPickValuation(
            pick_number=0,
            round=0,
            player_id=player_id,
            player_name=identity.full_name,
            position=identity.position,
            team_name=team_name,
            roster_id=roster.roster_id,
            expert_rank=record.expert_consensus_rank if record else 0,
            adp=record.average_draft_position if record else 0.0,
            actual_pick=0,
            reach=0.0,
            value_over_adp=record.value_over_adp if record else NO_DATA,
            tier=record.position_tier if record else NO_DATA,
            val_score=record.val if record else 0.0,
            playoff_share=record.playoff_share if record else NO_DATA,
            is_value_pick=False,
            is_reach=False,
            matched=record is not None,
        ))
    return players


def combine_team_players(draft_picks: Iterable[DraftPickValuation],
                         roster_players: Iterable[DraftPickValuation]) -> List[DraftPickValuation]:
    """Draft picks plus roster players not already among them (by name and position)"""
    combined = list(draft_picks)
    seen = {(p.player_name, p.position) for p in combined}
    for player in roster_players:
        key = (player.player_name, player.position)
        if key not in seen:
            seen.add(key)
            combined.append(player)
    return combined


def aggregate_position(position: str, players: Sequence[DraftPickValuation],
                       starter_requirements: Optional[Mapping[str, int]] = None,
                       overrides: Optional[Mapping] = None) -> PositionTierAggregate:
    tiers = [tier_value(p.tier, p.player_name, p.position, overrides) for p in players]

    ranked = sorted(
        ((tier, player) for tier, player in zip(tiers, players) if tier > 0),
        key=lambda item: item[0]
    )

    return PositionTierAggregate(
        position=position,
        players=list(players),
        average_tier=position_tier_average(tiers, position, starter_requirements),
        best_player=ranked[0][1] if ranked else None,
        total_players=len(players),
    )


def _team_picks(roster: Roster, team_name: str,
                pick_valuations: Iterable[DraftPickValuation]) -> List[DraftPickValuation]:
    return [
        v for v in pick_valuations
        if (v.roster_id is not None and str(v.roster_id) == roster.roster_id)
        or (v.roster_id is None and v.team_name == team_name)
    ]


def team_valuation(roster: Roster, team_name: str,
                   identities: Mapping[str, PlayerIdentity],
                   records: Sequence[RankingRecord],
                   pick_valuations: Sequence[DraftPickValuation],
                   starter_requirements: Optional[Mapping[str, int]] = None) -> TeamValuation:
    picks = _team_picks(roster, team_name, pick_valuations)
    roster_players = roster_player_valuations(roster, team_name, identities, records)
    players = combine_team_players(picks, roster_players)
    logger.debug(
        f"{team_name}: {len(picks)} draft picks, {len(roster_players)} roster players, "
        f"{len(players)} combined"
    )

    position_tiers: Dict[str, PositionTierAggregate] = {}
    for position in POSITIONS:
        at_position = [p for p in players if p.position == position]
        position_tiers[position] = aggregate_position(position, at_position, starter_requirements)

    score = overall_team_score({p: agg.average_tier for p, agg in position_tiers.items()})

    return TeamValuation(
        team_name=team_name,
        roster_id=roster.roster_id,
        owner_id=roster.owner_id,
        position_tiers=position_tiers,
        overall_score=score,
    )


def rank_teams(teams: List[TeamValuation]) -> List[TeamValuation]:
    """Lowest overall score ranks first; teams without a score go last"""
    ordered = sorted(
        teams,
        key=lambda t: (t.overall_score is None, t.overall_score or 0.0)
    )
    for rank, team in enumerate(ordered, 1):
        team.rank = rank
    return ordered


@measure_performance("build_team_valuations")
def build_team_valuations(rosters: Sequence[Roster], users: Sequence[LeagueUser],
                          identities: Mapping[str, PlayerIdentity],
                          records: Sequence[RankingRecord],
                          pick_valuations: Sequence[DraftPickValuation],
                          starter_requirements: Optional[Mapping[str, int]] = None) -> List[TeamValuation]:
    """Tier valuation for every owned roster in the league, ranked"""
    names = {user.user_id: user.display_name for user in users}
    teams = []

    for roster in rosters:
        team_name = names.get(roster.owner_id)
        if not team_name:
            logger.info(f"Skipping roster {roster.roster_id}: no owner")
            continue
        try:
            teams.append(team_valuation(
                roster, team_name, identities, records, pick_valuations, starter_requirements
            ))
        except Exception as e:
            logger.error(f"Error processing team {team_name}: {e}")

    return rank_teams(teams)
