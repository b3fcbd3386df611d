"""Core data models for the Sleeper league dashboard"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, List


class Position(Enum):
    """Fantasy positions tracked by the ranking sheet"""
    QB = "QB"
    RB = "RB"
    WR = "WR"
    TE = "TE"
    K = "K"
    DEF = "DEF"

    @classmethod
    def from_string(cls, value: Optional[str]) -> Optional['Position']:
        """Map a Sleeper or sheet position string to a Position"""
        if not value:
            return None
        key = value.strip().upper()
        if key in ('DST', 'D/ST'):
            key = 'DEF'
        try:
            return cls(key)
        except ValueError:
            return None


NO_DATA = "N/A"


class LeagueStatus(Enum):
    """Sleeper league lifecycle states"""
    PRE_DRAFT = "pre_draft"
    DRAFTING = "drafting"
    IN_SEASON = "in_season"
    COMPLETE = "complete"
    UNKNOWN = "unknown"

    @classmethod
    def from_string(cls, value: Optional[str]) -> 'LeagueStatus':
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class RankingRecord:
    """One row of expert ranking data for one player at one position"""
    name: str
    team_and_bye_week: str
    position_rank: int
    expert_consensus_rank: int
    position_tier: str
    average_draft_position: float
    value_over_adp: str
    val_f: float
    val: float
    val_c: float
    playoff_share: str
    dynasty_value: float
    drafted_marker: str
    position: Position

    @property
    def has_adp(self) -> bool:
        return self.average_draft_position > 0

    def __str__(self) -> str:
        return f"{self.name} ({self.position.value} - {self.team_and_bye_week})"


@dataclass(frozen=True)
class PlayerIdentity:
    """A player from the Sleeper player directory"""
    player_id: str
    first_name: str
    last_name: str
    position: Optional[str] = None
    team: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __str__(self) -> str:
        return f"{self.full_name} ({self.position or 'UNKNOWN'})"


@dataclass
class MatchResult:
    """A Sleeper identity bound to its ranking record, or to nothing"""
    identity: PlayerIdentity
    record: Optional[RankingRecord] = None
    method: Optional[str] = None  # exact, fuzzy, last_name
    similarity: float = 0.0

    @property
    def matched(self) -> bool:
        return self.record is not None


@dataclass
class UnmatchedPlayer:
    """A drafted player with no ranking record, for manual review"""
    player_id: str
    player_name: str
    position: str
    team: str
    suggestion: Optional[str] = None
    suggestion_score: int = 0


@dataclass
class League:
    league_id: str
    name: str
    season: str
    status: LeagueStatus
    total_rosters: int


@dataclass
class LeagueUser:
    user_id: str
    display_name: str


@dataclass
class Roster:
    """A team roster as returned by Sleeper"""
    roster_id: str
    owner_id: Optional[str]
    players: List[str] = field(default_factory=list)
    starters: List[str] = field(default_factory=list)
    wins: int = 0
    losses: int = 0
    ties: int = 0
    points_for: float = 0.0

    @property
    def bench(self) -> List[str]:
        """Players on the roster who are not in the starting lineup"""
        starters = set(self.starters)
        return [p for p in self.players if p not in starters]


@dataclass
class Matchup:
    """One week's head-to-head result, seen from roster_id's side"""
    week: int
    matchup_id: Optional[int]
    roster_id: str
    opponent_roster_id: str
    points: float
    opponent_points: float
    starters: List[str] = field(default_factory=list)
    opponent_starters: List[str] = field(default_factory=list)
    players_points: Dict[str, float] = field(default_factory=dict)
    opponent_players_points: Dict[str, float] = field(default_factory=dict)

    @property
    def is_played(self) -> bool:
        return self.points > 0 or self.opponent_points > 0

    def involves(self, roster_id: str) -> bool:
        return str(roster_id) in (self.roster_id, self.opponent_roster_id)

    def side(self, roster_id: str) -> Dict:
        """Points, opponent points, starters and player points for one roster"""
        if str(roster_id) == self.roster_id:
            return {
                "points": self.points,
                "opponent_points": self.opponent_points,
                "starters": self.starters,
                "players_points": self.players_points,
            }
        return {
            "points": self.opponent_points,
            "opponent_points": self.points,
            "starters": self.opponent_starters,
            "players_points": self.opponent_players_points,
        }


@dataclass
class DraftPick:
    """A single pick from a Sleeper draft"""
    pick_no: int
    round: int
    player_id: str
    picked_by: Optional[str] = None
    roster_id: Optional[str] = None
    draft_slot: Optional[int] = None
    metadata_position: Optional[str] = None
    metadata_name: Optional[str] = None

    def __str__(self) -> str:
        return f"Round {self.round}, Pick {self.pick_no}: {self.player_id}"


@dataclass
class DraftPickValuation:
    """A draft pick (or roster player) joined with its ranking record"""
    pick_number: int
    round: int
    player_id: str
    player_name: str
    position: str
    team_name: str
    roster_id: Optional[str]
    expert_rank: int
    adp: float
    actual_pick: int
    reach: float
    value_over_adp: str
    tier: str
    val_score: float
    playoff_share: str
    is_value_pick: bool
    is_reach: bool
    matched: bool


@dataclass
class PositionDraftSummary:
    position: str
    total_picks: int
    average_reach: float
    value_picks: int
    reach_picks: int
    best_value: Optional[DraftPickValuation]
    worst_reach: Optional[DraftPickValuation]
    picks: List[DraftPickValuation] = field(default_factory=list)


@dataclass
class DraftEfficiency:
    total_value_picks: int
    total_reaches: int
    average_reach: float
    best_value_pick: Optional[DraftPickValuation]
    worst_reach: Optional[DraftPickValuation]
    match_rate: float


@dataclass
class MatchStats:
    total_picks: int
    matched_picks: int
    unmatched_picks: int
    match_rate: float


@dataclass
class DraftAnalysis:
    league_id: str
    league_name: str
    draft_id: str
    total_picks: int
    position_analysis: List[PositionDraftSummary]
    all_picks: List[DraftPickValuation]
    efficiency: DraftEfficiency
    match_stats: Optional[MatchStats] = None


@dataclass
class PositionTierAggregate:
    """Matched players at one position for one team"""
    position: str
    players: List[DraftPickValuation]
    average_tier: Optional[float]  # None = no valid tier data, excluded
    best_player: Optional[DraftPickValuation]
    total_players: int


@dataclass
class TeamValuation:
    team_name: str
    roster_id: str
    owner_id: Optional[str]
    position_tiers: Dict[str, PositionTierAggregate]
    overall_score: Optional[float]
    rank: int = 0


@dataclass
class TeamSummary:
    """Season-to-date results and derived metrics for one team"""
    roster_id: str
    owner: str
    wins: int
    losses: int
    ties: int
    actual_points: float
    opponent_points: float
    power_rank_value: float
    self_inflicted_losses: int
    potential_wins: int
    points_left_on_bench: float
    luck_rating: float
    power_rank: int = 0
    sleeper_rank: int = 0


@dataclass
class PlayerValue:
    player_id: str
    name: str
    owner: str
    position: str
    points: float
    points_per_game: float
    vorp: float
    vors: float
    vobp: float
    rank: int = 0
