"""Thin client for the public Sleeper REST API"""
import logging
import time
from typing import Any, Dict, List, Mapping, Optional

import requests

from src.core.models import (
    DraftPick, League, LeagueStatus, LeagueUser, Matchup, PlayerIdentity, Roster
)
from src.core.season import pair_matchups
from src.utils.cache import OptimizedCache
from src.utils.monitoring import monitor
from config import SLEEPER_API, MAX_WEEKS


logger = logging.getLogger(__name__)

ERROR_MESSAGES = {
    404: "Resource not found: {endpoint}",
    403: "Access forbidden: {endpoint}",
    500: "Sleeper API server error",
    502: "Sleeper API temporarily unavailable",
    503: "Sleeper API temporarily unavailable",
    504: "Sleeper API temporarily unavailable",
}


class SleeperAPIError(Exception):
    """Raised when a Sleeper request fails"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class SleeperClient:
    """Read-only access to league, draft, matchup and player data"""

    def __init__(self, base_url: str = SLEEPER_API["base_url"],
                 timeout: float = SLEEPER_API["timeout"],
                 retry_delay: float = SLEEPER_API["retry_delay"],
                 max_attempts: int = SLEEPER_API["max_attempts"],
                 session: Optional[requests.Session] = None,
                 cache: Optional[OptimizedCache] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.retry_delay = retry_delay
        self.max_attempts = max_attempts
        self.session = session or requests.Session()
        self.session.headers.update({'Accept': 'application/json'})
        self._cache = cache

    @property
    def cache(self) -> OptimizedCache:
        if self._cache is None:
            self._cache = OptimizedCache('sleeper_players', cache_hours=SLEEPER_API["players_cache_hours"])
        return self._cache

    def _get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET an endpoint, waiting and retrying while rate limited (429)"""
        url = f"{self.base_url}{endpoint}"

        for attempt in range(1, self.max_attempts + 1):
            try:
                with monitor.measure("sleeper_request", endpoint=endpoint):
                    response = self.session.get(url, params=params, timeout=self.timeout)
            except requests.RequestException as e:
                raise SleeperAPIError(f"Error fetching {endpoint}: {e}")

            if response.status_code == 429:
                logger.debug(f"Rate limited on {endpoint} (attempt {attempt}/{self.max_attempts})")
                if attempt < self.max_attempts:
                    time.sleep(self.retry_delay)
                    continue
                raise SleeperAPIError(f"Rate limit exceeded: {endpoint}", 429)

            if not response.ok:
                template = ERROR_MESSAGES.get(response.status_code, "HTTP error {status}: {endpoint}")
                message = template.format(endpoint=endpoint, status=response.status_code)
                logger.error(f"Error fetching {endpoint}: {message}")
                raise SleeperAPIError(message, response.status_code)

            try:
                return response.json()
            except ValueError as e:
                raise SleeperAPIError(f"Invalid JSON from {endpoint}: {e}")

    # League

    def get_league(self, league_id: str) -> League:
        data = self._get(f"/league/{league_id}") or {}
        if not data:
            raise SleeperAPIError(f"Resource not found: /league/{league_id}", 404)
        return League(
            league_id=str(data.get("league_id", league_id)),
            name=data.get("name") or f"League {league_id}",
            season=str(data.get("season", "")),
            status=LeagueStatus.from_string(data.get("status")),
            total_rosters=int(data.get("total_rosters") or 0),
        )

    def get_rosters(self, league_id: str) -> List[Roster]:
        rosters = []
        for entry in self._get(f"/league/{league_id}/rosters") or []:
            settings = entry.get("settings") or {}
            points = (settings.get("fpts") or 0) + (settings.get("fpts_decimal") or 0) / 100
            rosters.append(Roster(
                roster_id=str(entry.get("roster_id")),
                owner_id=entry.get("owner_id"),
                players=list(entry.get("players") or []),
                starters=list(entry.get("starters") or []),
                wins=int(settings.get("wins") or 0),
                losses=int(settings.get("losses") or 0),
                ties=int(settings.get("ties") or 0),
                points_for=float(points),
            ))
        return rosters

    def get_users(self, league_id: str) -> List[LeagueUser]:
        return [
            LeagueUser(user_id=u.get("user_id"), display_name=u.get("display_name") or u.get("user_id"))
            for u in self._get(f"/league/{league_id}/users") or []
        ]

    def get_matchups(self, league_id: str, week: int) -> List[Matchup]:
        return pair_matchups(self._get(f"/league/{league_id}/matchups/{week}") or [], week)

    def get_all_matchups(self, league_id: str, max_weeks: int = MAX_WEEKS) -> Dict[int, List[Matchup]]:
        """Paired matchups for weeks 1..max_weeks that have any"""
        by_week = {}
        for week in range(1, max_weeks + 1):
            matchups = self.get_matchups(league_id, week)
            if matchups:
                by_week[week] = matchups
        return by_week

    # Drafts

    def get_drafts(self, league_id: str) -> List[Dict]:
        return self._get(f"/league/{league_id}/drafts") or []

    def get_latest_draft_id(self, league_id: str) -> str:
        drafts = self.get_drafts(league_id)
        if not drafts:
            raise SleeperAPIError(f"No drafts found for league {league_id}")
        return str(drafts[-1]["draft_id"])

    def get_draft_picks(self, draft_id: str) -> List[DraftPick]:
        picks = []
        for entry in self._get(f"/draft/{draft_id}/picks") or []:
            metadata = entry.get("metadata") or {}
            name = " ".join(filter(None, [metadata.get("first_name"), metadata.get("last_name")]))
            roster_id = entry.get("roster_id")
            picks.append(DraftPick(
                pick_no=int(entry.get("pick_no") or 0),
                round=int(entry.get("round") or 0),
                player_id=str(entry.get("player_id")),
                picked_by=entry.get("picked_by"),
                roster_id=str(roster_id) if roster_id is not None else None,
                draft_slot=entry.get("draft_slot"),
                metadata_position=metadata.get("position"),
                metadata_name=name or None,
            ))
        return picks

    # Players, stats, projections

    def get_players(self, force_refresh: bool = False) -> Dict[str, Dict]:
        """The full NFL player directory (several MB), cached on disk"""
        return self.cache.get_or_fetch(
            "players_nfl",
            lambda: self._get("/players/nfl") or {},
            force_refresh=force_refresh,
        )

    def get_nfl_state(self) -> Dict:
        return self._get("/state/nfl") or {}

    def get_season_stats(self, season: str) -> Optional[Dict[str, Dict]]:
        """Season totals per player, or None when unavailable"""
        try:
            return self._get(f"/stats/nfl/{season}", params={"season_type": "regular"})
        except SleeperAPIError as e:
            logger.warning(f"Season stats unavailable for {season}: {e}")
            return None

    def get_projections(self, season: str, week: int) -> Optional[Dict[str, Dict]]:
        """Weekly projections per player, or None when unavailable"""
        try:
            return self._get(f"/projections/nfl/{season}/{week}", params={"season_type": "regular"})
        except SleeperAPIError as e:
            logger.warning(f"Projections unavailable for {season} week {week}: {e}")
            return None

    def get_projections_by_week(self, season: str, weeks) -> Dict[int, Dict[str, Dict]]:
        by_week = {}
        for week in weeks:
            projections = self.get_projections(season, week)
            if projections:
                by_week[week] = projections
        return by_week


def identities_from_players(players: Mapping[str, Mapping]) -> Dict[str, PlayerIdentity]:
    """Convert the Sleeper player directory into PlayerIdentity objects"""
    identities = {}
    for player_id, data in (players or {}).items():
        if not data:
            continue
        identities[str(player_id)] = PlayerIdentity(
            player_id=str(player_id),
            first_name=data.get("first_name") or "",
            last_name=data.get("last_name") or "",
            position=data.get("position"),
            team=data.get("team"),
        )
    return identities
