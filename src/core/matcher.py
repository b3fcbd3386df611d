"""Player name normalization and matching between Sleeper and the ranking sheet"""
import logging
import re
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

import Levenshtein
from fuzzywuzzy import fuzz
from fuzzywuzzy import process

from src.core.models import (
    DraftPick, MatchResult, MatchStats, PlayerIdentity, Position,
    RankingRecord, UnmatchedPlayer
)
from config import FUZZY_MATCH_THRESHOLD


logger = logging.getLogger(__name__)

_NON_WORD = re.compile(r'[^A-Za-z0-9_\s]')
_WHITESPACE = re.compile(r'\s+')

EXACT = "exact"
FUZZY = "fuzzy"
LAST_NAME = "last_name"


def normalize_name(name: str) -> str:
    """Lowercase, strip punctuation and collapse whitespace"""
    if not name:
        return ''
    name = _NON_WORD.sub('', name.lower())
    return _WHITESPACE.sub(' ', name).strip()


def last_word(name: str) -> str:
    parts = name.split(' ')
    return parts[-1] or name


def levenshtein_distance(first: str, second: str) -> int:
    return Levenshtein.distance(first, second)


def similarity(first: str, second: str) -> float:
    """Edit-distance similarity in [0, 1]; two empty strings are identical"""
    longest = max(len(first), len(second))
    if longest == 0:
        return 1.0
    return (longest - levenshtein_distance(first, second)) / longest


def _position_value(position) -> Optional[str]:
    if isinstance(position, Position):
        return position.value
    resolved = Position.from_string(position)
    return resolved.value if resolved else position


def _best_fuzzy(target: str, candidates: Sequence[RankingRecord],
                threshold: float) -> Tuple[Optional[RankingRecord], float]:
    """Highest similarity wins, then smaller edit distance, then list order"""
    best = None
    best_key = None
    for index, record in enumerate(candidates):
        name = normalize_name(record.name)
        distance = levenshtein_distance(target, name)
        score = similarity(target, name)
        if score <= threshold:
            continue
        key = (-score, distance, index)
        if best_key is None or key < best_key:
            best, best_key = record, key
    return best, (-best_key[0] if best_key else 0.0)


def match_identity(identity: PlayerIdentity, position,
                   records: Sequence[RankingRecord],
                   threshold: float = FUZZY_MATCH_THRESHOLD) -> MatchResult:
    """Find the ranking record for a Sleeper player.

    Tried in order, first hit wins:
      1. exact normalized full name at the same position
      2. similarity above ``threshold`` at the same position
      3. last name equal to the record's last word at the same position
    """
    position = _position_value(position)
    candidates = [r for r in records if r.position.value == position]
    target = normalize_name(identity.full_name)

    for record in candidates:
        if normalize_name(record.name) == target:
            return MatchResult(identity, record, EXACT, 1.0)

    record, score = _best_fuzzy(target, candidates, threshold)
    if record:
        logger.debug(f"Fuzzy matched '{identity.full_name}' to '{record.name}' (score: {score:.2f})")
        return MatchResult(identity, record, FUZZY, score)

    last_name = normalize_name(identity.last_name)
    if last_name:
        for record in candidates:
            if normalize_name(last_word(record.name)) == last_name:
                logger.debug(f"Last name matched '{identity.full_name}' to '{record.name}'")
                return MatchResult(identity, record, LAST_NAME, similarity(target, normalize_name(record.name)))

    return MatchResult(identity)


def find_match(player_id: str, position,
               identities: Mapping[str, PlayerIdentity],
               records: Sequence[RankingRecord]) -> Optional[RankingRecord]:
    """Look a Sleeper player id up and return its ranking record, if any"""
    identity = identities.get(player_id)
    if identity is None:
        return None
    return match_identity(identity, position, records).record


def pick_position(pick: DraftPick, identities: Mapping[str, PlayerIdentity]) -> str:
    identity = identities.get(pick.player_id)
    if identity and identity.position:
        return identity.position
    return pick.metadata_position or 'UNKNOWN'


def match_stats(picks: Iterable[DraftPick],
                identities: Mapping[str, PlayerIdentity],
                records: Sequence[RankingRecord]) -> MatchStats:
    """How many draft picks could be tied to a ranking record"""
    picks = list(picks)
    matched = sum(
        1 for pick in picks
        if find_match(pick.player_id, pick_position(pick, identities), identities, records)
    )
    return MatchStats(
        total_picks=len(picks),
        matched_picks=matched,
        unmatched_picks=len(picks) - matched,
        match_rate=(matched / len(picks)) * 100 if picks else 0.0,
    )


def suggest_record(name: str, position: str,
                   records: Sequence[RankingRecord]) -> Tuple[Optional[str], int]:
    """Closest sheet name at a position, for manual review only"""
    choices = [r.name for r in records if r.position.value == position]
    if not choices or not name:
        return None, 0
    best = process.extractOne(name, choices, scorer=fuzz.token_sort_ratio)
    if not best:
        return None, 0
    return best[0], best[1]


def unmatched_players(picks: Iterable[DraftPick],
                      identities: Mapping[str, PlayerIdentity],
                      records: Sequence[RankingRecord]) -> List[UnmatchedPlayer]:
    """Draft picks with a known Sleeper player but no ranking record"""
    unmatched = []

    for pick in picks:
        identity = identities.get(pick.player_id)
        if identity is None:
            continue
        position = pick_position(pick, identities)
        if match_identity(identity, position, records).matched:
            continue

        suggestion, score = suggest_record(identity.full_name, position, records)
        unmatched.append(UnmatchedPlayer(
            player_id=pick.player_id,
            player_name=identity.full_name,
            position=position,
            team=identity.team or 'UNKNOWN',
            suggestion=suggestion,
            suggestion_score=score,
        ))

    if unmatched:
        logger.info(f"{len(unmatched)} drafted players have no ranking record")
    return unmatched
