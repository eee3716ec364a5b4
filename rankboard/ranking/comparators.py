"""
Leaderboard Ordering

One comparator per game. Each walks an ordered list of tie-break keys and
the first non-zero difference decides. The three are kept separate because
Deadlock ranks tiers in the opposite direction to the other two games.

All sort functions are stable and return a new list; the input is never
mutated.
"""

from functools import cmp_to_key
from typing import Callable, Dict, Iterable, List

from rankboard.config import MARVEL_RIVALS, OVERWATCH, DEADLOCK
from rankboard.models import PlayerRecord
from rankboard.vocabulary import VOCABULARIES

MR_VOCABULARY = VOCABULARIES[MARVEL_RIVALS]
OW_VOCABULARY = VOCABULARIES[OVERWATCH]
DL_VOCABULARY = VOCABULARIES[DEADLOCK]


def _compare_recency(a: PlayerRecord, b: PlayerRecord) -> int:
    """Most recent event first."""
    if a.date > b.date:
        return -1
    if a.date < b.date:
        return 1
    return 0


def compare_marvel_rivals(a: PlayerRecord, b: PlayerRecord) -> int:
    # 1. Best current rank (higher index = better)
    rank_diff = MR_VOCABULARY.index(b.rank_current) - MR_VOCABULARY.index(a.rank_current)
    if rank_diff:
        return rank_diff

    # 2. Lower tier wins (tier 1 > tier 2 > tier 3)
    tier_diff = a.tier_current - b.tier_current
    if tier_diff:
        return tier_diff

    # 3. Best peak rank
    peak_rank_diff = MR_VOCABULARY.index(b.rank_peak) - MR_VOCABULARY.index(a.rank_peak)
    if peak_rank_diff:
        return peak_rank_diff

    # 4. Lower peak tier wins
    peak_tier_diff = a.tier_peak - b.tier_peak
    if peak_tier_diff:
        return peak_tier_diff

    # 5. Most recent date
    return _compare_recency(a, b)


def compare_overwatch(a: PlayerRecord, b: PlayerRecord) -> int:
    rank_diff = OW_VOCABULARY.index(b.rank_current) - OW_VOCABULARY.index(a.rank_current)
    if rank_diff:
        return rank_diff

    # Same rank from here on. Inside Top 500 the tier is the placement
    # (#1 beats #500), so the ascending rule covers both cases.
    tier_diff = a.tier_current - b.tier_current
    if tier_diff:
        return tier_diff

    peak_rank_diff = OW_VOCABULARY.index(b.rank_peak) - OW_VOCABULARY.index(a.rank_peak)
    if peak_rank_diff:
        return peak_rank_diff

    peak_tier_diff = a.tier_peak - b.tier_peak
    if peak_tier_diff:
        return peak_tier_diff

    return _compare_recency(a, b)


def compare_deadlock(a: PlayerRecord, b: PlayerRecord) -> int:
    rank_diff = DL_VOCABULARY.index(b.rank_current) - DL_VOCABULARY.index(a.rank_current)
    if rank_diff:
        return rank_diff

    # Higher tier wins (tier 6 > tier 5)
    tier_diff = b.tier_current - a.tier_current
    if tier_diff:
        return tier_diff

    # Lower value wins
    value_diff = a.current_value - b.current_value
    if value_diff:
        return value_diff

    return _compare_recency(a, b)


def sort_marvel_rivals(players: Iterable[PlayerRecord]) -> List[PlayerRecord]:
    """Sort Marvel Rivals players, best first."""
    return sorted(players, key=cmp_to_key(compare_marvel_rivals))


def sort_overwatch(players: Iterable[PlayerRecord]) -> List[PlayerRecord]:
    """Sort Overwatch players, best first."""
    return sorted(players, key=cmp_to_key(compare_overwatch))


def sort_deadlock(players: Iterable[PlayerRecord]) -> List[PlayerRecord]:
    """Sort Deadlock players, best first."""
    return sorted(players, key=cmp_to_key(compare_deadlock))


SORTERS: Dict[str, Callable[[Iterable[PlayerRecord]], List[PlayerRecord]]] = {
    MARVEL_RIVALS: sort_marvel_rivals,
    OVERWATCH: sort_overwatch,
    DEADLOCK: sort_deadlock,
}


def rank_players(game: str, players: Iterable[PlayerRecord]) -> List[PlayerRecord]:
    """
    Order a game's roster for display.

    Raises:
        ValueError: If the game id is unknown
    """
    try:
        sorter = SORTERS[game]
    except KeyError:
        raise ValueError(f"Unknown game: '{game}'") from None
    return sorter(players)
