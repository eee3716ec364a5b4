"""
Rank Vocabularies

Each game has an ordered list of canonical rank names. The position of a
rank in that list is its comparison index (higher = better). Rank text in
messages is matched case-insensitively, longest candidate first, so that
multi-word ranks such as "One Above All" or "Top 500" win over any shorter
overlapping token.
"""

from typing import Optional, Sequence

from rankboard.config import (
    MARVEL_RIVALS,
    OVERWATCH,
    DEADLOCK,
    MARVEL_RIVALS_RANKS,
    OVERWATCH_RANKS,
    DEADLOCK_RANKS,
    TIER_BOUNDS,
    TOP_BRACKET_RANKS,
)


class RankVocabulary:
    """Ordered, case-insensitive set of rank names for one game."""

    def __init__(self, game: str, names: Sequence[str]):
        self.game = game
        self.names = tuple(names)
        self._index = {name.lower(): i for i, name in enumerate(self.names)}
        if len(self._index) != len(self.names):
            raise ValueError(f"Duplicate rank names in {game} vocabulary")

        # Token table: (lowercased words, canonical name), longest first
        self._table = sorted(
            ((tuple(name.lower().split()), name) for name in self.names),
            key=lambda entry: (len(entry[0]), len(entry[1])),
            reverse=True,
        )

    def __contains__(self, name: str) -> bool:
        return self.canonical(name) is not None

    def __len__(self) -> int:
        return len(self.names)

    def __repr__(self) -> str:
        return f"RankVocabulary({self.game!r}, {len(self.names)} ranks)"

    def index(self, name: Optional[str]) -> int:
        """Comparison index of a rank name; -1 when unknown."""
        if not isinstance(name, str) or not name:
            return -1
        return self._index.get(" ".join(name.lower().split()), -1)

    def canonical(self, text: Optional[str]) -> Optional[str]:
        """Canonical spelling of a rank name, or None when unknown."""
        idx = self.index(text)
        return self.names[idx] if idx >= 0 else None

    def match_at(self, tokens: Sequence[str], pos: int) -> Optional[tuple[str, int]]:
        """
        Match a rank name starting at tokens[pos].

        Args:
            tokens: Whitespace-split message tokens
            pos: Position to start matching at

        Returns:
            (canonical name, number of tokens consumed), or None
        """
        for words, name in self._table:
            end = pos + len(words)
            if end > len(tokens):
                continue
            if tuple(t.lower() for t in tokens[pos:end]) == words:
                return name, len(words)
        return None


VOCABULARIES = {
    MARVEL_RIVALS: RankVocabulary(MARVEL_RIVALS, MARVEL_RIVALS_RANKS),
    OVERWATCH: RankVocabulary(OVERWATCH, OVERWATCH_RANKS),
    DEADLOCK: RankVocabulary(DEADLOCK, DEADLOCK_RANKS),
}


def get_vocabulary(game: str) -> RankVocabulary:
    """Return the vocabulary for a game id, raising ValueError if unknown."""
    try:
        return VOCABULARIES[game]
    except KeyError:
        raise ValueError(f"Unknown game: '{game}'") from None


def is_top_bracket(game: str, rank: Optional[str]) -> bool:
    """True when the rank's tier is a leaderboard placement number."""
    top = TOP_BRACKET_RANKS.get(game)
    return top is not None and isinstance(rank, str) and rank.lower() == top.lower()


def tier_in_bounds(game: str, rank: str, tier: int) -> bool:
    """
    Check a tier against the game's bounds.

    Top-bracket ranks carry a placement instead of a tier and are exempt.
    """
    if is_top_bracket(game, rank):
        return True
    low, high = TIER_BOUNDS[game]
    return low <= tier <= high
