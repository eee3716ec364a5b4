"""
Rank Update Message Parser

This module parses free-text leaderboard update messages for the three
supported games and converts them into PlayerUpdate records.

Message formats (prefix is case-insensitive):
    LB_UPDATE_MR: @<name> <role> <rank> <tier> <rank> <tier> <date...>
    LB_UPDATE_OW: @<name> <role> <rank> <tier> <value> <rank> <tier> <value> <date...>
    LB_UPDATE_DL: @<name> <hero> <rank> <tier> <value> <date...>

Examples:
    LB_UPDATE_MR: @Turbo Strategist Diamond 2 Grandmaster 1 yesterday
    LB_UPDATE_OW: @Alpha Tank Diamond 3 3200 Master 2 3400 2 days ago
    LB_UPDATE_DL: @Player2 Haze Archon 4 1200 Feb 14 2026

A message either parses completely or not at all: any structural mismatch,
unknown rank or out-of-range tier returns None.
"""

import re
from datetime import datetime
from typing import List, NamedTuple, Optional, Sequence

from rankboard.config import (
    MARVEL_RIVALS, OVERWATCH, DEADLOCK, MESSAGE_PREFIXES, MAX_NUMBER_DIGITS,
)
from rankboard.ingestion.dates import parse_date
from rankboard.models import PlayerUpdate
from rankboard.utils import setup_logging, sanitize_field
from rankboard.vocabulary import RankVocabulary, get_vocabulary, tier_in_bounds

# --- Module Logger ---
logger = setup_logging(__name__)

# --- Grammar Tables ---
RANK = "rank"
NUMBER = "number"

# Positional fields following "@<name> <role|hero>"; the date takes the rest
GRAMMARS = {
    MARVEL_RIVALS: (RANK, NUMBER, RANK, NUMBER),
    OVERWATCH: (RANK, NUMBER, NUMBER, RANK, NUMBER, NUMBER),
    DEADLOCK: (RANK, NUMBER, NUMBER),
}

PREFIX_RES = {
    game: re.compile(r"^\s*" + re.escape(prefix) + r"\s*", re.IGNORECASE)
    for game, prefix in MESSAGE_PREFIXES.items()
}

DIGITS_RE = re.compile(r"[0-9]{1,%d}" % MAX_NUMBER_DIGITS)


class BodyMatch(NamedTuple):
    """Fields extracted from a message body before validation."""

    player_name: str
    identity: str  # role for MR/OW, hero for DL
    values: List
    date_raw: str


def match_grammar(
    tokens: Sequence[str],
    grammar: Sequence[str],
    vocabulary: RankVocabulary,
) -> Optional[tuple[list, list[str]]]:
    """
    Match tokens against a positional grammar.

    Args:
        tokens: Message tokens following the role/hero token
        grammar: Sequence of RANK / NUMBER field kinds
        vocabulary: Rank vocabulary used for RANK fields

    Returns:
        (field values, remaining date tokens), or None if no match or if
        no date tokens remain
    """
    values: list = []
    pos = 0

    for kind in grammar:
        if kind == RANK:
            hit = vocabulary.match_at(tokens, pos)
            if hit is None:
                return None
            name, used = hit
            values.append(name)
            pos += used
        else:
            if pos >= len(tokens) or not DIGITS_RE.fullmatch(tokens[pos]):
                return None
            values.append(int(tokens[pos]))
            pos += 1

    date_tokens = list(tokens[pos:])
    if not date_tokens:
        return None
    return values, date_tokens


def _match_body(game: str, content: str) -> Optional[BodyMatch]:
    """
    Strip the prefix and split "@<name> <role|hero> <fields...> <date...>".

    Player names may span several tokens: the shortest name whose remainder
    satisfies the grammar wins.
    """
    body = PREFIX_RES[game].sub("", content, count=1).strip()
    if not body.startswith("@"):
        return None

    tokens = body[1:].split()
    grammar = GRAMMARS[game]
    vocabulary = get_vocabulary(game)

    for split in range(1, len(tokens) - 1):
        matched = match_grammar(tokens[split + 1:], grammar, vocabulary)
        if matched is None:
            continue

        values, date_tokens = matched
        player_name = sanitize_field(" ".join(tokens[:split]))
        identity = sanitize_field(tokens[split])
        if not player_name or not identity:
            return None
        return BodyMatch(player_name, identity, values, " ".join(date_tokens))

    return None


def _reject(game: str, content: str, reason: str) -> None:
    logger.debug(f"Rejected {game} update ({reason}): {content!r}")
    return None


def parse_marvel_rivals(content: str, now: Optional[datetime] = None) -> Optional[PlayerUpdate]:
    """
    Parse a Marvel Rivals update.

    LB_UPDATE_MR: @PlayerName role Rank_current tier_current Rank_peak tier_peak date
    Tiers run 1-3, tier 1 being the best within a rank.
    """
    matched = _match_body(MARVEL_RIVALS, content)
    if matched is None:
        return _reject(MARVEL_RIVALS, content, "grammar mismatch")

    rank_current, tier_current, rank_peak, tier_peak = matched.values
    if not tier_in_bounds(MARVEL_RIVALS, rank_current, tier_current):
        return _reject(MARVEL_RIVALS, content, f"tier {tier_current} out of range")
    if not tier_in_bounds(MARVEL_RIVALS, rank_peak, tier_peak):
        return _reject(MARVEL_RIVALS, content, f"peak tier {tier_peak} out of range")

    return PlayerUpdate(
        game=MARVEL_RIVALS,
        player_name=matched.player_name,
        role=matched.identity,
        rank_current=rank_current,
        tier_current=tier_current,
        rank_peak=rank_peak,
        tier_peak=tier_peak,
        date=parse_date(matched.date_raw, now=now),
        date_raw=matched.date_raw,
    )


def parse_overwatch(content: str, now: Optional[datetime] = None) -> Optional[PlayerUpdate]:
    """
    Parse an Overwatch update.

    LB_UPDATE_OW: @PlayerName role Rank_current tier current_value Rank_peak tier peak_value date
    Tiers run 1-5. For "Top 500" the tier is the leaderboard placement and
    is not bounded.
    """
    matched = _match_body(OVERWATCH, content)
    if matched is None:
        return _reject(OVERWATCH, content, "grammar mismatch")

    rank_current, tier_current, current_value, rank_peak, tier_peak, peak_value = matched.values
    if not tier_in_bounds(OVERWATCH, rank_current, tier_current):
        return _reject(OVERWATCH, content, f"tier {tier_current} out of range")
    if not tier_in_bounds(OVERWATCH, rank_peak, tier_peak):
        return _reject(OVERWATCH, content, f"peak tier {tier_peak} out of range")

    return PlayerUpdate(
        game=OVERWATCH,
        player_name=matched.player_name,
        role=matched.identity,
        rank_current=rank_current,
        tier_current=tier_current,
        current_value=current_value,
        rank_peak=rank_peak,
        tier_peak=tier_peak,
        peak_value=peak_value,
        date=parse_date(matched.date_raw, now=now),
        date_raw=matched.date_raw,
    )


def parse_deadlock(content: str, now: Optional[datetime] = None) -> Optional[PlayerUpdate]:
    """
    Parse a Deadlock update.

    LB_UPDATE_DL: @PlayerName hero_name Rank_current tier current_value date
    Tiers run 1-6 where 6 is the highest.
    """
    matched = _match_body(DEADLOCK, content)
    if matched is None:
        return _reject(DEADLOCK, content, "grammar mismatch")

    rank_current, tier_current, current_value = matched.values
    if not tier_in_bounds(DEADLOCK, rank_current, tier_current):
        return _reject(DEADLOCK, content, f"tier {tier_current} out of range")

    return PlayerUpdate(
        game=DEADLOCK,
        player_name=matched.player_name,
        hero=matched.identity,
        rank_current=rank_current,
        tier_current=tier_current,
        current_value=current_value,
        date=parse_date(matched.date_raw, now=now),
        date_raw=matched.date_raw,
    )


PARSERS = {
    MARVEL_RIVALS: parse_marvel_rivals,
    OVERWATCH: parse_overwatch,
    DEADLOCK: parse_deadlock,
}


def detect_game(content: str) -> Optional[str]:
    """Return the game id whose prefix starts the message, if any."""
    if not isinstance(content, str):
        return None
    lowered = content.strip().lower()
    for game, prefix in MESSAGE_PREFIXES.items():
        if lowered.startswith(prefix.lower()):
            return game
    return None


def parse_message(content: str, now: Optional[datetime] = None) -> Optional[PlayerUpdate]:
    """
    Detect the game from the message prefix and dispatch to its parser.

    Args:
        content: Raw message text
        now: Reference instant for relative dates (default: current time)

    Returns:
        PlayerUpdate, or None if the message does not match any known format
    """
    game = detect_game(content)
    if game is None:
        return None
    return PARSERS[game](content.strip(), now=now)
