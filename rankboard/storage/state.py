"""
Leaderboard State Encoding & Reconciliation

Each game's roster is persisted as a single text envelope:

    LB_STATE:<GAME>:{"players":[...]}

The envelope may sit at the end of a larger human-readable message, so
decoding searches for the marker rather than expecting it at offset 0.
Decoding is total: absent, truncated or corrupted input produces an empty
roster (with a logged reason) instead of an exception.

Merging follows last-write-wins by event time: an update older than the
stored record for the same player is ignored.
"""

import json
import re
from dataclasses import dataclass
from typing import Optional

from rankboard.config import GAMES, STATE_PREFIX
from rankboard.models import PlayerRecord, PlayerUpdate, RosterState
from rankboard.utils import setup_logging

# --- Module Logger ---
logger = setup_logging(__name__)

MARKER_RE = re.compile(re.escape(STATE_PREFIX) + r"([A-Z_]+):")

_json_decoder = json.JSONDecoder()
_WHITESPACE_RE = re.compile(r"\s*")


class StateDecodeError(ValueError):
    """Raised internally when an envelope payload is unusable."""
    pass


@dataclass
class DecodeResult:
    """
    Outcome of decoding an envelope.

    recovered is True when the input could not be used and an empty roster
    was substituted; reason then says why.
    """

    roster: RosterState
    recovered: bool = False
    reason: Optional[str] = None


def state_marker(game: str) -> str:
    return f"{STATE_PREFIX}{game}:"


def encode_state(roster: RosterState) -> str:
    """
    Serialize a roster into its envelope text.

    Args:
        roster: Roster to encode

    Returns:
        Marker followed by compact JSON
    """
    payload = {"players": [player.to_document() for player in roster.players]}
    body = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
    return f"{state_marker(roster.game)}{body}"


def _players_from_payload(game: str, payload) -> RosterState:
    if not isinstance(payload, dict):
        raise StateDecodeError("payload is not an object")
    players = payload.get("players")
    if not isinstance(players, list):
        raise StateDecodeError("payload has no players list")

    roster = RosterState(game=game)
    for index, doc in enumerate(players):
        try:
            record = PlayerRecord.from_document(game, doc)
        except (KeyError, TypeError, ValueError) as e:
            raise StateDecodeError(f"player #{index} is invalid: {e}") from e
        # Duplicate names collapse to the most recent entry
        upsert_player(roster, record)
    return roster


def decode_state_result(text: Optional[str], game: Optional[str] = None) -> DecodeResult:
    """
    Decode an envelope, reporting whether recovery to empty was needed.

    Args:
        text: Stored message text, possibly with surrounding content
        game: Expected game id. When None the id is read from the marker.

    Returns:
        DecodeResult; never raises for bad input
    """
    def recover(reason: str, fallback_game: Optional[str]) -> DecodeResult:
        logger.warning(f"Using empty state ({reason})")
        return DecodeResult(RosterState(game=fallback_game or game or GAMES[0]), True, reason)

    if game is not None and game not in GAMES:
        raise ValueError(f"Unknown game: '{game}'")

    if not text or not isinstance(text, str):
        return recover("no stored state", game)

    last_reason = "state marker not found"
    for m in MARKER_RE.finditer(text):
        marker_game = m.group(1)
        if game is not None and marker_game != game:
            continue
        if marker_game not in GAMES:
            last_reason = f"unknown game in marker: {marker_game}"
            continue

        try:
            start = _WHITESPACE_RE.match(text, m.end()).end()
            payload, _ = _json_decoder.raw_decode(text, start)
            roster = _players_from_payload(marker_game, payload)
        except json.JSONDecodeError as e:
            last_reason = f"invalid state JSON: {e.msg}"
            continue
        except StateDecodeError as e:
            last_reason = str(e)
            continue
        except (RecursionError, ValueError) as e:
            # Nesting too deep or an integer literal too long to convert
            last_reason = f"unreadable state JSON: {type(e).__name__}"
            continue

        return DecodeResult(roster)

    return recover(last_reason, game)


def decode_state(text: Optional[str], game: Optional[str] = None) -> RosterState:
    """Decode an envelope; any problem yields an empty roster."""
    return decode_state_result(text, game).roster


def upsert_player(roster: RosterState, update: PlayerRecord) -> bool:
    """
    Merge a player update into a roster in place.

    Args:
        roster: Roster to mutate
        update: Parsed update (or record) for the roster's game

    Returns:
        True if the roster changed, False for a stale update

    Raises:
        ValueError: If the update belongs to another game
    """
    if update.game != roster.game:
        raise ValueError(f"Cannot merge {update.game} update into {roster.game} roster")

    record = update.to_record() if isinstance(update, PlayerUpdate) else update

    for idx, existing in enumerate(roster.players):
        if existing.key != record.key:
            continue

        if record.date < existing.date:
            logger.info(
                f"Skipping stale update for {record.player_name}: "
                f"incoming {record.date.isoformat()} < existing {existing.date.isoformat()}"
            )
            return False

        roster.players[idx] = record
        return True

    roster.players.append(record)
    return True
