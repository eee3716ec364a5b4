"""
Player and roster models shared across ingestion, ranking and storage.

PlayerRecord is the persisted roster entry; PlayerUpdate is one parsed
message and additionally carries the raw date text for diagnostics.
Both are frozen: the reconciler replaces whole records, never fields.
"""

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from rankboard.config import DEADLOCK, GAMES, OVERWATCH
from rankboard.vocabulary import get_vocabulary, tier_in_bounds


def _format_instant(value: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a Z suffix."""
    if value.tzinfo is None:
        value = value.astimezone()
    utc = value.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _parse_instant(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# camelCase document key for each record field
_DOCUMENT_KEYS = {
    "player_name": "playerName",
    "role": "role",
    "hero": "hero",
    "rank_current": "rankCurrent",
    "tier_current": "tierCurrent",
    "current_value": "currentValue",
    "rank_peak": "rankPeak",
    "tier_peak": "tierPeak",
    "peak_value": "peakValue",
}

_INT_FIELDS = ("tier_current", "current_value", "tier_peak", "peak_value")


@dataclass(frozen=True)
class PlayerRecord:
    """Persisted leaderboard entry for one player in one game."""

    game: str
    player_name: str
    rank_current: str
    tier_current: int
    date: datetime
    role: Optional[str] = None
    hero: Optional[str] = None
    current_value: Optional[int] = None
    rank_peak: Optional[str] = None
    tier_peak: Optional[int] = None
    peak_value: Optional[int] = None

    def __post_init__(self):
        if isinstance(self.date, datetime) and self.date.tzinfo is None:
            # Naive datetimes are local wall-clock time
            object.__setattr__(self, "date", self.date.astimezone())
        _validate(self)

    @property
    def key(self) -> str:
        """Identity within a roster."""
        return self.player_name.lower()

    def to_document(self) -> Dict[str, Any]:
        doc: Dict[str, Any] = {}
        for attr, key in _DOCUMENT_KEYS.items():
            value = getattr(self, attr)
            if value is not None:
                doc[key] = value
        doc["date"] = _format_instant(self.date)
        return doc

    @classmethod
    def from_document(cls, game: str, doc: Dict[str, Any]) -> "PlayerRecord":
        """
        Rebuild a record from its stored document.

        Raises:
            TypeError, ValueError, KeyError: If the document is malformed
        """
        if not isinstance(doc, dict):
            raise TypeError(f"Player entry must be an object, got {type(doc).__name__}")

        kwargs: Dict[str, Any] = {}
        for attr, key in _DOCUMENT_KEYS.items():
            if key in doc and doc[key] is not None:
                kwargs[attr] = doc[key]

        raw_date = doc.get("date")
        if raw_date is not None and raw_date != "":
            if not isinstance(raw_date, str):
                raise TypeError("Player date must be a string")
            kwargs["date"] = _parse_instant(raw_date)
        else:
            kwargs["date"] = datetime.now(timezone.utc)

        return cls(game=game, **kwargs)

    @classmethod
    def from_update(cls, update: "PlayerUpdate") -> "PlayerRecord":
        values = {f.name: getattr(update, f.name) for f in fields(cls)}
        return cls(**values)


@dataclass(frozen=True)
class PlayerUpdate(PlayerRecord):
    """One parsed rank-update message."""

    date_raw: str = ""

    def to_record(self) -> PlayerRecord:
        return PlayerRecord.from_update(self)


@dataclass
class RosterState:
    """All tracked players for one game. List order carries no meaning."""

    game: str
    players: List[PlayerRecord] = field(default_factory=list)

    def __post_init__(self):
        if self.game not in GAMES:
            raise ValueError(f"Unknown game: '{self.game}'")

    def __len__(self) -> int:
        return len(self.players)

    def find(self, player_name: str) -> Optional[PlayerRecord]:
        key = player_name.lower()
        for player in self.players:
            if player.key == key:
                return player
        return None


def _validate(record: PlayerRecord) -> None:
    """Enforce the per-game record shape. Raises ValueError on violation."""
    vocabulary = get_vocabulary(record.game)

    if not isinstance(record.player_name, str) or not record.player_name.strip():
        raise ValueError("player_name must be a non-empty string")
    if not isinstance(record.date, datetime):
        raise ValueError(f"date must be a datetime, got {type(record.date).__name__}")

    for name in ("role", "hero"):
        value = getattr(record, name)
        if value is not None and not isinstance(value, str):
            raise ValueError(f"{name} must be a string, got {value!r}")

    for name in _INT_FIELDS:
        value = getattr(record, name)
        if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
            raise ValueError(f"{name} must be an integer, got {value!r}")

    if record.tier_current is None:
        raise ValueError("tier_current is required")
    if record.rank_current not in vocabulary:
        raise ValueError(f"Unknown {record.game} rank: {record.rank_current!r}")
    if not tier_in_bounds(record.game, record.rank_current, record.tier_current):
        raise ValueError(
            f"Tier {record.tier_current} out of range for {record.game} {record.rank_current}"
        )

    if record.game == DEADLOCK:
        if not record.hero:
            raise ValueError("Deadlock records require a hero")
        if record.current_value is None:
            raise ValueError("Deadlock records require current_value")
        return

    if not record.role:
        raise ValueError(f"{record.game} records require a role")
    if record.rank_peak not in vocabulary:
        raise ValueError(f"Unknown {record.game} peak rank: {record.rank_peak!r}")
    if record.tier_peak is None or not tier_in_bounds(record.game, record.rank_peak, record.tier_peak):
        raise ValueError(
            f"Peak tier {record.tier_peak} out of range for {record.game} {record.rank_peak}"
        )
    if record.game == OVERWATCH and (record.current_value is None or record.peak_value is None):
        raise ValueError("Overwatch records require current_value and peak_value")
