"""
Leaderboard Sync

Runs one batch: fetch update messages, parse them, merge them into each
game's stored roster, re-rank, persist and publish. Transport (chat API,
webhooks) stays behind the MessageSource / StateStore / Publisher
protocols so this module only decides what happens, in which order.

Usage:
    from rankboard.sync import run_sync, SyncConfig
    summary = run_sync(SyncConfig.local(), source, store, publisher)
"""

import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional, Protocol

from rankboard.config import (
    GAMES,
    ENV_LISTENING_CHANNEL_ID,
    ENV_WEBHOOK_URL_SUFFIX,
    ENV_MESSAGE_ID_SUFFIX,
)
from rankboard.ingestion.message_parser import parse_message
from rankboard.models import PlayerUpdate
from rankboard.ranking.comparators import rank_players
from rankboard.ranking.renderer import render_leaderboard
from rankboard.storage.file_store import StoreError
from rankboard.storage.state import decode_state_result, encode_state, upsert_player
from rankboard.utils import setup_logging

# --- Module Logger ---
logger = setup_logging(__name__)


class ConfigError(ValueError):
    """Raised when required configuration is missing"""
    pass


class PublishError(Exception):
    """Raised by publishers when a leaderboard could not be posted"""
    pass


# --- Configuration ---
@dataclass
class GameConfig:
    """Transport identifiers for one game's public leaderboard."""

    game: str
    webhook_url: Optional[str] = None
    message_id: Optional[str] = None


@dataclass
class SyncConfig:
    listening_channel_id: Optional[str] = None
    games: Dict[str, GameConfig] = field(default_factory=dict)

    @classmethod
    def local(cls) -> "SyncConfig":
        """All games enabled, no remote identifiers."""
        return cls(games={game: GameConfig(game) for game in GAMES})


def load_sync_config(environ: Optional[Mapping[str, str]] = None) -> SyncConfig:
    """
    Build a SyncConfig from environment variables.

    Reads LISTENING_CHANNEL_ID, <GAME>_WEBHOOK_URL (required) and
    <GAME>_MESSAGE_ID (optional) for every game.

    Raises:
        ConfigError: If a required variable is missing or empty
    """
    env = os.environ if environ is None else environ
    missing = []

    channel_id = env.get(ENV_LISTENING_CHANNEL_ID)
    if not channel_id:
        missing.append(ENV_LISTENING_CHANNEL_ID)

    games = {}
    for game in GAMES:
        url_key = f"{game}{ENV_WEBHOOK_URL_SUFFIX}"
        webhook_url = env.get(url_key)
        if not webhook_url:
            missing.append(url_key)
        message_id = env.get(f"{game}{ENV_MESSAGE_ID_SUFFIX}") or None
        games[game] = GameConfig(game, webhook_url, message_id)

    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

    return SyncConfig(listening_channel_id=channel_id, games=games)


# --- Collaborators ---
@dataclass
class IncomingMessage:
    id: str
    content: str
    arrival_order: int = 0


class MessageSource(Protocol):
    def fetch_messages(self) -> List[IncomingMessage]: ...

    def acknowledge(self, message: IncomingMessage) -> bool: ...


class StateStore(Protocol):
    def load_state(self, game: str) -> Optional[str]: ...

    def save_state(self, game: str, text: str) -> object: ...


class Publisher(Protocol):
    def publish(self, game_config: GameConfig, content: str) -> Optional[str]: ...


# --- Results ---
@dataclass
class GameStats:
    processed: int = 0
    stale: int = 0
    acknowledged: int = 0
    errors: int = 0
    players: int = 0


@dataclass
class SyncSummary:
    skipped: List[IncomingMessage] = field(default_factory=list)
    games: Dict[str, GameStats] = field(default_factory=dict)


# --- Batch Processing ---
def group_updates(
    messages: List[IncomingMessage],
    games: Mapping[str, GameConfig],
    now: Optional[datetime] = None,
) -> tuple[Dict[str, List[tuple[IncomingMessage, PlayerUpdate]]], List[IncomingMessage]]:
    """
    Parse messages in arrival order and bucket them by game.

    Returns:
        (updates per enabled game, messages that did not parse)
    """
    by_game: Dict[str, List[tuple[IncomingMessage, PlayerUpdate]]] = {game: [] for game in games}
    unparsed: List[IncomingMessage] = []

    for msg in sorted(messages, key=lambda m: m.arrival_order):
        update = parse_message(msg.content, now=now)
        if update is None or update.game not in by_game:
            unparsed.append(msg)
            continue
        by_game[update.game].append((msg, update))

    return by_game, unparsed


def process_game(
    game_config: GameConfig,
    updates: List[tuple[IncomingMessage, PlayerUpdate]],
    source: MessageSource,
    store: StateStore,
    publisher: Publisher,
    now: Optional[datetime] = None,
) -> GameStats:
    """
    Apply one game's updates to its stored roster and republish it.

    Args:
        game_config: Target game and its transport identifiers
        updates: (message, parsed update) pairs in arrival order
        source: Used to acknowledge consumed messages
        store: Roster persistence
        publisher: Leaderboard publish target
        now: Reference instant for rendering

    Returns:
        GameStats for this game
    """
    game = game_config.game
    stats = GameStats()

    logger.info(f"Processing {game} ({len(updates)} update(s))")

    # Load current state
    stored = None
    try:
        stored = store.load_state(game)
    except StoreError as e:
        logger.warning(f"{game}: Could not load stored state, starting fresh: {e}")

    decoded = decode_state_result(stored, game)
    roster = decoded.roster
    logger.info(f"{game}: {len(roster)} existing player(s) in state")

    # Apply updates
    for msg, update in updates:
        if upsert_player(roster, update):
            logger.info(f"{game}: Updated player {update.player_name}")
            stats.processed += 1
        else:
            stats.stale += 1

        if source.acknowledge(msg):
            stats.acknowledged += 1
        else:
            logger.error(f"{game}: Failed to acknowledge message {msg.id}")
            stats.errors += 1

    stats.players = len(roster)

    # Persist
    try:
        store.save_state(game, encode_state(roster))
    except StoreError as e:
        logger.error(f"{game}: Failed to save state: {e}")
        stats.errors += 1

    # Rank, render and publish
    ranked = rank_players(game, roster.players)
    content = render_leaderboard(ranked, game, now=now)
    try:
        message_id = publisher.publish(game_config, content)
    except PublishError as e:
        logger.error(f"{game}: Failed to publish leaderboard: {e}")
        stats.errors += 1
        return stats

    if message_id and message_id != game_config.message_id:
        if game_config.message_id is None:
            logger.warning(f"NEW MESSAGE ID for {game}: {message_id}")
            logger.warning(f"Persist it as {game}{ENV_MESSAGE_ID_SUFFIX}={message_id}")
        game_config.message_id = message_id

    return stats


def run_sync(
    config: SyncConfig,
    source: MessageSource,
    store: StateStore,
    publisher: Publisher,
    now: Optional[datetime] = None,
) -> SyncSummary:
    """
    Main entry point for one sync run.

    Returns:
        SyncSummary with skipped messages and per-game stats
    """
    started = datetime.now(timezone.utc)
    logger.info("=" * 60)
    logger.info("Leaderboard Sync")
    logger.info("=" * 60)

    summary = SyncSummary()

    messages = source.fetch_messages()
    if not messages:
        logger.info("No messages to process.")
        return summary

    by_game, unparsed = group_updates(messages, config.games, now=now)
    summary.skipped = unparsed

    counts = ", ".join(f"{game}: {len(items)}" for game, items in by_game.items())
    logger.info(f"Parsed - {counts}, Skipped: {len(unparsed)}")
    for msg in unparsed:
        logger.info(f"Skipping unrecognized message {msg.id}")

    for game, updates in by_game.items():
        if not updates:
            logger.info(f"{game}: no updates.")
            continue
        summary.games[game] = process_game(
            config.games[game], updates, source, store, publisher, now=now
        )

    elapsed = (datetime.now(timezone.utc) - started).total_seconds()
    logger.info("=" * 60)
    logger.info(f"Sync complete in {elapsed:.1f}s")
    for game, stats in summary.games.items():
        logger.info(
            f"  {game}: {stats.processed} processed, {stats.stale} stale, "
            f"{stats.acknowledged} acknowledged, {stats.errors} errors"
        )
    logger.info("=" * 60)

    return summary
