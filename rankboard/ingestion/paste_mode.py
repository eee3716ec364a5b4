"""
Paste-Mode Leaderboard Ingestion

Runs a sync from update messages pasted into the terminal instead of a
chat channel. Each non-empty line is one message; state is kept in local
files and the rendered leaderboards are printed.

Usage:
    python -m rankboard.ingestion.paste_mode
    OR
    python rankboard/ingestion/paste_mode.py

    Programmatic usage:
        from rankboard.ingestion.paste_mode import ingest_pasted_text
        summary = ingest_pasted_text(text)
"""

import sys
from pathlib import Path

# Add project root to path for direct script execution
_project_root = str(Path(__file__).parent.parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from datetime import datetime
from typing import Dict, List, Optional

from rankboard.config import MAX_INPUT_SIZE
from rankboard.storage.file_store import FileStateStore
from rankboard.sync import GameConfig, IncomingMessage, SyncConfig, SyncSummary, run_sync
from rankboard.utils import setup_logging, validate_input_size

# --- Module Logger ---
logger = setup_logging(__name__)


class PasteSource:
    """Message source backed by pasted text, one message per line."""

    def __init__(self, text: str):
        validate_input_size(text, MAX_INPUT_SIZE)
        self.messages = [
            IncomingMessage(id=f"line-{number}", content=line.strip(), arrival_order=number)
            for number, line in enumerate(text.splitlines(), start=1)
            if line.strip()
        ]
        self.acknowledged: List[str] = []

    def fetch_messages(self) -> List[IncomingMessage]:
        return list(self.messages)

    def acknowledge(self, message: IncomingMessage) -> bool:
        self.acknowledged.append(message.id)
        return True


class ConsolePublisher:
    """Keeps the latest rendered board per game and echoes it to stdout."""

    def __init__(self, echo: bool = True):
        self.echo = echo
        self.published: Dict[str, str] = {}

    def publish(self, game_config: GameConfig, content: str) -> Optional[str]:
        self.published[game_config.game] = content
        if self.echo:
            print(content)
            print()
        return None


def ingest_pasted_text(
    text: str,
    store: Optional[FileStateStore] = None,
    publisher: Optional[ConsolePublisher] = None,
    now: Optional[datetime] = None,
) -> SyncSummary:
    """
    Main entry point for paste-mode ingestion.

    Args:
        text: Pasted update messages, one per line
        store: State store (default: FileStateStore on the data folder)
        publisher: Publish target (default: ConsolePublisher)
        now: Reference instant for relative dates

    Returns:
        SyncSummary of the run

    Raises:
        ValueError: If the pasted text exceeds MAX_INPUT_SIZE
    """
    source = PasteSource(text)
    return run_sync(
        SyncConfig.local(),
        source,
        store or FileStateStore(),
        publisher or ConsolePublisher(),
        now=now,
    )


def main():
    """CLI interface for paste-mode ingestion."""
    print("=" * 60)
    print("Paste-Mode Leaderboard Sync")
    print("=" * 60)
    print("\nPaste LB_UPDATE_* messages below, one per line.")
    print("When finished, press Enter twice (empty line) to process.\n")
    print("-" * 60)

    lines = []
    empty_count = 0

    try:
        while True:
            line = input()
            if line == "":
                empty_count += 1
                if empty_count >= 2:
                    break
            else:
                empty_count = 0
                lines.append(line)
    except EOFError:
        pass

    text = "\n".join(lines)

    if not text.strip():
        print("\nNo input received. Exiting.")
        sys.exit(1)

    print("-" * 60)
    print("\nProcessing input...\n")

    try:
        summary = ingest_pasted_text(text)
    except ValueError as e:
        print(f"\nINPUT ERROR: {e}")
        sys.exit(1)

    print("=" * 60)
    for game, stats in summary.games.items():
        print(f"  {game}: {stats.processed} updated, {stats.stale} stale, {stats.players} players")
    if summary.skipped:
        print(f"  Skipped {len(summary.skipped)} unrecognized line(s):")
        for msg in summary.skipped:
            print(f"    {msg.id}: {msg.content}")
    print("=" * 60)


if __name__ == "__main__":
    main()
