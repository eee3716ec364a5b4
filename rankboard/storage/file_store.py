"""
File-backed state persistence.

Keeps one envelope per game under a folder, e.g. data/state/overwatch_state.txt.
Writes go through a temporary file and an atomic move so an interrupted run
never leaves a half-written envelope behind.
"""

from pathlib import Path
from typing import Optional

from rankboard.config import STATE_FOLDER, STATE_FILE_SUFFIX
from rankboard.utils import setup_logging, atomic_write_text

# --- Module Logger ---
logger = setup_logging(__name__)


class StoreError(Exception):
    """Raised when stored state cannot be read or written"""
    pass


class FileStateStore:
    """Stores encoded roster envelopes as text files."""

    def __init__(self, folder: Optional[Path] = None):
        self.folder = Path(folder) if folder is not None else STATE_FOLDER

    def path_for(self, game: str) -> Path:
        return self.folder / f"{game.lower()}{STATE_FILE_SUFFIX}"

    def load_state(self, game: str) -> Optional[str]:
        """
        Read the stored envelope for a game.

        Returns:
            Envelope text, or None if nothing has been stored yet

        Raises:
            StoreError: If the file exists but cannot be read
        """
        path = self.path_for(game)
        if not path.exists():
            logger.info(f"No stored state for {game} at {path}")
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StoreError(f"Could not read {path}: {e}") from e

    def save_state(self, game: str, text: str) -> Path:
        """
        Persist the envelope for a game, replacing any previous one.

        Raises:
            StoreError: If the file cannot be written
        """
        path = self.path_for(game)
        try:
            atomic_write_text(text, path)
        except OSError as e:
            raise StoreError(f"Could not write {path}: {e}") from e
        logger.debug(f"Saved {game} state to {path}")
        return path
