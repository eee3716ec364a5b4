"""
Shared utilities for the rankboard leaderboard system.

This module provides common functions used across multiple modules
to avoid code duplication.
"""

import logging
import re
import shutil
import tempfile
from pathlib import Path

# Characters stripped from player names and role/hero fields
UNSAFE_CHARS_RE = re.compile(r"[<>\"';()]")


def sanitize_field(value: str) -> str:
    """Remove markup-sensitive characters and leading/trailing spaces."""
    return UNSAFE_CHARS_RE.sub("", str(value)).strip()


# --- Logging Setup ---
def setup_logging(name: str | None = None, level: int = logging.INFO) -> logging.Logger:
    """
    Configure and return a logger with consistent formatting.

    Args:
        name: Logger name (usually __name__ from the calling module)
        level: Logging level (default: INFO)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(level)
    return logger


# --- File Operations ---
def atomic_write_text(text: str, path: Path) -> None:
    """
    Write text to a file atomically using a temporary file.

    A reader never sees a half-written state file.

    Args:
        text: Content to write
        path: Destination path
    """
    logger = setup_logging(__name__)

    path.parent.mkdir(parents=True, exist_ok=True)

    try:
        with tempfile.NamedTemporaryFile(
            mode='w',
            encoding='utf-8',
            delete=False,
            suffix='.tmp',
            dir=path.parent  # Same filesystem for atomic move
        ) as tmp:
            tmp.write(text)
            tmp_path = Path(tmp.name)

        shutil.move(str(tmp_path), str(path))
        logger.debug(f"Atomically wrote {len(text)} chars to {path}")

    except Exception:
        if 'tmp_path' in locals() and tmp_path.exists():
            tmp_path.unlink()
        raise


# --- Validation ---
def validate_input_size(text: str, max_size: int) -> None:
    """
    Validate that input text does not exceed maximum size.

    Args:
        text: Input text to validate
        max_size: Maximum allowed size in bytes

    Raises:
        ValueError: If input exceeds max_size
    """
    if len(text) > max_size:
        raise ValueError(
            f"Input too large: {len(text):,} bytes. "
            f"Maximum allowed: {max_size:,} bytes"
        )


__all__ = [
    # Logging
    'setup_logging',
    # File operations
    'atomic_write_text',
    # Validation
    'validate_input_size',
    # Message fields
    'UNSAFE_CHARS_RE',
    'sanitize_field',
]
