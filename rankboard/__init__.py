"""
rankboard - Game Leaderboard Core Package

This package contains the core modules for:
- Update message parsing (rankboard.ingestion)
- Per-game leaderboard ordering and rendering (rankboard.ranking)
- Roster state encoding and reconciliation (rankboard.storage)
- Shared configuration and utilities
"""

from rankboard.config import *
