"""
Central configuration for the rankboard leaderboard system.

All shared constants and configuration values should be defined here
to avoid duplication and ensure consistency across modules.
"""

from pathlib import Path

# --- Project Paths ---
PROJECT_ROOT = Path(__file__).parent.parent
DATA_FOLDER = PROJECT_ROOT / "data"
STATE_FOLDER = DATA_FOLDER / "state"

# --- Games ---
MARVEL_RIVALS = "MARVEL_RIVALS"
OVERWATCH = "OVERWATCH"
DEADLOCK = "DEADLOCK"

GAMES = (MARVEL_RIVALS, OVERWATCH, DEADLOCK)

# Message prefixes (matched case-insensitively)
MESSAGE_PREFIXES = {
    MARVEL_RIVALS: "LB_UPDATE_MR:",
    OVERWATCH: "LB_UPDATE_OW:",
    DEADLOCK: "LB_UPDATE_DL:",
}

# --- Rank Vocabularies (ascending: later = better) ---
MARVEL_RIVALS_RANKS = (
    "Bronze", "Silver", "Gold", "Platinum", "Diamond",
    "Grandmaster", "Celestial", "Eternity", "One Above All",
)

OVERWATCH_RANKS = (
    "Bronze", "Silver", "Gold", "Platinum", "Diamond",
    "Master", "Grandmaster", "Champion", "Top 500",
)

DEADLOCK_RANKS = (
    "Initiate", "Seeker", "Alchemist", "Arcanist",
    "Ritualist", "Emissary", "Archon", "Oracle",
    "Phantom", "Ascendant", "Eternus",
)

# --- Tier Rules ---
# Inclusive (min, max) tier per game
TIER_BOUNDS = {
    MARVEL_RIVALS: (1, 3),
    OVERWATCH: (1, 5),
    DEADLOCK: (1, 6),
}

# Ranks whose "tier" is a leaderboard placement, exempt from TIER_BOUNDS
TOP_BRACKET_RANKS = {
    OVERWATCH: "Top 500",
}

# --- State Storage ---
STATE_PREFIX = "LB_STATE:"
STATE_FILE_SUFFIX = "_state.txt"

# --- Environment Variables (orchestration only) ---
ENV_LISTENING_CHANNEL_ID = "LISTENING_CHANNEL_ID"
ENV_WEBHOOK_URL_SUFFIX = "_WEBHOOK_URL"
ENV_MESSAGE_ID_SUFFIX = "_MESSAGE_ID"

# --- Input Validation ---
MAX_INPUT_SIZE = 50_000  # Maximum pasted batch size in bytes (~50KB)
MAX_NUMBER_DIGITS = 9  # Longest digit run accepted for a tier or rating
