"""
Leaderboard rendering: rank emojis, relative times and the display text
published for each game. Ordering is decided by the comparators; this
module only lays the rows out.
"""

from datetime import datetime, timezone
from typing import Iterable, Optional

from rankboard.config import MARVEL_RIVALS, OVERWATCH, DEADLOCK
from rankboard.models import PlayerRecord
from rankboard.vocabulary import is_top_bracket

RANK_EMOJIS = {
    # Shared / Overwatch
    "bronze": "🟫",
    "silver": "⚪",
    "gold": "🟡",
    "platinum": "🔵",
    "diamond": "💎",
    "master": "🎖️",
    "grandmaster": "👑",
    "champion": "🏆",
    "top 500": "⭐",
    # Marvel Rivals
    "celestial": "✨",
    "eternity": "♾️",
    "one above all": "🌟",
    # Deadlock
    "initiate": "🔰",
    "seeker": "🔍",
    "alchemist": "⚗️",
    "arcanist": "🔮",
    "ritualist": "📿",
    "emissary": "💼",
    "archon": "👤",
    "oracle": "🧙",
    "phantom": "👻",
    "ascendant": "🎖️",
    "eternus": "♾️",
}

UNKNOWN_EMOJI = "❓"

GAME_HEADERS = {
    MARVEL_RIVALS: "## 🦸 Marvel Rivals Leaderboard",
    OVERWATCH: "## 🔫 Overwatch Leaderboard",
    DEADLOCK: "## 🔒 Deadlock Leaderboard",
}

MEDALS = ("🥇", "🥈", "🥉")


def rank_emoji(rank_name: Optional[str]) -> str:
    return RANK_EMOJIS.get((rank_name or "").lower(), UNKNOWN_EMOJI)


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'} ago"


def relative_time(date: datetime, now: Optional[datetime] = None) -> str:
    """
    Human-readable distance from now, e.g. "2 hours ago" or "just now".

    Months are 30 days and years 365 days. Future dates read "just now".
    """
    current = now or datetime.now(timezone.utc)
    if date.tzinfo is None:
        date = date.astimezone()
    if current.tzinfo is None:
        current = current.astimezone()

    seconds = int((current - date).total_seconds())
    if seconds < 0:
        return "just now"

    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24
    weeks = days // 7
    months = days // 30
    years = days // 365

    if seconds < 10:
        return "just now"
    if seconds < 60:
        return f"{seconds} seconds ago"
    if minutes < 60:
        return _plural(minutes, "minute")
    if hours < 24:
        return _plural(hours, "hour")
    if days < 7:
        return _plural(days, "day")
    if weeks < 5:
        return _plural(weeks, "week")
    if months < 12:
        return _plural(months, "month")
    return _plural(years, "year")


def _position_label(position: int) -> str:
    if position <= len(MEDALS):
        return MEDALS[position - 1]
    return f"`{position:>2}`"


def _tier_label(game: str, rank: str, tier: int) -> str:
    return f"#{tier}" if is_top_bracket(game, rank) else f"{tier}"


def render_player(player: PlayerRecord, game: str, position: int,
                  now: Optional[datetime] = None) -> str:
    """Render one leaderboard row."""
    pos = _position_label(position)
    time = relative_time(player.date, now=now)

    if game == MARVEL_RIVALS:
        return (
            f"{pos} **@{player.player_name}** • {player.role} • "
            f"{rank_emoji(player.rank_current)} {player.rank_current} {player.tier_current} • "
            f"Peak: {rank_emoji(player.rank_peak)} {player.rank_peak} {player.tier_peak} • "
            f"*{time}*"
        )

    if game == OVERWATCH:
        current_tier = _tier_label(game, player.rank_current, player.tier_current)
        peak_tier = _tier_label(game, player.rank_peak, player.tier_peak)
        return (
            f"{pos} **@{player.player_name}** • {player.role} • "
            f"{rank_emoji(player.rank_current)} {player.rank_current} {current_tier} "
            f"({player.current_value} SR) • "
            f"Peak: {rank_emoji(player.rank_peak)} {player.rank_peak} {peak_tier} "
            f"({player.peak_value} SR) • "
            f"*{time}*"
        )

    if game == DEADLOCK:
        return (
            f"{pos} **@{player.player_name}** • {player.hero} • "
            f"{rank_emoji(player.rank_current)} {player.rank_current} {player.tier_current} "
            f"({player.current_value} pts) • "
            f"*{time}*"
        )

    return f"{pos} **@{player.player_name}** • *{time}*"


def render_leaderboard(players: Iterable[PlayerRecord], game: str,
                       now: Optional[datetime] = None) -> str:
    """
    Render a full leaderboard message from already-sorted players.

    Args:
        players: Players in display order (see rank_players)
        game: Game id
        now: Reference instant for relative times and the footer

    Returns:
        Markdown text suitable for a chat message
    """
    current = now or datetime.now(timezone.utc)
    header = GAME_HEADERS.get(game, f"## {game} Leaderboard")
    stamp = current.astimezone(timezone.utc).strftime("%a, %d %b %Y %H:%M:%S GMT")
    footer = f"-# Last updated: {stamp}"

    rows = [
        render_player(player, game, position, now=current)
        for position, player in enumerate(players, start=1)
    ]
    if not rows:
        return f"{header}\n\n*No players yet. Post an update to get started!*\n\n{footer}"

    body = "\n".join(rows)
    return f"{header}\n\n{body}\n\n{footer}"
