"""
Leaderboard Ranking

Modules:
- comparators: Per-game ordering of rosters
- renderer: Leaderboard display text
"""


def __getattr__(name):
    """Lazy imports to avoid RuntimeWarning when running modules directly."""
    if name == "rank_players":
        from rankboard.ranking.comparators import rank_players
        return rank_players
    if name == "render_leaderboard":
        from rankboard.ranking.renderer import render_leaderboard
        return render_leaderboard
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
