"""Played-game detection and recent-game windowing."""

from typing import Iterable, List

from ..config.scoring import ScoringSystem
from ..data.records import WeeklyStat

# Usage or production fields; any positive value means the player was active
USAGE_FIELDS = (
    "pass_td",
    "pass_yd",
    "rush_td",
    "rush_yd",
    "rec",
    "rec_td",
    "rec_yd",
    "targets",
    "carries",
)


def did_play(stat: WeeklyStat) -> bool:
    """Whether a week shows any real usage.

    Inactive, bye and DNP weeks usually come back as all-zero or empty stat
    lines and must not count toward a per-game average.
    """
    if stat.pts_ppr is not None and stat.pts_ppr != 0:
        return True
    return any((getattr(stat, field) or 0) > 0 for field in USAGE_FIELDS)


def sort_chronologically(weeks: Iterable[WeeklyStat]) -> List[WeeklyStat]:
    """Oldest first by (season, week)."""
    return sorted(weeks, key=lambda w: (w.season, w.week))


def last_n_played_points(weeks: Iterable[WeeklyStat],
                         n: int,
                         scoring: ScoringSystem) -> List[float]:
    """Fantasy points of the ``n`` most recent played games, oldest first.

    Returns fewer than ``n`` values when the history is short, and an empty
    list when no week was played.
    """
    if n <= 0:
        return []
    played = [
        scoring.calculate_fantasy_points(week)
        for week in sort_chronologically(weeks)
        if did_play(week)
    ]
    return played[-n:]
