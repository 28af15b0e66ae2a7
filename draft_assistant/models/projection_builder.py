"""Builds per-game projections from weekly stat history."""

import logging
import math
from collections import defaultdict
from datetime import date
from typing import AbstractSet, Dict, Iterable, List, Mapping, Optional, Protocol, Sequence

from ..config.scoring import ScoringSystem
from ..data.records import Player, ProjectionRow, WeeklyStat
from ..data.sleeper_client import WeekPage
from ..data.stat_normalizer import extract_player_id, normalize_weekly_stat
from ..exceptions import UpstreamUnavailableError
from .age_adjustment import age_in_years, age_multiplier
from .played_filter import last_n_played_points, sort_chronologically

logger = logging.getLogger(__name__)

LAST_N_GAMES = 50


class WeeklyPageSource(Protocol):
    def fetch_weeks(self, seasons: Sequence[int]) -> List[WeekPage]:
        ...


def bucket_weekly_stats(pages: Iterable[WeekPage],
                        player_ids: Optional[AbstractSet[str]] = None) -> Dict[str, List[WeeklyStat]]:
    """Normalize raw page rows and group them by player id.

    Only the first record seen for a given (player, season, week) is kept.
    Rows that cannot be normalized are dropped. When ``player_ids`` is given,
    rows for other players are skipped before normalization.
    """
    buckets: Dict[str, List[WeeklyStat]] = defaultdict(list)
    seen = set()
    dropped = 0

    for page in pages:
        for raw in page.rows:
            if player_ids is not None and (
                    not isinstance(raw, Mapping) or extract_player_id(raw) not in player_ids):
                continue
            stat = normalize_weekly_stat(raw, page.season, page.week)
            if stat is None:
                dropped += 1
                continue
            identity = (stat.player_id, stat.season, stat.week)
            if identity in seen:
                continue
            seen.add(identity)
            buckets[stat.player_id].append(stat)

    if dropped:
        logger.debug(f"Dropped {dropped} unusable stat rows")
    return dict(buckets)


def finite_ppg(value: float) -> float:
    """Coerce a projection to a finite, non-negative number."""
    if not math.isfinite(value):
        return 0.0
    return max(0.0, value)


def project_ppg(weeks: Iterable[WeeklyStat],
                player: Player,
                scoring: ScoringSystem,
                last_n: int = LAST_N_GAMES,
                today: Optional[date] = None) -> float:
    """Average of the last ``last_n`` played games, scaled by the age curve."""
    points = last_n_played_points(weeks, last_n, scoring)
    base = sum(points) / len(points) if points else 0.0
    age = age_in_years(player.birth_date, today)
    return finite_ppg(base * age_multiplier(player.position, age))


class ProjectionBuilder:
    """Turns players plus their weekly history into ProjectionRows.

    The builder holds no state between calls; each build fetches (or reuses
    the client's cached) pages for the full season x week matrix.
    """

    def __init__(self, client: WeeklyPageSource, last_n: int = LAST_N_GAMES):
        """Initialize the builder.

        Args:
            client: Source of weekly stat pages
            last_n: Number of most recent played games to average
        """
        self.client = client
        self.last_n = last_n

    def load_history(self,
                     seasons: Sequence[int],
                     player_ids: Optional[AbstractSet[str]] = None,
                     require_stats: bool = False) -> Dict[str, List[WeeklyStat]]:
        """Weekly stats in ``seasons`` keyed by player id.

        Args:
            seasons: Seasons to fetch
            player_ids: Restrict to these players. All players if None.
            require_stats: Raise if every fetched page came back empty

        Raises:
            UpstreamUnavailableError: ``require_stats`` is set and no page had rows
        """
        pages = self.client.fetch_weeks(seasons)
        if require_stats and pages and not any(page.rows for page in pages):
            raise UpstreamUnavailableError(
                f"No weekly stats returned for seasons {list(seasons)}"
            )
        return bucket_weekly_stats(pages, player_ids)

    def build(self,
              players: Sequence[Player],
              scoring: ScoringSystem,
              seasons: Sequence[int],
              today: Optional[date] = None) -> List[ProjectionRow]:
        """Project every player in ``players``, preserving input order.

        Args:
            players: Players to project
            scoring: Scoring configuration
            seasons: Seasons whose weekly stats form the history
            today: Reference date for ages. Defaults to today.

        Returns:
            One ProjectionRow per input player
        """
        history = self.load_history(seasons, {p.player_id for p in players}, require_stats=True)
        rows = self.build_from_history(players, history, scoring, today=today)
        logger.info(
            f"Built {len(rows)} projections ({scoring.cache_key}) "
            f"from {len(history)} players with stats"
        )
        return rows

    def build_from_history(self,
                           players: Sequence[Player],
                           history: Dict[str, List[WeeklyStat]],
                           scoring: ScoringSystem,
                           today: Optional[date] = None) -> List[ProjectionRow]:
        """Project players against already-bucketed weekly stats."""
        rows = []
        for player in players:
            weeks = history.get(player.player_id, [])
            ppg = project_ppg(weeks, player, scoring, last_n=self.last_n, today=today)
            rows.append(ProjectionRow(
                player_id=player.player_id,
                full_name=player.full_name,
                position=player.position,
                team=player.team,
                ppg=ppg,
            ))
        return rows

    def player_history(self, player_id: str, seasons: Sequence[int]) -> List[WeeklyStat]:
        """All normalized weeks for one player, oldest first, played or not."""
        player_id = str(player_id).strip()
        history = self.load_history(seasons, {player_id})
        return sort_chronologically(history.get(player_id, []))
