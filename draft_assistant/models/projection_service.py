"""Projection queries: cache lookups, builds and ranking."""

import logging
from datetime import date, datetime
from typing import Callable, Iterable, List, Optional, Sequence, Set

from pydantic import BaseModel, ConfigDict, Field

from ..config.scoring import ScoringSystem, ScoringType
from ..config.settings import Settings, get_settings
from ..data.records import FANTASY_POSITIONS, Player, ProjectionRow, WeeklyStat
from ..data.sleeper_client import SleeperClient
from ..exceptions import InvalidQueryError
from .projection_builder import ProjectionBuilder
from .projection_cache import ProjectionCache

logger = logging.getLogger(__name__)

ALL_POSITIONS = "ALL"
SEARCH_LIMIT = 12


def split_csv(value: Optional[str]) -> List[str]:
    """'a, b,,c' -> ['a', 'b', 'c']"""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def parse_seasons(value: Optional[str]) -> Optional[List[int]]:
    """Comma-separated seasons, or None when not given."""
    parts = split_csv(value)
    if not parts:
        return None
    try:
        return sorted({int(part) for part in parts})
    except ValueError:
        raise InvalidQueryError(f"Invalid seasons: {value}")


class ProjectionQuery(BaseModel):
    """A request for ranked projections."""

    scoring: ScoringSystem = ScoringSystem()
    position: Optional[str] = None
    ids: List[str] = Field(default_factory=list)
    exclude_ids: Set[str] = Field(default_factory=set)
    limit: int = 50
    games: Optional[int] = None
    seasons: Optional[List[int]] = None
    fast: bool = False

    @classmethod
    def from_params(cls,
                    preset: Optional[str] = None,
                    pass_td: Optional[int] = None,
                    position: Optional[str] = None,
                    ids: Optional[str] = None,
                    exclude: Optional[str] = None,
                    limit: Optional[int] = None,
                    games: Optional[int] = None,
                    seasons: Optional[str] = None,
                    fast: bool = False,
                    settings: Optional[Settings] = None) -> "ProjectionQuery":
        """Validate raw request parameters.

        Raises:
            InvalidQueryError: unknown preset, pass TD value or position, or
                neither a position nor ids were given
        """
        settings = settings or get_settings()

        try:
            preset_type = ScoringType.parse(preset or ScoringType.PPR)
        except ValueError:
            raise InvalidQueryError(f"Unsupported scoring preset: {preset}")

        pass_td = 4 if pass_td is None else pass_td
        if pass_td not in (4, 6):
            raise InvalidQueryError(f"passTd must be 4 or 6, got {pass_td}")

        id_list = split_csv(ids)
        pos = (position or "").strip().upper() or None
        if not id_list:
            if pos is None:
                raise InvalidQueryError("Either pos or ids is required")
            if pos != ALL_POSITIONS and pos not in FANTASY_POSITIONS:
                raise InvalidQueryError(
                    f"Unsupported position: {position}. "
                    f"Use one of {', '.join(FANTASY_POSITIONS)} or {ALL_POSITIONS}"
                )

        if limit is None:
            limit = settings.default_limit
        limit = max(1, min(settings.max_limit, limit))

        if games is not None and games < 1:
            raise InvalidQueryError(f"games must be positive, got {games}")

        return cls(
            scoring=ScoringSystem(preset=preset_type, pass_td=pass_td),
            position=pos,
            ids=list(dict.fromkeys(id_list)),
            exclude_ids=set(split_csv(exclude)),
            limit=limit,
            games=games,
            seasons=parse_seasons(seasons),
            fast=fast,
        )


class ProjectionResponse(BaseModel):
    """Ranked projections plus the scoring they were computed under."""

    model_config = ConfigDict(populate_by_name=True)

    preset: ScoringType
    pass_td: int = Field(alias="passTd")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")
    players: List[ProjectionRow]


def rank_rows(rows: Iterable[ProjectionRow],
              exclude_ids: Iterable[str] = (),
              limit: Optional[int] = None,
              games: Optional[int] = None) -> List[ProjectionRow]:
    """Drop excluded players, sort best first and truncate.

    Sorts by ppg, or by ppg * games when ``games`` is given.
    """
    excluded = set(exclude_ids)
    kept = [row for row in rows if row.player_id not in excluded]
    if games:
        kept.sort(key=lambda row: row.season_total(games), reverse=True)
    else:
        kept.sort(key=lambda row: row.ppg, reverse=True)
    return kept if limit is None else kept[:limit]


class ProjectionService:
    """Serves projection queries from the cache, building on misses."""

    def __init__(self,
                 client: Optional[SleeperClient] = None,
                 builder: Optional[ProjectionBuilder] = None,
                 cache: Optional[ProjectionCache] = None,
                 settings: Optional[Settings] = None,
                 today: Callable[[], date] = date.today):
        """Initialize the service.

        Args:
            client: Sleeper client. Created from settings if omitted.
            builder: Projection builder. Wraps ``client`` if omitted.
            cache: Projection cache. A new cache with the configured TTL if omitted.
            settings: Settings to use. Defaults to the process-wide settings.
            today: Returns the reference date for player ages
        """
        self.settings = settings or get_settings()
        self.client = client or SleeperClient(settings=self.settings)
        self.builder = builder or ProjectionBuilder(self.client, last_n=self.settings.last_n_games)
        self.cache = cache or ProjectionCache(ttl=self.settings.projection_ttl)
        self.today = today

    def default_seasons(self) -> List[int]:
        return self.settings.default_seasons(self.today())

    # ------------------------------------------------------------------
    # Projections
    # ------------------------------------------------------------------

    def get_projections(self, query: ProjectionQuery) -> ProjectionResponse:
        """Ranked projections for a position, an explicit id set or all positions."""
        scoring = query.scoring
        custom_seasons = query.seasons is not None
        seasons = query.seasons or self.default_seasons()

        if query.ids:
            rows, updated_at = self._rows_for_ids(scoring, query.ids, seasons, custom_seasons)
        elif query.position == ALL_POSITIONS:
            rows, updated_at = self._rows_for_all(scoring, seasons, custom_seasons, query.fast)
        else:
            rows, updated_at = self._rows_for_position(scoring, query.position, seasons, custom_seasons)

        ranked = rank_rows(rows, query.exclude_ids, query.limit, query.games)
        logger.info(
            f"Serving {len(ranked)} of {len(rows)} projections "
            f"({scoring.cache_key}, pos={query.position}, ids={len(query.ids)})"
        )
        return ProjectionResponse(
            preset=scoring.preset,
            pass_td=scoring.pass_td,
            updated_at=updated_at,
            players=ranked,
        )

    def build_position(self,
                       scoring: ScoringSystem,
                       position: str,
                       seasons: Sequence[int]) -> List[ProjectionRow]:
        """Project every pool player at ``position``; players with no played games are left out."""
        players = [p for p in self.client.fetch_players() if p.position == position]
        rows = self.builder.build(players, scoring, seasons, today=self.today())
        return [row for row in rows if row.ppg > 0]

    def build_player(self,
                     scoring: ScoringSystem,
                     player_id: str,
                     seasons: Sequence[int]) -> Optional[ProjectionRow]:
        """Project a single player; None if the id is not in the pool."""
        player = self.client.get_player(player_id)
        if player is None:
            logger.info(f"Player {player_id} not found in player pool")
            return None
        return self.builder.build([player], scoring, seasons, today=self.today())[0]

    def build_all_positions(self,
                            scoring: ScoringSystem,
                            seasons: Sequence[int]) -> List[ProjectionRow]:
        """Build and cache every position from a single history load."""
        players = self.client.fetch_players()
        history = self.builder.load_history(
            seasons, {p.player_id for p in players}, require_stats=True)
        today = self.today()

        merged = []
        for position in FANTASY_POSITIONS:
            pool = [p for p in players if p.position == position]
            rows = self.builder.build_from_history(pool, history, scoring, today=today)
            rows = [row for row in rows if row.ppg > 0]
            self.cache.put_position(scoring, position, rows)
            merged.extend(rows)
        return merged

    def _rows_for_position(self, scoring, position, seasons, custom_seasons):
        if custom_seasons:
            return self.build_position(scoring, position, seasons), None
        entry = self.cache.get_position(
            scoring, position, lambda: self.build_position(scoring, position, seasons))
        return list(entry.payload), entry.timestamp

    def _rows_for_all(self, scoring, seasons, custom_seasons, fast):
        if custom_seasons:
            players = self.client.fetch_players()
            rows = self.builder.build(players, scoring, seasons, today=self.today())
            return [row for row in rows if row.ppg > 0], None

        if fast:
            entries = [self.cache.peek_position(scoring, pos) for pos in FANTASY_POSITIONS]
            entries = [entry for entry in entries if entry is not None]
            if not entries:
                logger.info("No cached positions for fast request, building all positions")
                return self.build_all_positions(scoring, seasons), self.cache.clock()
        else:
            entries = [
                self.cache.get_position(
                    scoring, pos, lambda pos=pos: self.build_position(scoring, pos, seasons))
                for pos in FANTASY_POSITIONS
            ]

        rows = [row for entry in entries for row in entry.payload]
        return rows, min(entry.timestamp for entry in entries)

    def _rows_for_ids(self, scoring, ids, seasons, custom_seasons):
        if custom_seasons:
            rows = [self.build_player(scoring, pid, seasons) for pid in ids]
            return [row for row in rows if row is not None], None

        rows = []
        timestamps = []
        for pid in ids:
            entry = self.cache.get_player(
                scoring, pid, lambda pid=pid: self.build_player(scoring, pid, seasons))
            timestamps.append(entry.timestamp)
            if entry.payload is not None:
                rows.append(entry.payload)
        return rows, min(timestamps) if timestamps else None

    # ------------------------------------------------------------------
    # History and player lookups
    # ------------------------------------------------------------------

    def get_player_weekly_history(self,
                                  player_id: str,
                                  seasons: Optional[Sequence[int]] = None) -> List[WeeklyStat]:
        """Every normalized week for a player, oldest first, for charting."""
        player_id = (player_id or "").strip()
        if not player_id:
            raise InvalidQueryError("Missing player id")
        return self.builder.player_history(player_id, seasons or self.default_seasons())

    def list_players(self, position: Optional[str] = None) -> List[Player]:
        """Pool players, optionally limited to one position."""
        players = self.client.fetch_players()
        pos = (position or "").strip().upper()
        if pos in FANTASY_POSITIONS:
            return [p for p in players if p.position == pos]
        return list(players)

    def search_players(self, query: Optional[str], limit: int = SEARCH_LIMIT) -> List[Player]:
        """Case-insensitive substring match on player names."""
        needle = (query or "").strip().lower()
        if not needle:
            raise InvalidQueryError("Missing search text")
        matches = (p for p in self.client.fetch_players() if needle in p.full_name.lower())
        return [p for _, p in zip(range(limit), matches)]

    def get_player(self, player_id: Optional[str]) -> Optional[Player]:
        player_id = (player_id or "").strip()
        if not player_id:
            raise InvalidQueryError("Missing id")
        return self.client.get_player(player_id)
