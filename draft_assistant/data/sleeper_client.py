"""Sleeper API client for the player directory and weekly stat pages."""

import json
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Sequence, Tuple

import requests

from ..config.settings import Settings, get_settings
from ..exceptions import UpstreamUnavailableError
from .records import FANTASY_POSITIONS, Player

logger = logging.getLogger(__name__)

PLAYERS_SNAPSHOT_FILE = "players_snapshot.json"


class WeekPage(NamedTuple):
    """Raw per-player records for one (season, week)."""
    season: int
    week: int
    rows: List[Dict[str, Any]]


def _first_present(record: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = record.get(key)
        if value not in (None, ''):
            return value
    return None


def normalize_player(key: str, record: Dict[str, Any]) -> Optional[Player]:
    """Map one directory entry to a Player, or None if it is outside the pool.

    Args:
        key: Key of the entry in the directory mapping
        record: Raw Sleeper player record

    Returns:
        Player for QB/RB/WR/TE entries with an id and a name
    """
    if not isinstance(record, dict):
        return None

    player_id = str(_first_present(record, 'player_id', 'playerId', 'id') or key or '').strip()

    full_name = record.get('full_name') or ''
    if not full_name:
        first, last = record.get('first_name'), record.get('last_name')
        full_name = f"{first} {last}" if first and last else (record.get('name') or '')
    full_name = str(full_name).strip()

    position = record.get('position')
    if not player_id or not full_name or position not in FANTASY_POSITIONS:
        return None

    birth_date = _first_present(record, 'birth_date', 'birthdate', 'birthDate')
    return Player(
        player_id=player_id,
        full_name=full_name,
        position=position,
        team=record.get('team') or None,
        birth_date=str(birth_date) if birth_date else None,
    )


def rows_from_body(body: Any) -> List[Dict[str, Any]]:
    """Weekly stat rows from a response body: a list, or a list under 'stats'."""
    if isinstance(body, list):
        return body
    if isinstance(body, dict) and isinstance(body.get('stats'), list):
        return body['stats']
    return []


class SleeperClient:
    """Fetches the Sleeper player directory and weekly stat pages.

    Player directory results are cached in memory and snapshotted to disk so a
    failed refresh can fall back to the last good copy. Weekly pages are cached
    in memory for a short window; a week that cannot be fetched from any
    endpoint is an empty page, never an error.
    """

    def __init__(self,
                 settings: Optional[Settings] = None,
                 session: Optional[requests.Session] = None,
                 cache_dir: Optional[str] = None,
                 clock: Callable[[], datetime] = datetime.now):
        """Initialize the client.

        Args:
            settings: Settings to use. Defaults to the process-wide settings.
            session: HTTP session. A new requests.Session if omitted.
            cache_dir: Directory for the player snapshot
            clock: Returns the current time; injectable for tests
        """
        self.settings = settings or get_settings()
        self.session = session or requests.Session()
        self.clock = clock

        self.cache_dir = Path(cache_dir or self.settings.cache_dir)
        self.players_snapshot_file = self.cache_dir / PLAYERS_SNAPSHOT_FILE

        self.timeout = self.settings.request_timeout
        self.max_retries = self.settings.max_retries
        self.backoff_factor = self.settings.backoff_factor

        self._players: Optional[List[Player]] = None
        self._players_at: Optional[datetime] = None
        self._players_lock = threading.Lock()

        self._pages: Dict[Tuple[int, int], Tuple[datetime, List[Dict[str, Any]]]] = {}
        self._pages_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Player directory
    # ------------------------------------------------------------------

    def fetch_players_raw(self) -> Optional[Dict[str, Any]]:
        """Fetch the raw player directory with retries.

        Returns:
            Mapping of player id to raw record, or None if every attempt failed
        """
        url = self.settings.sleeper_players_url
        for attempt in range(self.max_retries + 1):
            try:
                logger.info(f"Fetching Sleeper player data (attempt {attempt + 1})")
                response = self.session.get(url, timeout=self.timeout)
                response.raise_for_status()

                data = response.json()
                if not isinstance(data, dict):
                    raise ValueError(f"unexpected player directory body: {type(data).__name__}")
                logger.info(f"Successfully fetched {len(data)} players from Sleeper")

                self._save_players_snapshot(data)
                return data

            except (requests.exceptions.RequestException, ValueError) as e:
                logger.warning(f"Attempt {attempt + 1} failed: {e}")
                if attempt < self.max_retries:
                    time.sleep(self.backoff_factor * (2 ** attempt))

        logger.error("All attempts failed to fetch Sleeper player data")
        return None

    def normalize_player_data(self, raw_data: Dict[str, Any]) -> List[Player]:
        """Filter the raw directory down to fantasy-relevant players."""
        players = []
        for key, record in raw_data.items():
            player = normalize_player(key, record)
            if player is not None:
                players.append(player)
        logger.info(f"Normalized {len(players)} QB/RB/WR/TE players")
        return players

    def fetch_players(self, force: bool = False) -> List[Player]:
        """Player pool, served from memory while younger than the players TTL.

        Raises:
            UpstreamUnavailableError: live fetch failed and no usable snapshot exists
        """
        with self._players_lock:
            now = self.clock()
            if (not force and self._players is not None
                    and now - self._players_at < self.settings.players_ttl):
                return self._players

            raw_data = self.fetch_players_raw()
            if raw_data is None:
                logger.warning("Fresh fetch failed, trying players snapshot")
                raw_data = self._load_players_snapshot()
            if raw_data is None:
                raise UpstreamUnavailableError("Sleeper player directory is unavailable")

            self._players = self.normalize_player_data(raw_data)
            self._players_at = now
            return self._players

    def get_player(self, player_id: str) -> Optional[Player]:
        """Look up one pool player by id."""
        player_id = str(player_id).strip()
        for player in self.fetch_players():
            if player.player_id == player_id:
                return player
        return None

    def _save_players_snapshot(self, data: Dict[str, Any]) -> None:
        """Save raw player data as snapshot for fallback."""
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            with open(self.players_snapshot_file, 'w') as f:
                json.dump({
                    'timestamp': self.clock().isoformat(),
                    'data': data
                }, f)
            logger.debug(f"Saved players snapshot to {self.players_snapshot_file}")
        except (OSError, TypeError) as e:
            logger.warning(f"Failed to save players snapshot: {e}")

    def _load_players_snapshot(self) -> Optional[Dict[str, Any]]:
        """Load players snapshot for fallback."""
        try:
            if not self.players_snapshot_file.exists():
                return None

            with open(self.players_snapshot_file, 'r') as f:
                snapshot = json.load(f)

            timestamp = datetime.fromisoformat(snapshot['timestamp'])
            if self.clock() - timestamp > self.settings.snapshot_max_age:
                logger.warning("Players snapshot is too old to use")
                return None

            logger.info("Using players snapshot for fallback")
            return snapshot['data']

        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Failed to load players snapshot: {e}")
            return None

    # ------------------------------------------------------------------
    # Weekly stat pages
    # ------------------------------------------------------------------

    def stats_urls(self, season: int, week: int) -> List[str]:
        """Candidate endpoints for one week, in priority order."""
        return [template.format(season=season, week=week)
                for template in self.settings.sleeper_stats_urls]

    def fetch_week(self, season: int, week: int) -> List[Dict[str, Any]]:
        """Raw stat rows for one week.

        Each candidate URL is tried in turn; connection errors, timeouts,
        non-OK statuses and undecodable bodies move on to the next one. When
        all candidates fail the week is treated as having no data.
        """
        key = (season, week)
        now = self.clock()
        with self._pages_lock:
            cached = self._pages.get(key)
            if cached is not None and now - cached[0] < self.settings.week_page_ttl:
                return cached[1]

        rows: List[Dict[str, Any]] = []
        for url in self.stats_urls(season, week):
            try:
                response = self.session.get(url, timeout=self.timeout)
                if not response.ok:
                    logger.debug(f"{url} returned {response.status_code}")
                    continue
                rows = rows_from_body(response.json())
                break
            except (requests.exceptions.RequestException, ValueError) as e:
                logger.warning(f"Failed to fetch {url}: {e}")
        else:
            logger.info(f"No stats available for {season} week {week}")

        with self._pages_lock:
            self._pages[key] = (now, rows)
        return rows

    def fetch_weeks(self,
                    seasons: Sequence[int],
                    weeks: Optional[Sequence[int]] = None) -> List[WeekPage]:
        """Fetch every (season, week) page with a bounded worker pool.

        Pages come back in job order (seasons ascending as given, weeks 1-18)
        regardless of which request finishes first.
        """
        if weeks is None:
            weeks = range(1, self.settings.weeks_per_season + 1)
        jobs = [(season, week) for season in seasons for week in weeks]
        if not jobs:
            return []

        workers = max(1, min(self.settings.max_workers, len(jobs)))
        logger.info(f"Fetching {len(jobs)} weekly stat pages with {workers} workers")
        with ThreadPoolExecutor(max_workers=workers) as executor:
            results = list(executor.map(lambda job: self.fetch_week(*job), jobs))

        return [WeekPage(season, week, rows) for (season, week), rows in zip(jobs, results)]
