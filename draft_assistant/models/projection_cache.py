"""In-memory projection cache keyed by scoring system and position or player."""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, Generic, List, Optional, TypeVar

from ..config.scoring import ScoringSystem
from ..data.records import ProjectionRow

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(hours=12)

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    key: str
    timestamp: datetime
    payload: T


def position_key(scoring: ScoringSystem, position: str) -> str:
    return f"{scoring.cache_key}:pos:{position.upper()}"


def player_key(scoring: ScoringSystem, player_id: str) -> str:
    return f"{scoring.cache_key}:id:{player_id}"


class _Table(Generic[T]):
    """One keyed table of timestamped entries with per-key rebuild locks."""

    def __init__(self, name: str, ttl: timedelta, clock: Callable[[], datetime]):
        self.name = name
        self.ttl = ttl
        self.clock = clock
        self._entries: Dict[str, CacheEntry[T]] = {}
        self._lock = threading.Lock()
        self._key_locks: Dict[str, threading.Lock] = {}

    def _key_lock(self, key: str) -> threading.Lock:
        with self._lock:
            return self._key_locks.setdefault(key, threading.Lock())

    def fresh(self, key: str) -> Optional[CacheEntry[T]]:
        with self._lock:
            entry = self._entries.get(key)
        if entry is not None and self.clock() - entry.timestamp < self.ttl:
            return entry
        return None

    def get_or_build(self, key: str, build: Callable[[], T]) -> CacheEntry[T]:
        entry = self.fresh(key)
        if entry is not None:
            logger.debug(f"{self.name} cache hit: {key}")
            return entry

        # Concurrent misses on the same key wait here; the first one builds
        with self._key_lock(key):
            entry = self.fresh(key)
            if entry is not None:
                return entry

            logger.info(f"{self.name} cache miss: {key}")
            payload = build()
            entry = CacheEntry(key=key, timestamp=self.clock(), payload=payload)
            with self._lock:
                self._entries[key] = entry
            return entry

    def put(self, key: str, payload: T) -> CacheEntry[T]:
        entry = CacheEntry(key=key, timestamp=self.clock(), payload=payload)
        with self._lock:
            self._entries[key] = entry
        return entry

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class ProjectionCache:
    """Position and player projection tables sharing one staleness window.

    Entries older than ``ttl`` are rebuilt, never served. A build that raises
    leaves the previous entry in place.
    """

    def __init__(self,
                 ttl: timedelta = DEFAULT_TTL,
                 clock: Callable[[], datetime] = datetime.now):
        self.ttl = ttl
        self.clock = clock
        self.positions: _Table[List[ProjectionRow]] = _Table("position", ttl, clock)
        self.players: _Table[Optional[ProjectionRow]] = _Table("player", ttl, clock)

    def get_position(self,
                     scoring: ScoringSystem,
                     position: str,
                     build: Callable[[], List[ProjectionRow]]) -> CacheEntry[List[ProjectionRow]]:
        """Rows for one position, rebuilt with ``build`` when missing or stale."""
        return self.positions.get_or_build(position_key(scoring, position), build)

    def peek_position(self,
                      scoring: ScoringSystem,
                      position: str) -> Optional[CacheEntry[List[ProjectionRow]]]:
        """Fresh position entry if one exists; never builds."""
        return self.positions.fresh(position_key(scoring, position))

    def put_position(self,
                     scoring: ScoringSystem,
                     position: str,
                     rows: List[ProjectionRow]) -> CacheEntry[List[ProjectionRow]]:
        return self.positions.put(position_key(scoring, position), rows)

    def get_player(self,
                   scoring: ScoringSystem,
                   player_id: str,
                   build: Callable[[], Optional[ProjectionRow]]) -> CacheEntry[Optional[ProjectionRow]]:
        """Row for one player, rebuilt with ``build`` when missing or stale."""
        return self.players.get_or_build(player_key(scoring, player_id), build)

    def clear(self) -> None:
        self.positions.clear()
        self.players.clear()
