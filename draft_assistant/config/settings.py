"""Application settings."""

from datetime import date, timedelta
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

SLEEPER_PLAYERS_URL = "https://api.sleeper.app/v1/players/nfl"

# Tried in order; the first OK response wins
SLEEPER_STATS_URLS = [
    "https://api.sleeper.app/stats/nfl/{season}/{week}?season_type=regular",
    "https://api.sleeper.app/v1/stats/nfl/{season}/{week}?season_type=regular",
    "https://api.sleeper.app/v1/stats/nfl/regular/{season}/{week}",
]


def current_season(today: Optional[date] = None) -> int:
    """NFL season for ``today``; a new season starts in September."""
    today = today or date.today()
    if today.month >= 9:
        return today.year
    return today.year - 1


class Settings(BaseSettings):
    """Draft assistant settings, overridable with DRAFT_ASSISTANT_* variables."""

    model_config = SettingsConfigDict(
        env_prefix="DRAFT_ASSISTANT_",
        env_file=".env",
        extra="ignore",
    )

    # Upstream API
    sleeper_players_url: str = SLEEPER_PLAYERS_URL
    sleeper_stats_urls: List[str] = SLEEPER_STATS_URLS
    request_timeout: float = 12.0
    max_retries: int = 2
    backoff_factor: float = 0.5
    max_workers: int = 8

    # Projection window
    seasons: Optional[List[int]] = None
    season_count: int = 5
    weeks_per_season: int = 18
    last_n_games: int = 50

    # Cache lifetimes
    projection_ttl_hours: float = 12.0
    week_page_ttl_minutes: float = 15.0
    players_ttl_hours: float = 6.0
    snapshot_max_age_hours: float = 24.0
    cache_dir: Path = Path("data/cache")

    # Query limits
    default_limit: int = 50
    max_limit: int = 200

    log_level: str = "INFO"

    def default_seasons(self, today: Optional[date] = None) -> List[int]:
        """Configured seasons, or the last ``season_count`` seasons ending now."""
        if self.seasons:
            return sorted(self.seasons)
        latest = current_season(today)
        return list(range(latest - self.season_count + 1, latest + 1))

    @property
    def projection_ttl(self) -> timedelta:
        return timedelta(hours=self.projection_ttl_hours)

    @property
    def week_page_ttl(self) -> timedelta:
        return timedelta(minutes=self.week_page_ttl_minutes)

    @property
    def players_ttl(self) -> timedelta:
        return timedelta(hours=self.players_ttl_hours)

    @property
    def snapshot_max_age(self) -> timedelta:
        return timedelta(hours=self.snapshot_max_age_hours)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings instance."""
    return Settings()
