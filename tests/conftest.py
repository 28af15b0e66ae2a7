"""Shared fixtures: an in-memory stand-in for the Sleeper client."""

from datetime import date
from typing import Dict, List, Optional, Sequence

import pytest

from draft_assistant.config.settings import Settings
from draft_assistant.data.records import Player
from draft_assistant.data.sleeper_client import WeekPage

REFERENCE_DATE = date(2025, 8, 1)


class FakeSleeperClient:
    """Serves fixed players and weekly pages, counting calls."""

    def __init__(self, players: List[Player], pages: Dict[tuple, List[dict]]):
        self.players = players
        self.pages = pages
        self.fetch_weeks_calls = 0
        self.fetch_players_calls = 0

    def fetch_players(self, force: bool = False) -> List[Player]:
        self.fetch_players_calls += 1
        return list(self.players)

    def get_player(self, player_id: str) -> Optional[Player]:
        for player in self.players:
            if player.player_id == player_id:
                return player
        return None

    def fetch_weeks(self, seasons: Sequence[int]) -> List[WeekPage]:
        self.fetch_weeks_calls += 1
        return [
            WeekPage(season, week, self.pages.get((season, week), []))
            for season in seasons
            for week in range(1, 19)
        ]


def std_row(player_id: str, points: float) -> dict:
    """Raw row whose standard-scoring value is ``points`` via rushing yards."""
    return {"player_id": player_id, "stats": {"rush_yd": points * 10}}


@pytest.fixture
def settings(tmp_path):
    return Settings(
        seasons=[2024],
        cache_dir=tmp_path / "cache",
        max_workers=4,
        max_retries=0,
        backoff_factor=0,
    )


@pytest.fixture
def pool_players() -> List[Player]:
    return [
        Player(player_id="1", full_name="Quinn Passer", position="QB", team="KC", birth_date="1995-09-17"),
        Player(player_id="2", full_name="Rob Runner", position="RB", team="SF"),
        Player(player_id="7", full_name="Sam Rusher", position="RB", team="ATL"),
        Player(player_id="3", full_name="Will Receiver", position="WR", team="MIN"),
        Player(player_id="4", full_name="Ted End", position="TE", team="DET"),
        Player(player_id="5", full_name="Bench Back", position="RB", team=None),
    ]


@pytest.fixture
def pool_pages() -> Dict[tuple, List[dict]]:
    # Standard points per week: QB 20, RB7 25, RB2 15, WR 12, TE 8; player 5 never plays
    pages = {}
    for week in (1, 2, 3):
        pages[(2024, week)] = [
            {"player_id": "1", "stats": {"pass_yd": 250, "pass_td": 1}},
            std_row("7", 25),
            std_row("2", 15),
            std_row("3", 12),
            std_row("4", 8),
            {"player_id": "5", "stats": {}},
        ]
    return pages


@pytest.fixture
def fake_client(pool_players, pool_pages) -> FakeSleeperClient:
    return FakeSleeperClient(pool_players, pool_pages)
