"""Tests for played-game detection and windowing."""

import pytest
from draft_assistant.config.scoring import ScoringSystem, ScoringType
from draft_assistant.data.records import WeeklyStat
from draft_assistant.models.played_filter import (
    USAGE_FIELDS,
    did_play,
    last_n_played_points,
    sort_chronologically,
)

STANDARD = ScoringSystem(preset=ScoringType.STANDARD)


def week(season, wk, **fields):
    return WeeklyStat(player_id="1", season=season, week=wk, **fields)


class TestDidPlay:
    """Test played-week detection."""

    def test_empty_week_is_not_played(self):
        assert not did_play(week(2024, 1))

    def test_all_zero_week_is_not_played(self):
        zeros = {field: 0 for field in USAGE_FIELDS}
        assert not did_play(week(2024, 1, pts_ppr=0, pts_std=0, **zeros))

    def test_single_carry_is_played(self):
        assert did_play(week(2024, 1, carries=1))

    @pytest.mark.parametrize("field", USAGE_FIELDS)
    def test_any_usage_field_counts(self, field):
        assert did_play(week(2024, 1, **{field: 1}))

    def test_nonzero_ppr_total_counts(self):
        assert did_play(week(2024, 1, pts_ppr=-1.5))

    def test_other_precomputed_totals_do_not_count(self):
        assert not did_play(week(2024, 1, pts_std=4.0, pts_half_ppr=4.0))

    def test_negative_usage_is_not_played(self):
        assert not did_play(week(2024, 1, rush_yd=-3))


class TestLastNPlayedPoints:
    """Test recent-game window selection."""

    def test_returns_latest_played_games_oldest_first(self):
        weeks = [
            week(2024, 2, rush_yd=200),
            week(2023, 17, rush_yd=100),
            week(2024, 1, rush_yd=150),
            week(2023, 18),  # inactive
        ]
        assert last_n_played_points(weeks, 2, STANDARD) == pytest.approx([15.0, 20.0])
        assert last_n_played_points(weeks, 10, STANDARD) == pytest.approx([10.0, 15.0, 20.0])

    def test_never_more_than_n(self):
        weeks = [week(2024, wk, rec_yd=10 * wk) for wk in range(1, 19)]
        result = last_n_played_points(weeks, 5, STANDARD)
        assert len(result) == 5
        assert result == pytest.approx([14.0, 15.0, 16.0, 17.0, 18.0])

    def test_only_played_weeks_are_scored(self):
        weeks = [week(2024, 1, pts_std=7.0), week(2024, 2, carries=2, rush_yd=10)]
        # week 1 has a standard total but no usage, so it is skipped
        assert last_n_played_points(weeks, 50, STANDARD) == pytest.approx([1.0])

    def test_no_played_games(self):
        assert last_n_played_points([week(2024, 1), week(2024, 2)], 50, STANDARD) == []
        assert last_n_played_points([], 50, STANDARD) == []

    def test_non_positive_window(self):
        assert last_n_played_points([week(2024, 1, rec=1)], 0, STANDARD) == []

    def test_sort_chronologically(self):
        weeks = [week(2024, 3), week(2022, 18), week(2024, 1)]
        ordered = sort_chronologically(weeks)
        assert [(w.season, w.week) for w in ordered] == [(2022, 18), (2024, 1), (2024, 3)]
