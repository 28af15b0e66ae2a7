"""Tests for scoring system functionality."""

import pytest
from draft_assistant.config.scoring import ScoringSystem, ScoringType, weekly_points
from draft_assistant.data.records import WeeklyStat


def make_stat(**fields):
    return WeeklyStat(player_id="1", season=2024, week=1, **fields)


class TestScoringSystem:
    """Test scoring system calculations."""

    def test_standard_scoring(self):
        """Test standard scoring from raw components."""
        scoring = ScoringSystem.get_scoring_system(ScoringType.STANDARD)

        qb_stat = make_stat(pass_yd=300, pass_td=2, pass_int=1, rush_yd=20, rush_td=1)

        expected = 300 * 0.04 + 2 * 4 - 1 + 20 * 0.1 + 6
        assert scoring.calculate_fantasy_points(qb_stat) == pytest.approx(expected)

    def test_ppr_scoring(self):
        """Test PPR scoring system."""
        scoring = ScoringSystem.get_scoring_system(ScoringType.PPR)

        wr_stat = make_stat(rec_yd=100, rec_td=1, rec=8)

        expected = 100 * 0.1 + 6 + 8 * 1
        assert scoring.calculate_fantasy_points(wr_stat) == pytest.approx(expected)

    def test_half_ppr_scoring(self):
        """Test Half-PPR scoring system."""
        scoring = ScoringSystem.get_scoring_system(ScoringType.HALF_PPR)

        rb_stat = make_stat(rush_yd=80, rush_td=1, rec_yd=30, rec=4)

        expected = 80 * 0.1 + 6 + 30 * 0.1 + 4 * 0.5
        assert scoring.calculate_fantasy_points(rb_stat) == pytest.approx(expected)

    def test_six_point_passing_touchdowns(self):
        """Passing TD value comes from the configuration."""
        four = ScoringSystem.get_scoring_system("STANDARD", pass_td=4)
        six = ScoringSystem.get_scoring_system("STANDARD", pass_td=6)
        stat = make_stat(pass_td=3)

        assert four.calculate_fantasy_points(stat) == 12
        assert six.calculate_fantasy_points(stat) == 18

    def test_empty_stats(self):
        """Test scoring with every field absent."""
        scoring = ScoringSystem.get_scoring_system(ScoringType.PPR)
        assert scoring.calculate_fantasy_points(make_stat()) == 0.0

    def test_missing_stats(self):
        """Test scoring with only one component present."""
        scoring = ScoringSystem.get_scoring_system(ScoringType.PPR)
        stat = make_stat(pass_yd=250)

        assert scoring.calculate_fantasy_points(stat) == pytest.approx(250 * 0.04)


class TestPrecomputedPoints:
    """Upstream fantasy totals take priority over the formula."""

    @pytest.mark.parametrize("preset, expected", [
        (ScoringType.PPR, 21.3),
        (ScoringType.HALF_PPR, 18.8),
        (ScoringType.STANDARD, 16.3),
    ])
    def test_matching_precomputed_field_is_returned(self, preset, expected):
        stat = make_stat(pts_ppr=21.3, pts_half_ppr=18.8, pts_std=16.3, rec=5, rec_yd=100)
        scoring = ScoringSystem(preset=preset)
        assert scoring.calculate_fantasy_points(stat) == expected

    def test_other_presets_total_is_ignored(self):
        """A PPR total does not stand in for a standard score."""
        stat = make_stat(pts_ppr=30.0, rec=5, rec_yd=50)
        scoring = ScoringSystem(preset=ScoringType.STANDARD)
        assert scoring.calculate_fantasy_points(stat) == pytest.approx(5.0)

    def test_zero_precomputed_total_is_trusted(self):
        stat = make_stat(pts_ppr=0.0, rec_yd=50)
        assert ScoringSystem(preset=ScoringType.PPR).calculate_fantasy_points(stat) == 0.0


class TestScoringDeterminism:
    """Scoring is a pure function of stat and configuration."""

    @pytest.mark.parametrize("preset", list(ScoringType))
    @pytest.mark.parametrize("pass_td", [4, 6])
    def test_repeated_calls_agree(self, preset, pass_td):
        scoring = ScoringSystem(preset=preset, pass_td=pass_td)
        stat = make_stat(pass_yd=287, pass_td=2, pass_int=1, rush_yd=31, rec=3, rec_yd=22)

        first = scoring.calculate_fantasy_points(stat)
        assert all(scoring.calculate_fantasy_points(stat) == first for _ in range(5))
        assert weekly_points(stat, scoring) == first

    def test_preset_names_are_parsed_leniently(self):
        assert ScoringType.parse("half-ppr") == ScoringType.HALF_PPR
        assert ScoringType.parse("ppr") == ScoringType.PPR
        with pytest.raises(ValueError):
            ScoringType.parse("superflex")

    def test_cache_key_distinguishes_configurations(self):
        keys = {
            ScoringSystem(preset=preset, pass_td=td).cache_key
            for preset in ScoringType for td in (4, 6)
        }
        assert len(keys) == 6
