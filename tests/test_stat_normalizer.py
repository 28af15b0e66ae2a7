"""Tests for raw stat record normalization."""

import pytest
from draft_assistant.data.stat_normalizer import (
    STAT_SYNONYMS,
    normalize_weekly_stat,
    pick_number,
    to_number,
)


class TestPickNumber:
    """Test synonym lookup and numeric coercion."""

    def test_first_present_key_wins(self):
        row = {"passing_yards": 210, "pass_yd": 250}
        assert pick_number(row, ("pass_yd", "passing_yards")) == 250
        assert pick_number(row, ("passing_yards", "pass_yd")) == 210

    def test_numeric_strings_are_accepted(self):
        assert pick_number({"rec": " 7 "}, ("rec",)) == 7.0
        assert pick_number({"rec": "3.5"}, ("rec",)) == 3.5

    def test_non_numeric_values_fall_through(self):
        row = {"rec": "n/a", "receptions": 4}
        assert pick_number(row, ("rec", "receptions")) == 4

    def test_missing_everywhere_is_none(self):
        assert pick_number({"foo": 1}, ("rec", "receptions")) is None

    @pytest.mark.parametrize("value", [None, "", "   ", True, float("nan"), float("inf"), 10 ** 400, "9" * 400, [], {}])
    def test_unusable_values(self, value):
        assert to_number(value) is None


class TestNormalizeWeeklyStat:
    """Test WeeklyStat construction from raw records."""

    def test_nested_stats_are_read(self):
        raw = {"player_id": "4034", "stats": {"pts_ppr": "18.4", "rec": 6, "rec_yd": 74}}
        stat = normalize_weekly_stat(raw, 2024, 5)

        assert stat.player_id == "4034"
        assert (stat.season, stat.week) == (2024, 5)
        assert stat.pts_ppr == 18.4
        assert stat.rec == 6
        assert stat.rec_yd == 74
        assert stat.rush_yd is None

    def test_flat_records_with_alternate_spellings(self):
        raw = {
            "player_id": 4866,
            "rushing_yards": 102,
            "rushing_tds": 1,
            "rush_att": 21,
            "receptions": 3,
            "tgt": 4,
        }
        stat = normalize_weekly_stat(raw, "2023", 11.0)

        assert stat.player_id == "4866"
        assert stat.season == 2023 and stat.week == 11
        assert stat.rush_yd == 102
        assert stat.rush_td == 1
        assert stat.carries == 21
        assert stat.rec == 3
        assert stat.targets == 4

    def test_unrecognized_record_has_all_fields_absent(self):
        stat = normalize_weekly_stat({"player_id": "9", "stats": {"snaps": 40}}, 2024, 1)

        assert stat is not None
        for field in STAT_SYNONYMS:
            assert getattr(stat, field) is None

    @pytest.mark.parametrize("season, week", [
        (2024, 0),
        (2024, 19),
        (2024, 2.5),
        ("twenty", 3),
        (None, 3),
        (2024, float("nan")),
    ])
    def test_invalid_season_or_week_is_dropped(self, season, week):
        assert normalize_weekly_stat({"player_id": "1", "rec": 1}, season, week) is None

    def test_record_without_player_id_is_dropped(self):
        assert normalize_weekly_stat({"stats": {"rec": 2}}, 2024, 1) is None

    def test_explicit_player_id_overrides_record(self):
        stat = normalize_weekly_stat({"player_id": "1", "rec": 2}, 2024, 1, player_id="99")
        assert stat.player_id == "99"

    def test_non_mapping_record_is_dropped(self):
        assert normalize_weekly_stat(["not", "a", "record"], 2024, 1) is None

    def test_oversized_integer_field_stays_absent(self):
        stat = normalize_weekly_stat({"player_id": "1", "stats": {"rush_yd": 10 ** 400, "rec": 3}}, 2024, 1)
        assert stat.rush_yd is None
        assert stat.rec == 3
