"""Normalize raw Sleeper stat records into WeeklyStat objects.

Sleeper has served weekly stats in several shapes over the years, with the
same statistic appearing under different keys (``pass_yd`` vs
``passing_yards`` and so on). Each canonical field lists the keys it may
appear under; the first numeric value found wins. New upstream spellings are
added to ``STAT_SYNONYMS``.
"""

import logging
import math
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from .records import WeeklyStat

logger = logging.getLogger(__name__)

MIN_WEEK = 1
MAX_WEEK = 18

STAT_SYNONYMS: Dict[str, Tuple[str, ...]] = {
    "pts_ppr": ("pts_ppr", "ppr_points", "fantasy_points_ppr", "ppr"),
    "pts_half_ppr": ("pts_half_ppr", "half_ppr_points", "fantasy_points_half_ppr", "half_ppr"),
    "pts_std": ("pts_std", "standard_points", "fantasy_points", "std"),
    "pass_yd": ("pass_yd", "passing_yards", "passYds", "pass_yds"),
    "pass_td": ("pass_td", "passing_tds", "passing_td"),
    "pass_int": ("pass_int", "interceptions", "ints"),
    "rush_yd": ("rush_yd", "rushing_yards", "rushYds", "rush_yds"),
    "rush_td": ("rush_td", "rushing_tds", "rushing_td"),
    "carries": ("carries", "rush_att", "rushing_att", "att_rush"),
    "rec": ("rec", "receptions", "catches", "catch"),
    "rec_yd": ("rec_yd", "receiving_yards", "recYds", "rec_yds"),
    "rec_td": ("rec_td", "receiving_tds", "receiving_td"),
    "targets": ("targets", "tgt", "rec_tgt", "tar"),
}


def to_number(value: Any) -> Optional[float]:
    """Coerce a raw value to a finite float, or None if it is not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str) and value.strip():
        try:
            number = float(value.strip())
        except (ValueError, OverflowError):
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def pick_number(row: Mapping[str, Any], keys: Iterable[str]) -> Optional[float]:
    """Return the first numeric value found under ``keys``."""
    for key in keys:
        number = to_number(row.get(key))
        if number is not None:
            return number
    return None


def to_int(value: Any) -> Optional[int]:
    """Coerce season/week values; non-integral numbers are rejected."""
    number = to_number(value)
    if number is None or not number.is_integer():
        return None
    return int(number)


def extract_player_id(raw: Mapping[str, Any]) -> str:
    """Player id of a raw stat record as a string ('' when missing)."""
    value = raw.get("player_id")
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def stat_fields(raw: Mapping[str, Any]) -> Mapping[str, Any]:
    """Stat mapping of a record; newer feeds nest it under ``stats``."""
    nested = raw.get("stats")
    if isinstance(nested, Mapping):
        return nested
    return raw


def normalize_weekly_stat(raw: Mapping[str, Any],
                          season: Any,
                          week: Any,
                          player_id: Optional[str] = None) -> Optional[WeeklyStat]:
    """Build a WeeklyStat from one raw record.

    Args:
        raw: Raw per-player record from a weekly stats page
        season: Season the page belongs to
        week: Week the page belongs to
        player_id: Id to use instead of the record's own ``player_id``

    Returns:
        WeeklyStat, or None when season/week are not valid integers or the
        record has no player id. Unrecognized stat keys never cause a
        rejection; those fields are simply left as None.
    """
    season_value = to_int(season)
    week_value = to_int(week)
    if season_value is None or week_value is None:
        return None
    if not MIN_WEEK <= week_value <= MAX_WEEK:
        return None

    if not isinstance(raw, Mapping):
        return None

    pid = player_id or extract_player_id(raw)
    if not pid:
        return None

    fields = stat_fields(raw)
    values = {
        name: pick_number(fields, keys)
        for name, keys in STAT_SYNONYMS.items()
    }
    return WeeklyStat(player_id=pid, season=season_value, week=week_value, **values)
