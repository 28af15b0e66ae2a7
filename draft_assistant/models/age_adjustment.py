"""Position-specific age curve applied to a player's base average."""

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, Optional, Union

logger = logging.getLogger(__name__)

DAYS_PER_YEAR = 365.25


@dataclass(frozen=True)
class AgeCurve:
    """Peak age with asymmetric growth before it and decline after it."""
    peak: int
    decline_rate: float
    decline_cap: float
    growth_rate: float
    growth_cap: float

    def multiplier(self, age: int) -> float:
        delta = age - self.peak
        if delta > 0:
            return 1 - min(self.decline_cap, self.decline_rate * delta)
        if delta < 0:
            return 1 + min(self.growth_cap, self.growth_rate * -delta)
        return 1.0


AGE_CURVES: Dict[str, AgeCurve] = {
    'RB': AgeCurve(peak=26, decline_rate=0.06, decline_cap=0.25, growth_rate=0.02, growth_cap=0.08),
    'WR': AgeCurve(peak=27, decline_rate=0.03, decline_cap=0.18, growth_rate=0.015, growth_cap=0.06),
    'TE': AgeCurve(peak=28, decline_rate=0.02, decline_cap=0.12, growth_rate=0.01, growth_cap=0.05),
    'QB': AgeCurve(peak=32, decline_rate=0.015, decline_cap=0.12, growth_rate=0.01, growth_cap=0.05),
}


def age_multiplier(position: str, age: Optional[int]) -> float:
    """Multiplier for a player of ``position`` aged ``age`` whole years.

    Unknown (or zero) ages and positions without a curve get 1.0.
    """
    if not age:
        return 1.0
    curve = AGE_CURVES.get((position or '').upper())
    if curve is None:
        return 1.0
    return curve.multiplier(age)


def parse_birth_date(value: Union[str, date, None]) -> Optional[date]:
    """Parse an ISO birth date; returns None for missing or malformed values."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text[:10]).date()
    except ValueError:
        logger.debug(f"Unparseable birth date: {value!r}")
        return None


def age_in_years(birth_date: Union[str, date, None],
                 today: Optional[date] = None) -> Optional[int]:
    """Whole years elapsed since ``birth_date``, using 365.25-day years."""
    born = parse_birth_date(birth_date)
    if born is None:
        return None
    today = today or date.today()
    return math.floor((today - born).days / DAYS_PER_YEAR)


def player_age_multiplier(position: str,
                          birth_date: Union[str, date, None],
                          today: Optional[date] = None) -> float:
    """Age multiplier straight from a birth date."""
    return age_multiplier(position, age_in_years(birth_date, today))
