"""Fantasy football scoring configurations."""

from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict

from ..data.records import WeeklyStat


class ScoringType(str, Enum):
    """Supported fantasy scoring presets."""
    STANDARD = "STANDARD"
    PPR = "PPR"
    HALF_PPR = "HALF_PPR"

    @classmethod
    def parse(cls, value: Union[str, "ScoringType"]) -> "ScoringType":
        """Accept 'ppr', 'half-ppr', 'HALF_PPR' and friends."""
        if isinstance(value, ScoringType):
            return value
        normalized = str(value).strip().upper().replace("-", "_")
        return cls(normalized)


# Yardage and touchdown values shared by every preset
PASSING_YARD_POINTS = 0.04
INTERCEPTION_POINTS = -1.0
RUSHING_YARD_POINTS = 0.1
RUSHING_TD_POINTS = 6.0
RECEIVING_YARD_POINTS = 0.1
RECEIVING_TD_POINTS = 6.0

RECEPTION_POINTS = {
    ScoringType.PPR: 1.0,
    ScoringType.HALF_PPR: 0.5,
    ScoringType.STANDARD: 0.0,
}


class ScoringSystem(BaseModel):
    """Scoring preset plus points per passing touchdown."""

    model_config = ConfigDict(frozen=True)

    preset: ScoringType = ScoringType.PPR
    pass_td: Literal[4, 6] = 4

    @classmethod
    def get_scoring_system(cls,
                           scoring_type: Union[str, ScoringType],
                           pass_td: int = 4) -> "ScoringSystem":
        """Build a scoring system from a preset name and passing-TD value."""
        return cls(preset=ScoringType.parse(scoring_type), pass_td=pass_td)

    @property
    def reception(self) -> float:
        """Points per reception for this preset."""
        return RECEPTION_POINTS[self.preset]

    @property
    def cache_key(self) -> str:
        return f"{self.preset.value}:{self.pass_td}"

    def precomputed_points(self, stat: WeeklyStat) -> Optional[float]:
        """Upstream fantasy total matching this preset, if the record carries one."""
        if self.preset == ScoringType.PPR:
            return stat.pts_ppr
        if self.preset == ScoringType.HALF_PPR:
            return stat.pts_half_ppr
        return stat.pts_std

    def calculate_fantasy_points(self, stat: WeeklyStat) -> float:
        """Calculate fantasy points for one weekly stat line.

        A precomputed upstream total for the active preset is trusted as-is.
        Otherwise points are derived from the raw components, with missing
        components counting as zero.
        """
        precomputed = self.precomputed_points(stat)
        if precomputed is not None:
            return precomputed

        # Passing
        pass_points = (stat.pass_yd or 0) * PASSING_YARD_POINTS
        pass_points += (stat.pass_td or 0) * self.pass_td
        pass_points += (stat.pass_int or 0) * INTERCEPTION_POINTS

        # Rushing
        rush_points = (stat.rush_yd or 0) * RUSHING_YARD_POINTS
        rush_points += (stat.rush_td or 0) * RUSHING_TD_POINTS

        # Receiving
        rec_points = (stat.rec_yd or 0) * RECEIVING_YARD_POINTS
        rec_points += (stat.rec_td or 0) * RECEIVING_TD_POINTS
        rec_points += (stat.rec or 0) * self.reception

        return pass_points + rush_points + rec_points


def weekly_points(stat: WeeklyStat, scoring: ScoringSystem) -> float:
    """Fantasy points for ``stat`` under ``scoring``."""
    return scoring.calculate_fantasy_points(stat)
