"""Player, weekly statistic and projection records."""

from typing import Optional

from pydantic import BaseModel, ConfigDict

FANTASY_POSITIONS = ("QB", "RB", "WR", "TE")


class Player(BaseModel):
    """A fantasy-relevant player from the Sleeper player directory."""

    model_config = ConfigDict(frozen=True)

    player_id: str
    full_name: str
    position: str
    team: Optional[str] = None
    birth_date: Optional[str] = None


class WeeklyStat(BaseModel):
    """One player's stat line for a single (season, week).

    Optional fields are None when the upstream record did not carry them;
    scoring treats them as zero but played detection does not.
    """

    model_config = ConfigDict(frozen=True)

    player_id: str
    season: int
    week: int

    # Precomputed fantasy totals
    pts_ppr: Optional[float] = None
    pts_half_ppr: Optional[float] = None
    pts_std: Optional[float] = None

    # Passing
    pass_yd: Optional[float] = None
    pass_td: Optional[float] = None
    pass_int: Optional[float] = None

    # Rushing
    rush_yd: Optional[float] = None
    rush_td: Optional[float] = None
    carries: Optional[float] = None

    # Receiving
    rec: Optional[float] = None
    rec_yd: Optional[float] = None
    rec_td: Optional[float] = None
    targets: Optional[float] = None


class ProjectionRow(BaseModel):
    """Projected points per game for one player."""

    model_config = ConfigDict(frozen=True)

    player_id: str
    full_name: str
    position: str
    team: Optional[str] = None
    ppg: float = 0.0

    def season_total(self, games: int) -> float:
        """Projected total over ``games`` games."""
        return self.ppg * games
