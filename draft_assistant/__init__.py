"""Fantasy Football Draft Assistant

Per-game fantasy projections from Sleeper weekly stats, served to a draft UI.
"""

__version__ = "0.1.0"
__author__ = "Fantasy Football Analytics"

from .config.scoring import ScoringSystem, ScoringType
from .data.sleeper_client import SleeperClient
from .models.projection_builder import ProjectionBuilder
from .models.projection_cache import ProjectionCache
from .models.projection_service import ProjectionQuery, ProjectionService

__all__ = [
    "ScoringSystem",
    "ScoringType",
    "SleeperClient",
    "ProjectionBuilder",
    "ProjectionCache",
    "ProjectionQuery",
    "ProjectionService",
]
