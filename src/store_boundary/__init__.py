"""Store boundary construction and validation."""

from store_boundary.geo import distance, point_in_polygon
from store_boundary.models import BoundarySnapshot, Coordinate
from store_boundary.session import (
    MAX_VERTICES,
    AddResult,
    BoundarySession,
    SaveError,
    SaveResult,
    SessionState,
)

__all__ = [
    "MAX_VERTICES",
    "AddResult",
    "BoundarySession",
    "BoundarySnapshot",
    "Coordinate",
    "SaveError",
    "SaveResult",
    "SessionState",
    "distance",
    "point_in_polygon",
]
