"""Boundary session — builds and validates a store's service polygon.

The session holds the store center, the service radius and up to five
polygon vertices in insertion order. The radius gates each new vertex at the
moment it is added; it is never re-applied to vertices already accepted.
Every outcome is returned as a value so the caller decides how to report it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from store_boundary.config import SessionDefaults, load_defaults
from store_boundary.geo import distance, point_in_polygon
from store_boundary.models import BoundarySnapshot, Coordinate
from store_boundary.validation import ValidationError, validate_coordinate, validate_radius

MAX_VERTICES = 5


class AddResult(str, Enum):
    """Outcome of offering a vertex to the session."""
    ACCEPTED = "ACCEPTED"
    REJECTED_TOO_MANY = "REJECTED_TOO_MANY"
    REJECTED_OUT_OF_RADIUS = "REJECTED_OUT_OF_RADIUS"


class SaveError(str, Enum):
    """Reason a boundary could not be saved."""
    INCOMPLETE_BOUNDARY = "INCOMPLETE_BOUNDARY"
    CENTER_NOT_CONTAINED = "CENTER_NOT_CONTAINED"


class SessionState(str, Enum):
    """Derived lifecycle state.

    - EMPTY: no vertices
    - BUILDING: 1..4 vertices
    - READY: 5 vertices, not validated since the last change
    - VALID: 5 vertices, last validation succeeded
    """
    EMPTY = "EMPTY"
    BUILDING = "BUILDING"
    READY = "READY"
    VALID = "VALID"


@dataclass(frozen=True)
class SaveResult:
    """Result of validate_and_save: a snapshot on success, an error otherwise."""

    snapshot: Optional[BoundarySnapshot] = None
    error: Optional[SaveError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class BoundarySession:
    """Stateful controller for one store boundary."""

    def __init__(self, center: Coordinate, radius_m: float, store_name: str = ""):
        self._center = center
        self._radius_m = radius_m
        self.store_name = store_name
        self._vertices: list[Coordinate] = []
        self._validated = False

        # Constructor input goes through the same checks as the setters
        self.set_center(center)
        self.set_radius(radius_m)

    @classmethod
    def from_defaults(cls, defaults: Optional[SessionDefaults] = None) -> BoundarySession:
        defaults = defaults or load_defaults()
        return cls(
            center=Coordinate(defaults.latitude, defaults.longitude),
            radius_m=defaults.radius_m,
            store_name=defaults.store_name,
        )

    # ── State ────────────────────────────────────────────────────────────

    @property
    def center(self) -> Coordinate:
        return self._center

    @property
    def radius_m(self) -> float:
        return self._radius_m

    @property
    def radius_km(self) -> float:
        return self._radius_m / 1000

    @property
    def vertices(self) -> tuple[Coordinate, ...]:
        return tuple(self._vertices)

    @property
    def remaining_vertices(self) -> int:
        return MAX_VERTICES - len(self._vertices)

    @property
    def can_undo(self) -> bool:
        return bool(self._vertices)

    @property
    def state(self) -> SessionState:
        count = len(self._vertices)
        if count == 0:
            return SessionState.EMPTY
        if count < MAX_VERTICES:
            return SessionState.BUILDING
        return SessionState.VALID if self._validated else SessionState.READY

    def distance_to_center(self, point: Coordinate) -> float:
        return distance(point, self._center)

    def is_within_radius(self, point: Coordinate) -> bool:
        return self.distance_to_center(point) <= self._radius_m

    # ── Vertex editing ───────────────────────────────────────────────────

    def attempt_add_vertex(self, point: Coordinate) -> AddResult:
        """Append ``point`` if there is room and it lies within the radius."""
        if len(self._vertices) >= MAX_VERTICES:
            return AddResult.REJECTED_TOO_MANY
        if not self.is_within_radius(point):
            return AddResult.REJECTED_OUT_OF_RADIUS

        self._vertices.append(point)
        self._validated = False
        return AddResult.ACCEPTED

    def remove_last_vertex(self) -> bool:
        """Pop the most recent vertex. Returns False if there was none."""
        if not self._vertices:
            return False
        self._vertices.pop()
        self._validated = False
        return True

    def clear_all(self) -> None:
        """Drop every vertex. Center, radius and name are kept."""
        self._vertices.clear()
        self._validated = False

    # ── Settings ─────────────────────────────────────────────────────────

    def set_center(self, center: Coordinate) -> None:
        """Move the store center. Existing vertices are kept as they are.

        Raises:
            ValidationError: if the coordinate is out of range or NaN.
        """
        errors = validate_coordinate(center)
        if errors:
            raise ValidationError(errors)
        if center != self._center:
            self._validated = False
        self._center = center

    def set_radius(self, radius_m: float) -> None:
        """Change the radius used to gate future vertices.

        Raises:
            ValidationError: if the radius is not a positive finite number.
        """
        errors = validate_radius(radius_m)
        if errors:
            raise ValidationError(errors)
        self._radius_m = float(radius_m)

    def set_store_name(self, name: str) -> None:
        self.store_name = name

    # ── Validation ───────────────────────────────────────────────────────

    def validate_and_save(self) -> SaveResult:
        """Check the boundary and return an immutable snapshot if it is complete.

        The live session is left untouched either way.
        """
        if len(self._vertices) != MAX_VERTICES:
            return SaveResult(error=SaveError.INCOMPLETE_BOUNDARY)

        if not point_in_polygon(self._center, self._vertices):
            return SaveResult(error=SaveError.CENTER_NOT_CONTAINED)

        self._validated = True
        return SaveResult(
            snapshot=BoundarySnapshot(
                center=self._center,
                vertices=tuple(self._vertices),
                store_name=self.store_name,
            )
        )
