"""Input validation for coordinates and radii entered by the operator."""

from __future__ import annotations

import math

from store_boundary.models import Coordinate


class ValidationError(Exception):
    """Raised when operator input fails validation."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Validation failed: {'; '.join(errors)}")


def validate_coordinate(coord: Coordinate) -> list[str]:
    """Validate a Coordinate. Returns list of error messages (empty = valid)."""
    errors: list[str] = []

    # NaN compares False against everything, so the range checks below would miss it
    if math.isnan(coord.latitude):
        errors.append("latitude is NaN")
    elif not -90 <= coord.latitude <= 90:
        errors.append(f"latitude {coord.latitude} out of range [-90, 90]")

    if math.isnan(coord.longitude):
        errors.append("longitude is NaN")
    elif not -180 <= coord.longitude <= 180:
        errors.append(f"longitude {coord.longitude} out of range [-180, 180]")

    return errors


def validate_radius(radius_m: float) -> list[str]:
    """Validate a service radius in meters."""
    errors: list[str] = []

    if math.isnan(radius_m) or math.isinf(radius_m):
        errors.append(f"radius {radius_m} is not a finite number")
    elif radius_m <= 0:
        errors.append(f"radius {radius_m} must be positive")

    return errors
