"""Data models for store boundaries."""

from __future__ import annotations

import json
from dataclasses import dataclass


@dataclass(frozen=True)
class Coordinate:
    """Immutable geographic point."""

    latitude: float             # WGS84, [-90, 90]
    longitude: float            # WGS84, [-180, 180]

    @classmethod
    def parse(cls, text: str) -> Coordinate:
        """Parse ``"lat,lng"`` (whitespace tolerated) into a Coordinate."""
        parts = [p.strip() for p in text.split(",")]
        if len(parts) != 2 or not all(parts):
            raise ValueError(f"expected 'LAT,LNG', got {text!r}")
        try:
            return cls(latitude=float(parts[0]), longitude=float(parts[1]))
        except ValueError:
            raise ValueError(f"expected numeric 'LAT,LNG', got {text!r}") from None

    def to_dict(self) -> dict:
        return {"latitude": self.latitude, "longitude": self.longitude}

    @classmethod
    def from_dict(cls, d: dict) -> Coordinate:
        return cls(latitude=float(d["latitude"]), longitude=float(d["longitude"]))

    def __str__(self) -> str:
        return f"{self.latitude:.6f}, {self.longitude:.6f}"


@dataclass(frozen=True)
class BoundarySnapshot:
    """Validated store boundary, ready for persistence."""

    center: Coordinate
    vertices: tuple[Coordinate, ...]
    store_name: str

    @property
    def boundary(self) -> list[dict]:
        """Vertices as ``{"latitude", "longitude"}`` dicts, in ring order."""
        return [v.to_dict() for v in self.vertices]

    def to_json(self) -> str:
        return json.dumps({
            "store_name": self.store_name,
            "center": self.center.to_dict(),
            "boundary": self.boundary,
        })

    @classmethod
    def from_json(cls, raw: str) -> BoundarySnapshot:
        d = json.loads(raw)
        return cls(
            center=Coordinate.from_dict(d["center"]),
            vertices=tuple(Coordinate.from_dict(v) for v in d["boundary"]),
            store_name=d["store_name"],
        )
