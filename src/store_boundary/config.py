"""Session defaults and collaborator settings."""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass
class SessionDefaults:
    """Initial state for a new boundary session."""

    store_name: str
    latitude: float
    longitude: float
    radius_m: float


@dataclass
class GeolocationConfig:
    """Configuration for the IP geolocation lookup."""

    name: str
    url: str
    timeout_seconds: float
    max_retries: int
    retry_backoff_base: float
    enabled: bool


DEFAULTS = SessionDefaults(
    store_name="Terrys Cafe London",
    latitude=51.4998819,
    longitude=-0.0992492,
    radius_m=5000.0,
)

GEOLOCATION = GeolocationConfig(
    name="ipapi",
    url=os.getenv("STORE_BOUNDARY_GEOLOCATION_URL", "https://ipapi.co/json/"),
    timeout_seconds=5.0,
    max_retries=2,
    retry_backoff_base=2.0,
    enabled=True,
)


def load_defaults() -> SessionDefaults:
    """Session defaults with ``STORE_BOUNDARY_*`` environment overrides applied."""
    return SessionDefaults(
        store_name=os.getenv("STORE_BOUNDARY_NAME", DEFAULTS.store_name),
        latitude=float(os.getenv("STORE_BOUNDARY_LAT", DEFAULTS.latitude)),
        longitude=float(os.getenv("STORE_BOUNDARY_LNG", DEFAULTS.longitude)),
        radius_m=float(os.getenv("STORE_BOUNDARY_RADIUS_M", DEFAULTS.radius_m)),
    )
