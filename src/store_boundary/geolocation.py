"""IP-based geolocation lookup for the initial store center."""

from __future__ import annotations

import logging
import time
from typing import Optional

import httpx

from store_boundary.config import GeolocationConfig
from store_boundary.models import Coordinate
from store_boundary.validation import validate_coordinate

logger = logging.getLogger(__name__)


class IPGeolocationClient:
    """HTTP client for JSON geolocation services.

    Works with any endpoint whose response body carries top-level
    ``latitude``/``longitude`` fields (ipapi.co, ipwho.is, etc.).
    """

    def __init__(self, config: GeolocationConfig, transport: httpx.BaseTransport | None = None):
        self.config = config
        self._client = httpx.Client(timeout=config.timeout_seconds, transport=transport)

    def close(self) -> None:
        if not self._client.is_closed:
            self._client.close()

    def __enter__(self) -> IPGeolocationClient:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def locate(self) -> Optional[Coordinate]:
        """Look up the caller's approximate position.

        Returns:
            The located Coordinate, or None if the lookup is disabled, every
            attempt failed, or the response did not hold a usable position.
        """
        if not self.config.enabled:
            return None

        try:
            payload = self._request_with_retry()
        except RuntimeError as exc:
            logger.error("%s: %s", self.config.name, exc)
            return None

        return self._parse(payload)

    def _parse(self, payload: dict) -> Optional[Coordinate]:
        try:
            coord = Coordinate(
                latitude=float(payload["latitude"]),
                longitude=float(payload["longitude"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            logger.error("%s: unusable response %r (%s)", self.config.name, payload, exc)
            return None

        errors = validate_coordinate(coord)
        if errors:
            logger.error("%s: invalid position: %s", self.config.name, "; ".join(errors))
            return None

        logger.info("%s: located at %s", self.config.name, coord)
        return coord

    def _request_with_retry(self) -> dict:
        """Make HTTP request with exponential backoff retry."""
        last_exc: Exception | None = None

        for attempt in range(self.config.max_retries + 1):
            try:
                resp = self._client.get(self.config.url)
                resp.raise_for_status()
                return resp.json()
            except (httpx.HTTPStatusError, httpx.RequestError, ValueError) as exc:
                last_exc = exc
                if attempt < self.config.max_retries:
                    backoff = self.config.retry_backoff_base ** attempt
                    logger.warning(
                        "%s: attempt %d/%d failed (%s), retrying in %.1fs",
                        self.config.name, attempt + 1, self.config.max_retries + 1,
                        exc, backoff,
                    )
                    time.sleep(backoff)

        raise RuntimeError(
            f"all {self.config.max_retries + 1} attempts failed"
        ) from last_exc


def locate_center(config: GeolocationConfig) -> Optional[Coordinate]:
    """One-shot lookup with a short-lived client."""
    with IPGeolocationClient(config) as client:
        return client.locate()
