"""Persistence sinks for validated boundaries."""

from __future__ import annotations

import abc
import logging
from pathlib import Path

from store_boundary.models import BoundarySnapshot

logger = logging.getLogger(__name__)


class BoundarySink(abc.ABC):
    """Destination for a saved BoundarySnapshot."""

    @abc.abstractmethod
    def save(self, snapshot: BoundarySnapshot) -> None:
        """Persist the snapshot.

        Raises:
            OSError: if the underlying storage cannot be written.
        """


class JsonFileSink(BoundarySink):
    """Writes each snapshot as a JSON document, replacing the previous one."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def save(self, snapshot: BoundarySnapshot) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(snapshot.to_json() + "\n", encoding="utf-8")
        logger.info("Saved boundary for %r to %s", snapshot.store_name, self.path)


class LogSink(BoundarySink):
    """Logs the boundary payload instead of storing it."""

    def save(self, snapshot: BoundarySnapshot) -> None:
        logger.info("Boundary for %r: %s", snapshot.store_name, snapshot.boundary)
