"""In-memory state shared by the API routes."""

from __future__ import annotations

from revdep.extractor import ExtractionCache


class AppState:
    """Holds the extraction cache reused across requests."""

    def __init__(self):
        self.cache = ExtractionCache()

    def reset(self) -> None:
        self.cache.clear()


# Module-level singleton; all routers import this
state = AppState()
