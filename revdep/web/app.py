"""FastAPI application factory."""

from __future__ import annotations

from fastapi import FastAPI

from revdep import __version__
from revdep.web.api import router


def create_app() -> FastAPI:
    app = FastAPI(title="revdep", version=__version__)
    app.include_router(router)
    return app
