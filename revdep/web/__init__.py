"""JSON API over the resolve, entry-points, files and node-modules operations."""

from revdep.web.app import create_app

__all__ = ["create_app"]
