"""HTTP API."""

from synergi.api.server import create_app

__all__ = ["create_app"]
