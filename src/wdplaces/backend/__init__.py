"""Flask backend serving the wdplaces lookups over HTTP."""

from wdplaces.backend.app import create_app

__all__ = ["create_app"]
