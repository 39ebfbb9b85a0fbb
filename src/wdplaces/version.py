"""Version information for :mod:`wdplaces`."""

__all__ = ["VERSION", "get_version"]

VERSION = "0.1.0"


def get_version() -> str:
    """Get the :mod:`wdplaces` version string."""
    return VERSION
