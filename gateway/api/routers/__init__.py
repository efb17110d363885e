"""API routers for Addon Mirror."""

from . import health
from . import repository

__all__ = [
    "health",
    "repository",
]
