"""Trip API routes."""

from trips.routes import crud

__all__ = ["crud"]
