"""
Route calculation and trip history package.

The package is organized into:
- routes/: API endpoint handlers
- services/: state attribution, route orchestration and persistence
- serializers.py: Data transformation utilities
"""

from fastapi import APIRouter

from trips.routes import crud

# Create main router that aggregates all trip-related routes
router = APIRouter()

router.include_router(crud.router, tags=["trips"])

__all__ = ["router"]
