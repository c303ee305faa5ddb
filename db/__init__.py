"""Database package for MongoDB operations using Beanie ODM.

Modules:
    manager: DatabaseManager singleton for connection handling
    models: Beanie Document models for all collections

Usage:
    from db import Trip, db_manager

    await db_manager.init_beanie()
    trip = await Trip.get(trip_id)
"""

from db.manager import DatabaseManager, db_manager
from db.models import ALL_DOCUMENT_MODELS, ServerLog, Trip

__all__ = [
    "ALL_DOCUMENT_MODELS",
    "DatabaseManager",
    "ServerLog",
    "Trip",
    "db_manager",
]
