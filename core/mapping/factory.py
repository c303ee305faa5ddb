"""
Factory for resolving the active MappingProvider.
"""

import logging

from config import require_google_maps_api_key
from core.mapping.google_provider import GoogleProvider
from core.mapping.interfaces import MappingProvider, RouteProvider, StateResolver

logger = logging.getLogger(__name__)


def get_mapping_provider() -> MappingProvider:
    """
    Returns the Google-backed MappingProvider.

    Raises ConfigurationException when GOOGLE_MAPS_API_KEY is missing or blank.
    """
    return GoogleProvider(api_key=require_google_maps_api_key())


def get_state_resolver() -> StateResolver:
    return get_mapping_provider().state_resolver


def get_route_provider() -> RouteProvider:
    return get_mapping_provider().route_provider
