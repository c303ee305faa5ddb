"""Encoded polyline decoding (Google precision-5 format)."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def _coords_in_range(coords: list[list[float]]) -> bool:
    return all(-180.0 <= lon <= 180.0 and -90.0 <= lat <= 90.0 for lon, lat in coords)


def decode_polyline5(encoded: str | None) -> list[list[float]]:
    """Decode a precision-5 polyline into ``[lon, lat]`` pairs.

    Returns an empty list for empty, truncated or out-of-range input.
    """
    if not encoded:
        return []

    coords: list[list[float]] = []
    index = 0
    lat = 0
    lng = 0
    length = len(encoded)

    def next_value() -> int:
        nonlocal index
        result = 0
        shift = 0
        while True:
            if index >= length:
                raise ValueError("Invalid polyline encoding")
            byte = ord(encoded[index]) - 63
            index += 1
            result |= (byte & 0x1F) << shift
            shift += 5
            if byte < 0x20:
                break
        if result & 1:
            return ~(result >> 1)
        return result >> 1

    try:
        while index < length:
            lat += next_value()
            lng += next_value()
            coords.append([lng / 1e5, lat / 1e5])
    except ValueError:
        logger.debug("Discarding truncated polyline of length %d", length)
        return []

    if not _coords_in_range(coords):
        return []
    return coords
