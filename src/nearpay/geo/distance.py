"""Centralized geographic distance calculations.

This module provides Haversine distance calculations for determining
proximity between the current user and synthetic users, requests and
meetup spots. All proximity checks use a closed interval: a point at
exactly the threshold distance is considered in range.
"""

from math import atan2, cos, radians, sin, sqrt
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from nearpay.models import Location

EARTH_RADIUS_M = 6_371_000  # Earth radius in meters


def haversine_distance_m(
    lat1: float,
    lng1: float,
    lat2: float,
    lng2: float,
) -> float:
    """Calculate the great-circle distance between two points in meters.

    Uses the Haversine formula to calculate the shortest distance over
    the Earth's surface between two points specified by latitude/longitude.
    The intermediate term is clamped to [0, 1] so floating point rounding
    on near-antipodal inputs cannot push ``sqrt(1 - a)`` into a domain error.

    Args:
        lat1: Latitude of first point in degrees
        lng1: Longitude of first point in degrees
        lat2: Latitude of second point in degrees
        lng2: Longitude of second point in degrees

    Returns:
        Distance between the two points in meters, never negative
    """
    lat1, lng1, lat2, lng2 = map(radians, [lat1, lng1, lat2, lng2])
    dlat = lat2 - lat1
    dlng = lng2 - lng1

    a = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlng / 2) ** 2
    a = min(1.0, max(0.0, a))
    c = 2 * atan2(sqrt(a), sqrt(1 - a))

    return EARTH_RADIUS_M * c


def haversine_distance_km(
    lat1: float,
    lng1: float,
    lat2: float,
    lng2: float,
) -> float:
    """Calculate the great-circle distance between two points in kilometers."""
    return haversine_distance_m(lat1, lng1, lat2, lng2) / 1000.0


def distance_between(a: "Location", b: "Location") -> float:
    """Distance in meters between two Location models."""
    return haversine_distance_m(a.lat, a.lng, b.lat, b.lng)


def is_within_proximity(
    lat1: float,
    lng1: float,
    lat2: float,
    lng2: float,
    threshold_m: float = 700.0,
) -> bool:
    """Check if two geographic points are within a given distance threshold.

    Args:
        lat1: Latitude of first point in degrees
        lng1: Longitude of first point in degrees
        lat2: Latitude of second point in degrees
        lng2: Longitude of second point in degrees
        threshold_m: Maximum distance in meters, inclusive

    Returns:
        True if the points are at most threshold_m meters apart
    """
    return haversine_distance_m(lat1, lng1, lat2, lng2) <= threshold_m
