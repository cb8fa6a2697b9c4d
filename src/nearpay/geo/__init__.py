from nearpay.geo.distance import (
    EARTH_RADIUS_M,
    distance_between,
    haversine_distance_km,
    haversine_distance_m,
    is_within_proximity,
)

__all__ = [
    "EARTH_RADIUS_M",
    "distance_between",
    "haversine_distance_km",
    "haversine_distance_m",
    "is_within_proximity",
]
