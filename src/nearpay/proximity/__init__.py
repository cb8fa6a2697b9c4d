from nearpay.proximity.engine import (
    DEFAULT_RADIUS_M,
    MeetupSpotDistance,
    ProximityBand,
    ProximityEngine,
    RankedRequest,
    UserWithDistance,
)

__all__ = [
    "DEFAULT_RADIUS_M",
    "MeetupSpotDistance",
    "ProximityBand",
    "ProximityEngine",
    "RankedRequest",
    "UserWithDistance",
]
