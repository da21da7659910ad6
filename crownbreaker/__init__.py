"""CrownBreaker: plan optimized KOM routes through starred Strava segments."""

from .errors import (
    AuthenticationError,
    KomOptimizerAPIError,
    PolylineDecodeError,
    ResourceNotFoundError,
    RouteConfigError,
    RouteGenerationError,
)
from .geometry import calculate_map_region, decode_polyline, try_decode_polyline
from .models import BoundingRegion, Coordinate, GeneratedRoute, RouteConfig, Segment
from .session import SessionContext

__all__ = [
    "AuthenticationError",
    "KomOptimizerAPIError",
    "PolylineDecodeError",
    "ResourceNotFoundError",
    "RouteConfigError",
    "RouteGenerationError",
    "calculate_map_region",
    "decode_polyline",
    "try_decode_polyline",
    "BoundingRegion",
    "Coordinate",
    "GeneratedRoute",
    "RouteConfig",
    "Segment",
    "SessionContext",
]
