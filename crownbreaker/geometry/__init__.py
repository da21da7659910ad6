"""Geometry helpers used to put segments and routes on a map."""

from .polyline import DecodeResult, decode_polyline, try_decode_polyline
from .region import DEFAULT_REGION, calculate_map_region, region_for_coordinates

__all__ = [
    "DecodeResult",
    "decode_polyline",
    "try_decode_polyline",
    "DEFAULT_REGION",
    "calculate_map_region",
    "region_for_coordinates",
]
