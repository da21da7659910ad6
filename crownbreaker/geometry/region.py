"""Map viewport computation for sets of segments or coordinates."""

from __future__ import annotations

import logging
import math
from typing import Any, Iterable, Iterator, Mapping, Optional, Sequence

from ..config import DEFAULT_REGION_CENTER, DEFAULT_REGION_SPAN, REGION_MARGIN_FACTOR
from ..models import BoundingRegion, Coordinate

LOGGER = logging.getLogger(__name__)

__all__ = ["DEFAULT_REGION", "calculate_map_region", "region_for_coordinates"]


DEFAULT_REGION = BoundingRegion(
    center_latitude=DEFAULT_REGION_CENTER[0],
    center_longitude=DEFAULT_REGION_CENTER[1],
    latitude_span=DEFAULT_REGION_SPAN,
    longitude_span=DEFAULT_REGION_SPAN,
)


def _endpoint(segment: Any, attr: str, key: str) -> Optional[Coordinate]:
    """Return a segment's start/end coordinate from an object or raw payload."""

    if isinstance(segment, Mapping):
        return Coordinate.from_latlng(segment.get(key))
    value = getattr(segment, attr, None)
    if value is None or isinstance(value, Coordinate):
        return value
    return Coordinate.from_latlng(value)


def _segment_endpoints(segments: Iterable[Any]) -> Iterator[Coordinate]:
    for segment in segments:
        start = _endpoint(segment, "start_coordinate", "start_latlng")
        if start is not None:
            yield start
        end = _endpoint(segment, "end_coordinate", "end_latlng")
        if end is not None:
            yield end


def region_for_coordinates(
    coordinates: Iterable[Coordinate], *, margin: float = REGION_MARGIN_FACTOR
) -> BoundingRegion:
    """Bounding region of ``coordinates`` with each span scaled by ``margin``.

    Returns :data:`DEFAULT_REGION` when there is no coordinate at all.
    Non-finite points are ignored. A single point produces a zero span.
    """

    min_lat = max_lat = min_lng = max_lng = None
    for coord in coordinates:
        if not (math.isfinite(coord.latitude) and math.isfinite(coord.longitude)):
            continue
        if min_lat is None:
            min_lat = max_lat = coord.latitude
            min_lng = max_lng = coord.longitude
            continue
        min_lat = min(min_lat, coord.latitude)
        max_lat = max(max_lat, coord.latitude)
        min_lng = min(min_lng, coord.longitude)
        max_lng = max(max_lng, coord.longitude)

    if min_lat is None:
        return DEFAULT_REGION

    return BoundingRegion(
        center_latitude=(min_lat + max_lat) / 2,
        center_longitude=(min_lng + max_lng) / 2,
        latitude_span=(max_lat - min_lat) * margin,
        longitude_span=(max_lng - min_lng) * margin,
    )


def calculate_map_region(
    segments: Optional[Sequence[Any]], *, margin: float = REGION_MARGIN_FACTOR
) -> BoundingRegion:
    """Viewport framing the start and end points of ``segments``.

    Segments may be :class:`~crownbreaker.models.Segment` instances (or any
    object with ``start_coordinate``/``end_coordinate``) or raw payload
    mappings carrying ``start_latlng``/``end_latlng`` pairs. Missing
    coordinates are skipped field by field.
    """

    if not segments:
        return DEFAULT_REGION
    region = region_for_coordinates(_segment_endpoints(segments), margin=margin)
    if region is DEFAULT_REGION:
        LOGGER.debug(
            "None of the %s segments carry coordinates; using default region",
            len(segments),
        )
    return region
