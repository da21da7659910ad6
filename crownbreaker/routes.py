"""Route workflow: configure, generate, preview data and export."""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Optional, Sequence

from .api_client import RoutesAPI
from .config import (
    DEFAULT_EXPORT_FORMAT,
    DEFAULT_REGION_CENTER,
    DEFAULT_ROUTE_PROFILE,
    EXPORT_OUTPUT_DIR,
    ROUTE_PROFILES,
)
from .errors import RouteConfigError
from .geometry import region_for_coordinates
from .models import BoundingRegion, GeneratedRoute, RouteConfig, Segment, StartPoint

LOGGER = logging.getLogger(__name__)


def parse_start_point(text: str, name: Optional[str] = None) -> StartPoint:
    """Parse ``"lat,lng"`` into a :class:`StartPoint`."""

    parts = [part.strip() for part in text.split(",")]
    if len(parts) != 2:
        raise RouteConfigError(f"Expected 'lat,lng' coordinates, got {text!r}")
    try:
        latitude, longitude = float(parts[0]), float(parts[1])
    except ValueError as exc:
        raise RouteConfigError(f"Invalid coordinates {text!r}") from exc
    return StartPoint(latitude, longitude, name or "Custom point")


def default_start_point(segments: Sequence[Segment]) -> StartPoint:
    """Start of the first segment with coordinates, else the default centre."""

    for segment in segments:
        start = segment.start_coordinate
        if start is not None:
            return StartPoint(start.latitude, start.longitude, segment.name)
    return StartPoint(DEFAULT_REGION_CENTER[0], DEFAULT_REGION_CENTER[1], "Default start")


def validate_route_config(config: RouteConfig) -> RouteConfig:
    """Return a normalised copy of ``config`` or raise :class:`RouteConfigError`."""

    name = (config.route_name or "").strip()
    if not name:
        raise RouteConfigError("Please give your route a name")
    if config.profile not in ROUTE_PROFILES:
        raise RouteConfigError(
            f"Unknown profile {config.profile!r}; expected one of {', '.join(ROUTE_PROFILES)}"
        )
    start = config.start_point
    if start is None:
        raise RouteConfigError("A start point is required")
    for value in (start.latitude, start.longitude):
        if value is None or not math.isfinite(value):
            raise RouteConfigError("Please enter valid coordinates")
    if not -90.0 <= start.latitude <= 90.0 or not -180.0 <= start.longitude <= 180.0:
        raise RouteConfigError(
            f"Start point ({start.latitude}, {start.longitude}) is out of range"
        )
    return RouteConfig(
        route_name=name,
        start_point=start,
        profile=config.profile,
        go_back=bool(config.go_back),
    )


def build_route_config(
    route_name: str,
    start_point: StartPoint,
    *,
    profile: str = DEFAULT_ROUTE_PROFILE,
    go_back: bool = False,
) -> RouteConfig:
    return validate_route_config(
        RouteConfig(route_name, start_point, profile=profile, go_back=go_back)
    )


def route_region(route: GeneratedRoute) -> BoundingRegion:
    """Viewport framing the route geometry (waypoints when geometry is empty)."""

    return region_for_coordinates(route.full_geometry or route.waypoints)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def share_message(route: GeneratedRoute) -> str:
    return (
        "My optimized KOM route!\n\n"
        f"Distance: {_round_half_up(route.total_distance / 1000)}km\n"
        f"Duration: {_round_half_up(route.total_duration / 60)}min\n"
        f"Segments: {len(route.segments)}\n\n"
        "#CrownBreaker #KOM #Strava"
    )


class RoutePlanner:
    """Thin orchestration over :class:`RoutesAPI` for the generate/export flow."""

    def __init__(self, api: RoutesAPI) -> None:
        self._api = api

    def generate(self, config: RouteConfig, segments: Sequence[Segment]) -> GeneratedRoute:
        if not segments:
            raise RouteConfigError("Select at least one segment")
        config = validate_route_config(config)
        return self._api.generate_route(config, [segment.id for segment in segments])

    def export_to_file(
        self,
        route_id: str,
        export_format: str = DEFAULT_EXPORT_FORMAT,
        output_path: Optional[Path] = None,
    ) -> Path:
        """Download the export and write it to ``output_path``.

        Defaults to ``EXPORT_OUTPUT_DIR/route_<id>.<format>``.
        """

        content = self._api.export_route(route_id, export_format)
        if output_path is None:
            output_path = EXPORT_OUTPUT_DIR / f"route_{route_id}.{export_format.lower()}"
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(content)
        LOGGER.info("Route %s written to %s", route_id, output_path)
        return output_path
