"""Interactive HTML previews of segments and generated routes."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

import folium

from .geometry import calculate_map_region, decode_polyline
from .models import BoundingRegion, GeneratedRoute, Segment
from .routes import route_region

PathLike = Union[str, Path]

_SEGMENT_COLOR = "#fc4c02"
_SELECTED_COLOR = "#e3360b"
_ROUTE_COLOR = "#1e3a8a"
_DEFAULT_ZOOM = 13


def _base_map(region: BoundingRegion) -> folium.Map:
    folium_map = folium.Map(
        location=[region.center_latitude, region.center_longitude],
        zoom_start=_DEFAULT_ZOOM,
        control_scale=True,
    )
    # A single point has no extent to fit; keep the default zoom.
    if region.latitude_span > 0 and region.longitude_span > 0:
        south_west, north_east = region.bounds()
        folium_map.fit_bounds([list(south_west), list(north_east)])
    return folium_map


def _save(folium_map: folium.Map, output_html_path: Optional[PathLike]) -> None:
    if output_html_path is None:
        return
    path = Path(output_html_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    folium_map.save(str(path))


def _segment_popup(index: int, segment: Segment) -> str:
    grade = f"{segment.average_grade}%" if segment.average_grade is not None else "n/a"
    return f"{index}. {segment.name} | {segment.distance:.0f}m - {grade}"


def create_segments_map(
    segments: Sequence[Segment],
    *,
    selected_ids: Iterable[int] = (),
    output_html_path: Optional[PathLike] = None,
) -> folium.Map:
    """Map of segment shapes (or start markers when no polyline is known).

    Selected segments are drawn thicker in a darker colour.
    """

    selected = set(selected_ids)
    folium_map = _base_map(calculate_map_region(segments))
    for index, segment in enumerate(segments, start=1):
        is_selected = segment.id in selected
        color = _SELECTED_COLOR if is_selected else _SEGMENT_COLOR
        label = _segment_popup(index, segment)
        points = decode_polyline(segment.encoded_polyline)
        if len(points) >= 2:
            folium.PolyLine(
                [point.as_tuple() for point in points],
                color=color,
                weight=6 if is_selected else 4,
                opacity=0.9,
                tooltip=label,
            ).add_to(folium_map)
        start = segment.start_coordinate
        if start is not None:
            folium.CircleMarker(
                location=start.as_tuple(),
                radius=5,
                color=color,
                fill=True,
                fill_color=color,
                tooltip=label,
            ).add_to(folium_map)
    _save(folium_map, output_html_path)
    return folium_map


def create_route_map(
    route: GeneratedRoute,
    *,
    output_html_path: Optional[PathLike] = None,
) -> folium.Map:
    """Map of a generated route with its waypoints and segment starts."""

    folium_map = _base_map(route_region(route))
    if len(route.full_geometry) >= 2:
        folium.PolyLine(
            [point.as_tuple() for point in route.full_geometry],
            color=_ROUTE_COLOR,
            weight=5,
            opacity=0.8,
            tooltip=f"Route {route.route_id}",
        ).add_to(folium_map)
    for waypoint in route.waypoints:
        folium.CircleMarker(
            location=waypoint.as_tuple(),
            radius=4,
            color=_ROUTE_COLOR,
            fill=True,
            fill_color="#ffffff",
        ).add_to(folium_map)
    for segment in route.segments:
        if segment.start_point is None:
            continue
        kom = f" (KOM {segment.kom_time:.0f}s)" if segment.kom_time is not None else ""
        folium.Marker(
            location=segment.start_point.as_tuple(),
            tooltip=f"{segment.name}{kom}",
            icon=folium.Icon(color="red", icon="flag"),
        ).add_to(folium_map)
    _save(folium_map, output_html_path)
    return folium_map
