from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple


LatLng = Tuple[float, float]


def _finite_pair(lat: Any, lng: Any) -> Optional[LatLng]:
    if lat is None or lng is None:
        return None
    try:
        lat, lng = float(lat), float(lng)
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return None
    return lat, lng


@dataclass(frozen=True, slots=True)
class Coordinate:
    """A latitude/longitude pair in decimal degrees."""

    latitude: float
    longitude: float

    def as_tuple(self) -> LatLng:
        return self.latitude, self.longitude

    @classmethod
    def from_latlng(cls, pair: Optional[Sequence[float]]) -> Optional["Coordinate"]:
        """Build from a ``[lat, lng]`` pair; ``None`` when absent or malformed."""

        try:
            if not pair or len(pair) != 2:
                return None
            lat, lng = pair
        except (TypeError, ValueError):
            return None
        values = _finite_pair(lat, lng)
        return cls(*values) if values else None

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> Optional["Coordinate"]:
        """Build from a ``{"latitude": .., "longitude": ..}`` mapping."""

        if not isinstance(data, Mapping):
            return None
        values = _finite_pair(data.get("latitude"), data.get("longitude"))
        return cls(*values) if values else None


@dataclass(frozen=True, slots=True)
class BoundingRegion:
    """Map viewport: centre point plus angular span in degrees."""

    center_latitude: float
    center_longitude: float
    latitude_span: float
    longitude_span: float

    @property
    def center(self) -> Coordinate:
        return Coordinate(self.center_latitude, self.center_longitude)

    def bounds(self) -> Tuple[LatLng, LatLng]:
        """Return ``((south, west), (north, east))`` corners."""

        half_lat = self.latitude_span / 2
        half_lng = self.longitude_span / 2
        return (
            (self.center_latitude - half_lat, self.center_longitude - half_lng),
            (self.center_latitude + half_lat, self.center_longitude + half_lng),
        )


def _opt_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass
class Segment:
    id: int
    name: str
    distance: float = 0.0
    average_grade: Optional[float] = None
    maximum_grade: Optional[float] = None
    elevation_high: Optional[float] = None
    elevation_low: Optional[float] = None
    start_latlng: Optional[LatLng] = None
    end_latlng: Optional[LatLng] = None
    climb_category: Optional[int] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    private: bool = False
    starred: bool = False
    polyline: Optional[str] = None
    summary_polyline: Optional[str] = None

    @property
    def start_coordinate(self) -> Optional[Coordinate]:
        return Coordinate.from_latlng(self.start_latlng)

    @property
    def end_coordinate(self) -> Optional[Coordinate]:
        return Coordinate.from_latlng(self.end_latlng)

    @property
    def elevation_gain(self) -> float:
        if self.elevation_high is None or self.elevation_low is None:
            return 0.0
        return self.elevation_high - self.elevation_low

    @property
    def encoded_polyline(self) -> Optional[str]:
        """Full-resolution polyline when present, otherwise the summary one."""

        return self.polyline or self.summary_polyline

    @staticmethod
    def _common_fields(payload: Mapping[str, Any]) -> Dict[str, Any]:
        map_info = payload.get("map") or {}
        start = Coordinate.from_latlng(payload.get("start_latlng"))
        end = Coordinate.from_latlng(payload.get("end_latlng"))
        return {
            "id": int(payload["id"]),
            "name": str(payload.get("name") or f"Segment {payload['id']}"),
            "distance": _opt_float(payload.get("distance")) or 0.0,
            "average_grade": _opt_float(payload.get("average_grade")),
            "maximum_grade": _opt_float(payload.get("maximum_grade")),
            "elevation_high": _opt_float(payload.get("elevation_high")),
            "elevation_low": _opt_float(payload.get("elevation_low")),
            "start_latlng": start.as_tuple() if start else None,
            "end_latlng": end.as_tuple() if end else None,
            "climb_category": payload.get("climb_category"),
            "city": payload.get("city"),
            "state": payload.get("state"),
            "country": payload.get("country"),
            "private": bool(payload.get("private", False)),
            "starred": bool(payload.get("starred", False)),
            "polyline": map_info.get("polyline") or None,
            "summary_polyline": map_info.get("summary_polyline") or None,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Segment":
        """Parse a Strava segment object as relayed by the backend."""

        return cls(**cls._common_fields(payload))


@dataclass
class SegmentDetails(Segment):
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    total_elevation_gain: Optional[float] = None
    effort_count: Optional[int] = None
    athlete_count: Optional[int] = None
    hazardous: bool = False
    star_count: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "SegmentDetails":
        fields = cls._common_fields(payload)
        fields.update(
            created_at=payload.get("created_at"),
            updated_at=payload.get("updated_at"),
            total_elevation_gain=_opt_float(payload.get("total_elevation_gain")),
            effort_count=payload.get("effort_count"),
            athlete_count=payload.get("athlete_count"),
            hazardous=bool(payload.get("hazardous", False)),
            star_count=payload.get("star_count"),
        )
        return cls(**fields)


@dataclass(frozen=True)
class SegmentSummary:
    count: int
    total_distance_km: float
    total_elevation_m: float


@dataclass
class StartPoint:
    latitude: float
    longitude: float
    name: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "latitude": self.latitude,
            "longitude": self.longitude,
        }
        if self.name:
            payload["name"] = self.name
        return payload


@dataclass
class RouteConfig:
    route_name: str
    start_point: StartPoint
    profile: str = "bike"
    go_back: bool = False


@dataclass
class RouteSegment:
    id: str
    name: str
    distance: float
    kom_time: Optional[float] = None
    start_point: Optional[Coordinate] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "RouteSegment":
        return cls(
            id=str(payload.get("id", "")),
            name=str(payload.get("name") or ""),
            distance=_opt_float(payload.get("distance")) or 0.0,
            kom_time=_opt_float(payload.get("komTime")),
            start_point=Coordinate.from_mapping(payload.get("startPoint")),
        )


def _coordinates(items: Optional[Sequence[Mapping[str, Any]]]) -> List[Coordinate]:
    coords: List[Coordinate] = []
    for item in items or []:
        coord = Coordinate.from_mapping(item)
        if coord is not None:
            coords.append(coord)
    return coords


@dataclass
class GeneratedRoute:
    route_id: str
    total_distance: float
    total_duration: float
    segments: List[RouteSegment] = field(default_factory=list)
    full_geometry: List[Coordinate] = field(default_factory=list)
    waypoints: List[Coordinate] = field(default_factory=list)

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "GeneratedRoute":
        return cls(
            route_id=str(data.get("routeId", "")),
            total_distance=_opt_float(data.get("totalDistance")) or 0.0,
            total_duration=_opt_float(data.get("totalDuration")) or 0.0,
            segments=[RouteSegment.from_payload(s) for s in data.get("segments") or []],
            full_geometry=_coordinates(data.get("fullGeometry")),
            waypoints=_coordinates(data.get("waypoints")),
        )


@dataclass
class UserRoute:
    id: str
    name: str
    total_distance: float
    total_duration: float
    segment_count: int
    created_at: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "UserRoute":
        return cls(
            id=str(payload.get("id", "")),
            name=str(payload.get("name") or ""),
            total_distance=_opt_float(payload.get("totalDistance")) or 0.0,
            total_duration=_opt_float(payload.get("totalDuration")) or 0.0,
            segment_count=int(payload.get("segmentCount") or 0),
            created_at=payload.get("createdAt"),
        )
