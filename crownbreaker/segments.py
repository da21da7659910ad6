"""Client-side cache of the user's starred segments.

``SegmentsStore`` keeps the last fetched list together with a loading flag and
the last error message, so callers can render "loading", "error" and "data"
states from one object. Segment details are cached separately in a TTL cache
because they are fetched one by one when a segment is opened.
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable, List, Optional, Set

from cachetools import TTLCache

from .api_client import SegmentsAPI
from .config import SEGMENT_DETAILS_CACHE_SIZE, SEGMENT_DETAILS_CACHE_TTL_SECONDS
from .errors import KomOptimizerAPIError
from .geometry import calculate_map_region, decode_polyline
from .models import BoundingRegion, Coordinate, Segment, SegmentDetails, SegmentSummary

LOGGER = logging.getLogger(__name__)


def summarize_segments(segments: Iterable[Segment]) -> SegmentSummary:
    """Count, total distance (km) and summed elevation gain (m) of ``segments``."""

    count = 0
    distance_m = 0.0
    elevation_m = 0.0
    for segment in segments:
        count += 1
        distance_m += segment.distance or 0.0
        elevation_m += segment.elevation_gain
    return SegmentSummary(
        count=count,
        total_distance_km=round(distance_m / 1000, 1),
        total_elevation_m=round(elevation_m),
    )


class SegmentsStore:
    def __init__(
        self,
        api: SegmentsAPI,
        *,
        details_cache_size: int = SEGMENT_DETAILS_CACHE_SIZE,
        details_ttl_seconds: int = SEGMENT_DETAILS_CACHE_TTL_SECONDS,
    ) -> None:
        self._api = api
        self._lock = threading.RLock()
        self._segments: List[Segment] = []
        self._selected: Set[int] = set()
        self._loaded = False
        self.loading = False
        self.error: Optional[str] = None
        self._details: TTLCache[int, SegmentDetails] = TTLCache(
            maxsize=max(1, details_cache_size), ttl=details_ttl_seconds
        )

    @property
    def segments(self) -> List[Segment]:
        with self._lock:
            return list(self._segments)

    def refresh(self) -> List[Segment]:
        """Refetch the starred list; on failure keep the old list and set ``error``."""

        with self._lock:
            self.loading = True
            self.error = None
        try:
            segments = self._api.get_starred_segments()
        except KomOptimizerAPIError as exc:
            LOGGER.error("Failed to load starred segments: %s", exc)
            with self._lock:
                self.error = str(exc) or "Server error"
            return self.segments
        finally:
            with self._lock:
                self.loading = False
        with self._lock:
            self._segments = list(segments)
            self._loaded = True
            known = {segment.id for segment in self._segments}
            dropped = self._selected - known
            if dropped:
                LOGGER.info("Dropping %s selected segments no longer starred", len(dropped))
            self._selected &= known
            return list(self._segments)

    def ensure_loaded(self) -> List[Segment]:
        with self._lock:
            loaded = self._loaded
        if not loaded:
            return self.refresh()
        return self.segments

    def get(self, segment_id: int) -> Optional[Segment]:
        with self._lock:
            for segment in self._segments:
                if segment.id == segment_id:
                    return segment
        return None

    def details(self, segment_id: int) -> SegmentDetails:
        with self._lock:
            cached = self._details.get(segment_id)
        if cached is not None:
            return cached
        details = self._api.get_segment_details(segment_id)
        with self._lock:
            self._details[segment_id] = details
        return details

    # -- selection ----------------------------------------------------------
    def select(self, segment_id: int) -> None:
        with self._lock:
            if self.get(segment_id) is None:
                raise KeyError(f"Segment {segment_id} is not among the starred segments")
            self._selected.add(segment_id)

    def deselect(self, segment_id: int) -> None:
        with self._lock:
            self._selected.discard(segment_id)

    def toggle(self, segment_id: int) -> bool:
        """Flip selection of ``segment_id``; return the new state."""

        with self._lock:
            if segment_id in self._selected:
                self._selected.discard(segment_id)
                return False
            self.select(segment_id)
            return True

    def clear_selection(self) -> None:
        with self._lock:
            self._selected.clear()

    @property
    def selected_segments(self) -> List[Segment]:
        """Selected segments in starred-list order."""

        with self._lock:
            return [s for s in self._segments if s.id in self._selected]

    # -- derived views ------------------------------------------------------
    def summary(self) -> SegmentSummary:
        return summarize_segments(self.segments)

    def region(self, *, selected_only: bool = False) -> BoundingRegion:
        segments = self.selected_segments if selected_only else self.segments
        return calculate_map_region(segments)

    def geometry(self, segment_id: int) -> List[Coordinate]:
        """Decoded shape of a segment, fetching details when the list lacks it."""

        segment = self.get(segment_id)
        encoded = segment.encoded_polyline if segment else None
        if not encoded:
            encoded = self.details(segment_id).encoded_polyline
        return decode_polyline(encoded)
