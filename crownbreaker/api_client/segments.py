"""Starred segment endpoints."""

from __future__ import annotations

import logging
from typing import List

from ..errors import KomOptimizerAPIError
from ..models import Segment, SegmentDetails
from .resources import ResourceAPI

LOGGER = logging.getLogger(__name__)


class SegmentsAPI:
    """Read access to the user's starred Strava segments."""

    def __init__(self, resources: ResourceAPI) -> None:
        self._resources = resources

    def get_starred_segments(self) -> List[Segment]:
        payload = self._resources.fetch_field(
            "user/segments/starred", "segments", "Starred segments"
        )
        if not isinstance(payload, list):
            raise KomOptimizerAPIError("Starred segments payload is not a list")
        segments: List[Segment] = []
        for item in payload:
            try:
                segments.append(Segment.from_payload(item))
            except (KeyError, TypeError, ValueError) as exc:
                LOGGER.warning("Skipping malformed segment payload: %s", exc)
        LOGGER.info("Fetched %s starred segments", len(segments))
        return segments

    def get_segment_details(self, segment_id: int) -> SegmentDetails:
        payload = self._resources.fetch_field(
            f"user/segment/{int(segment_id)}", "segment", f"Segment {segment_id}"
        )
        if not isinstance(payload, dict):
            raise KomOptimizerAPIError(f"Segment {segment_id} payload is not an object")
        try:
            return SegmentDetails.from_payload(payload)
        except (KeyError, TypeError, ValueError) as exc:
            raise KomOptimizerAPIError(
                f"Segment {segment_id} payload is malformed: {exc}"
            ) from exc
