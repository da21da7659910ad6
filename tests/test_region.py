"""Tests for map region computation."""

from __future__ import annotations

import math

import pytest

from crownbreaker.geometry import DEFAULT_REGION, calculate_map_region, region_for_coordinates
from crownbreaker.models import BoundingRegion, Coordinate, Segment


def _segment(segment_id, start=None, end=None):
    return Segment(id=segment_id, name=f"S{segment_id}", start_latlng=start, end_latlng=end)


def test_empty_list_returns_default_region():
    region = calculate_map_region([])
    assert region == BoundingRegion(45.764, 4.835, 0.1, 0.1)
    assert calculate_map_region(None) is DEFAULT_REGION


def test_single_start_point_has_zero_span():
    region = calculate_map_region([_segment(1, start=(45.0, 4.0))])
    assert region.center_latitude == 45.0
    assert region.center_longitude == 4.0
    assert region.latitude_span == 0
    assert region.longitude_span == 0


def test_two_starts_add_twenty_percent_margin():
    region = calculate_map_region(
        [_segment(1, start=(45.0, 4.0)), _segment(2, start=(46.0, 5.0))]
    )
    assert region.center_latitude == pytest.approx(45.5)
    assert region.center_longitude == pytest.approx(4.5)
    assert region.latitude_span == pytest.approx(1.2)
    assert region.longitude_span == pytest.approx(1.2)


def test_start_and_end_points_both_count():
    region = calculate_map_region([_segment(1, start=(45.0, 4.0), end=(45.2, 4.6))])
    assert region.center_latitude == pytest.approx(45.1)
    assert region.center_longitude == pytest.approx(4.3)
    assert region.latitude_span == pytest.approx(0.24)
    assert region.longitude_span == pytest.approx(0.72)


def test_missing_coordinates_are_skipped_per_field():
    region = calculate_map_region(
        [
            _segment(1, start=(45.0, 4.0)),
            _segment(2, end=(46.0, 5.0)),
            _segment(3),
        ]
    )
    assert region.center_latitude == pytest.approx(45.5)
    assert region.latitude_span == pytest.approx(1.2)


def test_segments_without_any_coordinates_fall_back_to_default():
    region = calculate_map_region([_segment(1), _segment(2)])
    assert region == DEFAULT_REGION
    assert all(math.isfinite(v) for v in (region.latitude_span, region.longitude_span))


def test_raw_payload_mappings_are_accepted():
    region = calculate_map_region(
        [
            {"start_latlng": [45.0, 4.0], "end_latlng": None},
            {"start_latlng": [46.0, 5.0]},
        ]
    )
    assert region.center_longitude == pytest.approx(4.5)
    assert region.longitude_span == pytest.approx(1.2)


def test_custom_margin():
    region = calculate_map_region(
        [_segment(1, start=(45.0, 4.0)), _segment(2, start=(46.0, 5.0))], margin=1.0
    )
    assert region.latitude_span == pytest.approx(1.0)


def test_region_for_coordinates_and_bounds():
    region = region_for_coordinates([Coordinate(10.0, 20.0), Coordinate(12.0, 24.0)])
    south_west, north_east = region.bounds()
    assert south_west == pytest.approx((9.8, 19.6))
    assert north_east == pytest.approx((12.2, 24.4))
    assert region_for_coordinates([]) is DEFAULT_REGION


@pytest.mark.parametrize(
    "bad",
    [5, ["n/a", "x"], [math.nan, math.nan], [math.inf, 4.0], "45,4", [45.0], object()],
)
def test_malformed_raw_coordinates_are_skipped(bad):
    region = calculate_map_region([{"start_latlng": bad}])
    assert region == DEFAULT_REGION


def test_malformed_coordinates_do_not_disturb_valid_ones():
    region = calculate_map_region(
        [
            {"start_latlng": [45.0, 4.0], "end_latlng": [math.nan, math.nan]},
            {"start_latlng": ["n/a", "x"], "end_latlng": [46.0, 5.0]},
            {"start_latlng": 5},
        ]
    )
    assert region.center_latitude == pytest.approx(45.5)
    assert region.longitude_span == pytest.approx(1.2)
    assert all(
        math.isfinite(v)
        for v in (
            region.center_latitude,
            region.center_longitude,
            region.latitude_span,
            region.longitude_span,
        )
    )


def test_region_for_coordinates_ignores_non_finite_points():
    region = region_for_coordinates(
        [Coordinate(math.nan, 4.0), Coordinate(10.0, 20.0), Coordinate(12.0, math.inf)]
    )
    assert region == BoundingRegion(10.0, 20.0, 0.0, 0.0)
