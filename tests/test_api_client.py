"""Tests for the KOM optimizer REST client against a scripted session."""

from __future__ import annotations

import pytest
import requests

from conftest import FakeResp, FakeSession, make_segment_payload
from crownbreaker.api_client import KomOptimizerClient, ResourceAPI, build_optimize_request
from crownbreaker.api_client import resources as resources_module
from crownbreaker.errors import (
    AuthenticationError,
    KomOptimizerAPIError,
    ResourceNotFoundError,
    RouteConfigError,
    RouteGenerationError,
)
from crownbreaker.models import RouteConfig, SegmentDetails, StartPoint
from crownbreaker.session import SessionContext


def _route_config():
    return RouteConfig(
        route_name="Morning",
        start_point=StartPoint(45.76, 4.83, "Home"),
        profile="bike",
        go_back=True,
    )


def _route_data():
    return {
        "routeId": "r-1",
        "totalDistance": 42000,
        "totalDuration": 5400,
        "segments": [
            {
                "id": "1",
                "name": "Croix-Rousse",
                "distance": 1000,
                "komTime": 180,
                "startPoint": {"latitude": 45.0, "longitude": 4.0},
            }
        ],
        "fullGeometry": [
            {"latitude": 45.0, "longitude": 4.0},
            {"latitude": 45.1, "longitude": 4.1},
        ],
        "waypoints": [{"latitude": 45.0, "longitude": 4.0, "name": "Start"}],
    }


def test_starred_segments_request_and_parsing(client, fake_session, starred_payload):
    fake_session.queue(FakeResp(200, data=starred_payload))
    segments = client.segments.get_starred_segments()

    call = fake_session.calls[0]
    assert call["method"] == "GET"
    assert call["url"] == "https://api.test/api/user/segments/starred"
    assert call["headers"]["Authorization"] == "Bearer jwt-token-1234"
    assert [s.id for s in segments] == [1, 2]
    assert segments[0].start_latlng == (45.0, 4.0)
    assert segments[0].polyline == "_p~iF~ps|U_ulLnnqC"
    assert segments[0].summary_polyline is None
    assert segments[1].encoded_polyline is None
    assert segments[0].elevation_gain == pytest.approx(50.0)


def test_starred_segments_skips_malformed_items(client, fake_session):
    fake_session.queue(
        FakeResp(200, data={"segments": [{"name": "no id"}, make_segment_payload(3, "ok", None, None)]})
    )
    segments = client.segments.get_starred_segments()
    assert [s.id for s in segments] == [3]
    assert segments[0].start_coordinate is None


def test_missing_token_raises_before_any_request(fake_session):
    client = KomOptimizerClient(SessionContext(), session=fake_session, base_url="https://api.test/api")
    with pytest.raises(AuthenticationError, match="No token found"):
        client.segments.get_starred_segments()
    assert fake_session.calls == []


def test_http_error_status_raises(client, fake_session):
    fake_session.queue(FakeResp(500, data={}))
    with pytest.raises(KomOptimizerAPIError, match="status: 500"):
        client.segments.get_starred_segments()


def test_missing_response_field_raises(client, fake_session):
    fake_session.queue(FakeResp(200, data={"items": []}))
    with pytest.raises(KomOptimizerAPIError, match="missing 'segments'"):
        client.segments.get_starred_segments()


def test_segment_details(client, fake_session):
    payload = make_segment_payload(
        9, "Climb", [45.0, 4.0], [45.1, 4.1],
        created_at="2024-01-01T00:00:00Z", effort_count=120, athlete_count=40,
        hazardous=False, star_count=3, total_elevation_gain=75.0,
        map={"summary_polyline": "??"},
    )
    fake_session.queue(FakeResp(200, data={"segment": payload}))
    details = client.segments.get_segment_details(9)
    assert fake_session.calls[0]["url"].endswith("/user/segment/9")
    assert isinstance(details, SegmentDetails)
    assert details.effort_count == 120
    assert details.encoded_polyline == "??"


def test_segment_details_not_found(client, fake_session):
    fake_session.queue(FakeResp(404, data={"message": "Segment not found"}))
    with pytest.raises(ResourceNotFoundError, match="Segment not found"):
        client.segments.get_segment_details(404)


def test_build_optimize_request():
    body = build_optimize_request(_route_config(), [1, "2"])
    assert body == {
        "segmentIds": ["1", "2"],
        "startPoint": {"latitude": 45.76, "longitude": 4.83, "name": "Home"},
        "routeName": "Morning",
        "profile": "bike",
        "goBack": True,
    }


def test_generate_route_success(client, fake_session):
    fake_session.queue(FakeResp(200, data={"success": True, "message": "ok", "data": _route_data()}))
    route = client.routes.generate_route(_route_config(), [1])

    call = fake_session.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == "https://api.test/api/route/optimize"
    assert call["json"]["segmentIds"] == ["1"]
    assert route.route_id == "r-1"
    assert route.total_distance == 42000
    assert route.segments[0].kom_time == 180
    assert route.segments[0].start_point.latitude == 45.0
    assert len(route.full_geometry) == 2
    assert route.waypoints[0].longitude == 4.0


def test_generate_route_unsuccessful_payload(client, fake_session):
    fake_session.queue(FakeResp(200, data={"success": False, "message": "No path found"}))
    with pytest.raises(RouteGenerationError, match="No path found"):
        client.routes.generate_route(_route_config(), [1])


def test_generate_route_error_status_uses_body_message(client, fake_session):
    fake_session.queue(FakeResp(422, data={"message": "Too many segments"}))
    with pytest.raises(RouteGenerationError, match="Too many segments"):
        client.routes.generate_route(_route_config(), [1])


def test_generate_route_auth_failure_is_not_wrapped(client, fake_session):
    fake_session.queue(FakeResp(401, data={"message": "expired"}))
    with pytest.raises(AuthenticationError):
        client.routes.generate_route(_route_config(), [1])


def test_user_routes_and_single_route(client, fake_session):
    fake_session.queue(
        FakeResp(200, data={"routes": [{"id": "r-1", "name": "Morning", "totalDistance": 1000,
                                        "totalDuration": 60, "segmentCount": 2,
                                        "createdAt": "2024-05-01"}]}),
        FakeResp(200, data={"route": {"id": "r-1", "name": "Morning"}}),
    )
    routes = client.routes.get_user_routes()
    assert routes[0].segment_count == 2
    assert fake_session.calls[0]["url"].endswith("/route/my-routes")
    assert client.routes.get_route("r-1") == {"id": "r-1", "name": "Morning"}
    assert fake_session.calls[1]["url"].endswith("/route/r-1")


def test_export_route_returns_text(client, fake_session):
    fake_session.queue(FakeResp(200, text="<gpx></gpx>"))
    assert client.routes.export_route("r-1", "GPX") == "<gpx></gpx>"
    assert fake_session.calls[0]["url"].endswith("/route/r-1/export/gpx")


def test_export_route_rejects_unknown_format(client, fake_session):
    with pytest.raises(RouteConfigError):
        client.routes.export_route("r-1", "kml")
    assert fake_session.calls == []


def test_auth_url_is_unauthenticated(fake_session):
    client = KomOptimizerClient(SessionContext(), session=fake_session, auth_base_url="https://api.test/api")
    fake_session.queue(FakeResp(200, data={"authUrl": "https://strava.test/authorize"}))
    url = client.auth.get_auth_url("http://localhost:5000/auth/strava")
    call = fake_session.calls[0]
    assert url == "https://strava.test/authorize"
    assert call["url"] == "https://api.test/api/auth/strava/mobile-auth-url"
    assert call["params"] == {"redirectUri": "http://localhost:5000/auth/strava"}
    assert "Authorization" not in call["headers"]


def test_non_json_payload_raises(client, fake_session):
    fake_session.queue(FakeResp(200, text="oops"))
    with pytest.raises(KomOptimizerAPIError, match="non-JSON"):
        client.segments.get_starred_segments()


def test_transport_error_is_wrapped(context):
    session = FakeSession([requests.ConnectionError("down")])
    api = ResourceAPI(context, session=session, base_url="https://api.test/api")
    with pytest.raises(KomOptimizerAPIError, match="network error"):
        api.fetch_json("GET", "ping", "Ping")


def test_single_attempt_by_default(context):
    session = FakeSession([FakeResp(503, data={}), FakeResp(200, data={})])
    api = ResourceAPI(context, session=session, base_url="https://api.test/api")
    with pytest.raises(KomOptimizerAPIError):
        api.fetch_json("GET", "ping", "Ping")
    assert len(session.calls) == 1


def test_retries_when_enabled(context, monkeypatch):
    monkeypatch.setattr(resources_module.time, "sleep", lambda _s: None)
    session = FakeSession([
        requests.Timeout("slow"),
        FakeResp(503, data={}),
        FakeResp(200, data={"pong": True}),
    ])
    api = ResourceAPI(context, session=session, base_url="https://api.test/api", max_retries=3)
    assert api.fetch_json("GET", "ping", "Ping") == {"pong": True}
    assert len(session.calls) == 3
