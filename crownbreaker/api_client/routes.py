"""Route optimisation, listing and export endpoints."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Sequence

from ..config import EXPORT_FORMATS
from ..errors import (
    AuthenticationError,
    KomOptimizerAPIError,
    RouteConfigError,
    RouteGenerationError,
)
from ..models import GeneratedRoute, RouteConfig, UserRoute
from .resources import ResourceAPI

LOGGER = logging.getLogger(__name__)


def build_optimize_request(
    config: RouteConfig, segment_ids: Sequence[int | str]
) -> Dict[str, Any]:
    """Return the JSON body expected by ``POST /route/optimize``."""

    return {
        "segmentIds": [str(segment_id) for segment_id in segment_ids],
        "startPoint": config.start_point.to_payload(),
        "routeName": config.route_name,
        "profile": config.profile,
        "goBack": config.go_back,
    }


class RoutesAPI:
    """Optimised route generation and retrieval."""

    def __init__(self, resources: ResourceAPI) -> None:
        self._resources = resources

    def generate_route(
        self, config: RouteConfig, segment_ids: Sequence[int | str]
    ) -> GeneratedRoute:
        """Ask the optimizer for a route through ``segment_ids``.

        Raises:
            RouteGenerationError: If the backend rejects the request or
                answers with ``success: false``.
            AuthenticationError: If there is no valid session token.
        """

        body = build_optimize_request(config, segment_ids)
        LOGGER.info(
            "Requesting optimized route name=%r segments=%s profile=%s go_back=%s",
            config.route_name,
            len(body["segmentIds"]),
            config.profile,
            config.go_back,
        )
        try:
            result = self._resources.fetch_json(
                "POST", "route/optimize", "Route optimization", body=body
            )
        except AuthenticationError:
            raise
        except KomOptimizerAPIError as exc:
            raise RouteGenerationError(str(exc)) from exc

        if not isinstance(result, dict):
            raise RouteGenerationError("Route optimization returned an unexpected payload")
        if not result.get("success"):
            message = result.get("message") or "Route generation failed"
            LOGGER.error("Route optimization failed: %s", message)
            raise RouteGenerationError(str(message))
        data = result.get("data")
        if not isinstance(data, dict):
            raise RouteGenerationError("Route optimization response has no data")
        route = GeneratedRoute.from_payload(data)
        LOGGER.info(
            "Generated route id=%s distance=%.0fm duration=%.0fs points=%s",
            route.route_id,
            route.total_distance,
            route.total_duration,
            len(route.full_geometry),
        )
        return route

    def get_user_routes(self) -> List[UserRoute]:
        payload = self._resources.fetch_field("route/my-routes", "routes", "User routes")
        if not isinstance(payload, list):
            raise KomOptimizerAPIError("User routes payload is not a list")
        return [UserRoute.from_payload(item) for item in payload if isinstance(item, dict)]

    def get_route(self, route_id: str) -> Dict[str, Any]:
        """Return the stored route record as sent by the backend."""

        route = self._resources.fetch_field(f"route/{route_id}", "route", f"Route {route_id}")
        if not isinstance(route, dict):
            raise KomOptimizerAPIError(f"Route {route_id} payload is not an object")
        return route

    def export_route(self, route_id: str, export_format: str = "gpx") -> str:
        """Return the route serialised by the backend as GPX, JSON or TCX text."""

        fmt = export_format.lower()
        if fmt not in EXPORT_FORMATS:
            raise RouteConfigError(
                f"Unsupported export format {export_format!r}; expected one of {', '.join(EXPORT_FORMATS)}"
            )
        text = self._resources.fetch_text(
            f"route/{route_id}/export/{fmt}", f"Route {route_id} export"
        )
        LOGGER.info("Exported route %s as %s (%s bytes)", route_id, fmt, len(text))
        return text
