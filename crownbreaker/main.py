"""Command-line entry point for the CrownBreaker client.

Usage examples:

    crownbreaker login
    crownbreaker segments
    crownbreaker route generate --segment 123 --segment 456 \
        --name "Morning KOMs" --start 45.76,4.83 --profile bike --go-back
    crownbreaker route export ROUTE_ID --format gpx
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from .api_client import KomOptimizerClient
from .config import (
    DEFAULT_EXPORT_FORMAT,
    DEFAULT_ROUTE_PROFILE,
    EXPORT_FORMATS,
    PREVIEW_OUTPUT_DIR,
    ROUTE_PROFILES,
)
from .errors import KomOptimizerAPIError, RouteConfigError
from .geometry import decode_polyline
from .models import BoundingRegion, Segment
from .oauth import start_login_flow
from .routes import (
    RoutePlanner,
    build_route_config,
    default_start_point,
    parse_start_point,
    route_region,
    share_message,
)
from .segments import SegmentsStore
from .session import SessionContext

LOGGER = logging.getLogger(__name__)


def _setup_logging(level: str) -> None:
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=getattr(logging, level),
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )


def _format_region(region: BoundingRegion) -> str:
    return (
        f"center=({region.center_latitude:.5f}, {region.center_longitude:.5f}) "
        f"span=({region.latitude_span:.5f}, {region.longitude_span:.5f})"
    )


def _pick_segments(store: SegmentsStore, ids: Sequence[int]) -> List[Segment]:
    store.ensure_loaded()
    if store.error:
        raise KomOptimizerAPIError(store.error)
    for segment_id in ids:
        store.select(segment_id)
    return store.selected_segments if ids else store.segments


# -- commands ----------------------------------------------------------------
def _cmd_login(args: argparse.Namespace, client: KomOptimizerClient) -> int:
    user = start_login_flow(client.auth, client.context, timeout=args.timeout)
    name = user.get("firstname") or user.get("username") or "athlete"
    print(f"Logged in as {name}")
    return 0


def _cmd_logout(args: argparse.Namespace, client: KomOptimizerClient) -> int:
    client.context.logout()
    print("Logged out")
    return 0


def _cmd_segments(args: argparse.Namespace, client: KomOptimizerClient) -> int:
    store = SegmentsStore(client.segments)
    if args.details is not None:
        details = store.details(args.details)
        print(f"{details.id}  {details.name}")
        print(f"  distance: {details.distance:.0f}m  grade: {details.average_grade}%")
        print(f"  efforts: {details.effort_count}  athletes: {details.athlete_count}")
        print(f"  geometry points: {len(decode_polyline(details.encoded_polyline))}")
        return 0
    segments = _pick_segments(store, [])
    for segment in segments:
        print(
            f"{segment.id:>12}  {segment.name}  {segment.distance:.0f}m  "
            f"{segment.average_grade}%"
        )
    summary = store.summary()
    print(
        f"{summary.count} segments, {summary.total_distance_km}km, "
        f"{summary.total_elevation_m:.0f}m elevation"
    )
    return 0


def _cmd_region(args: argparse.Namespace, client: KomOptimizerClient) -> int:
    store = SegmentsStore(client.segments)
    _pick_segments(store, args.segment or [])
    print(_format_region(store.region(selected_only=bool(args.segment))))
    return 0


def _cmd_decode(args: argparse.Namespace, client: KomOptimizerClient) -> int:
    for point in decode_polyline(args.polyline, args.precision):
        print(f"{point.latitude:.{args.precision}f},{point.longitude:.{args.precision}f}")
    return 0


def _cmd_preview(args: argparse.Namespace, client: KomOptimizerClient) -> int:
    from .preview import create_segments_map

    store = SegmentsStore(client.segments)
    _pick_segments(store, args.segment or [])
    output = args.output or PREVIEW_OUTPUT_DIR / "segments.html"
    create_segments_map(
        store.segments,
        selected_ids=[s.id for s in store.selected_segments],
        output_html_path=output,
    )
    print(f"Preview written to {output}")
    return 0


def _cmd_route_generate(args: argparse.Namespace, client: KomOptimizerClient) -> int:
    store = SegmentsStore(client.segments)
    selected = _pick_segments(store, args.segment)
    if args.start:
        start = parse_start_point(args.start, args.start_name)
    else:
        start = default_start_point(selected)
    config = build_route_config(
        args.name, start, profile=args.profile, go_back=args.go_back
    )
    route = RoutePlanner(client.routes).generate(config, selected)
    print(f"Route {route.route_id}")
    print(share_message(route))
    print(_format_region(route_region(route)))
    if args.preview:
        from .preview import create_route_map

        create_route_map(route, output_html_path=args.preview)
        print(f"Preview written to {args.preview}")
    return 0


def _cmd_route_list(args: argparse.Namespace, client: KomOptimizerClient) -> int:
    for route in client.routes.get_user_routes():
        print(
            f"{route.id}  {route.name}  {route.total_distance / 1000:.1f}km  "
            f"{route.segment_count} segments  {route.created_at or ''}".rstrip()
        )
    return 0


def _cmd_route_show(args: argparse.Namespace, client: KomOptimizerClient) -> int:
    print(json.dumps(client.routes.get_route(args.route_id), indent=2))
    return 0


def _cmd_route_export(args: argparse.Namespace, client: KomOptimizerClient) -> int:
    path = RoutePlanner(client.routes).export_to_file(
        args.route_id, args.format, args.output
    )
    print(f"File saved to: {path}")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="crownbreaker",
        description="Plan optimized routes through your starred Strava segments",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Python logging level",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    login = commands.add_parser("login", help="Log in with Strava in the browser")
    login.add_argument("--timeout", type=int, default=120, help="Seconds to wait")
    login.set_defaults(handler=_cmd_login)

    logout = commands.add_parser("logout", help="Forget the stored session")
    logout.set_defaults(handler=_cmd_logout)

    segments = commands.add_parser("segments", help="List starred segments")
    segments.add_argument("--details", type=int, help="Show one segment in detail")
    segments.set_defaults(handler=_cmd_segments)

    region = commands.add_parser("region", help="Map region framing segments")
    region.add_argument("--segment", type=int, action="append", help="Segment ID")
    region.set_defaults(handler=_cmd_region)

    decode = commands.add_parser("decode", help="Decode an encoded polyline")
    decode.add_argument("polyline")
    decode.add_argument(
        "--precision", type=int, choices=range(0, 11), default=5, metavar="DIGITS"
    )
    decode.set_defaults(handler=_cmd_decode)

    preview = commands.add_parser("preview", help="Write an HTML map of segments")
    preview.add_argument("--segment", type=int, action="append", help="Highlight ID")
    preview.add_argument("--output", type=Path)
    preview.set_defaults(handler=_cmd_preview)

    route = commands.add_parser("route", help="Generate, list and export routes")
    route_commands = route.add_subparsers(dest="route_command", required=True)

    generate = route_commands.add_parser("generate", help="Generate an optimized route")
    generate.add_argument("--segment", type=int, action="append", required=True)
    generate.add_argument("--name", required=True)
    generate.add_argument("--start", help="Start point as 'lat,lng'")
    generate.add_argument("--start-name")
    generate.add_argument("--profile", choices=ROUTE_PROFILES, default=DEFAULT_ROUTE_PROFILE)
    generate.add_argument("--go-back", action="store_true", help="Return to the start point")
    generate.add_argument("--preview", type=Path, help="Write an HTML map of the route")
    generate.set_defaults(handler=_cmd_route_generate)

    route_list = route_commands.add_parser("list", help="List your routes")
    route_list.set_defaults(handler=_cmd_route_list)

    show = route_commands.add_parser("show", help="Print a stored route")
    show.add_argument("route_id")
    show.set_defaults(handler=_cmd_route_show)

    export = route_commands.add_parser("export", help="Export a route to a file")
    export.add_argument("route_id")
    export.add_argument("--format", choices=EXPORT_FORMATS, default=DEFAULT_EXPORT_FORMAT)
    export.add_argument("--output", type=Path)
    export.set_defaults(handler=_cmd_route_export)

    return parser


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    client: Optional[KomOptimizerClient] = None,
) -> int:
    """Parse ``argv`` and run the selected command; returns the exit code."""

    args = _build_parser().parse_args(argv)
    _setup_logging(args.log_level)
    if client is None:
        client = KomOptimizerClient(SessionContext.default())
    try:
        return args.handler(args, client)
    except (KomOptimizerAPIError, RouteConfigError, KeyError) as exc:
        LOGGER.debug("Command %s failed", args.command, exc_info=True)
        message = exc.args[0] if isinstance(exc, KeyError) and exc.args else exc
        print(f"Error: {message}")
        return 1


if __name__ == "__main__":  # pragma: no cover - CLI helper
    raise SystemExit(main())
