"""Command-line entry point for planning school transport routes."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

import aiohttp

from school_routes.adapters.config import AppConfig, ConfiguredSchoolLocationProvider
from school_routes.adapters.osrm import OsrmRouteLookup, SegmentedRouteLookup
from school_routes.adapters.persistence import RouteRecordCodec
from school_routes.application.services import RouteEditingSession
from school_routes.domain.fare_calculator import monthly_fare
from school_routes.domain.geo_math import haversine_distance_meters
from school_routes.domain.models import Coordinate, RouteDirection
from school_routes.domain.ports import RoutingLookup

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def parse_coordinate(text: str) -> Coordinate:
    """Parse a 'LAT,LNG' argument."""
    parts = text.split(",")
    if len(parts) != 2:
        raise argparse.ArgumentTypeError(f"expected LAT,LNG, got '{text}'")
    try:
        return Coordinate(latitude=float(parts[0]), longitude=float(parts[1]))
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid coordinate '{text}': {e}") from e


def build_route_lookup(session: aiohttp.ClientSession, config: AppConfig) -> RoutingLookup:
    """OSRM lookup, resolved leg by leg when segmented routing is enabled."""
    lookup: RoutingLookup = OsrmRouteLookup.from_config(session, config)
    if config.segmented_routing:
        lookup = SegmentedRouteLookup(lookup)
    return lookup


async def plan_route(
    record: dict[str, Any],
    config: AppConfig,
    route_lookup: RoutingLookup,
    *,
    school: Coordinate | None = None,
    direction: RouteDirection | None = None,
    optimize: bool = False,
    resolve_road: bool = True,
) -> dict[str, Any]:
    """Hydrate a persisted route, apply the requested edits and re-encode it.

    The school location comes from ``school`` when given, otherwise from the
    configuration. When ``resolve_road`` is False no lookup is made and a
    stored road path is dropped if the waypoints changed.

    Raises:
        pydantic.ValidationError: If the record is structurally invalid.
        InsufficientWaypoints: If ``optimize`` is requested on an incomplete route.
    """
    codec = RouteRecordCodec.from_config(config)
    state = codec.decode(record)
    original_waypoints = state.waypoints()

    editing = RouteEditingSession(
        state, route_lookup, debounce_seconds=config.routing_debounce_seconds
    )
    try:
        if school is not None:
            editing.set_school_location(school)
        else:
            await editing.load_school_location(ConfiguredSchoolLocationProvider(config))

        if direction is not None:
            editing.change_direction(direction)

        if optimize:
            editing.optimize_stops()

        if resolve_road:
            editing.coordinator.notify_changed()
            await editing.coordinator.flush()
        elif state.waypoints() != original_waypoints:
            state.clear_road_polyline()
    finally:
        await editing.close()

    for field_name, message in editing.validation_errors().items():
        logger.warning(f"Route not ready to save ({field_name}): {message}")

    # Fields outside the planning core (route name, driver, ...) are carried over
    return {**record, **codec.encode(state)}


async def _run_plan(args: argparse.Namespace, config: AppConfig) -> None:
    record = json.loads(Path(args.record).read_text(encoding="utf-8"))
    direction = RouteDirection(args.direction) if args.direction else None

    async with aiohttp.ClientSession() as session:
        result = await plan_route(
            record,
            config,
            build_route_lookup(session, config),
            school=args.school,
            direction=direction,
            optimize=args.optimize,
            resolve_road=not args.no_road,
        )

    output = json.dumps(result, indent=2, ensure_ascii=False)
    if args.output:
        Path(args.output).write_text(output + "\n", encoding="utf-8")
        logger.info(f"Wrote planned route to {args.output}")
    else:
        print(output)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="school-routes",
        description="School transport route planner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Re-plan a saved route, reorder its stops and fetch the road path
  school-routes plan route.json --school 28.6139,77.2090 --optimize

  # Distance between two points in meters
  school-routes distance 28.6139,77.2090 28.7041,77.1025

  # Monthly fare for a stop 12.5 km from the school
  school-routes fare --distance-m 12500 --fare-per-km 10

Put negative coordinates after '--', e.g. school-routes distance -- -33.86,151.2 -33.9,151.1
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    plan_parser = subparsers.add_parser("plan", help="Plan a persisted route record")
    plan_parser.add_argument("record", help="Path to a route record JSON file")
    plan_parser.add_argument(
        "--school", type=parse_coordinate, help="School location as LAT,LNG"
    )
    plan_parser.add_argument(
        "--direction",
        choices=[d.value for d in RouteDirection],
        help="Change the route type",
    )
    plan_parser.add_argument(
        "--optimize", action="store_true", help="Reorder stops by nearest neighbor"
    )
    plan_parser.add_argument(
        "--no-road", action="store_true", help="Skip the road route lookup"
    )
    plan_parser.add_argument("--output", help="Write the record here instead of stdout")

    distance_parser = subparsers.add_parser(
        "distance", help="Great-circle distance between two points"
    )
    distance_parser.add_argument("origin", type=parse_coordinate, help="LAT,LNG")
    distance_parser.add_argument("destination", type=parse_coordinate, help="LAT,LNG")

    fare_parser = subparsers.add_parser("fare", help="Monthly fare for a distance")
    fare_parser.add_argument(
        "--distance-m", type=float, required=True, help="Maximum distance from school in meters"
    )
    fare_parser.add_argument("--fare-per-km", type=float, required=True, help="Rate per km")

    return parser


async def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        config = AppConfig.load()
        configure_logging(config.log_level)

        if args.command == "plan":
            await _run_plan(args, config)

        elif args.command == "distance":
            meters = haversine_distance_meters(args.origin, args.destination)
            print(f"{meters:.1f}")

        elif args.command == "fare":
            if args.fare_per_km <= 0:
                print("Error: Fare per kilometer must be greater than 0", file=sys.stderr)
                sys.exit(1)
            print(f"{monthly_fare(args.distance_m, args.fare_per_km):.2f}")

    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def cli_main() -> None:
    """Synchronous entry point for the CLI command."""
    asyncio.run(main())


if __name__ == "__main__":
    cli_main()
