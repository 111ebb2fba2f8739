"""Command-line departure board for Wiener Linien stations."""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

import aiohttp

from wl_departures.adapters.client_state import JsonClientStateStore
from wl_departures.adapters.config import AppConfig
from wl_departures.adapters.stations import JsonStationRepository
from wl_departures.adapters.terminal import (
    TerminalDisplayAdapter,
    TerminalProgressReporter,
    describe_station,
)
from wl_departures.adapters.wiener_linien_api import ProxyRegistry, WienerLinienMonitorRepository
from wl_departures.application.services import (
    BatchedMonitorFetcher,
    DepartureGroupingService,
    DepartureLoadService,
    StationSearchService,
)
from wl_departures.domain.models import LoadStatus, Station
from wl_departures.domain.ports import ClientStateStore, DisplayAdapter

DEFAULT_NEARBY_RADIUS_METERS = 500.0


def station_to_dict(station: Station, distance: float | None = None) -> dict[str, Any]:
    """JSON-friendly representation of a station."""
    data: dict[str, Any] = {
        "name": station.name,
        "municipality": station.municipality,
        "latitude": station.latitude,
        "longitude": station.longitude,
        "rbl": station.primary_platform_id,
        "rbls": list(station.platform_ids),
    }
    if distance is not None:
        data["distance_m"] = round(distance)
    return data


def print_stations(stations: list[Station], as_json: bool, empty_message: str) -> None:
    """Print a station list as text or JSON."""
    if as_json:
        print(json.dumps([station_to_dict(s) for s in stations], indent=2, ensure_ascii=False))
        return
    if not stations:
        print(empty_message, file=sys.stderr)
        return
    for station in stations:
        print(f"  {describe_station(station)}")
        print(f"    RBL: {station.primary_platform_id} ({len(station.platform_ids)} Steige)")


def build_load_service(
    config: AppConfig,
    session: aiohttp.ClientSession,
    station_repository: JsonStationRepository,
    client_state: ClientStateStore | None,
    display_adapter: DisplayAdapter | None,
    show_progress: bool = True,
) -> DepartureLoadService:
    """Wire the departure pipeline for one session."""
    registry = ProxyRegistry(config.proxies, session)
    monitor_repository = WienerLinienMonitorRepository(registry, config.api_base_url)
    fetcher = BatchedMonitorFetcher(
        monitor_repository,
        batch_size=config.batch_size,
        batch_delay_ms=config.batch_delay_ms,
        max_platform_ids=config.max_platform_ids,
        progress_reporter=TerminalProgressReporter() if show_progress else None,
    )
    return DepartureLoadService(
        station_repository,
        fetcher,
        DepartureGroupingService(config.max_departures_per_group),
        client_state=client_state,
        display_adapter=display_adapter,
        refresh_interval_seconds=config.refresh_interval_seconds,
    )


async def show_departures(
    config: AppConfig,
    station: Station,
    station_repository: JsonStationRepository,
    client_state: ClientStateStore,
    watch: bool = False,
    as_json: bool = False,
) -> int:
    """Load and print the departure board of a station. Returns the exit code."""
    display = TerminalDisplayAdapter(as_json=as_json)
    async with aiohttp.ClientSession() as session:
        service = build_load_service(
            config, session, station_repository, client_state, display, show_progress=not as_json
        )
        try:
            result = await service.load_departures(station)
            await display.display_result(result)
            while watch and service.is_auto_refreshing:
                await asyncio.sleep(1)
        finally:
            await service.close()

    return 1 if result.status in (LoadStatus.FAILED, LoadStatus.NO_DATA) else 0


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="wl-departures",
        description="Wiener Linien departure board",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Search for stations
  wl-departures search "Karlsplatz"

  # Stations within 300 m
  wl-departures nearby 48.2003 16.3695 --radius 300

  # Departures by name or RBL, refreshing every 10 seconds
  wl-departures departures "Karlsplatz" --watch
  wl-departures departures 4116

  # Toggle a favorite and list favorites
  wl-departures favorite "Karlsplatz"
  wl-departures favorites
        """,
    )
    parser.add_argument("--config", dest="config_file", help="TOML configuration file")
    parser.add_argument("--stations-file", help="Station dataset (JSON)")
    parser.add_argument("--state-file", help="File holding favorites and recent searches")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    search_parser = subparsers.add_parser("search", help="Search stations by name")
    search_parser.add_argument("query", help="Part of the station name")
    search_parser.add_argument("--json", action="store_true", help="Output as JSON")

    nearby_parser = subparsers.add_parser("nearby", help="Stations near a coordinate")
    nearby_parser.add_argument("latitude", type=float)
    nearby_parser.add_argument("longitude", type=float)
    nearby_parser.add_argument(
        "--radius",
        type=float,
        default=DEFAULT_NEARBY_RADIUS_METERS,
        help=f"Search radius in meters (default: {DEFAULT_NEARBY_RADIUS_METERS:g})",
    )
    nearby_parser.add_argument("--json", action="store_true", help="Output as JSON")

    departures_parser = subparsers.add_parser("departures", help="Show departures of a station")
    departures_parser.add_argument("query", help="Station name or RBL number")
    departures_parser.add_argument(
        "--watch", action="store_true", help="Keep refreshing until interrupted"
    )
    departures_parser.add_argument("--json", action="store_true", help="Output as JSON")

    favorite_parser = subparsers.add_parser("favorite", help="Add or remove a favorite")
    favorite_parser.add_argument("query", help="Station name or RBL number")

    subparsers.add_parser("favorites", help="List favorite stations")
    subparsers.add_parser("recent", help="List recently viewed stations")

    return parser


def load_config(args: argparse.Namespace) -> AppConfig:
    """Build the configuration from env, the optional TOML file and CLI overrides."""
    config = AppConfig()
    if args.config_file:
        config.config_file = args.config_file
    config.load_toml_overrides()
    if args.stations_file:
        config.stations_file = args.stations_file
    if args.state_file:
        config.state_file = args.state_file
    return config


async def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )

    exit_code = 0
    try:
        config = load_config(args)
        station_repository = JsonStationRepository.from_file(config.stations_file)
        search_service = StationSearchService(station_repository)
        client_state = JsonClientStateStore(config.state_file)

        if args.command == "search":
            results = search_service.search_by_name(args.query)
            if not args.json and results:
                print(f"\nFound {len(results)} station(s):\n")
            print_stations(results, args.json, f"No stations found for '{args.query}'")
            if not results and not args.json:
                exit_code = 1

        elif args.command == "nearby":
            matches = search_service.search_nearby_with_distance(
                args.latitude, args.longitude, args.radius
            )
            if args.json:
                print(
                    json.dumps(
                        [station_to_dict(s, d) for s, d in matches], indent=2, ensure_ascii=False
                    )
                )
            elif not matches:
                print(f"No stations within {args.radius:g} m", file=sys.stderr)
                exit_code = 1
            else:
                for station, distance in matches:
                    print(f"  {distance:6.0f} m  {describe_station(station)}")

        elif args.command == "departures":
            station = search_service.resolve(args.query)
            if station is None:
                print(f"Station '{args.query}' not found.", file=sys.stderr)
                sys.exit(1)
            exit_code = await show_departures(
                config,
                station,
                station_repository,
                client_state,
                watch=args.watch,
                as_json=args.json,
            )

        elif args.command == "favorite":
            station = search_service.resolve(args.query)
            if station is None:
                print(f"Station '{args.query}' not found.", file=sys.stderr)
                sys.exit(1)
            if client_state.toggle_favorite(station):
                print(f"Added {station.name} to favorites")
            else:
                print(f"Removed {station.name} from favorites")

        elif args.command == "favorites":
            print_stations(client_state.get_favorites(), False, "No favorites yet")

        elif args.command == "recent":
            print_stations(client_state.get_recent(), False, "No recent searches")

    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if exit_code:
        sys.exit(exit_code)


def cli_main() -> None:
    """Synchronous entry point for the CLI command."""
    asyncio.run(main())


if __name__ == "__main__":
    cli_main()
