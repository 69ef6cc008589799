"""Kolektor pomiarów Airly.

Co COLLECT_INTERVAL pobiera pomiary dla instalacji (lub instalacji najbliższej
podanemu punktowi) i zapisuje je w lokalnej bazie SQLite. Błędne przebiegi są
logowane, a kolejna próba następuje przy następnym uruchomieniu zadania.
"""

import argparse
import logging
import os
import sys
from typing import Optional

import requests.exceptions
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger
from dotenv import load_dotenv

import airly.api.exceptions as exceptions
import airly.api.models as models
import airly.config as config
from airly import location
from airly.api.client import Client as APIClient
from airly.database.client import Client as DatabaseClient
from airly.repository import Repository


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Collect Airly measurements into a SQLite database")
    p.add_argument("--lat", type=float, default=None, help="Latitude")
    p.add_argument("--lon", type=float, default=None, help="Longitude")
    p.add_argument("--place", type=str, default=None, help="Place name resolved to coordinates")
    p.add_argument("--here", action="store_true", help="Use location of the public IP address")
    p.add_argument(
        "--installation", type=int, default=-1,
        help="Installation ID to get measurements from, -1 means the location will be used"
    )
    p.add_argument("--key", type=str, default=None, help=f"API key (default: ${config.API_KEY_ENV})")
    p.add_argument("--lang", type=str, default="en", choices=config.LANGUAGES, help="Language")
    p.add_argument("--database", type=str, default=config.DATABASE_FILEPATH, help="SQLite database file")
    p.add_argument("--once", action="store_true", help="Collect once and exit")
    return p.parse_args(argv)


def resolve_location(args: argparse.Namespace) -> Optional[models.Location]:
    """Zwraca punkt odniesienia z argumentów lub None, gdy wskazano instalację."""
    if args.installation != -1:
        return None
    if args.place:
        return location.find_position(args.place)
    if args.here:
        return location.current_location()
    if args.lat is None or args.lon is None:
        raise ValueError("--lat and --lon, --place or --here is required without --installation")
    return models.Location(latitude=args.lat, longitude=args.lon)


def collect(repository: Repository, installation_id: int, point: Optional[models.Location]) -> bool:
    """
    Pobiera i zapisuje jeden zestaw pomiarów.

    Returns:
        True jeśli pomiary zapisano, False w przypadku błędu.
    """
    try:
        if installation_id == -1:
            measurements = repository.update_nearest_measurements(point)
        else:
            measurements = repository.update_installation_measurements(installation_id)
    except (requests.exceptions.RequestException, exceptions.APIError, exceptions.DecodeError) as e:
        logging.error("Error getting measurements: %s", e)
        return False

    logging.info(
        "Stored measurements from %s: %d history, %d forecast",
        models.format_timestamp(measurements.current.from_date_time),
        len(measurements.history),
        len(measurements.forecast),
    )
    return True


def main(argv: Optional[list[str]] = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )
    load_dotenv()
    args = parse_args(argv)

    key = args.key or os.getenv(config.API_KEY_ENV, "")
    if not key:
        logging.error(f"Missing API key, use --key or {config.API_KEY_ENV}")
        return 1

    try:
        point = resolve_location(args)
    except (ValueError, LookupError) as e:
        logging.error("Cannot resolve location: %s", e)
        return 1

    repository = Repository(APIClient(key, args.lang), DatabaseClient(args.database))

    def scheduled_collect():
        # zadania schedulera działają w osobnym wątku, sqlite wymaga własnego połączenia
        worker = repository.clone()
        try:
            collect(worker, args.installation, point)
        finally:
            worker.close()

    try:
        collect(repository, args.installation, point)
        if args.once:
            return 0

        scheduler = BlockingScheduler()
        scheduler.add_job(
            scheduled_collect,
            trigger=IntervalTrigger(seconds=config.COLLECT_INTERVAL.total_seconds()),
            id="collect_measurements",
            name="Collect Airly measurements"
        )
        logging.info(f"Scheduled collection every {config.COLLECT_INTERVAL}")
        try:
            scheduler.start()
        except (KeyboardInterrupt, SystemExit):
            logging.info("Collector stopped")
        return 0
    finally:
        repository.close()


if __name__ == "__main__":
    sys.exit(main())
