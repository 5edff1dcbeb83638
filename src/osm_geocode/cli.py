# Command line entry point: geocode address records missing coordinates
from __future__ import annotations

import contextlib
import logging
import sys
from argparse import ArgumentParser
from pathlib import Path
from typing import Optional, Sequence

from colorama import Fore, Style

from .geocoding import (
    BatchGeocoder,
    DuckDBGeocodeCache,
    DuckDBRecordStore,
    NominatimClient,
    RunConfig,
    ThrottleScheduler,
    open_cache,
)
from .settings import settings
from .utils.errors import CacheUnavailableError

logger = logging.getLogger(__name__)


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(description="Geocode address records via Nominatim")
    parser.add_argument('page_uid', nargs='?', default=0,
                        help='Page id with existing addresses (0: all pages)')
    parser.add_argument('email', nargs='?', default=settings.contact_email,
                        help='Contact e-mail sent in the User-Agent')
    parser.add_argument('nominatim_base', nargs='?', default=settings.nominatim_base,
                        help='Nominatim base URL')
    parser.add_argument('throttle_microseconds', nargs='?', default=settings.throttle_microseconds,
                        help='Pause between lookups in microseconds')
    parser.add_argument('max_results', nargs='?', default=settings.max_results,
                        help='Maximum number of addresses per run')
    parser.add_argument('--db', type=Path, default=settings.ddb_path,
                        help='DuckDB file holding the address table')
    parser.add_argument('--table', default=settings.table_name,
                        help='Address table name')
    parser.add_argument('--cache-db', type=Path, default=settings.cache_path,
                        help='DuckDB file backing the geocode cache')
    parser.add_argument('--memory-cache', action='store_true',
                        help='Keep the cache in memory for this run only')
    parser.add_argument('--import-csv', type=Path,
                        help='Load address rows from a CSV before geocoding')
    parser.add_argument('--log-level', default='INFO')
    return parser


def _status(step: str, ok: bool, detail: str = "") -> None:
    padding = max(1, 24 - len(step))
    label = f"{Fore.GREEN}Complete" if ok else f"{Fore.RED}Failed"
    suffix = f": {detail}" if detail else ""
    print(f'Geocode -- {step} {"-" * padding}> {label}{Style.RESET_ALL}{suffix}')


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )

    config = (
        RunConfig.builder()
        .scope_filter(args.page_uid)
        .contact_email(args.email)
        .provider_base_url(args.nominatim_base)
        .throttle_delay_micros(args.throttle_microseconds)
        .max_results(args.max_results)
        .build()
    )
    logger.info(f"Run config: {config}")

    try:
        cache = open_cache(settings.cache_name, None if args.memory_cache else args.cache_db)
    except CacheUnavailableError as e:
        _status('Open cache', False, str(e))
        return 1
    _status('Open cache', True)

    client = NominatimClient(
        app_name=settings.app_name,
        accept_language=settings.accept_language,
        timeout=settings.timeout_s,
    )
    with cache, contextlib.closing(client), DuckDBRecordStore(args.db, table_name=args.table) as store:
        if isinstance(cache, DuckDBGeocodeCache):
            cache.purge_expired()
        if args.import_csv:
            count = store.import_csv(args.import_csv)
            _status('Import CSV', True, f"{count} rows")

        geocoder = BatchGeocoder(store, cache, client, throttle=ThrottleScheduler())
        total = geocoder.run(config)
        stats = geocoder.last_stats
        _status('Geocode records', True,
                f"{total} selected, {stats.persisted()} updated, {stats.not_found} not found")
    return 0


if __name__ == '__main__':
    sys.exit(main())
