"""
Batch geocoding of records that are missing coordinates.
"""

import logging
from typing import Optional

from .base import Geocoder, GeocodeCache, RecordStore, Throttle
from .models import CACHE_TTL_SECONDS, BatchStats, GeoResult, RunConfig
from .normalizers import AddressNormalizer
from .throttling import ThrottleScheduler

logger = logging.getLogger(__name__)


class BatchGeocoder:
    """
    Geocodes one bounded batch of candidate records.

    For each record: render the address, check the cache, look it up on a
    miss, persist coordinates when a result was found, then pace before
    the next record. Per-record failures leave the record untouched so a
    later run picks it up again.

    Example:
        geocoder = BatchGeocoder(
            store=DuckDBRecordStore("addresses.duckdb"),
            cache=open_cache("ttaddress_geocoding", "cache.duckdb"),
            client=NominatimClient(),
        )
        selected = geocoder.run(RunConfig.builder().contact_email("ops@example.org").build())
    """

    def __init__(
        self,
        store: RecordStore,
        cache: GeocodeCache,
        client: Geocoder,
        throttle: Optional[Throttle] = None,
        normalizer: Optional[AddressNormalizer] = None,
        cache_ttl_seconds: int = CACHE_TTL_SECONDS,
    ):
        self.store = store
        self.cache = cache
        self.client = client
        self.throttle = throttle or ThrottleScheduler()
        self.normalizer = normalizer or AddressNormalizer()
        self.cache_ttl_seconds = cache_ttl_seconds
        self.last_stats = BatchStats()

    def run(self, config: RunConfig) -> int:
        """
        Geocode up to config.max_results candidate records.

        Returns:
            Number of candidates selected, whether or not they resolved
        """
        records = self.store.select_missing_coordinates(config.scope_filter, config.max_results)
        total = len(records)
        stats = BatchStats(selected=total)
        self.last_stats = stats
        if total == 0:
            logger.info("No records missing coordinates")
            return 0

        for idx, record in enumerate(records):
            query = record.to_query()
            address = self.normalizer.render(query)
            if not address:
                logger.debug(f"Skipping uid={record.uid}: no address fields")
                stats.skipped += 1
                continue

            key = self.normalizer.key_of(address)
            result: Optional[GeoResult] = None
            if self.cache.has(key):
                result = self.cache.get(key)
            if result is not None:
                stats.from_cache += 1
            else:
                result = self.client.lookup(query, config)
                if result is not None:
                    self.cache.set(key, result, self.cache_ttl_seconds)
                    stats.resolved += 1

            if result is not None:
                self.store.persist_coordinates(record.uid, result.latitude, result.longitude)
            else:
                stats.not_found += 1
                logger.warning(f"No coordinates for uid={record.uid} ({address})")

            # paced by position, cache hits included
            self.throttle.wait_between(idx == total - 1, config.throttle_delay_micros)

        logger.info(
            f"Geocoding complete: {total} selected, {stats.resolved} looked up, "
            f"{stats.from_cache} from cache, {stats.not_found} not found, {stats.skipped} skipped"
        )
        return total
