"""
Geocode cache backends.

Maps normalized address keys to coordinates with a time-to-live. Only
successful lookups are ever written; expired entries read as misses.
"""

import logging
import time
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple

import duckdb

from ..db.db import connect, MEMORY
from ..utils.errors import CacheUnavailableError
from .base import GeocodeCache
from .models import GeoResult

logger = logging.getLogger(__name__)

DEFAULT_CACHE_NAME = "ttaddress_geocoding"


class InMemoryGeocodeCache(GeocodeCache):
    """
    Process-local cache, lost when the run ends.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._entries: Dict[str, Tuple[GeoResult, float]] = {}

    def _live(self, key: str) -> Optional[GeoResult]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        result, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return result

    def has(self, key: str) -> bool:
        return self._live(key) is not None

    def get(self, key: str) -> Optional[GeoResult]:
        return self._live(key)

    def set(self, key: str, result: GeoResult, ttl_seconds: int) -> None:
        self._entries[key] = (result, self._clock() + ttl_seconds)


class DuckDBGeocodeCache(GeocodeCache):
    """
    DuckDB-backed cache that survives across runs.

    Expiry is stored as an absolute epoch timestamp per row.
    """

    DDL = """
    CREATE TABLE IF NOT EXISTS geocode_cache (
        cache_key TEXT PRIMARY KEY,
        latitude DOUBLE NOT NULL,
        longitude DOUBLE NOT NULL,
        expires_at DOUBLE NOT NULL,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    );
    """

    def __init__(
        self,
        db_path: Path | str = MEMORY,
        name: str = DEFAULT_CACHE_NAME,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize DuckDB cache.

        Args:
            db_path: Path to DuckDB database file, or ":memory:"
            name: Logical cache name (used in errors and logs)
            clock: Returns current epoch seconds (injectable for tests)

        Raises:
            CacheUnavailableError if the database cannot be opened
        """
        self.name = name
        self.db_path = str(db_path)
        self._clock = clock
        try:
            self.con = connect(self.db_path)
            self.con.execute(self.DDL)
        except (duckdb.Error, OSError) as e:
            raise CacheUnavailableError(name, str(e)) from e
        logger.info(f"Initialized DuckDB cache '{name}': {self.db_path}")

    def _row(self, key: str) -> Optional[tuple]:
        return self.con.execute(
            "SELECT latitude, longitude FROM geocode_cache WHERE cache_key = ? AND expires_at > ?",
            [key, self._clock()],
        ).fetchone()

    def has(self, key: str) -> bool:
        return self._row(key) is not None

    def get(self, key: str) -> Optional[GeoResult]:
        row = self._row(key)
        if row is None:
            return None
        return GeoResult(latitude=row[0], longitude=row[1])

    def set(self, key: str, result: GeoResult, ttl_seconds: int) -> None:
        # an expired row for the same key is replaced
        self.con.execute(
            """
            INSERT INTO geocode_cache (cache_key, latitude, longitude, expires_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(cache_key) DO UPDATE SET
                latitude = excluded.latitude,
                longitude = excluded.longitude,
                expires_at = excluded.expires_at,
                created_at = CURRENT_TIMESTAMP
            """,
            [key, result.latitude, result.longitude, self._clock() + ttl_seconds],
        )

    def purge_expired(self) -> int:
        """Delete elapsed entries. Returns the number removed."""
        now = self._clock()
        row = self.con.execute(
            "SELECT COUNT(*) FROM geocode_cache WHERE expires_at <= ?", [now]
        ).fetchone()
        removed = row[0] if row else 0
        if removed:
            self.con.execute("DELETE FROM geocode_cache WHERE expires_at <= ?", [now])
            logger.info(f"Purged {removed} expired entries from cache '{self.name}'")
        return removed

    def close(self) -> None:
        """Close database connection."""
        if self.con:
            self.con.close()
            self.con = None
            logger.info(f"Closed cache '{self.name}'")


def open_cache(
    name: str = DEFAULT_CACHE_NAME,
    db_path: Optional[Path | str] = None,
    clock: Callable[[], float] = time.time,
) -> GeocodeCache:
    """
    Open the cache registered under a logical name.

    Args:
        name: Logical cache name
        db_path: DuckDB file backing the cache; None keeps it in memory

    Returns:
        A ready GeocodeCache

    Raises:
        CacheUnavailableError if the backend cannot be opened
    """
    if not name:
        raise CacheUnavailableError("<unnamed>", "cache name must not be empty")
    if db_path is None:
        logger.info(f"Using in-memory cache '{name}'")
        return InMemoryGeocodeCache(clock=clock)
    return DuckDBGeocodeCache(db_path, name=name, clock=clock)
