"""
Abstract base classes for the geocoding system.

These define the interfaces that all concrete implementations must follow.
"""

from abc import ABC, abstractmethod
from typing import Optional, List

from .models import AddressQuery, CandidateRecord, GeoResult, RunConfig


class Geocoder(ABC):
    """
    Abstract base for geocoders.

    Geocoders resolve an address to coordinates. They never raise for
    provider or transport failures; a failed lookup returns None.
    """

    @abstractmethod
    def lookup(self, query: AddressQuery, config: RunConfig) -> Optional[GeoResult]:
        """
        Geocode a single address.

        Args:
            query: Address fields to resolve
            config: Run configuration (provider URL, contact email)

        Returns:
            GeoResult, or None when nothing usable came back
        """
        pass


class GeocodeCache(ABC):
    """
    Abstract base for the address → coordinates cache.

    Entries expire after their TTL; expired entries are never reported
    as present.
    """

    @abstractmethod
    def has(self, key: str) -> bool:
        """Whether a live entry exists for key."""
        pass

    @abstractmethod
    def get(self, key: str) -> Optional[GeoResult]:
        """Get a live cached result, or None."""
        pass

    @abstractmethod
    def set(self, key: str, result: GeoResult, ttl_seconds: int) -> None:
        """Cache a result for ttl_seconds from now."""
        pass

    def close(self) -> None:
        """Release backend resources."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class RecordStore(ABC):
    """
    Abstract base for the address record table.

    Selects records that are missing coordinates and writes resolved
    coordinates back.
    """

    @abstractmethod
    def select_missing_coordinates(
        self,
        scope_filter: Optional[int],
        limit: int,
    ) -> List[CandidateRecord]:
        """
        Select up to `limit` records whose latitude or longitude is null or zero.

        Args:
            scope_filter: Restrict to records with this pid (None: all records)
            limit: Maximum number of records

        Returns:
            Candidates in a deterministic order
        """
        pass

    @abstractmethod
    def persist_coordinates(self, uid: int, latitude: float, longitude: float) -> None:
        """Overwrite the coordinates of one record."""
        pass

    def close(self) -> None:
        """Close connections/cleanup resources."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class Throttle(ABC):
    """
    Abstract base for request pacing between consecutive records.
    """

    @abstractmethod
    def wait_between(self, is_last: bool, delay_micros: int) -> None:
        """Block before the next record unless this one is the last."""
        pass
