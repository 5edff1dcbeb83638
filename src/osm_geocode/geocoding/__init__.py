"""
- Models: Data structures (AddressQuery, GeoResult, CandidateRecord, RunConfig, ...)
- Base classes: Abstract interfaces
- Normalizers: Address rendering and cache keys
- Cache: TTL caches for resolved addresses
- Geocoders: Nominatim lookup
- Throttling: Pacing between lookups
- Storage: Record stores for address rows
- Batch: The batch run tying them together
"""

from .models import (
    AddressQuery,
    GeoResult,
    CandidateRecord,
    BatchStats,
    RunConfig,
    RunConfigBuilder,
    CACHE_TTL_SECONDS,
    accept_scope_filter,
    accept_base_url,
    accept_throttle_micros,
    accept_max_results,
)

from .base import (
    Geocoder,
    GeocodeCache,
    RecordStore,
    Throttle,
)

from .normalizers import (
    AddressNormalizer,
    CACHE_KEY_PREFIX,
)

from .cache import (
    InMemoryGeocodeCache,
    DuckDBGeocodeCache,
    open_cache,
)

from .geocoders import (
    NominatimClient,
)

from .throttling import (
    ThrottleScheduler,
)

from .storage import (
    DuckDBRecordStore,
    InMemoryRecordStore,
)

from .batch import (
    BatchGeocoder,
)

__all__ = [
    # Models
    "AddressQuery",
    "GeoResult",
    "CandidateRecord",
    "BatchStats",
    "RunConfig",
    "RunConfigBuilder",
    "CACHE_TTL_SECONDS",
    "accept_scope_filter",
    "accept_base_url",
    "accept_throttle_micros",
    "accept_max_results",
    # Base classes
    "Geocoder",
    "GeocodeCache",
    "RecordStore",
    "Throttle",
    # Normalizers
    "AddressNormalizer",
    "CACHE_KEY_PREFIX",
    # Cache
    "InMemoryGeocodeCache",
    "DuckDBGeocodeCache",
    "open_cache",
    # Geocoders
    "NominatimClient",
    # Throttling
    "ThrottleScheduler",
    # Storage
    "DuckDBRecordStore",
    "InMemoryRecordStore",
    # Batch
    "BatchGeocoder",
]
