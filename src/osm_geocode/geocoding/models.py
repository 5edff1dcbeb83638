"""
Core data models for batch geocoding.

Addresses, results and run configuration are immutable, frozen dataclasses
that serve as the contract between the components of the pipeline. Stored
records are pydantic models so rows read back from the database are
validated before they are geocoded.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator


# 90 days
CACHE_TTL_SECONDS = 7_776_000

DEFAULT_CONTACT_EMAIL = "info@yourdomain.com"
DEFAULT_NOMINATIM_BASE = "https://nominatim.openstreetmap.org"
DEFAULT_THROTTLE_MICROSECONDS = 2_000_000
DEFAULT_MAX_RESULTS = 100


@dataclass(frozen=True)
class AddressQuery:
    """
    The address fields of a single record, trimmed.

    A query with every field blank cannot be geocoded and is skipped
    by the batch without touching the cache or the provider.
    """
    street: str = ""
    postal_code: str = ""
    city: str = ""
    country: str = ""

    @classmethod
    def from_fields(
        cls,
        street: Optional[str] = None,
        postal_code: Optional[str] = None,
        city: Optional[str] = None,
        country: Optional[str] = None,
    ) -> "AddressQuery":
        return cls(
            street=_clean(street),
            postal_code=_clean(postal_code),
            city=_clean(city),
            country=_clean(country),
        )

    def is_empty(self) -> bool:
        return not (self.street or self.postal_code or self.city or self.country)


@dataclass(frozen=True)
class GeoResult:
    """A resolved coordinate pair. A missing result is represented by None."""
    latitude: float
    longitude: float


class CandidateRecord(BaseModel):
    """A stored address row, as read back from the record table."""
    model_config = ConfigDict(frozen=True)

    uid: int
    pid: int = 0
    address: str = ""
    zip: str = ""
    city: str = ""
    country: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @field_validator("address", "zip", "city", "country", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        if value is None:
            return ""
        # zip codes stored as integers
        if isinstance(value, int):
            return str(value)
        return value

    def is_candidate(self) -> bool:
        """True when either coordinate is missing (null) or zero."""
        return (
            self.latitude is None or self.latitude == 0
            or self.longitude is None or self.longitude == 0
        )

    def to_query(self) -> AddressQuery:
        return AddressQuery.from_fields(self.address, self.zip, self.city, self.country)


@dataclass
class BatchStats:
    """Per-run counters, kept for logging alongside the returned batch size."""
    selected: int = 0
    skipped: int = 0
    from_cache: int = 0
    resolved: int = 0
    not_found: int = 0

    def persisted(self) -> int:
        return self.from_cache + self.resolved


# --- Config validation -------------------------------------------------------
# Each function returns the accepted value or the prior one; none of them raise.

def _to_int(value: Any) -> Optional[int]:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def accept_scope_filter(value: Any, prior: Optional[int] = None) -> Optional[int]:
    """Page/owner id restriction. None, empty and 0 mean no restriction."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    parsed = _to_int(value)
    if parsed is None:
        return prior
    return parsed if parsed != 0 else None


def accept_base_url(value: Any, prior: str) -> str:
    cleaned = str(value).strip().rstrip("/") if value is not None else ""
    return cleaned or prior


def accept_throttle_micros(value: Any, prior: int) -> int:
    parsed = _to_int(value)
    if parsed is None or parsed < 0:
        return prior
    return parsed


def accept_max_results(value: Any, prior: int) -> int:
    parsed = _to_int(value)
    if parsed is None or parsed <= 0:
        return prior
    return parsed


@dataclass(frozen=True)
class RunConfig:
    """Configuration of a single batch run. Built once, never mutated."""
    scope_filter: Optional[int] = None
    contact_email: str = DEFAULT_CONTACT_EMAIL
    provider_base_url: str = DEFAULT_NOMINATIM_BASE
    throttle_delay_micros: int = DEFAULT_THROTTLE_MICROSECONDS
    max_results: int = DEFAULT_MAX_RESULTS

    @classmethod
    def builder(cls, base: Optional["RunConfig"] = None) -> "RunConfigBuilder":
        return RunConfigBuilder(base or cls())

    @classmethod
    def from_settings(cls, settings: Any) -> "RunConfig":
        """Start from the environment-driven defaults in ``osm_geocode.settings``."""
        return (
            cls.builder()
            .contact_email(settings.contact_email)
            .provider_base_url(settings.nominatim_base)
            .throttle_delay_micros(settings.throttle_microseconds)
            .max_results(settings.max_results)
            .build()
        )


@dataclass
class RunConfigBuilder:
    """
    Fluent builder for RunConfig.

    Invalid values are ignored and the previous value kept, so the
    order of calls does not matter.

    Example:
        config = (
            RunConfig.builder()
            .scope_filter(12)
            .contact_email("ops@example.org")
            .throttle_delay_micros(1_000_000)
            .build()
        )
    """
    _base: RunConfig
    _values: dict[str, Any] = field(default_factory=dict)

    def _current(self, name: str) -> Any:
        return self._values.get(name, getattr(self._base, name))

    def scope_filter(self, value: Any) -> "RunConfigBuilder":
        self._values["scope_filter"] = accept_scope_filter(value, self._current("scope_filter"))
        return self

    def contact_email(self, value: Any) -> "RunConfigBuilder":
        self._values["contact_email"] = _clean(value)
        return self

    def provider_base_url(self, value: Any) -> "RunConfigBuilder":
        self._values["provider_base_url"] = accept_base_url(value, self._current("provider_base_url"))
        return self

    def throttle_delay_micros(self, value: Any) -> "RunConfigBuilder":
        self._values["throttle_delay_micros"] = accept_throttle_micros(
            value, self._current("throttle_delay_micros")
        )
        return self

    def max_results(self, value: Any) -> "RunConfigBuilder":
        self._values["max_results"] = accept_max_results(value, self._current("max_results"))
        return self

    def build(self) -> RunConfig:
        return RunConfig(
            scope_filter=self._current("scope_filter"),
            contact_email=self._current("contact_email"),
            provider_base_url=self._current("provider_base_url"),
            throttle_delay_micros=self._current("throttle_delay_micros"),
            max_results=self._current("max_results"),
        )


def _clean(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()
