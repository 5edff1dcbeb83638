"""
Nominatim (OpenStreetMap) search API wrapper implementing the Geocoder interface.

Reference: https://nominatim.org/release-docs/latest/api/Search/
Usage policy: https://operations.osmfoundation.org/policies/nominatim/
"""

import logging
import math
from typing import Any, Optional

import requests

from .base import Geocoder
from .models import AddressQuery, GeoResult, RunConfig
from .normalizers import AddressNormalizer

logger = logging.getLogger(__name__)

APP_NAME = "osm-geocode"
FALLBACK_CONTACT = "contact-not-set@example.com"


class NominatimClient(Geocoder):
    """
    Nominatim search API wrapper.

    Prefers a structured query (street/postalcode/city/country) and falls
    back to free text. Every failure (transport error, 429, other non-2xx,
    empty or malformed body) is logged and returns None; nothing is retried.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        app_name: str = APP_NAME,
        accept_language: str = "de",
        timeout: float = 15.0,
        normalizer: Optional[AddressNormalizer] = None,
    ):
        """
        Initialize Nominatim client.

        Args:
            session: HTTP session to reuse (a new one is created if omitted)
            app_name: Application name sent in the User-Agent
            accept_language: Preferred response language
            timeout: HTTP request timeout in seconds
            normalizer: Renders the free-text fallback query
        """
        self.session = session or requests.Session()
        self.app_name = app_name
        self.accept_language = accept_language
        self.timeout = timeout
        self.normalizer = normalizer or AddressNormalizer()

        logger.info(f"Initialized NominatimClient: lang={accept_language}, timeout={timeout}s")

    def user_agent(self, config: RunConfig) -> str:
        return f"{self.app_name} ({config.contact_email or FALLBACK_CONTACT})".strip()

    def build_params(self, query: AddressQuery) -> dict[str, str]:
        params = {
            "format": "jsonv2",
            "limit": "1",
            "addressdetails": "0",
            "accept-language": self.accept_language,
        }

        has_structured = False
        for name, value in (
            ("street", query.street),
            ("postalcode", query.postal_code),
            ("city", query.city),
            ("country", query.country),
        ):
            if value:
                params[name] = value
                has_structured = True

        if not has_structured:
            params["q"] = self.normalizer.render(query)
        return params

    def lookup(self, query: AddressQuery, config: RunConfig) -> Optional[GeoResult]:
        """
        Geocode a single address.

        Args:
            query: Address to resolve
            config: Provides the base URL and contact email

        Returns:
            GeoResult for the best match, or None
        """
        payload = self._get_json(
            f"{config.provider_base_url.rstrip('/')}/search",
            self.build_params(query),
            config,
        )
        if not payload:
            return None

        first = payload[0]
        if not isinstance(first, dict) or "lat" not in first or "lon" not in first:
            logger.debug(f"No coordinates in first result: {str(first)[:200]}")
            return None

        try:
            lat = float(first["lat"])
            lon = float(first["lon"])
        except (TypeError, ValueError):
            logger.warning(f"Unparseable coordinates lat={first['lat']!r} lon={first['lon']!r}")
            return None

        # NaN and infinity parse as floats but are not coordinates
        if not (math.isfinite(lat) and math.isfinite(lon) and -90 <= lat <= 90 and -180 <= lon <= 180):
            logger.warning(f"Invalid coordinates lat={lat} lon={lon}")
            return None
        return GeoResult(latitude=lat, longitude=lon)

    def _get_json(self, endpoint: str, params: dict[str, str], config: RunConfig) -> list[Any]:
        """
        GET the endpoint and decode a JSON list.

        Returns:
            The decoded list, or an empty list on any failure
        """
        headers = {
            "User-Agent": self.user_agent(config),
            "Accept": "application/json",
            "Accept-Language": self.accept_language,
        }

        logger.debug(f"Querying {endpoint} with {params}")
        try:
            response = self.session.get(
                endpoint,
                params=params,
                headers=headers,
                timeout=self.timeout,
                allow_redirects=True,
            )
        except requests.RequestException as e:
            logger.warning(f"Request to {endpoint} failed: {e}")
            return []

        status = response.status_code
        if status == 429:
            logger.warning(f"Rate limited by {endpoint} (HTTP 429)")
            return []
        if status < 200 or status >= 300:
            logger.warning(f"HTTP {status} from {endpoint}: {response.text[:200]}")
            return []

        if not response.content:
            logger.warning(f"Empty response body from {endpoint}")
            return []

        try:
            decoded = response.json()
        except ValueError:
            logger.warning(f"Invalid JSON from {endpoint}: {response.text[:200]}")
            return []

        if not isinstance(decoded, list):
            logger.warning(f"Expected a JSON list from {endpoint}, got {type(decoded).__name__}")
            return []
        return decoded

    def close(self) -> None:
        """Close the HTTP session."""
        self.session.close()
