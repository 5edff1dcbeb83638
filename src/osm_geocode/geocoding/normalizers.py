"""
Address rendering and cache key normalization.

Rendering produces the human-readable one-line address that is sent to the
provider as a free-text fallback; normalization turns that line into the
cache key shared by every record with the same rendered address.
"""

import re

from .models import AddressQuery

CACHE_KEY_PREFIX = "geocode-osm-"

_RE_NON_ALNUM = re.compile(r"[^0-9a-zA-Z ]")
_RE_WHITESPACE = re.compile(r"\s+")


class AddressNormalizer:
    """
    Renders AddressQuery values and derives cache keys from them.

    Examples:
        normalizer = AddressNormalizer()
        line = normalizer.render(AddressQuery("Main St", "12345", "Berlin", "DE"))
        → "Main St, 12345 Berlin, DE"
        normalizer.key_of(line)
        → "geocode-osm-main-st-12345-berlin-de"
    """

    def __init__(self, prefix: str = CACHE_KEY_PREFIX):
        self.prefix = prefix

    def render(self, query: AddressQuery) -> str:
        parts = []
        for part in (query.street, f"{query.postal_code} {query.city}".strip(), query.country):
            part = part.strip()
            if part:
                parts.append(part)
        return ", ".join(parts).lstrip(", ")

    def key_of(self, rendered: str) -> str:
        if not rendered.strip():
            raise ValueError("cannot build a cache key from an empty address")
        cleaned = _RE_NON_ALNUM.sub("", rendered)
        return self.prefix + _RE_WHITESPACE.sub("-", cleaned).lower()
