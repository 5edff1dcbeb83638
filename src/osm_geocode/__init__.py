"""Batch geocoding of address records against Nominatim."""

__version__ = "0.1.0"
