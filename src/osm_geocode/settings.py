from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    ddb_path: Path = Path("data/addresses.duckdb")
    cache_path: Optional[Path] = Path("data/geocode_cache.duckdb")
    cache_name: str = "ttaddress_geocoding"
    table_name: str = "tt_address"

    contact_email: str = "info@yourdomain.com"
    nominatim_base: str = "https://nominatim.openstreetmap.org"
    throttle_microseconds: int = 2_000_000
    max_results: int = 100

    app_name: str = "osm-geocode"
    accept_language: str = "de"
    timeout_s: float = 15.0

    model_config = SettingsConfigDict(
        env_prefix="GEOCODE_",
        env_file=".env",
        extra="ignore",
    )


settings = Settings()
