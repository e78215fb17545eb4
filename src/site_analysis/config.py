"""Configuration settings for the site analysis service."""

import os
from typing import Final, List
from dotenv import load_dotenv

load_dotenv()

# Provider configuration
NOMINATIM_DOMAIN: str = os.getenv("NOMINATIM_DOMAIN", "nominatim.openstreetmap.org")
NOMINATIM_SCHEME: str = os.getenv("NOMINATIM_SCHEME", "https")
OVERPASS_API_URL: str = os.getenv("OVERPASS_API_URL", "https://overpass-api.de/api/interpreter")
OPEN_METEO_ARCHIVE_URL: str = os.getenv(
    "OPEN_METEO_ARCHIVE_URL", "https://archive-api.open-meteo.com/v1/archive"
)
USER_AGENT: str = os.getenv("USER_AGENT", "SolarSiteAnalysis/1.0")
PROVIDER_TIMEOUT_SECONDS: float = float(os.getenv("PROVIDER_TIMEOUT_SECONDS", "30"))

# Analysis settings
GEOCODER_COUNTRY_SUFFIX: Final[str] = "UK"
CLIMATE_LOOKBACK_YEARS: Final[int] = 5
MAX_OBSTACLES_PER_CATEGORY: Final[int] = 100

# Server configuration
HOST: str = os.getenv("HOST", "0.0.0.0")
PORT: int = int(os.getenv("PORT", "8000"))
DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO").upper()
CORS_ALLOW_ORIGINS: List[str] = [
    origin.strip() for origin in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",") if origin.strip()
]
