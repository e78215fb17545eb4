"""Monthly climate statistics from the Open-Meteo archive."""

import logging
from datetime import date
from statistics import fmean
from typing import Dict, Iterable, List, Optional, Tuple

import httpx
from pydantic import ValidationError

from site_analysis.analysis.errors import UpstreamError
from site_analysis.analysis.models import (
    DailySample, MonthlyClimateAverage,
    OpenMeteoArchiveResponse, OpenMeteoDaily
)
from site_analysis.config import (
    CLIMATE_LOOKBACK_YEARS, OPEN_METEO_ARCHIVE_URL,
    PROVIDER_TIMEOUT_SECONDS, USER_AGENT
)

logger = logging.getLogger(__name__)

PROVIDER_NAME = "Open-Meteo"

MONTH_NAMES: Tuple[str, ...] = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

DAILY_VARS = [
    "temperature_2m_mean",
    "precipitation_sum",
    "sunshine_duration",
]

SECONDS_PER_HOUR = 3600


def lookback_window(as_of: date, years: int = CLIMATE_LOOKBACK_YEARS) -> Tuple[date, date]:
    """Return the inclusive (start, end) window ending at `as_of`.

    29 February maps to 28 February when the start year is not a leap year.
    """
    try:
        start = as_of.replace(year=as_of.year - years)
    except ValueError:
        start = as_of.replace(year=as_of.year - years, day=28)
    return start, as_of


def _value_at(values: List[Optional[float]], index: int) -> Optional[float]:
    return values[index] if index < len(values) else None


def daily_samples(daily: OpenMeteoDaily) -> List[DailySample]:
    """Zip the index-aligned daily arrays into samples.

    A field array shorter than the date index yields None for the missing days.
    """
    return [
        DailySample(
            date=day,
            mean_temperature_c=_value_at(daily.temperature_2m_mean, index),
            precipitation_mm=_value_at(daily.precipitation_sum, index),
            sunshine_seconds=_value_at(daily.sunshine_duration, index),
        )
        for index, day in enumerate(daily.time)
    ]


def monthly_averages(samples: Iterable[DailySample]) -> List[MonthlyClimateAverage]:
    """Reduce daily samples to twelve calendar-month averages.

    Samples from every year are pooled by month. Null values are left out of
    their own field only, and a field with no values averages to 0.

    Args:
        samples: Daily samples in any order

    Returns:
        Twelve MonthlyClimateAverage entries, January to December
    """
    buckets: Dict[str, Dict[str, List[float]]] = {
        month: {"temp": [], "precip": [], "sun": []} for month in MONTH_NAMES
    }

    for sample in samples:
        bucket = buckets[MONTH_NAMES[sample.date.month - 1]]
        if sample.mean_temperature_c is not None:
            bucket["temp"].append(sample.mean_temperature_c)
        if sample.precipitation_mm is not None:
            bucket["precip"].append(sample.precipitation_mm)
        if sample.sunshine_seconds is not None:
            bucket["sun"].append(sample.sunshine_seconds / SECONDS_PER_HOUR)

    return [
        MonthlyClimateAverage(
            month_name=month,
            mean_temperature_c=_mean(buckets[month]["temp"]),
            mean_precipitation_mm=_mean(buckets[month]["precip"]),
            mean_sunshine_hours=_mean(buckets[month]["sun"]),
        )
        for month in MONTH_NAMES
    ]


def _mean(values: List[float]) -> float:
    return fmean(values) if values else 0.0


class ClimateAggregator:
    """Async client that turns five years of daily weather into monthly averages."""

    def __init__(
        self,
        base_url: str = OPEN_METEO_ARCHIVE_URL,
        user_agent: str = USER_AGENT,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """Initialize the climate aggregator.

        Args:
            base_url: Open-Meteo archive endpoint
            user_agent: User-Agent header for API requests
            transport: Optional httpx transport, used to stub the provider
        """
        self.base_url = base_url
        self.user_agent = user_agent
        self.client = httpx.AsyncClient(
            headers={"User-Agent": self.user_agent},
            timeout=PROVIDER_TIMEOUT_SECONDS,
            transport=transport
        )

    async def fetch_daily(self, latitude: float, longitude: float, start: date, end: date) -> OpenMeteoDaily:
        """Fetch the daily series for a point and date range.

        Args:
            latitude: Latitude in decimal degrees
            longitude: Longitude in decimal degrees
            start: First day, inclusive
            end: Last day, inclusive

        Returns:
            Validated daily arrays

        Raises:
            UpstreamError: If the provider call fails or returns an invalid payload
        """
        params = {
            "latitude": latitude,
            "longitude": longitude,
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
            "daily": ",".join(DAILY_VARS),
            "timezone": "auto",
        }
        logger.info(f"Fetching climate archive for ({latitude}, {longitude}) from {start} to {end}")

        try:
            response = await self.client.get(self.base_url, params=params)
            response.raise_for_status()
            payload = OpenMeteoArchiveResponse.model_validate(response.json())

        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error from Open-Meteo API: {e.response.status_code} - {e.response.text}")
            raise UpstreamError(PROVIDER_NAME, e.response.status_code) from e
        except httpx.RequestError as e:
            logger.error(f"Request error to Open-Meteo API: {e}")
            raise UpstreamError(PROVIDER_NAME, reason=str(e)) from e
        except (ValidationError, ValueError) as e:
            logger.error(f"Invalid Open-Meteo API response format: {e}")
            raise UpstreamError(PROVIDER_NAME, reason="invalid response format") from e

        logger.info(f"Open-Meteo returned {len(payload.daily.time)} days")
        return payload.daily

    async def aggregate(self, latitude: float, longitude: float, as_of: date) -> List[MonthlyClimateAverage]:
        """Compute monthly averages over the lookback window ending at `as_of`.

        Args:
            latitude: Latitude in decimal degrees
            longitude: Longitude in decimal degrees
            as_of: Last day of the window

        Returns:
            Twelve MonthlyClimateAverage entries, January to December
        """
        start, end = lookback_window(as_of)
        daily = await self.fetch_daily(latitude, longitude, start, end)

        try:
            samples = daily_samples(daily)
        except ValidationError as e:
            logger.error(f"Invalid date in Open-Meteo response: {e}")
            raise UpstreamError(PROVIDER_NAME, reason="invalid response format") from e

        return monthly_averages(samples)

    async def aclose(self):
        """Close the async HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.aclose()
