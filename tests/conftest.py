"""Shared fixtures for site analysis tests."""

from datetime import date, timedelta
from types import SimpleNamespace
from typing import Callable, Dict, List, Optional

import httpx
import pytest

from site_analysis.analysis.climate import ClimateAggregator
from site_analysis.analysis.geocoding import Geocoder
from site_analysis.analysis.obstacles import ObstacleCollector
from site_analysis.analysis.service import AnalysisService

BOUNDING_BOX = ["51.5000", "51.5100", "-0.1300", "-0.1200"]


class StubGeolocator:
    """Stands in for geopy's Nominatim and records each geocode call."""

    def __init__(self, raw: Optional[dict] = None, error: Optional[Exception] = None):
        self.raw = raw
        self.error = error
        self.calls: List[tuple] = []

    def geocode(self, query, **kwargs):
        self.calls.append((query, kwargs))
        if self.error is not None:
            raise self.error
        if self.raw is None:
            return None
        return SimpleNamespace(raw=self.raw)


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps the requests it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)


def json_transport(payload, status_code: int = 200) -> RecordingTransport:
    """Transport answering every request with the same JSON body."""
    return RecordingTransport(lambda request: httpx.Response(status_code, json=payload))


def daily_series(start: date, days: int, value: Callable[[date], Dict[str, Optional[float]]]) -> dict:
    """Build an Open-Meteo style daily payload."""
    series = {"time": [], "temperature_2m_mean": [], "precipitation_sum": [], "sunshine_duration": []}
    for offset in range(days):
        day = start + timedelta(days=offset)
        values = value(day)
        series["time"].append(day.isoformat())
        series["temperature_2m_mean"].append(values.get("temperature_2m_mean"))
        series["precipitation_sum"].append(values.get("precipitation_sum"))
        series["sunshine_duration"].append(values.get("sunshine_duration"))
    return {"daily": series}


@pytest.fixture
def nominatim_place() -> dict:
    """Nominatim candidate without boundary geometry."""
    return {
        "place_id": 1234,
        "lat": "51.5050",
        "lon": "-0.1250",
        "boundingbox": list(BOUNDING_BOX),
        "display_name": "SW1A 1AA, London, United Kingdom",
    }


@pytest.fixture
def overpass_payload() -> dict:
    """Overpass response with one element of each kind plus noise."""
    return {
        "elements": [
            {"type": "way", "id": 1, "center": {"lat": 51.505, "lon": -0.125}, "tags": {"building": "yes"}},
            {"type": "node", "id": 2, "lat": 51.506, "lon": -0.126, "tags": {"natural": "tree"}},
            {"type": "node", "id": 3, "lat": 51.507, "lon": -0.127, "tags": {"power": "pole"}},
            {"type": "node", "id": 4, "lat": 51.508, "lon": -0.128, "tags": {"amenity": "bench"}},
            {"type": "way", "id": 5, "tags": {"building": "house"}},
        ]
    }


@pytest.fixture
def climate_payload() -> dict:
    """Two years of constant daily values."""
    return daily_series(
        date(2021, 1, 1),
        730,
        lambda day: {"temperature_2m_mean": 10.0, "precipitation_sum": 2.0, "sunshine_duration": 7200.0},
    )


@pytest.fixture
def make_service(nominatim_place, overpass_payload, climate_payload):
    """Factory for an AnalysisService wired to stubbed providers."""

    def factory(
        geolocator: Optional[StubGeolocator] = None,
        overpass: Optional[RecordingTransport] = None,
        open_meteo: Optional[RecordingTransport] = None,
    ) -> AnalysisService:
        return AnalysisService(
            geocoder=Geocoder(geolocator or StubGeolocator(raw=nominatim_place)),
            obstacle_collector=ObstacleCollector(transport=overpass or json_transport(overpass_payload)),
            climate_aggregator=ClimateAggregator(transport=open_meteo or json_transport(climate_payload)),
        )

    return factory
