"""Tests for the analysis pipeline."""

from datetime import date, datetime, timezone

import pytest

from site_analysis.analysis import service as service_module
from site_analysis.analysis.errors import InvalidRequestError, NotFoundError, UpstreamError

from conftest import StubGeolocator, json_transport


@pytest.mark.asyncio
async def test_analyze_runs_full_pipeline(make_service):
    async with make_service() as service:
        result = await service.analyze("SW1A 1AA", as_of=date(2025, 10, 19))

    assert result.boundary["geometry"]["type"] == "Polygon"
    assert len(result.obstacles.buildings) == 1
    assert len(result.obstacles.trees) == 1
    assert len(result.obstacles.poles) == 1
    assert [m.month_name for m in result.weather][:3] == ["January", "February", "March"]
    assert len(result.weather) == 12


@pytest.mark.asyncio
async def test_blank_postcode_calls_no_provider(make_service):
    geolocator = StubGeolocator()
    overpass = json_transport({"elements": []})
    open_meteo = json_transport({"daily": {}})

    async with make_service(geolocator, overpass, open_meteo) as service:
        with pytest.raises(InvalidRequestError):
            await service.analyze("  ")

    assert geolocator.calls == []
    assert overpass.requests == []
    assert open_meteo.requests == []


@pytest.mark.asyncio
async def test_not_found_short_circuits(make_service):
    overpass = json_transport({"elements": []})
    open_meteo = json_transport({"daily": {}})

    async with make_service(StubGeolocator(raw=None), overpass, open_meteo) as service:
        with pytest.raises(NotFoundError):
            await service.analyze("ZZ99 9ZZ")

    assert overpass.requests == []
    assert open_meteo.requests == []


@pytest.mark.asyncio
async def test_upstream_failure_has_no_partial_result(make_service):
    async with make_service(overpass=json_transport({}, status_code=503)) as service:
        with pytest.raises(UpstreamError, match="Overpass API error: 503"):
            await service.analyze("SW1A 1AA", as_of=date(2025, 10, 19))


@pytest.mark.asyncio
async def test_default_window_ends_on_utc_date(make_service, climate_payload, monkeypatch):
    class LateEveningUTC(datetime):
        @classmethod
        def now(cls, tz=None):
            assert tz is timezone.utc
            return datetime(2025, 12, 31, 23, 30, tzinfo=timezone.utc)

    monkeypatch.setattr(service_module, "datetime", LateEveningUTC)
    open_meteo = json_transport(climate_payload)

    async with make_service(open_meteo=open_meteo) as service:
        await service.analyze("SW1A 1AA")

    params = open_meteo.requests[0].url.params
    assert params["end_date"] == "2025-12-31"
    assert params["start_date"] == "2020-12-31"
