import asyncio

import httpx
import pytest

from app.errors import UpstreamFetchFailure
from app.weather import OpenMeteoWeatherProvider, StaticWeatherProvider


def provider(handler):
    return OpenMeteoWeatherProvider("https://weather.test/", 10.5, 76.2, transport=httpx.MockTransport(handler))


def test_static_provider_defaults():
    snap = asyncio.run(StaticWeatherProvider().fetch_current())
    assert (snap.temperature, snap.rainfall, snap.humidity) == (25, 50, 65)


def test_open_meteo_maps_current_block():
    seen = {}

    def handler(request):
        seen["url"] = request.url
        return httpx.Response(200, json={"current": {
            "temperature_2m": 22.4, "relative_humidity_2m": 61, "precipitation": 3.2,
        }})

    snap = asyncio.run(provider(handler).fetch_current())
    assert (snap.temperature, snap.rainfall, snap.humidity) == (22.4, 3.2, 61)
    assert seen["url"].path == "/v1/forecast"
    assert seen["url"].params["latitude"] == "10.5"
    assert "precipitation" in seen["url"].params["current"]


@pytest.mark.parametrize("response", [
    httpx.Response(503, text="unavailable"),
    httpx.Response(200, json={"hourly": {}}),
    httpx.Response(200, text="not json"),
    httpx.Response(200, json={"current": {"temperature_2m": "hot"}}),
])
def test_bad_responses_raise_upstream_failure(response):
    with pytest.raises(UpstreamFetchFailure):
        asyncio.run(provider(lambda request: response).fetch_current())


def test_transport_error_raises_upstream_failure():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(UpstreamFetchFailure):
        asyncio.run(provider(handler).fetch_current())
