import logging
from typing import Any, Dict, Optional
import httpx
from app.config import settings
from app.errors import UpstreamFetchFailure
from app.schema import WeatherSnapshot

logger = logging.getLogger(__name__)

class WeatherProvider:
    async def fetch_current(self) -> WeatherSnapshot:
        raise NotImplementedError

class StaticWeatherProvider(WeatherProvider):
    """Fixed "current conditions" used when no weather API is configured."""

    def __init__(self, snapshot: Optional[WeatherSnapshot] = None):
        self.snapshot = snapshot or WeatherSnapshot(temperature=25, rainfall=50, humidity=65)

    async def fetch_current(self) -> WeatherSnapshot:
        return self.snapshot

class OpenMeteoWeatherProvider(WeatherProvider):
    """
    Current conditions from an Open-Meteo compatible ``/v1/forecast`` endpoint.

    Single attempt, no retries. Transport errors, non-2xx responses and
    payloads missing the ``current`` block all surface as UpstreamFetchFailure.
    """

    def __init__(self, base_url: str, latitude: float, longitude: float,
                 timeout: float = 10, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.latitude = latitude
        self.longitude = longitude
        self.timeout = timeout
        self._transport = transport

    def _params(self) -> Dict[str, Any]:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "current": "temperature_2m,relative_humidity_2m,precipitation",
        }

    async def fetch_current(self) -> WeatherSnapshot:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                r = await client.get(f"{self.base_url}/v1/forecast", params=self._params())
            r.raise_for_status()
            current = r.json()["current"]
            return WeatherSnapshot(
                temperature=current["temperature_2m"],
                rainfall=current["precipitation"],
                humidity=current["relative_humidity_2m"],
            )
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            logger.warning("weather fetch from %s failed: %s", self.base_url, e)
            raise UpstreamFetchFailure() from e

def get_weather_provider() -> WeatherProvider:
    if not settings.weather_api_url:
        return StaticWeatherProvider()
    return OpenMeteoWeatherProvider(
        settings.weather_api_url,
        settings.weather_latitude,
        settings.weather_longitude,
        timeout=settings.weather_timeout_s,
    )
