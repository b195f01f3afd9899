import asyncio
import logging
from typing import Any, AsyncIterator, Dict
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from app.config import settings
from app.engine.classifier import classify
from app.errors import AdvisorError, NoReadingAvailable, UpstreamFetchFailure
from app.schema import CropRecommendation
from app.sensors import SensorFeed, SoilChannel, get_sensor_feed
from app.weather import WeatherProvider, get_weather_provider

logger = logging.getLogger(__name__)

router = APIRouter()

async def recommend_once(device_id: str, sensor_feed: SensorFeed, weather: WeatherProvider,
                         timeout: float) -> CropRecommendation:
    """Wait for the first reading, then fetch weather and classify both."""
    async with sensor_feed.subscribe(device_id) as channel:
        try:
            soil = await channel.next(timeout=timeout)
        except asyncio.TimeoutError:
            soil = None
    if soil is None:
        logger.warning("no soil reading for %s", device_id)
        raise NoReadingAvailable()
    snapshot = await weather.fetch_current()
    return CropRecommendation(device_id=device_id, soil=soil, weather=snapshot,
                              recommended_crop=classify(soil, snapshot))

async def recommendation_stream(channel: SoilChannel, weather: WeatherProvider) -> AsyncIterator[Dict[str, Any]]:
    """
    Re-classify on every reading pushed to ``channel``.

    A delivery of ``None`` or a failed weather fetch yields an error frame for
    that cycle only; the stream keeps waiting for the next reading.
    """
    async for soil in channel:
        if soil is None:
            yield {"error": NoReadingAvailable.code, "detail": NoReadingAvailable.default_detail}
            continue
        try:
            snapshot = await weather.fetch_current()
        except AdvisorError as e:
            yield {"error": e.code, "detail": e.detail}
            continue
        rec = CropRecommendation(device_id=channel.device_id, soil=soil, weather=snapshot,
                                 recommended_crop=classify(soil, snapshot))
        yield rec.model_dump()

@router.get("", response_model=CropRecommendation, summary="Crop for the default device")
async def recommend_default(sensor_feed: SensorFeed = Depends(get_sensor_feed),
                            weather: WeatherProvider = Depends(get_weather_provider)):
    return await recommend_once(settings.default_device_id, sensor_feed, weather,
                                settings.sensor_wait_timeout_s)

@router.get("/{device_id}", response_model=CropRecommendation, summary="Crop for a device")
async def recommend_device(device_id: str,
                           sensor_feed: SensorFeed = Depends(get_sensor_feed),
                           weather: WeatherProvider = Depends(get_weather_provider)):
    return await recommend_once(device_id, sensor_feed, weather, settings.sensor_wait_timeout_s)

@router.websocket("/{device_id}/live")
async def recommend_live(websocket: WebSocket, device_id: str,
                         sensor_feed: SensorFeed = Depends(get_sensor_feed),
                         weather: WeatherProvider = Depends(get_weather_provider)):
    await websocket.accept()
    try:
        channel = await sensor_feed.open(device_id)
    except Exception as e:
        logger.warning("sensor feed for %s unavailable: %s", device_id, e)
        await websocket.send_json({"error": UpstreamFetchFailure.code,
                                   "detail": UpstreamFetchFailure.default_detail})
        await websocket.close(code=1011)
        return

    watcher = asyncio.create_task(_close_on_disconnect(websocket, channel))
    try:
        async for frame in recommendation_stream(channel, weather):
            await websocket.send_json(frame)
    except WebSocketDisconnect:
        pass
    finally:
        watcher.cancel()
        channel.close()
    logger.info("live recommendation for %s disconnected", device_id)

async def _close_on_disconnect(websocket: WebSocket, channel: SoilChannel) -> None:
    """Ends the stream as soon as the client goes away, even if no reading ever arrives."""
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    finally:
        channel.close()
