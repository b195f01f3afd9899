"""
Live soil readings per device.

Devices push readings to ``POST /sensors/{device_id}/readings``; the latest one
is stored in ``soil_readings`` and fanned out to every open ``SoilChannel`` for
that device. A channel is seeded with the stored reading on open, or with
``None`` when the device has never reported.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Awaitable, Callable, Dict, Optional, Set

from fastapi import APIRouter, Depends
from app.db import db
from app.errors import NoReadingAvailable
from app.schema import SoilReading

logger = logging.getLogger(__name__)

Loader = Callable[[str], Awaitable[Optional[SoilReading]]]

_CLOSED = object()

class SoilChannel:
    """Single-slot mailbox: an unread reading is replaced by a newer push."""

    def __init__(self, feed: "SensorFeed", device_id: str):
        self.device_id = device_id
        self._feed = feed
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=1)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def push(self, reading: Optional[SoilReading]) -> None:
        if self._closed:
            return
        if self._queue.full():
            self._queue.get_nowait()
        self._queue.put_nowait(reading)

    async def next(self, timeout: Optional[float] = None) -> Optional[SoilReading]:
        if timeout is None:
            item = await self._queue.get()
        else:
            item = await asyncio.wait_for(self._queue.get(), timeout)
        if item is _CLOSED:
            raise RuntimeError(f"channel for {self.device_id} is closed")
        return item

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._feed._release(self)
        # wake a pending __anext__
        if self._queue.full():
            self._queue.get_nowait()
        self._queue.put_nowait(_CLOSED)

    def __aiter__(self) -> "SoilChannel":
        return self

    async def __anext__(self) -> Optional[SoilReading]:
        if self._closed and self._queue.empty():
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _CLOSED:
            raise StopAsyncIteration
        return item

class SensorFeed:
    def __init__(self, loader: Loader):
        self._loader = loader
        self._channels: Dict[str, Set[SoilChannel]] = {}

    async def open(self, device_id: str) -> SoilChannel:
        channel = SoilChannel(self, device_id)
        self._channels.setdefault(device_id, set()).add(channel)
        try:
            channel.push(await self._loader(device_id))
        except BaseException:
            channel.close()
            raise
        return channel

    @asynccontextmanager
    async def subscribe(self, device_id: str) -> AsyncIterator[SoilChannel]:
        channel = await self.open(device_id)
        try:
            yield channel
        finally:
            channel.close()

    def publish(self, device_id: str, reading: SoilReading) -> int:
        """Deliver to every open channel for the device; returns how many."""
        channels = list(self._channels.get(device_id, ()))
        for ch in channels:
            ch.push(reading)
        return len(channels)

    def subscriber_count(self, device_id: str) -> int:
        return len(self._channels.get(device_id, ()))

    def _release(self, channel: SoilChannel) -> None:
        channels = self._channels.get(channel.device_id)
        if not channels:
            return
        channels.discard(channel)
        if not channels:
            del self._channels[channel.device_id]

def _to_reading(doc: Optional[dict]) -> Optional[SoilReading]:
    if not doc:
        return None
    return SoilReading.model_validate(doc)

async def load_latest_reading(device_id: str) -> Optional[SoilReading]:
    return _to_reading(await db.soil_readings.find_one({"deviceId": device_id}))

async def store_reading(device_id: str, reading: SoilReading) -> None:
    await db.soil_readings.update_one(
        {"deviceId": device_id},
        {"$set": {**reading.model_dump(), "updatedAt": datetime.now(timezone.utc)}},
        upsert=True,
    )

feed = SensorFeed(load_latest_reading)

def get_sensor_feed() -> SensorFeed:
    return feed

# ---------- Ingestion ----------
router = APIRouter()

@router.post("/{device_id}/readings", status_code=202, summary="Push a soil reading")
async def push_reading(device_id: str, body: SoilReading, sensor_feed: SensorFeed = Depends(get_sensor_feed)):
    await store_reading(device_id, body)
    delivered = sensor_feed.publish(device_id, body)
    logger.info("reading from %s stored, delivered to %d subscriber(s)", device_id, delivered)
    return {"deviceId": device_id, "delivered": delivered}

@router.get("/{device_id}", response_model=SoilReading, summary="Latest soil reading")
async def latest_reading(device_id: str):
    reading = await load_latest_reading(device_id)
    if reading is None:
        raise NoReadingAvailable()
    return reading
