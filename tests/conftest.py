from datetime import datetime, timezone
from typing import Dict, Optional

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from app.main import app
from app.errors import PersistenceFailure
from app.predictions import get_prediction_store
from app.schema import PredictionRecord, SoilReading, WeatherSnapshot
from app.security import current_user
from app.sensors import SensorFeed, get_sensor_feed
from app.weather import StaticWeatherProvider, get_weather_provider

USER_ID = str(ObjectId())


class MemoryPredictionStore:
    def __init__(self, fail_with: Optional[str] = None):
        self.docs: Dict[str, PredictionRecord] = {}
        self.fail_with = fail_with

    async def insert(self, user_id, submission, result):
        if self.fail_with:
            raise PersistenceFailure(self.fail_with)
        pid = str(ObjectId())
        self.docs[pid] = PredictionRecord(
            **submission.model_dump(), **result.model_dump(),
            id=pid, user_id=user_id, created_at=datetime.now(timezone.utc),
        )
        return pid

    async def list_for_user(self, user_id, limit=20, skip=0):
        mine = [d for d in self.docs.values() if d.user_id == user_id]
        mine.sort(key=lambda d: d.created_at, reverse=True)
        return mine[skip:skip + limit]

    async def get_for_user(self, user_id, prediction_id):
        doc = self.docs.get(prediction_id)
        return doc if doc and doc.user_id == user_id else None


@pytest.fixture
def rice_soil():
    return SoilReading(soil_ph=6.5, soil_moisture=30, nitrogen_level=50, phosphorus_level=10, potassium_level=80)


@pytest.fixture
def warm_weather():
    return WeatherSnapshot(temperature=22, rainfall=40, humidity=60)


@pytest.fixture
def readings():
    """Stored latest reading per device, as the feed loader sees it."""
    return {}


@pytest.fixture
def feed(readings):
    async def loader(device_id):
        return readings.get(device_id)
    return SensorFeed(loader)


@pytest.fixture
def store():
    return MemoryPredictionStore()


@pytest.fixture
def weather(warm_weather):
    return StaticWeatherProvider(warm_weather)


@pytest.fixture
def client(feed, store, weather):
    app.dependency_overrides[get_sensor_feed] = lambda: feed
    app.dependency_overrides[get_prediction_store] = lambda: store
    app.dependency_overrides[get_weather_provider] = lambda: weather
    app.dependency_overrides[current_user] = lambda: {"id": USER_ID, "name": "tester", "email": "t@example.com"}
    # no context manager: startup (MongoDB) is not run
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def user_id():
    return USER_ID
