# app/config.py
import os
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseModel):
    # 🔑 Mongo & Auth
    mongodb_uri: str = os.getenv("MONGODB_URI", "")
    mongodb_db: str = os.getenv("MONGODB_DB", "field_advisor")
    jwt_secret: str = os.getenv("JWT_SECRET", "dev-secret")
    jwt_expire_min: int = int(os.getenv("JWT_EXPIRE_MIN", "43200"))  # 30 days
    dev_passwordless: bool = os.getenv("DEV_PASSWORDLESS", "true").lower() == "true"

    # 🌦 Weather (empty URL -> static snapshot)
    weather_api_url: str = os.getenv("WEATHER_API_URL", "")
    weather_latitude: float = float(os.getenv("WEATHER_LATITUDE", "20.59"))
    weather_longitude: float = float(os.getenv("WEATHER_LONGITUDE", "78.96"))
    weather_timeout_s: float = float(os.getenv("WEATHER_TIMEOUT_S", "10"))

    # 📡 Sensors
    default_device_id: str = os.getenv("DEFAULT_DEVICE_ID", "Device_0001")
    sensor_wait_timeout_s: float = float(os.getenv("SENSOR_WAIT_TIMEOUT_S", "5"))

    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

settings = Settings()
