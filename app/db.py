# app/db.py
import logging
from typing import Optional
from fastapi import FastAPI
from motor.motor_asyncio import AsyncIOMotorClient
from app.config import settings

logger = logging.getLogger(__name__)

class DB:
    client: Optional[AsyncIOMotorClient] = None
    database = None
    users = None
    predictions = None
    soil_readings = None

db = DB()

async def ensure_indexes():
    await db.users.create_index("email", unique=True, name="uniq_email")
    await db.predictions.create_index([("userId", 1), ("createdAt", -1)], name="user_created_idx")
    # one latest reading per device
    await db.soil_readings.create_index("deviceId", unique=True, name="uniq_device")

def setup_mongo(app: FastAPI):
    @app.on_event("startup")
    async def _startup():
        if not settings.mongodb_uri:
            raise RuntimeError("MONGODB_URI is not set. Add it to .env")

        client = AsyncIOMotorClient(
            settings.mongodb_uri,
            serverSelectionTimeoutMS=8000,
            uuidRepresentation="standard",
        )
        db.client = client

        database = client.get_default_database(default=settings.mongodb_db)
        db.database = database
        db.users = database["users"]
        db.predictions = database["predictions"]
        db.soil_readings = database["soil_readings"]

        # raises if the server is unreachable
        await client.admin.command("ping")
        await ensure_indexes()
        logger.info("connected to MongoDB database %s", database.name)

    @app.on_event("shutdown")
    async def _shutdown():
        if db.client is not None:
            db.client.close()
            db.client = None
            db.database = None
            db.users = None
            db.predictions = None
            db.soil_readings = None
