import time, jwt
from bson import ObjectId
from bson.errors import InvalidId
from fastapi import Header, HTTPException
from app.config import settings
from app.db import db

def create_token(user_id: str) -> str:
    payload = {"sub": user_id, "exp": int(time.time()) + 60 * settings.jwt_expire_min}
    return jwt.encode(payload, settings.jwt_secret, algorithm="HS256")

def decode_token(token: str) -> str:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=["HS256"])
    except jwt.PyJWTError:
        raise HTTPException(401, "Invalid token")
    uid = payload.get("sub")
    if not uid:
        raise HTTPException(401, "Invalid token")
    return uid

async def current_user(authorization: str = Header(...)):
    if not authorization.startswith("Bearer "):
        raise HTTPException(401, "Missing token")
    uid = decode_token(authorization.split(" ", 1)[1])
    try:
        oid = ObjectId(uid)
    except InvalidId:
        raise HTTPException(401, "Invalid token")
    user = await db.users.find_one({"_id": oid})
    if not user:
        raise HTTPException(401, "User not found")
    user["id"] = str(user["_id"])
    return user
