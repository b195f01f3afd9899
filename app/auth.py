from fastapi import APIRouter, HTTPException, Depends
from pydantic import BaseModel, EmailStr
from app.db import db
from app.security import create_token, current_user
from app.config import settings

router = APIRouter()

class RegisterBody(BaseModel):
    name: str
    email: EmailStr

class LoginBody(BaseModel):
    email: EmailStr

def _session(uid: str, name, email: str) -> dict:
    return {"token": create_token(uid), "user": {"id": uid, "name": name, "email": email}}

@router.post("/register")
async def register(body: RegisterBody):
    existing = await db.users.find_one({"email": body.email})
    if existing:
        # idempotent
        return _session(str(existing["_id"]), existing.get("name"), existing["email"])
    res = await db.users.insert_one({"name": body.name, "email": body.email})
    return _session(str(res.inserted_id), body.name, body.email)

@router.post("/login")
async def login(body: LoginBody):
    user = await db.users.find_one({"email": body.email})
    if not user:
        if settings.dev_passwordless:
            name = body.email.split("@")[0]
            res = await db.users.insert_one({"email": body.email, "name": name})
            return _session(str(res.inserted_id), name, body.email)
        raise HTTPException(404, "User not found")
    return _session(str(user["_id"]), user.get("name"), user["email"])

@router.get("/me")
async def me(user = Depends(current_user)):
    return {"id": user["id"], "name": user.get("name"), "email": user["email"]}
