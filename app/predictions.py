import logging
from datetime import datetime, timezone
from typing import List, Optional
from bson import ObjectId
from bson.errors import InvalidId
from fastapi import APIRouter, Depends, Query
from pymongo.errors import PyMongoError
from app.db import db
from app.engine.predictor import predict
from app.errors import MalformedId, NotFound, PersistenceFailure
from app.schema import FieldSubmission, PredictionCreated, PredictionList, PredictionRecord, PredictionResult
from app.security import current_user

logger = logging.getLogger(__name__)

router = APIRouter()

def _serialize(doc) -> Optional[PredictionRecord]:
    if not doc:
        return None
    return PredictionRecord(
        **{k: v for k, v in doc.items() if k not in ("_id", "userId", "createdAt")},
        id=str(doc["_id"]),
        user_id=str(doc["userId"]),
        created_at=doc["createdAt"],
    )

class PredictionStore:
    """Submission + result pairs in the ``predictions`` collection."""

    def __init__(self, collection):
        self.collection = collection

    async def insert(self, user_id: str, submission: FieldSubmission, result: PredictionResult) -> str:
        doc = {
            "userId": ObjectId(user_id),
            **submission.model_dump(),
            **result.model_dump(),
            "createdAt": datetime.now(timezone.utc),
        }
        try:
            res = await self.collection.insert_one(doc)
        except PyMongoError as e:
            raise PersistenceFailure(str(e)) from e
        return str(res.inserted_id)

    async def list_for_user(self, user_id: str, limit: int = 20, skip: int = 0) -> List[PredictionRecord]:
        cursor = self.collection.find({"userId": ObjectId(user_id)}).sort("createdAt", -1).skip(skip).limit(limit)
        return [_serialize(x) async for x in cursor]

    async def get_for_user(self, user_id: str, prediction_id: str) -> Optional[PredictionRecord]:
        doc = await self.collection.find_one({"_id": ObjectId(prediction_id), "userId": ObjectId(user_id)})
        return _serialize(doc)

def get_prediction_store() -> PredictionStore:
    return PredictionStore(db.predictions)

@router.post("", response_model=PredictionCreated, status_code=201, summary="New yield prediction")
async def create_prediction(
    body: FieldSubmission,
    user = Depends(current_user),
    store: PredictionStore = Depends(get_prediction_store),
):
    result = predict(body.crop_type, body.field_area)
    try:
        pid = await store.insert(user["id"], body, result)
    except PersistenceFailure:
        logger.warning("prediction for user %s not saved, discarding result", user["id"])
        raise
    logger.info("prediction %s saved: %s kg/ha of %s", pid, result.predicted_yield, body.crop_type)
    return PredictionCreated(id=pid, prediction=result)

@router.get("", response_model=PredictionList, summary="List my predictions")
async def list_predictions(
    user = Depends(current_user),
    store: PredictionStore = Depends(get_prediction_store),
    limit: int = Query(20, ge=1, le=100),
    skip: int = Query(0, ge=0),
):
    return PredictionList(items=await store.list_for_user(user["id"], limit=limit, skip=skip))

@router.get("/{prediction_id}", response_model=PredictionRecord, summary="Get one prediction")
async def get_prediction(
    prediction_id: str,
    user = Depends(current_user),
    store: PredictionStore = Depends(get_prediction_store),
):
    try:
        ObjectId(prediction_id)
    except (InvalidId, TypeError):
        raise MalformedId()
    record = await store.get_for_user(user["id"], prediction_id)
    if record is None:
        raise NotFound()
    return record
