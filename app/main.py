import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.config import settings
from app.db import setup_mongo
from app.errors import AdvisorError, ValidationFailure
from app.auth import router as auth_router
from app.predictions import router as predictions_router
from app.recommendation import router as recommendation_router
from app.sensors import router as sensors_router

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Field Advisor - crop recommendation & yield prediction", version="0.1.0")
app.state.settings = settings
setup_mongo(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"], allow_credentials=True,
    allow_methods=["*"], allow_headers=["*"]
)

def _error_response(exc: AdvisorError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder({"error": exc.code, "detail": exc.detail}),
    )

@app.exception_handler(AdvisorError)
async def advisor_error_handler(request: Request, exc: AdvisorError):
    return _error_response(exc)

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return _error_response(ValidationFailure(exc.errors()))

@app.get("/health")
def health():
    return {"ok": True}

app.include_router(auth_router, prefix="/auth", tags=["Auth"])
app.include_router(sensors_router, prefix="/sensors", tags=["Sensors"])
app.include_router(recommendation_router, prefix="/recommendation", tags=["Recommendation"])
app.include_router(predictions_router, prefix="/predictions", tags=["Predictions"])
