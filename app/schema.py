from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Literal, Optional, List

IrrigationMethod = Literal["Drip","Sprinkler","Flood","Rain-fed"]

# No range checks here: out-of-range or NaN values simply match no rule.
class SoilReading(BaseModel):
    model_config = ConfigDict(frozen=True)

    soil_ph: float
    soil_moisture: float
    nitrogen_level: float
    phosphorus_level: float
    potassium_level: float

class WeatherSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    temperature: float   # °C
    rainfall: float      # mm
    humidity: float      # %

class FieldSubmission(BaseModel):
    crop_type: str
    field_area: float = Field(gt=0)   # hectares
    # carried through to storage, not read by the predictor
    soil_ph: Optional[float] = None
    soil_moisture: Optional[float] = None
    nitrogen_level: Optional[float] = None
    phosphorus_level: Optional[float] = None
    potassium_level: Optional[float] = None
    temperature: Optional[float] = None
    rainfall: Optional[float] = None
    humidity: Optional[float] = None
    irrigation_method: Optional[IrrigationMethod] = None
    fertilizer_used: Optional[str] = None

    @field_validator("crop_type")
    @classmethod
    def _crop_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("crop_type is required")
        return v

class Recommendations(BaseModel):
    model_config = ConfigDict(frozen=True)

    irrigation: str
    fertilizer: str
    pest_control: str
    general: str

class PredictionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    predicted_yield: int = Field(ge=0)   # kg/ha
    confidence_score: float = Field(ge=0.7, lt=1.0)
    recommendations: Recommendations

class PredictionRecord(FieldSubmission, PredictionResult):
    model_config = ConfigDict(frozen=False)

    id: str
    user_id: str
    created_at: datetime

class PredictionCreated(BaseModel):
    id: str
    prediction: PredictionResult

class PredictionList(BaseModel):
    items: List[PredictionRecord]

class CropRecommendation(BaseModel):
    device_id: str
    soil: SoilReading
    weather: WeatherSnapshot
    recommended_crop: str
