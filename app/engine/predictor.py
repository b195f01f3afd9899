import logging
import math
import random
from typing import Optional
from app.schema import PredictionResult, Recommendations
from .crops import BASE_YIELDS, DEFAULT_BASE_YIELD

logger = logging.getLogger(__name__)

VARIATION_SPAN = 0.4      # ±20% around the base yield
CONFIDENCE_FLOOR = 0.7
CONFIDENCE_SPAN = 0.3
OPTIMAL_IRRIGATION_CONFIDENCE = 0.8

IRRIGATION_OK = "Optimal irrigation schedule"
IRRIGATION_ADJUST = "Consider adjusting irrigation frequency"
FERTILIZER_ADVICE = "Apply balanced NPK fertilizer based on soil test results"
PEST_ADVICE = "Monitor for common pests during growth stages"
GENERAL_ADVICE = "Maintain consistent field monitoring for best results"

def base_yield(crop_type: str) -> int:
    return BASE_YIELDS.get(crop_type, DEFAULT_BASE_YIELD)

def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))

def predict(crop_type: str, field_area: float, rng: Optional[random.Random] = None) -> PredictionResult:
    """
    Mock yield model: base yield for the crop perturbed by up to ±20%, plus a
    synthetic confidence in [0.7, 1.0).

    Two draws are taken from ``rng`` in order: the yield variation, then the
    confidence. ``field_area`` is accepted but does not affect the numbers.
    """
    rng = rng or random.Random()
    base = base_yield(crop_type)

    variation = (rng.random() - 0.5) * VARIATION_SPAN
    predicted = _round_half_up(base * (1 + variation))

    confidence = rng.random() * CONFIDENCE_SPAN + CONFIDENCE_FLOOR
    if confidence >= 1.0:
        confidence = math.nextafter(1.0, 0.0)

    irrigation = IRRIGATION_OK if confidence > OPTIMAL_IRRIGATION_CONFIDENCE else IRRIGATION_ADJUST
    logger.debug("predicted %s kg/ha for %s (base=%s, confidence=%.3f, area=%s)",
                 predicted, crop_type, base, confidence, field_area)

    return PredictionResult(
        predicted_yield=predicted,
        confidence_score=confidence,
        recommendations=Recommendations(
            irrigation=irrigation,
            fertilizer=FERTILIZER_ADVICE,
            pest_control=PEST_ADVICE,
            general=GENERAL_ADVICE,
        ),
    )
