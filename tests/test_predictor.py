import random

import pytest

from app.engine.crops import BASE_YIELDS, DEFAULT_BASE_YIELD
from app.engine.predictor import (
    FERTILIZER_ADVICE, GENERAL_ADVICE, IRRIGATION_ADJUST, IRRIGATION_OK, PEST_ADVICE,
    base_yield, predict,
)


class ScriptedRandom(random.Random):
    """Returns the given values from random(), in order."""

    def __init__(self, *values):
        super().__init__()
        self._values = list(values)

    def random(self):
        return self._values.pop(0)


@pytest.mark.parametrize("crop,base", sorted(BASE_YIELDS.items()))
def test_yield_stays_within_twenty_percent(crop, base):
    rng = random.Random(crop)
    for _ in range(10_000):
        res = predict(crop, 2.5, rng)
        assert 0.8 * base <= res.predicted_yield <= 1.2 * base
        assert 0.7 <= res.confidence_score < 1.0


def test_unknown_crop_uses_default_base():
    assert base_yield("Barley") == DEFAULT_BASE_YIELD == 3000
    rng = random.Random(7)
    for _ in range(1_000):
        assert 2400 <= predict("Barley", 1.0, rng).predicted_yield <= 3600


def test_draw_order_and_rounding():
    # variation from the first draw, confidence from the second
    res = predict("Cotton", 5.0, ScriptedRandom(0.0, 0.0))
    assert res.predicted_yield == 640
    assert res.confidence_score == pytest.approx(0.7)

    res = predict("Wheat", 5.0, ScriptedRandom(0.5, 0.5))
    assert res.predicted_yield == 3000
    assert res.confidence_score == pytest.approx(0.85)

    # 800 * 1.00125 = 801
    assert predict("Cotton", 1.0, ScriptedRandom(0.503125, 0.1)).predicted_yield == 801


def test_confidence_never_reaches_one():
    res = predict("Rice", 1.0, ScriptedRandom(0.5, 0.9999999999999999))
    assert res.confidence_score < 1.0


@pytest.mark.parametrize("r2,irrigation", [
    (0.9, IRRIGATION_OK),        # 0.97
    (0.34, IRRIGATION_OK),       # 0.802
    (0.33, IRRIGATION_ADJUST),   # 0.799
    (0.0, IRRIGATION_ADJUST),    # 0.7
])
def test_irrigation_follows_confidence(r2, irrigation):
    res = predict("Corn", 3.0, ScriptedRandom(0.5, r2))
    assert res.recommendations.irrigation == irrigation


def test_fixed_recommendations():
    recs = predict("Tomatoes", 0.5).recommendations
    assert recs.fertilizer == FERTILIZER_ADVICE
    assert recs.pest_control == PEST_ADVICE
    assert recs.general == GENERAL_ADVICE
    assert set(recs.model_dump()) == {"irrigation", "fertilizer", "pest_control", "general"}


def test_same_seed_same_result():
    assert predict("Cotton", 5.0, random.Random(1234)) == predict("Cotton", 5.0, random.Random(1234))


def test_field_area_does_not_change_result():
    small = predict("Soybeans", 0.1, random.Random(99))
    large = predict("Soybeans", 500.0, random.Random(99))
    assert small == large
