import logging
from app.schema import SoilReading, WeatherSnapshot
from .crops import RULES, UNDETERMINED

logger = logging.getLogger(__name__)

def _matches(rule: dict, soil: SoilReading, weather: WeatherSnapshot) -> bool:
    lo, hi = rule["ph"]
    if not (lo <= soil.soil_ph <= hi):
        return False
    for field, floor in rule.get("min", {}).items():
        if not getattr(soil, field) >= floor:
            return False
    min_temp = rule.get("min_temp")
    if min_temp is not None and not weather.temperature >= min_temp:
        return False
    return True

def classify(soil: SoilReading, weather: WeatherSnapshot) -> str:
    """Pick a crop for the current soil and weather, first matching rule wins."""
    for rule in RULES:
        if _matches(rule, soil, weather):
            logger.debug("classified %s (ph=%s, temp=%s)", rule["crop"], soil.soil_ph, weather.temperature)
            return rule["crop"]
    logger.debug("no crop rule matched (ph=%s, temp=%s)", soil.soil_ph, weather.temperature)
    return UNDETERMINED
