UNDETERMINED = "Unable to determine optimal crop"

# Evaluated in order; the first rule whose bounds all hold wins.
# Rice and Wheat overlap on pH 6.5-7.0, Rice takes it.
RULES = [
    {"crop":"Rice",  "ph":(6.0, 7.0), "min":{"nitrogen_level":40}, "min_temp":20},
    {"crop":"Wheat", "ph":(6.5, 7.5), "min":{"phosphorus_level":30}},
]

# kg/ha
BASE_YIELDS = {
    "Wheat":    3000,
    "Rice":     4500,
    "Corn":     5500,
    "Soybeans": 2800,
    "Cotton":   800,
    "Tomatoes": 25000,
}
DEFAULT_BASE_YIELD = 3000
