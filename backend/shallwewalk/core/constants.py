"""Shared engine constants.

Energy-model coefficients live here as plain lookup data so they can be
reviewed and tuned in one place.
"""

# Mean Earth radius used by the haversine formula (km)
EARTH_RADIUS_KM = 6371.0

# Base metabolic rate: BASE_KCAL_COEFFICIENT * weight_kg ** ALLOMETRIC_EXPONENT (kcal/day)
BASE_KCAL_COEFFICIENT = 70.0
ALLOMETRIC_EXPONENT = 0.75

# Activity level multipliers applied to the base metabolic rate
ACTIVITY_LEVEL_MULTIPLIERS = {
    "low": 1.2,
    "medium": 1.4,
    "high": 1.8,
}

# How hard each activity kind works the animal per unit time
ACTIVITY_TYPE_FACTORS = {
    "run": 1.0,
    "walk": 0.7,
}

# Average speed used when no time has elapsed yet (km/h)
DEFAULT_SPEED_KMH = 5.0
# Anything faster is treated as GPS noise (km/h)
MAX_SPEED_KMH = 15.0
# intensity = 1 + speed / SPEED_INTENSITY_DIVISOR
SPEED_INTENSITY_DIVISOR = 20.0

# Closed breed catalog. Keys are the names the app stores (Korean) plus
# English equivalents; anything else counts as mixed/unknown (1.0).
BREED_MULTIPLIERS = {
    "골든 리트리버": 1.3,
    "래브라도": 1.3,
    "허스키": 1.5,
    "보더 콜리": 1.4,
    "비글": 1.2,
    "시바견": 1.1,
    "진돗개": 1.2,
    "말티즈": 0.9,
    "비숑 프리제": 1.0,
    "치와와": 0.8,
    "요크셔테리어": 0.8,
    "푸들": 1.0,
    "불독": 0.9,
    "믹스견": 1.0,
    "golden retriever": 1.3,
    "labrador": 1.3,
    "husky": 1.5,
    "border collie": 1.4,
    "beagle": 1.2,
    "shiba": 1.1,
    "jindo": 1.2,
    "maltese": 0.9,
    "bichon frise": 1.0,
    "chihuahua": 0.8,
    "yorkshire terrier": 0.8,
    "poodle": 1.0,
    "bulldog": 0.9,
    "mixed": 1.0,
}
DEFAULT_BREED = "믹스견"
DEFAULT_BREED_MULTIPLIER = 1.0

# Encoded polyline precision (1e5 -> five decimal places)
POLYLINE_PRECISION = 5
