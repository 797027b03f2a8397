from enum import Enum


class ActivityKind(str, Enum):
    run = "run"
    walk = "walk"


class ActivityLevel(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
