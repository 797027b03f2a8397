import re

from loguru import logger

# H:MM:SS or MM:SS
_CLOCK_RE = re.compile(r"^\s*(\d+):(\d{1,2})(?::(\d{1,2}))?\s*$")
# A bare number without a unit is minutes (older app versions stored "45")
_BARE_NUMBER_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*$")
# Longest alternatives first so "min" never matches as "m" + "in"
_UNIT_RE = re.compile(
    r"(\d+(?:\.\d+)?)\s*"
    r"(시간|hours|hour|hrs|hr|h|분|minutes|minute|mins|min|m|초|seconds|second|secs|sec|s)"
    r"(?![a-z])",
    re.IGNORECASE,
)

_UNIT_TO_HOURS = {
    "시간": 1.0,
    "h": 1.0,
    "hr": 1.0,
    "hrs": 1.0,
    "hour": 1.0,
    "hours": 1.0,
    "분": 1 / 60,
    "m": 1 / 60,
    "min": 1 / 60,
    "mins": 1 / 60,
    "minute": 1 / 60,
    "minutes": 1 / 60,
    "초": 1 / 3600,
    "s": 1 / 3600,
    "sec": 1 / 3600,
    "secs": 1 / 3600,
    "second": 1 / 3600,
    "seconds": 1 / 3600,
}


def try_parse_hours(text: str | None) -> float | None:
    """
    Parse free-form duration text into fractional hours.

    Returns None when the text is not recognised so callers can tell
    "unparseable" apart from a genuine zero.

    Recognised forms, tried in order:
      - '1:05:00' (H:MM:SS) or '45:00' (MM:SS)
      - text with unit markers, e.g. '1시간 5분', '30분', '1h 20min'
      - a bare number, read as minutes: '45' -> 0.75
    """
    if text is None:
        return None
    s = str(text).strip()
    if s == "":
        return None

    m = _CLOCK_RE.match(s)
    if m:
        first, second, third = m.groups()
        if third is None:
            return (int(first) * 60 + int(second)) / 3600
        return (int(first) * 3600 + int(second) * 60 + int(third)) / 3600

    units = _UNIT_RE.findall(s)
    if units:
        return sum(float(value) * _UNIT_TO_HOURS[unit.lower()] for value, unit in units)

    m = _BARE_NUMBER_RE.match(s)
    if m:
        return float(m.group(1)) / 60

    return None


def parse_hours(text: str | None) -> float:
    """Like try_parse_hours, but unparseable text counts as 0 hours."""
    hours = try_parse_hours(text)
    if hours is None:
        logger.debug(f"Unparseable duration text {text!r}, counting as 0h")
        return 0.0
    return hours


def seconds_to_mmss(total_seconds: int) -> str:
    """
    Convert total seconds (int) -> 'MM:SS' stopwatch text.
    Minutes keep counting past 59: 4503 -> '75:03'
    """
    total_seconds = max(0, int(total_seconds))
    minutes = total_seconds // 60
    seconds = total_seconds % 60
    return f"{minutes:02d}:{seconds:02d}"


def compute_pace(duration_seconds: int, distance_km: float) -> str:
    """
    Compute pace per kilometre as 'M:SS/km'.
    Example: duration=1800 sec, distance=5.0 -> '6:00/km'
    """
    if distance_km <= 0:
        return "0:00/km"

    pace_sec = int(duration_seconds / distance_km)

    minutes = pace_sec // 60
    seconds = pace_sec % 60
    return f"{minutes}:{seconds:02d}/km"
