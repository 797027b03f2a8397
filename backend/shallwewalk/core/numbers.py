import re

# Everything except digits, a decimal point and a minus sign
_NON_NUMERIC_RE = re.compile(r"[^0-9.\-]")
_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?|-?\.\d+")


def try_parse_number(text) -> float | None:
    """
    Pull a plain number out of display text such as '3.20km' or '117 kcal'.

    Returns None when no number can be recovered.
    """
    if text is None or isinstance(text, bool):
        return None
    if isinstance(text, (int, float)):
        return float(text)
    stripped = _NON_NUMERIC_RE.sub("", str(text))
    m = _NUMBER_RE.search(stripped)
    if not m:
        return None
    return float(m.group(0))


def parse_number(text) -> float:
    """Like try_parse_number, but anything unparseable is 0."""
    value = try_parse_number(text)
    if value is None or value != value or value in (float("inf"), float("-inf")):
        return 0.0
    return value
