"""race time strings: input masking, validation and conversion."""
import math
import re

STRICT_TIME_PATTERN = re.compile(r"^\d{1,2}:[0-5]\d\.\d{3}$")
# CSV rows coming from spreadsheets are checked with this looser pattern
LENIENT_TIME_PATTERN = re.compile(r"^\d+:\d{2}\.\d{3}$")

MAX_MASK_DIGITS = 7


def parse_mask(raw: str) -> str:
    """
    format raw keystrokes as a partial race time.

    digits fill the mask from the right like a stopwatch display, so
    "1", "12", "123", "123456" and "1032456" become "1", "0:12", "1:23",
    "1:23.456" and "10:32.456".
    non-digits and leading zeros are ignored.

    args:
        raw: whatever the input field currently holds

    returns:
        masked string, empty if no significant digit was typed
    """
    digits = re.sub(r"\D", "", raw or "")
    significant = digits.lstrip("0")[:MAX_MASK_DIGITS]
    if not significant:
        return "0" if digits else ""

    if len(significant) == 1:
        return significant

    if len(significant) <= 3:
        minutes = significant[:-2] or "0"
        return f"{minutes}:{_clamp_seconds(significant[-2:])}"

    millis = significant[-3:]
    seconds = _clamp_seconds(significant[:-3][-2:])
    minutes = significant[:-5] or "0"
    return f"{minutes}:{seconds}.{millis}"


def _clamp_seconds(value: str) -> str:
    seconds = min(int(value), 59)
    return f"{seconds:02d}"


def is_valid_strict(value: str) -> bool:
    """check a typed or edited time against M:SS.mmm (minutes up to 2 digits)."""
    if not value:
        return False
    return STRICT_TIME_PATTERN.match(value) is not None


def is_valid_lenient(value: str) -> bool:
    """check an imported time; any minute count and unchecked seconds pass."""
    if not value:
        return False
    return LENIENT_TIME_PATTERN.match(value) is not None


def to_seconds(value: str) -> float:
    """
    convert a time string to seconds for comparisons.

    does not validate; anything unparsable comes back as nan.
    """
    parts = (value or "").split(":")
    try:
        if len(parts) == 2:
            return int(parts[0]) * 60 + float(parts[1])
        if len(parts) == 1:
            return float(parts[0])
    except ValueError:
        pass
    return math.nan


def format_seconds(value: float) -> str:
    """render a duration in seconds as M:SS.mmm."""
    total_ms = int(round(value * 1000))
    minutes, rest = divmod(total_ms, 60_000)
    seconds, millis = divmod(rest, 1000)
    return f"{minutes}:{seconds:02d}.{millis:03d}"
