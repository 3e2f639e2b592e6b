from datetime import datetime, timezone
from typing import Optional


def now_iso() -> str:
    """current UTC time as ISO 8601 with millisecond precision and a Z suffix."""
    stamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")


def parse_iso(value: str) -> Optional[datetime]:
    """parse a stored timestamp, returns None when it isn't one."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def sort_key(value: str) -> float:
    """timestamp as epoch seconds for ordering; unparsable dates sort oldest."""
    parsed = parse_iso(value)
    if parsed is None:
        return float("-inf")
    return parsed.timestamp()


def format_relative(value: str, now: Optional[datetime] = None) -> str:
    """
    render a timestamp relative to now ("just now", "3 hours ago").

    falls back to the raw value when it can't be parsed.
    """
    parsed = parse_iso(value)
    if parsed is None:
        return value
    now = now or datetime.now(timezone.utc)
    seconds = int((now - parsed).total_seconds())

    if seconds < 60:
        return "just now"

    for unit, size in (("year", 31_536_000), ("month", 2_592_000), ("day", 86_400),
                       ("hour", 3_600), ("minute", 60)):
        if seconds >= size:
            count = seconds // size
            plural = "" if count == 1 else "s"
            return f"{count} {unit}{plural} ago"
    return "just now"


def format_absolute(value: str) -> str:
    """render a timestamp as local 'YYYY-MM-DD HH:MM'."""
    parsed = parse_iso(value)
    if parsed is None:
        return value
    return parsed.astimezone().strftime("%Y-%m-%d %H:%M")
