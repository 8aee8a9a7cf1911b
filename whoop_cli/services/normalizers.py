"""Value normalizers for WHOOP display data.

WHOOP payloads are built for rendering, so numbers arrive as decorated
strings ("72 bpm", "98.6°F") and timestamps use a compact "+0000" offset.
Everything here is pure and returns None instead of raising.
"""

import math
import re
from datetime import datetime, timezone, tzinfo
from typing import Optional

_COMPACT_OFFSET = re.compile(r"([+-]\d{2})(\d{2})$")
_BARE_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_NON_NUMERIC = re.compile(r"[^0-9.-]")
_LEADING_FLOAT = re.compile(r"^-?(\d+\.?\d*|\.\d+)")
_CLOCK = re.compile(r"^(\d{1,2}):(\d{2})$")
_NAME_SEPARATORS = re.compile(r"[_-]+")
_NEXT_UPDATE = re.compile(r"NEXT UPDATE IN\s+(.+)", re.IGNORECASE)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


# ==================== Timestamps ====================


def normalize_whoop_timestamp(raw: Optional[str]) -> Optional[str]:
    """Rewrite a trailing "+HHMM" offset as "+HH:MM"."""
    if not raw:
        return None
    return _COMPACT_OFFSET.sub(r"\1:\2", raw)


def parse_timestamp(raw: Optional[str]) -> Optional[datetime]:
    """Parse a WHOOP timestamp into an aware datetime.

    A date-time without an offset is machine-local time; a bare date is
    UTC midnight.
    """
    normalized = normalize_whoop_timestamp(raw)
    if not normalized:
        return None
    try:
        parsed = datetime.fromisoformat(normalized.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        if _BARE_DATE.match(normalized.strip()):
            return parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone()
    return parsed


def to_local_iso(raw: Optional[str], tz: Optional[tzinfo] = None) -> Optional[str]:
    """Timestamp as "YYYY-MM-DDTHH:MM:SS+HH:MM" in tz (machine zone by default)."""
    parsed = parse_timestamp(raw)
    if parsed is None:
        return None
    local = parsed.astimezone(tz) if tz is not None else parsed.astimezone()
    return local.isoformat(timespec="seconds")


def to_utc_iso(value: Optional[datetime]) -> Optional[str]:
    """UTC timestamp with milliseconds and a Z suffix."""
    if value is None:
        return None
    utc = value.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


# ==================== Numbers ====================


def parse_display_number(value: Optional[str]) -> Optional[float]:
    """Parse the number out of a display string ("72 bpm" -> 72.0).

    Everything but digits, "." and "-" is dropped, then the longest leading
    float is read. Returns None when nothing numeric remains.
    """
    if not value or not isinstance(value, str):
        return None
    sanitized = _NON_NUMERIC.sub("", value)
    match = _LEADING_FLOAT.match(sanitized)
    if not match:
        return None
    parsed = float(match.group(0))
    return parsed if math.isfinite(parsed) else None


def parse_display_int(value: Optional[str]) -> Optional[int]:
    """Like parse_display_number, rounded half up ("98.6°F" -> 99)."""
    parsed = parse_display_number(value)
    if parsed is None:
        return None
    return _round_half_up(parsed)


# ==================== Durations & text ====================


def format_duration_between(
    start: Optional[datetime],
    end: Optional[datetime],
) -> Optional[str]:
    """Human duration such as "1h 5m", "12m 30s" or "45s".

    Seconds are dropped once the interval reaches an hour. Non-positive
    intervals give None.
    """
    if start is None or end is None:
        return None
    diff_seconds = (end - start).total_seconds()
    if not math.isfinite(diff_seconds) or diff_seconds <= 0:
        return None

    total_seconds = _round_half_up(diff_seconds)
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    seconds = total_seconds % 60

    parts: list[str] = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0 or hours > 0:
        parts.append(f"{minutes}m")
    if seconds > 0 and hours == 0:
        parts.append(f"{seconds}s")
    return " ".join(parts) if parts else "0m"


def format_clock(value: Optional[str]) -> Optional[str]:
    """Turn a "7:05" clock display into "7h 5m"; other text passes through trimmed."""
    if not value or not isinstance(value, str):
        return None
    trimmed = value.strip()
    match = _CLOCK.match(trimmed)
    if not match:
        return trimmed
    return f"{int(match.group(1))}h {int(match.group(2))}m"


def normalize_workout_name(raw: Optional[str]) -> str:
    """Title-case an activity name ("FUNCTIONAL_FITNESS" -> "Functional Fitness")."""
    if not raw:
        return "Workout"
    words = _NAME_SEPARATORS.sub(" ", raw).strip().lower().split()
    return " ".join(word[:1].upper() + word[1:] for word in words)


def parse_next_update_in(value: Optional[str]) -> Optional[str]:
    """Countdown text from a subtitle ("NEXT UPDATE IN 3 DAYS" -> "3 days")."""
    if not value:
        return None
    match = _NEXT_UPDATE.search(value)
    if match:
        return match.group(1).lower()
    return value.lower()
