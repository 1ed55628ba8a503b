import re
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime

from dateutil import parser as date_parser

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 3600

EMPTY_DURATION = "00:00"

_TAG_RE = re.compile(r"<[^>]*?>")
_ENTITY_RE = re.compile(r"&(amp|lt|gt|quot|#39|nbsp);")
_ENTITIES = {
    "amp": "&",
    "lt": "<",
    "gt": ">",
    "quot": '"',
    "#39": "'",
    "nbsp": " ",
}
_TRUE_FLAGS = ("true", "yes")
_INT_RE = re.compile(r"^\s*[+-]?[0-9]+\s*$")
_LEADING_INT_RE = re.compile(r"^[0-9]+")
# Full calendar date required; partial ISO forms like "2024" are rejected.
_ISO_DATE_RE = re.compile(r"^[0-9]{4}-?[0-9]{2}-?[0-9]{2}")


def parse_int(text: str | None) -> int | None:
    """Signed ASCII decimal integer, or ``None``."""
    if text is None or not _INT_RE.match(text):
        return None
    return int(text)


def normalize_duration(value: str | None) -> str:
    """Canonicalize an ``itunes:duration`` value.

    Colon forms are zero-padded (``"5:3"`` -> ``"05:03"``,
    ``"1:02:05"`` -> ``"01:02:05"``); unparseable colon forms pass through
    trimmed. Bare seconds render as ``M:SS`` or ``H:MM:SS``
    (``"125"`` -> ``"2:05"``); a fractional part is dropped
    (``"125.5"`` -> ``"2:05"``). Anything else is ``"00:00"``.
    """
    if not value or not value.strip():
        return EMPTY_DURATION
    text = value.strip()

    if ":" in text:
        parts = [parse_int(p) for p in text.split(":") if p]
        if None in parts:
            return text
        if len(parts) == 2:
            minutes, seconds = parts
            return f"{minutes:02d}:{seconds:02d}"
        if len(parts) == 3:
            hours, minutes, seconds = parts
            return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
        return text

    match = _LEADING_INT_RE.match(text)
    if match is None:
        return EMPTY_DURATION
    total = int(match.group())
    hours, rest = divmod(total, SECONDS_PER_HOUR)
    minutes, seconds = divmod(rest, SECONDS_PER_MINUTE)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes}:{seconds:02d}"


def strip_html(html: str | None) -> str:
    """Remove tags, then decode the common named entities, then trim."""
    if not html:
        return ""
    text = _TAG_RE.sub("", html)
    text = _ENTITY_RE.sub(lambda m: _ENTITIES[m.group(1)], text)
    return text.strip()


def parse_explicit(value: str | None) -> bool:
    if not value:
        return False
    return value.strip().lower() in _TRUE_FLAGS


def parse_keywords(value: str | None) -> list[str] | None:
    """Comma-separated keywords, trimmed; ``None`` when nothing remains."""
    if not value:
        return None
    keywords = [k.strip() for k in value.split(",")]
    keywords = [k for k in keywords if k]
    return keywords or None


def parse_positive_int(value: str | None) -> int | None:
    """Strictly positive integer, or ``None`` for absent, zero, negative or junk."""
    if not value:
        return None
    number = parse_int(value)
    if number is None or number <= 0:
        return None
    return number


def parse_date(value: str | None) -> datetime | None:
    """Parse an RFC-822 or ISO-8601 date into an aware UTC datetime."""
    if not value or not value.strip():
        return None
    text = value.strip()
    try:
        parsed = parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError):
        if not _ISO_DATE_RE.match(text):
            return None
        try:
            parsed = date_parser.isoparse(text)
        except (ValueError, OverflowError):
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
