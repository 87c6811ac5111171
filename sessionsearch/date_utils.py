"""Shared timestamp parsing, day bounds and free-text date extraction."""
from __future__ import annotations

import re
from datetime import date, datetime, time, timezone
from typing import Any

_DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
# fromisoformat before 3.11 only takes 3 or 6 fraction digits.
_FRACTION_RE = re.compile(r"\.(\d+)(?=[+-]\d{2}:?\d{2}$|$)")

# Order matters: candidates are reported by position in the text, and a span
# claimed by an earlier pattern is not reported again by a later one.
_DATE_PATTERNS = (
    re.compile(r"\b(\d{4}-\d{2}-\d{2})\b"),  # YYYY-MM-DD
    re.compile(r"\b(\d{2}/\d{2}/\d{4})\b"),  # MM/DD/YYYY
    re.compile(r"\b(\d{2}-\d{2}-\d{4})\b"),  # DD-MM-YYYY
    re.compile(r"\b(\d{1,2}/\d{1,2}/\d{4})\b"),  # M/D/YYYY
)


def _pad_fraction(token: str) -> str:
    return _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), token)


def _parse_datetime_token(token: str) -> datetime | None:
    cleaned = token.strip()
    if not cleaned:
        return None
    try:
        return datetime.fromisoformat(_pad_fraction(cleaned.replace("Z", "+00:00")))
    except ValueError:
        pass
    for fmt in ("%Y/%m/%d", "%m/%d/%Y", "%Y-%m-%d %H:%M:%S"):
        try:
            return datetime.strptime(cleaned, fmt)
        except ValueError:
            continue
    return None


def parse_timestamp(value: Any) -> datetime | None:
    """Parse a message/session timestamp into an aware UTC datetime."""
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str):
        parsed = _parse_datetime_token(value)
        if parsed is None:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def timestamp_epoch(value: Any) -> float | None:
    parsed = parse_timestamp(value)
    if parsed is None:
        return None
    return parsed.timestamp()


def to_day(value: Any) -> str:
    """Truncate a timestamp to its UTC calendar day (``YYYY-MM-DD``)."""
    parsed = parse_timestamp(value)
    if parsed is None:
        return ""
    return parsed.date().isoformat()


def _coerce_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return parse_timestamp(value).date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        token = value.strip()
        if _DATE_ONLY_RE.match(token):
            try:
                return date.fromisoformat(token)
            except ValueError:
                return None
        parsed = parse_timestamp(token)
        return parsed.date() if parsed else None
    return None


def day_start(value: Any) -> datetime | None:
    """00:00:00.000 UTC of the day ``value`` falls on."""
    day = _coerce_date(value)
    if day is None:
        return None
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def day_end(value: Any) -> datetime | None:
    """23:59:59.999 UTC of the day ``value`` falls on."""
    day = _coerce_date(value)
    if day is None:
        return None
    return datetime.combine(day, time(23, 59, 59, 999000), tzinfo=timezone.utc)


def normalize_date_token(token: str) -> str:
    """Normalize a matched date token to ``YYYY-MM-DD``.

    Slash-separated tokens are read month first (``MM/DD/YYYY``). Dash-separated
    tokens with a two digit leading segment are read day first (``DD-MM-YYYY``).
    Tokens leading with a four digit year are already canonical. Returns an
    empty string when the token does not name a real calendar day.
    """
    cleaned = (token or "").strip()
    parts: list[str]
    if "/" in cleaned:
        parts = cleaned.split("/")
        if len(parts) != 3:
            return ""
        month, day, year = parts
    elif "-" in cleaned:
        parts = cleaned.split("-")
        if len(parts) != 3:
            return ""
        if len(parts[0]) == 2:
            day, month, year = parts
        else:
            year, month, day = parts
    else:
        return ""

    candidate = f"{year}-{month.zfill(2)}-{day.zfill(2)}"
    try:
        return date.fromisoformat(candidate).isoformat()
    except ValueError:
        return ""


def extract_dates(text: str) -> list[str]:
    """Find date substrings in free text and return them normalized, in text order."""
    if not text:
        return []
    found: list[tuple[int, str]] = []
    claimed: list[tuple[int, int]] = []
    for pattern in _DATE_PATTERNS:
        for match in pattern.finditer(text):
            start, end = match.span(1)
            if any(start < c_end and c_start < end for c_start, c_end in claimed):
                continue
            claimed.append((start, end))
            normalized = normalize_date_token(match.group(1))
            if normalized:
                found.append((start, normalized))
    found.sort(key=lambda item: item[0])
    return [value for _, value in found]
