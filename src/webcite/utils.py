"""Utility helpers for identifiers, free text and date strings."""

from __future__ import annotations

import re
import unicodedata
from datetime import datetime

from bs4 import BeautifulSoup

from webcite.models import DateTime, DateValue, Year, YearMonth, YearMonthDay

DOI_PATTERN = re.compile(r"\b(10\.\d{4,9}/[-.;()/:\w]+)")
SLUG_PATTERN = re.compile(r"[^a-z0-9]+")
WHITESPACE_PATTERN = re.compile(r"\s+")

LONG_DATE_FORMATS = (
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %B %Y",
    "%d %b %Y",
    "%Y/%m/%d",
    "%m/%d/%Y",
)


def extract_doi(text: str) -> str | None:
    """Return the first DOI found in ``text``."""
    if not text:
        return None
    match = DOI_PATTERN.search(text)
    if not match:
        return None
    return match.group(1)


def normalize_whitespace(value: str) -> str:
    """Collapse runs of whitespace (newlines, indentation) into single spaces."""
    return WHITESPACE_PATTERN.sub(" ", value).strip()


def slugify(value: str, max_length: int = 80) -> str:
    """Create an ASCII identifier-safe slug."""
    value = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode()
    value = value.lower()
    value = SLUG_PATTERN.sub("-", value).strip("-")
    if not value:
        value = "item"
    return value[:max_length]


def html_to_text(raw_html: str, limit: int = 4000) -> str:
    """Visible page text: scripts/styles dropped, entities decoded, whitespace collapsed."""
    soup = BeautifulSoup(raw_html, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    text = normalize_whitespace(soup.get_text(" "))
    return text[:limit].strip()


def parse_rfc3339(value: str) -> DateTime | None:
    """Parse an RFC 3339 timestamp; an offset is required."""
    candidate = value.strip()
    if candidate.endswith(("Z", "z")):
        candidate = candidate[:-1] + "+00:00"
    if "T" not in candidate and "t" not in candidate and " " not in candidate:
        return None
    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return None
    return DateTime(parsed)


def parse_html_date(value: str) -> DateValue | None:
    """Dates found in meta tags: RFC 3339, naive ISO datetime (UTC) or ``YYYY-MM-DD``."""
    value = value.strip()
    stamped = parse_rfc3339(value)
    if stamped is not None:
        return stamped
    try:
        return DateTime(datetime.strptime(value, "%Y-%m-%dT%H:%M:%S"))
    except ValueError:
        pass
    try:
        return YearMonthDay(datetime.strptime(value, "%Y-%m-%d").date())
    except ValueError:
        return None


def parse_partial_date(value: str) -> DateValue | None:
    """Parse ``YYYY-MM-DD``, ``YYYY-MM`` or ``YYYY`` keeping only the given precision."""
    value = value.strip()
    try:
        return YearMonthDay(datetime.strptime(value, "%Y-%m-%d").date())
    except ValueError:
        pass
    match = re.fullmatch(r"(\d{4})-(\d{1,2})", value)
    if match:
        month = int(match.group(2))
        if 1 <= month <= 12:
            return YearMonth(year=int(match.group(1)), month=month)
        return None
    if re.fullmatch(r"\d{4}", value):
        return Year(int(value))
    return None


def parse_loose_date(value: str) -> DateValue | None:
    """Accept the date spellings seen in bibliographic records."""
    value = value.strip()
    if not value:
        return None
    partial = parse_partial_date(value)
    if partial is not None:
        if isinstance(partial, Year) and not 1000 <= partial.year <= 2100:
            return None
        return partial
    stamped = parse_rfc3339(value)
    if stamped is not None:
        return stamped
    for fmt in LONG_DATE_FORMATS:
        try:
            return YearMonthDay(datetime.strptime(value, fmt).date())
        except ValueError:
            continue
    return None
