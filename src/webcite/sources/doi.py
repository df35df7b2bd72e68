"""Fields read from the BibTeX entry fetched for a DOI found in the page."""

from __future__ import annotations

import re
from datetime import date

from webcite.models import (
    TEXT_ATTRIBUTES,
    Attribute,
    Author,
    Authors,
    AttributeType,
    Date,
    DateValue,
    Organization,
    Person,
    Year,
    YearMonth,
    YearMonthDay,
)
from webcite.options import MetadataType
from webcite.sources.base import ParseInfo
from webcite.utils import normalize_whitespace, parse_partial_date

KEYS: dict[AttributeType, str] = {
    AttributeType.TITLE: "title",
    AttributeType.URL: "url",
    AttributeType.TYPE: "type",
    AttributeType.JOURNAL: "journal",
    AttributeType.VOLUME: "volume",
    AttributeType.LANGUAGE: "language",
    AttributeType.PUBLISHER: "publisher",
    AttributeType.INSTITUTION: "institution",
}

MONTHS = {
    name: index
    for index, name in enumerate(
        ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"),
        start=1,
    )
}

# EDTF qualifiers: "~" approximate, "?" uncertain, "%" both.
UNCERTAIN_MARKERS = ("~", "?", "%")
AUTHOR_SEPARATOR = re.compile(r"\s+and\s+", flags=re.IGNORECASE)


class Doi:
    name = MetadataType.DOI

    def parse(self, parse_info: ParseInfo, attribute_type: AttributeType) -> Attribute | None:
        parse_info.require(self.name)
        entry = parse_info.bibliography
        if not entry:
            return None
        if attribute_type is AttributeType.AUTHOR:
            authors = parse_bibtex_authors(entry.get("author", ""))
            return Authors(tuple(authors)) if authors else None
        if attribute_type is AttributeType.DATE:
            value = bibtex_date(entry)
            return Date(value) if value is not None else None
        if attribute_type is AttributeType.TYPE:
            value = entry.get("type") or entry.get("ENTRYTYPE")
            return TEXT_ATTRIBUTES[attribute_type](value) if value else None
        key = KEYS.get(attribute_type)
        if key is None:
            return None
        value = clean_field(entry.get(key, ""))
        return TEXT_ATTRIBUTES[attribute_type](value) if value else None


def clean_field(value: str) -> str:
    """Drop BibTeX grouping braces and collapse whitespace."""
    return normalize_whitespace(value.replace("{", "").replace("}", ""))


def parse_bibtex_authors(value: str) -> list[Author]:
    authors: list[Author] = []
    for raw in AUTHOR_SEPARATOR.split(value.strip()):
        raw = raw.strip()
        if not raw:
            continue
        # A fully braced name is a corporate author.
        if raw.startswith("{") and raw.endswith("}") and "," not in raw:
            authors.append(Organization(clean_field(raw)))
            continue
        name = clean_field(raw)
        if "," in name:
            family, _, given = name.partition(",")
            name = normalize_whitespace(f"{given} {family}")
        if name:
            authors.append(Person(name))
    return authors


def bibtex_date(entry: dict[str, str]) -> DateValue | None:
    """Approximate, uncertain and ranged dates are treated as absent."""
    raw = entry.get("date")
    if raw:
        raw = raw.strip()
        if "/" in raw or any(marker in raw for marker in UNCERTAIN_MARKERS):
            return None
        return parse_partial_date(raw)
    year = (entry.get("year") or "").strip()
    if not year.isdigit():
        return None
    month = _month_number(entry.get("month"))
    if month is None:
        return Year(int(year))
    day = (entry.get("day") or "").strip()
    if day.isdigit():
        try:
            return YearMonthDay(date(int(year), month, int(day)))
        except ValueError:
            pass
    return YearMonth(year=int(year), month=month)


def _month_number(value: str | None) -> int | None:
    if not value:
        return None
    value = value.strip().lower()
    if value.isdigit():
        month = int(value)
        return month if 1 <= month <= 12 else None
    return MONTHS.get(value[:3])
