"""Citoid (Wikipedia's Zotero translation server) records and their parser."""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from webcite.models import (
    Attribute,
    Author,
    Authors,
    AttributeType,
    Date,
    DateValue,
    Journal,
    Language,
    Organization,
    Person,
    Publisher,
    Site,
    Title,
    Url,
    Volume,
)
from webcite.options import MetadataType
from webcite.sources.base import ParseInfo
from webcite.utils import parse_loose_date

PMID_PATTERN = re.compile(r"PMID:\s*(\d+)")
BIBCODE_PATTERN = re.compile(r"ADS Bibcode:\s*(\S+)")

AUTHOR_CREATOR_TYPES = {"author", "contributor", "artist"}
INVALID_TITLES = {"404", "error", "access denied"}

# Hosts on which Citoid returns junk or nothing useful.
CITOID_BLACKLIST = (
    "facebook.com",
    "twitter.com",
    "x.com",
    "instagram.com",
    "tiktok.com",
    "archive.org/web",
    "youtube.com",
    "youtu.be",
    "linkedin.com",
    "reddit.com",
)


class CitoidCreator(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    creator_type: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    name: str | None = None

    @property
    def is_author(self) -> bool:
        """Editors and translators are not authors; an untyped creator is."""
        return self.creator_type is None or self.creator_type in AUTHOR_CREATOR_TYPES

    def to_author(self) -> Author | None:
        if self.name:
            return Organization(self.name.strip())
        parts = [part.strip() for part in (self.first_name, self.last_name) if part and part.strip()]
        if not parts:
            return None
        return Person(" ".join(parts))


class CitoidRecord(BaseModel):
    """First item of a Citoid ``/data/citation/zotero`` response."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    item_type: str | None = None
    title: str | None = None
    creators: list[CitoidCreator] = Field(default_factory=list)
    date: str | None = None
    publication_title: str | None = None
    book_title: str | None = None
    website_title: str | None = None
    doi: str | None = Field(default=None, alias="DOI")
    url: str | None = None
    language: str | None = None
    publisher: str | None = None
    place: str | None = None
    volume: str | None = None
    issue: str | None = None
    pages: str | None = None
    isbn: list[str] | str | None = Field(default=None, alias="ISBN")
    issn: list[str] | str | None = Field(default=None, alias="ISSN")
    abstract_note: str | None = None
    extra: str | None = None
    university: str | None = None
    thesis_type: str | None = None

    def authors(self) -> list[Author]:
        return [
            author
            for author in (creator.to_author() for creator in self.creators if creator.is_author)
            if author is not None
        ]

    def site_name(self) -> str | None:
        return self.publication_title or self.website_title or self.book_title

    def parsed_date(self) -> DateValue | None:
        return parse_loose_date(self.date) if self.date else None

    @property
    def pmid(self) -> str | None:
        return _search_extra(PMID_PATTERN, self.extra)

    @property
    def bibcode(self) -> str | None:
        return _search_extra(BIBCODE_PATTERN, self.extra)

    def is_valid(self) -> bool:
        """Citoid answers unresolvable URLs with placeholder titles."""
        if self.title is None or not self.title.strip():
            return False
        lowered = self.title.strip().lower()
        return not (lowered.startswith("not found") or lowered in INVALID_TITLES)


def _search_extra(pattern: re.Pattern[str], extra: str | None) -> str | None:
    if not extra:
        return None
    match = pattern.search(extra)
    return match.group(1) if match else None


def should_skip_citoid(url: str) -> bool:
    lowered = url.lower()
    return any(blocked in lowered for blocked in CITOID_BLACKLIST)


class Citoid:
    name = MetadataType.CITOID

    def parse(self, parse_info: ParseInfo, attribute_type: AttributeType) -> Attribute | None:
        parse_info.require(self.name)
        record = parse_info.citoid
        if record is None or not record.is_valid():
            return None
        return attribute_from_record(record, attribute_type)


def attribute_from_record(record: CitoidRecord, attribute_type: AttributeType) -> Attribute | None:
    if attribute_type is AttributeType.AUTHOR:
        authors = record.authors()
        return Authors(tuple(authors)) if authors else None
    if attribute_type is AttributeType.DATE:
        value = record.parsed_date()
        return Date(value) if value is not None else None
    if attribute_type is AttributeType.SITE:
        return _text(Site, record.site_name())
    if attribute_type is AttributeType.PUBLISHER:
        return _text(Publisher, record.publisher or record.university)
    simple = {
        AttributeType.TITLE: (Title, record.title),
        AttributeType.LANGUAGE: (Language, record.language),
        AttributeType.URL: (Url, record.url),
        AttributeType.JOURNAL: (Journal, record.publication_title),
        AttributeType.VOLUME: (Volume, record.volume),
    }
    if attribute_type not in simple:
        return None
    attribute_cls, value = simple[attribute_type]
    return _text(attribute_cls, value)


def _text(attribute_cls, value: str | None) -> Attribute | None:
    if value is None or not value.strip():
        return None
    return attribute_cls(value.strip())
