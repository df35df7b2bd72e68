"""Typed attribute model shared by every metadata source and citation builder."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import ClassVar, Union


class AttributeType(str, Enum):
    """Semantic citation field used as the resolution key."""

    TITLE = "title"
    AUTHOR = "author"
    LOCALE = "locale"
    LANGUAGE = "language"
    SITE = "site"
    DATE = "date"
    ARCHIVE_DATE = "archive_date"
    URL = "url"
    ARCHIVE_URL = "archive_url"
    TYPE = "type"
    JOURNAL = "journal"
    PUBLISHER = "publisher"
    INSTITUTION = "institution"
    VOLUME = "volume"


# Authors ---------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Person:
    """An individual. Given/family parts are split only when formatting."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class Organization:
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class Generic:
    """Unattributed author text (bylines, AI output) of unknown kind."""

    name: str

    def __str__(self) -> str:
        return self.name


Author = Union[Person, Organization, Generic]


# Dates -----------------------------------------------------------------------
#
# Precision lattice: DateTime > YearMonthDay > YearMonth > Year. A value never
# claims more precision than its source supplied.


@dataclass(frozen=True, slots=True)
class DateTime:
    value: datetime

    def __post_init__(self) -> None:
        if self.value.tzinfo is None:
            object.__setattr__(self, "value", self.value.replace(tzinfo=timezone.utc))
        else:
            object.__setattr__(self, "value", self.value.astimezone(timezone.utc))

    @property
    def year(self) -> int:
        return self.value.year

    def __str__(self) -> str:
        return self.value.strftime("%Y-%m-%d")


@dataclass(frozen=True, slots=True)
class YearMonthDay:
    value: date

    @property
    def year(self) -> int:
        return self.value.year

    def __str__(self) -> str:
        return self.value.strftime("%Y-%m-%d")


@dataclass(frozen=True, slots=True)
class YearMonth:
    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"month out of range: {self.month}")

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


@dataclass(frozen=True, slots=True)
class Year:
    year: int

    def __str__(self) -> str:
        return f"{self.year:04d}"


DateValue = Union[DateTime, YearMonthDay, YearMonth, Year]


@dataclass(frozen=True, slots=True)
class Translation:
    """A translated title together with its ISO 639 language code."""

    text: str
    language: str


# Attributes ------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Attribute:
    """Base of the attribute union. Each subclass maps to one AttributeType."""

    attribute_type: ClassVar[AttributeType]


@dataclass(frozen=True, slots=True)
class TextAttribute(Attribute):
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Title(TextAttribute):
    attribute_type = AttributeType.TITLE


@dataclass(frozen=True, slots=True)
class TranslatedTitle(Attribute):
    attribute_type = AttributeType.TITLE

    translation: Translation

    def __str__(self) -> str:
        return self.translation.text


@dataclass(frozen=True, slots=True)
class Authors(Attribute):
    attribute_type = AttributeType.AUTHOR

    authors: tuple[Author, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "authors", tuple(self.authors))

    def __str__(self) -> str:
        return ", ".join(str(author) for author in self.authors)


@dataclass(frozen=True, slots=True)
class Date(Attribute):
    attribute_type = AttributeType.DATE

    value: DateValue

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True, slots=True)
class ArchiveDate(Attribute):
    attribute_type = AttributeType.ARCHIVE_DATE

    value: DateValue

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True, slots=True)
class Language(TextAttribute):
    attribute_type = AttributeType.LANGUAGE


@dataclass(frozen=True, slots=True)
class Locale(TextAttribute):
    attribute_type = AttributeType.LOCALE


@dataclass(frozen=True, slots=True)
class Site(TextAttribute):
    attribute_type = AttributeType.SITE


@dataclass(frozen=True, slots=True)
class Url(TextAttribute):
    attribute_type = AttributeType.URL


@dataclass(frozen=True, slots=True)
class ArchiveUrl(TextAttribute):
    attribute_type = AttributeType.ARCHIVE_URL


@dataclass(frozen=True, slots=True)
class Type(TextAttribute):
    attribute_type = AttributeType.TYPE


@dataclass(frozen=True, slots=True)
class Journal(TextAttribute):
    attribute_type = AttributeType.JOURNAL


@dataclass(frozen=True, slots=True)
class Publisher(TextAttribute):
    attribute_type = AttributeType.PUBLISHER


@dataclass(frozen=True, slots=True)
class Institution(TextAttribute):
    attribute_type = AttributeType.INSTITUTION


@dataclass(frozen=True, slots=True)
class Volume(TextAttribute):
    attribute_type = AttributeType.VOLUME


# Plain-text attribute class for each AttributeType, used by sources that only
# ever produce strings for a field.
TEXT_ATTRIBUTES: dict[AttributeType, type[TextAttribute]] = {
    AttributeType.TITLE: Title,
    AttributeType.LANGUAGE: Language,
    AttributeType.LOCALE: Locale,
    AttributeType.SITE: Site,
    AttributeType.URL: Url,
    AttributeType.ARCHIVE_URL: ArchiveUrl,
    AttributeType.TYPE: Type,
    AttributeType.JOURNAL: Journal,
    AttributeType.PUBLISHER: Publisher,
    AttributeType.INSTITUTION: Institution,
    AttributeType.VOLUME: Volume,
}


def attribute_to_json(attribute: Attribute) -> object:
    """JSON-ready rendering used by the CLI and web API."""
    if isinstance(attribute, Authors):
        return [
            {"kind": type(author).__name__.lower(), "name": author.name}
            for author in attribute.authors
        ]
    if isinstance(attribute, TranslatedTitle):
        return {"text": attribute.translation.text, "language": attribute.translation.language}
    return str(attribute)
