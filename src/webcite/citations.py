"""Citation builders: accumulate attributes, then render one citation style.

Each builder exposes ``add(attribute)``, ``try_add(attribute_or_none)`` and
``build()``. Attributes a style has no slot for are ignored.
"""

from __future__ import annotations

from collections.abc import Sequence

from webcite.models import (
    ArchiveDate,
    ArchiveUrl,
    Attribute,
    Author,
    Authors,
    Date,
    DateTime,
    DateValue,
    Journal,
    Language,
    Organization,
    Publisher,
    Site,
    Title,
    TranslatedTitle,
    Url,
    Volume,
    Year,
    YearMonth,
    YearMonthDay,
)
from webcite.utils import normalize_whitespace, slugify

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


def split_name(author: Author) -> tuple[str, str] | None:
    """``(given, family)`` using the last token as the family name.

    Organizations and single-token names are not split.
    """
    if isinstance(author, Organization):
        return None
    parts = normalize_whitespace(author.name).split(" ")
    if len(parts) < 2:
        return None
    return " ".join(parts[:-1]), parts[-1]


def date_year(value: DateValue) -> int:
    return value.year


class CitationBuilder:
    def try_add(self, attribute: Attribute | None) -> "CitationBuilder":
        if attribute is not None:
            self.add(attribute)
        return self

    def add(self, attribute: Attribute) -> "CitationBuilder":
        raise NotImplementedError

    def build(self) -> str:
        raise NotImplementedError


class WikiCitation(CitationBuilder):
    """English Wikipedia ``{{cite web}}`` template."""

    FIELDS = {
        Title: "title",
        Language: "language",
        Site: "website",
        Url: "url",
        ArchiveUrl: "archive-url",
        Journal: "journal",
        Publisher: "publisher",
    }

    def __init__(self) -> None:
        self._lines: list[str] = []

    def add(self, attribute: Attribute) -> "WikiCitation":
        if isinstance(attribute, Authors):
            self._lines.extend(self._author_lines(attribute.authors))
        elif isinstance(attribute, TranslatedTitle):
            self._param("trans-title", attribute.translation.text)
        elif isinstance(attribute, Date):
            self._param("date", str(attribute.value))
        elif isinstance(attribute, ArchiveDate):
            self._param("archive-date", str(attribute.value))
        elif type(attribute) in self.FIELDS:
            self._param(self.FIELDS[type(attribute)], str(attribute))
        return self

    def _param(self, name: str, value: str) -> None:
        self._lines.append(f"| {name} = {normalize_whitespace(value)}")

    @staticmethod
    def _author_lines(authors: Sequence[Author]) -> list[str]:
        lines: list[str] = []
        for position, author in enumerate(authors, start=1):
            index = str(position) if len(authors) > 1 else ""
            parts = split_name(author)
            if parts is None:
                lines.append(f"| author{index} = {normalize_whitespace(author.name)}")
            else:
                given, family = parts
                lines.append(f"| last{index} = {family}")
                lines.append(f"| first{index} = {given}")
        return lines

    def build(self) -> str:
        body = "".join(f"\n{line}" for line in self._lines)
        return f"{{{{cite web{body}\n}}}}"


class BibTeXCitation(CitationBuilder):
    """A ``@misc`` BibTeX entry."""

    FIELDS = {
        Title: "title",
        Url: "url",
        Site: "howpublished",
        Publisher: "publisher",
        Language: "language",
        Journal: "journal",
        Volume: "volume",
        ArchiveUrl: "archiveurl",
    }

    def __init__(self) -> None:
        self._lines: list[str] = []
        self._family: str | None = None
        self._year: int | None = None

    def add(self, attribute: Attribute) -> "BibTeXCitation":
        if isinstance(attribute, Authors):
            self._add_authors(attribute.authors)
        elif isinstance(attribute, TranslatedTitle):
            self._field("note", f"Translated title: {attribute.translation.text}")
        elif isinstance(attribute, Date):
            self._add_date(attribute.value)
        elif isinstance(attribute, ArchiveDate):
            self._field("archivedate", str(attribute.value))
        elif type(attribute) in self.FIELDS:
            self._field(self.FIELDS[type(attribute)], str(attribute))
        return self

    def _field(self, name: str, value: str) -> None:
        self._lines.append(f'{name} = "{_escape_bibtex(normalize_whitespace(value))}"')

    def _add_authors(self, authors: Sequence[Author]) -> None:
        rendered = []
        for author in authors:
            parts = split_name(author)
            if parts is None:
                rendered.append(f"{{{normalize_whitespace(author.name)}}}")
            else:
                given, family = parts
                rendered.append(f"{family}, {given}")
        if not rendered:
            return
        first = split_name(authors[0])
        self._family = first[1] if first else normalize_whitespace(authors[0].name)
        self._field("author", " and ".join(rendered))

    def _add_date(self, value: DateValue) -> None:
        self._year = date_year(value)
        if isinstance(value, YearMonth):
            self._lines.append(f'year = "{value.year}",\nmonth = "{value.month}"')
        elif isinstance(value, Year):
            self._lines.append(f'year = "{value.year}"')
        else:
            self._lines.append(f'date = "{value}"')

    def key(self) -> str:
        """First author's family name plus year, e.g. ``smith2020``."""
        parts = [part for part in (self._family, str(self._year) if self._year else None) if part]
        if not parts:
            return "webcite"
        key = slugify("".join(parts)).replace("-", "")
        return key if key and key != "item" else "webcite"

    def build(self) -> str:
        body = "".join(f"{line},\n" for line in self._lines)
        return f"@misc{{{self.key()},\n{body}}}"


def _escape_bibtex(value: str) -> str:
    return value.replace('"', '{"}')


class HarvardCitation(CitationBuilder):
    """Harvard author-date style.

    ``Author (Year) 'Title', Site. Available at: URL (Accessed: D Month YYYY).``
    """

    def __init__(self) -> None:
        self.authors: str | None = None
        self.year: str | None = None
        self.title: str | None = None
        self.site: str | None = None
        self.publisher: str | None = None
        self.url: str | None = None
        self.access_date: str | None = None

    def add(self, attribute: Attribute) -> "HarvardCitation":
        if isinstance(attribute, Title):
            self.title = normalize_whitespace(attribute.value)
        elif isinstance(attribute, Authors):
            self.authors = format_harvard_authors(attribute.authors) or None
        elif isinstance(attribute, Date):
            self.year = str(date_year(attribute.value))
        elif isinstance(attribute, Site):
            self.site = normalize_whitespace(attribute.value)
        elif isinstance(attribute, Publisher):
            self.publisher = normalize_whitespace(attribute.value)
        elif isinstance(attribute, Url):
            self.url = attribute.value.strip()
        elif isinstance(attribute, ArchiveDate):
            self.access_date = format_access_date(attribute.value)
        return self

    def build(self) -> str:
        year = self.year or "n.d."
        result = f"{self.authors} ({year})" if self.authors else f"({year})"
        if self.title:
            result += f" '{self.title}'"
        source = self.site or self.publisher
        if source:
            result += f", {source}"
        result += "."
        if self.url:
            result += f" Available at: {self.url}"
            if self.access_date:
                result += f" (Accessed: {self.access_date})."
            else:
                result += "."
        return result


def format_harvard_author(author: Author) -> str:
    parts = split_name(author)
    if parts is None:
        return normalize_whitespace(author.name)
    given, family = parts
    initials = "".join(f"{name[0]}." for name in given.split(" ") if name)
    return f"{family}, {initials}"


def format_harvard_authors(authors: Sequence[Author]) -> str:
    if not authors:
        return ""
    if len(authors) == 1:
        return format_harvard_author(authors[0])
    if len(authors) == 2:
        return f"{format_harvard_author(authors[0])} and {format_harvard_author(authors[1])}"
    return f"{format_harvard_author(authors[0])} et al."


def format_access_date(value: DateValue) -> str:
    if isinstance(value, DateTime):
        day = value.value.date()
    elif isinstance(value, YearMonthDay):
        day = value.value
    elif isinstance(value, YearMonth):
        return f"{MONTH_NAMES[value.month - 1]} {value.year}"
    else:
        return str(value.year)
    return f"{day.day} {MONTH_NAMES[day.month - 1]} {day.year}"
