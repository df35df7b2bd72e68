"""Reference shapes and their rendering into citation styles."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import ClassVar

from webcite.citations import BibTeXCitation, CitationBuilder, HarvardCitation, WikiCitation
from webcite.models import Attribute, attribute_to_json


@dataclass(slots=True)
class Reference:
    """Base for the reference shapes.

    ``CITATION_ORDER`` lists the fields fed to a citation builder, in order.
    """

    CITATION_ORDER: ClassVar[tuple[str, ...]] = ()

    def _render(self, builder: CitationBuilder) -> str:
        for name in self.CITATION_ORDER:
            builder.try_add(getattr(self, name))
        return builder.build()

    def wiki(self) -> str:
        return self._render(WikiCitation())

    def bibtex(self) -> str:
        return self._render(BibTeXCitation())

    def harvard(self) -> str:
        return self._render(HarvardCitation())

    @property
    def kind(self) -> str:
        return type(self).__name__

    def attributes(self) -> dict[str, Attribute]:
        return {
            item.name: getattr(self, item.name)
            for item in fields(self)
            if getattr(self, item.name) is not None
        }

    def to_dict(self) -> dict[str, object]:
        return {
            "type": self.kind,
            "fields": {name: attribute_to_json(value) for name, value in self.attributes().items()},
            "citations": {"wiki": self.wiki(), "bibtex": self.bibtex(), "harvard": self.harvard()},
        }


@dataclass(slots=True)
class NewsArticle(Reference):
    """News articles, blog posts and most other web pages."""

    CITATION_ORDER: ClassVar[tuple[str, ...]] = (
        "title",
        "translated_title",
        "author",
        "date",
        "language",
        "site",
        "url",
        "archive_url",
        "archive_date",
        "publisher",
    )

    title: Attribute | None = None
    translated_title: Attribute | None = None
    author: Attribute | None = None
    date: Attribute | None = None
    language: Attribute | None = None
    site: Attribute | None = None
    url: Attribute | None = None
    publisher: Attribute | None = None
    archive_url: Attribute | None = None
    archive_date: Attribute | None = None


@dataclass(slots=True)
class ScholarlyArticle(Reference):
    CITATION_ORDER: ClassVar[tuple[str, ...]] = (
        "title",
        "translated_title",
        "author",
        "date",
        "language",
        "url",
        "archive_url",
        "archive_date",
        "journal",
        "publisher",
    )

    title: Attribute | None = None
    translated_title: Attribute | None = None
    author: Attribute | None = None
    date: Attribute | None = None
    language: Attribute | None = None
    url: Attribute | None = None
    journal: Attribute | None = None
    publisher: Attribute | None = None
    archive_url: Attribute | None = None
    archive_date: Attribute | None = None


@dataclass(slots=True)
class GenericReference(Reference):
    CITATION_ORDER: ClassVar[tuple[str, ...]] = (
        "title",
        "translated_title",
        "author",
        "date",
        "language",
        "site",
        "url",
        "archive_url",
        "archive_date",
    )

    title: Attribute | None = None
    translated_title: Attribute | None = None
    author: Attribute | None = None
    date: Attribute | None = None
    language: Attribute | None = None
    site: Attribute | None = None
    url: Attribute | None = None
    archive_url: Attribute | None = None
    archive_date: Attribute | None = None
