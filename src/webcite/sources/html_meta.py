"""Plain ``<meta>`` tags plus microdata and byline heuristics.

Serves as the fallback when Open Graph and Schema.org leave fields empty.
"""

from __future__ import annotations

from bs4 import BeautifulSoup

from webcite.models import (
    TEXT_ATTRIBUTES,
    Attribute,
    Authors,
    AttributeType,
    Date,
    Generic,
)
from webcite.options import MetadataType
from webcite.sources.base import ParseInfo
from webcite.utils import normalize_whitespace, parse_html_date

KEYS: dict[AttributeType, tuple[str, ...]] = {
    AttributeType.AUTHOR: ("author", "article:author", "byl"),
    AttributeType.PUBLISHER: ("publisher", "article:publisher"),
    AttributeType.DATE: (
        "date",
        "article:published_time",
        "pubdate",
        "publishdate",
        "DC.date.issued",
    ),
    AttributeType.SITE: ("application-name", "apple-mobile-web-app-title"),
    AttributeType.LANGUAGE: ("language", "DC.language"),
}

DATE_SELECTORS = (
    'time[itemprop="datePublished"]',
    'time[itemprop="published"]',
    'time[itemprop="dateCreated"]',
    "time[datetime]",
)

AUTHOR_SELECTORS = (
    '[itemprop="author"] [itemprop="name"]',
    '[itemprop="author"]',
    '[rel="author"]',
    ".author",
    ".byline",
    '[class*="author-name"]',
    '[class*="byline"]',
)

BYLINE_PREFIXES = ("By ", "by ", "Af ", "af ")
MAX_AUTHOR_LENGTH = 200


class HtmlMeta:
    name = MetadataType.HTML_META

    def parse(self, parse_info: ParseInfo, attribute_type: AttributeType) -> Attribute | None:
        parse_info.require(self.name)
        if parse_info.document is None:
            return None
        soup = parse_info.document.soup
        content = find_meta_content(soup, KEYS.get(attribute_type, ()))

        if attribute_type is AttributeType.AUTHOR:
            if content is not None:
                return Authors((Generic(clean_byline(content) or content.strip()),))
            authors = find_byline_authors(soup)
            return Authors(tuple(authors)) if authors else None

        if attribute_type is AttributeType.DATE:
            if content is None:
                content = find_microdata_date(soup)
            if content is None:
                return None
            parsed = parse_html_date(content)
            return Date(parsed) if parsed is not None else None

        if content is None:
            return None
        attribute_cls = TEXT_ATTRIBUTES.get(attribute_type)
        return attribute_cls(content) if attribute_cls else None


def find_meta_content(soup: BeautifulSoup, keys: tuple[str, ...]) -> str | None:
    """First non-empty ``content`` of ``<meta name=key>`` or ``<meta property=key>``."""
    for key in keys:
        for attr in ("name", "property"):
            tag = soup.find("meta", attrs={attr: key})
            if tag is None:
                continue
            content = tag.get("content")
            if content and content.strip():
                return content.strip()
    return None


def find_microdata_date(soup: BeautifulSoup) -> str | None:
    for selector in DATE_SELECTORS:
        element = soup.select_one(selector)
        if element is None:
            continue
        value = element.get("datetime")
        if value and value.strip():
            return value.strip()
    return None


def find_byline_authors(soup: BeautifulSoup) -> list[Generic]:
    for selector in AUTHOR_SELECTORS:
        names: list[str] = []
        for element in soup.select(selector):
            text = normalize_whitespace(element.get_text(" "))
            if not text or len(text) >= MAX_AUTHOR_LENGTH:
                continue
            cleaned = clean_byline(text)
            if cleaned and cleaned not in names:
                names.append(cleaned)
        if names:
            return [Generic(name) for name in names]
    return []


def clean_byline(text: str) -> str:
    """Strip a leading "By "/"Af " byline marker."""
    text = text.strip()
    for prefix in BYLINE_PREFIXES:
        if text.startswith(prefix):
            text = text[len(prefix):]
            break
    return text.strip()
