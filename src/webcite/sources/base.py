"""Shared contract for metadata sources and the per-request ParseInfo bundle."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

import structlog
from bs4 import BeautifulSoup

from webcite.models import Attribute, AttributeType
from webcite.options import MetadataType

if TYPE_CHECKING:
    from webcite.sources.citoid import CitoidRecord

logger = structlog.get_logger(__name__)

# Sources that read straight from the HTML and need no prefetching.
HTML_SOURCES = frozenset(
    {MetadataType.OPENGRAPH, MetadataType.SCHEMA_ORG, MetadataType.HTML_META}
)

OPENGRAPH_NAMESPACES = ("article:", "book:", "profile:")


class ParseSkip(Exception):
    """The source was not prepared for this request and contributes nothing."""


@dataclass(frozen=True, slots=True)
class HtmlDocument:
    """Pre-parsed view of a page: soup, text, Open Graph map and JSON-LD objects."""

    soup: BeautifulSoup
    text_content: str
    opengraph: dict[str, str]
    schema_org: tuple[dict[str, Any], ...]

    @classmethod
    def parse(cls, raw_html: str) -> "HtmlDocument | None":
        """Return ``None`` when the text holds no HTML structure at all."""
        if not raw_html or not raw_html.strip():
            return None
        soup = BeautifulSoup(raw_html, "html.parser")
        if soup.find() is None:
            return None
        return cls(
            soup=soup,
            text_content=soup.get_text(" "),
            opengraph=_collect_opengraph(soup),
            schema_org=tuple(_collect_json_ld(soup)),
        )


def _collect_opengraph(soup: BeautifulSoup) -> dict[str, str]:
    properties: dict[str, str] = {}
    for tag in soup.find_all("meta", attrs={"property": True}):
        prop = (tag.get("property") or "").strip()
        content = (tag.get("content") or "").strip()
        if not prop or not content:
            continue
        if prop.startswith("og:"):
            key = prop[3:]
        elif prop.startswith(OPENGRAPH_NAMESPACES):
            key = prop
        else:
            continue
        properties.setdefault(key, content)
    return properties


def _collect_json_ld(soup: BeautifulSoup) -> list[dict[str, Any]]:
    objects: list[dict[str, Any]] = []
    for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
        payload = script.string or script.get_text()
        if not payload or not payload.strip():
            continue
        try:
            data = json.loads(payload)
        except ValueError:
            logger.debug("schema_org.invalid_json", length=len(payload))
            continue
        items = data if isinstance(data, list) else [data]
        for item in items:
            if not isinstance(item, dict):
                continue
            graph = item.get("@graph")
            if isinstance(graph, list):
                objects.extend(node for node in graph if isinstance(node, dict))
            else:
                objects.append(item)
    return objects


@dataclass(frozen=True, slots=True)
class ParseInfo:
    """Immutable per-request bundle shared by reference across every source.

    ``url`` is ``None`` when the page was read from a local file. ``prepared``
    lists the sources whose inputs were gathered for this request; a source
    outside that set raises :class:`ParseSkip`.
    """

    raw_html: str
    url: str | None = None
    document: HtmlDocument | None = None
    bibliography: dict[str, str] | None = None
    citoid: "CitoidRecord | None" = None
    prepared: frozenset[MetadataType] = field(default=HTML_SOURCES)

    @classmethod
    def build(
        cls,
        raw_html: str,
        *,
        url: str | None = None,
        bibliography: dict[str, str] | None = None,
        citoid: "CitoidRecord | None" = None,
        prepared: frozenset[MetadataType] | set[MetadataType] | None = None,
    ) -> "ParseInfo":
        sources = frozenset(prepared) if prepared is not None else HTML_SOURCES
        return cls(
            raw_html=raw_html,
            url=url,
            document=HtmlDocument.parse(raw_html),
            bibliography=bibliography,
            citoid=citoid,
            prepared=sources | HTML_SOURCES,
        )

    @property
    def has_usable_data(self) -> bool:
        return self.document is not None or self.bibliography is not None or self.citoid is not None

    def require(self, source: MetadataType) -> None:
        if source not in self.prepared:
            raise ParseSkip(source.value)


class AttributeParser(Protocol):
    """One metadata source. ``None`` means "no opinion for this field"."""

    name: MetadataType

    def parse(self, parse_info: ParseInfo, attribute_type: AttributeType) -> Attribute | None:
        ...
