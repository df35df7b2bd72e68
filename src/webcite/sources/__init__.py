"""Metadata sources and the registry used by the priority resolver."""

from webcite.options import MetadataType
from webcite.sources.base import AttributeParser, HtmlDocument, ParseInfo, ParseSkip
from webcite.sources.citoid import Citoid, CitoidRecord, should_skip_citoid
from webcite.sources.doi import Doi
from webcite.sources.html_meta import HtmlMeta
from webcite.sources.opengraph import OpenGraph
from webcite.sources.schema_org import SchemaOrg

# MetadataType.AI has no entry: AI output is overlaid by the generator.
SOURCE_PARSERS: dict[MetadataType, AttributeParser] = {
    MetadataType.OPENGRAPH: OpenGraph(),
    MetadataType.SCHEMA_ORG: SchemaOrg(),
    MetadataType.HTML_META: HtmlMeta(),
    MetadataType.DOI: Doi(),
    MetadataType.CITOID: Citoid(),
}

__all__ = [
    "AttributeParser",
    "Citoid",
    "CitoidRecord",
    "Doi",
    "HtmlDocument",
    "HtmlMeta",
    "OpenGraph",
    "ParseInfo",
    "ParseSkip",
    "SOURCE_PARSERS",
    "SchemaOrg",
    "should_skip_citoid",
]
