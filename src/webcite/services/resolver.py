"""Priority-based attribute resolution across metadata sources."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

import structlog

from webcite.models import Attribute, AttributeType, attribute_to_json
from webcite.options import AttributeConfig, AttributePriority, MetadataType
from webcite.sources import SOURCE_PARSERS, AttributeParser, ParseInfo, ParseSkip

logger = structlog.get_logger(__name__)

# Order used by the multi-source view, both for querying and for picking the
# value shown by default.
MULTI_SOURCE_ORDER = (
    MetadataType.OPENGRAPH,
    MetadataType.SCHEMA_ORG,
    MetadataType.HTML_META,
    MetadataType.DOI,
    MetadataType.CITOID,
)


def resolve_attribute(
    parse_info: ParseInfo,
    attribute_type: AttributeType,
    priority: AttributePriority,
    parsers: Mapping[MetadataType, AttributeParser] = SOURCE_PARSERS,
) -> Attribute | None:
    """Try each source in order; the first value found wins."""
    for source in priority.priority:
        parser = parsers.get(source)
        if parser is None:
            logger.debug("source.unavailable", source=source.value, field=attribute_type.value)
            continue
        try:
            attribute = parser.parse(parse_info, attribute_type)
        except ParseSkip:
            logger.debug("source.skip", source=source.value, field=attribute_type.value)
            continue
        if attribute is not None:
            logger.debug("source.hit", source=source.value, field=attribute_type.value)
            return attribute
    return None


@dataclass(slots=True)
class AttributeCollection:
    """One resolved value per field."""

    attributes: dict[AttributeType, Attribute] = field(default_factory=dict)

    @classmethod
    def initialize(
        cls,
        config: AttributeConfig,
        parse_info: ParseInfo,
        parsers: Mapping[MetadataType, AttributeParser] = SOURCE_PARSERS,
    ) -> "AttributeCollection":
        collection = cls()
        for attribute_type in AttributeType:
            attribute = resolve_attribute(parse_info, attribute_type, config.get(attribute_type), parsers)
            if attribute is not None:
                collection.attributes[attribute_type] = attribute
        return collection

    def get(self, attribute_type: AttributeType) -> Attribute | None:
        return self.attributes.get(attribute_type)


@dataclass(slots=True)
class MultiSourceAttributeCollection:
    """Every source's value for every field, for side-by-side comparison."""

    values: dict[AttributeType, dict[MetadataType, Attribute]] = field(default_factory=dict)

    @classmethod
    def parse_all(
        cls,
        parse_info: ParseInfo,
        parsers: Mapping[MetadataType, AttributeParser] = SOURCE_PARSERS,
    ) -> "MultiSourceAttributeCollection":
        collection = cls()
        for attribute_type in AttributeType:
            found: dict[MetadataType, Attribute] = {}
            for source in MULTI_SOURCE_ORDER:
                parser = parsers.get(source)
                if parser is None:
                    continue
                try:
                    attribute = parser.parse(parse_info, attribute_type)
                except ParseSkip:
                    continue
                if attribute is not None:
                    found[source] = attribute
            if found:
                collection.values[attribute_type] = found
        return collection

    def get(self, attribute_type: AttributeType) -> dict[MetadataType, Attribute]:
        return dict(self.values.get(attribute_type, {}))

    def default_source(self, attribute_type: AttributeType) -> MetadataType | None:
        found = self.values.get(attribute_type, {})
        for source in MULTI_SOURCE_ORDER:
            if source in found:
                return source
        return None

    def default_value(self, attribute_type: AttributeType) -> Attribute | None:
        source = self.default_source(attribute_type)
        return self.values[attribute_type][source] if source is not None else None

    def to_dict(self) -> dict[str, dict[str, object]]:
        payload: dict[str, dict[str, object]] = {}
        for attribute_type, found in self.values.items():
            payload[attribute_type.value] = {
                "default": self.default_source(attribute_type).value,
                "sources": {
                    source.value: attribute_to_json(attribute) for source, attribute in found.items()
                },
            }
        return payload
