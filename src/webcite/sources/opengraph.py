"""Open Graph (``og:*``) metadata source."""

from __future__ import annotations

from webcite.models import TEXT_ATTRIBUTES, Attribute, Authors, AttributeType, Date, Generic
from webcite.options import MetadataType
from webcite.sources.base import ParseInfo
from webcite.utils import normalize_whitespace, parse_html_date

KEYS: dict[AttributeType, tuple[str, ...]] = {
    AttributeType.TITLE: ("title",),
    AttributeType.AUTHOR: ("article:author",),
    AttributeType.LOCALE: ("locale",),
    AttributeType.SITE: ("site_name",),
    AttributeType.URL: ("url",),
    AttributeType.DATE: ("article:published_time", "article:modified_time", "updated_time"),
    AttributeType.TYPE: ("type",),
}


class OpenGraph:
    name = MetadataType.OPENGRAPH

    def parse(self, parse_info: ParseInfo, attribute_type: AttributeType) -> Attribute | None:
        parse_info.require(self.name)
        if parse_info.document is None:
            return None
        properties = parse_info.document.opengraph
        for key in KEYS.get(attribute_type, ()):
            value = properties.get(key)
            if not value:
                continue
            attribute = _to_attribute(attribute_type, value)
            if attribute is not None:
                return attribute
        return None


def _to_attribute(attribute_type: AttributeType, value: str) -> Attribute | None:
    if attribute_type is AttributeType.AUTHOR:
        # article:author frequently holds a profile URL rather than a name.
        if value.startswith(("http://", "https://")):
            return None
        return Authors((Generic(normalize_whitespace(value)),))
    if attribute_type is AttributeType.DATE:
        parsed = parse_html_date(value)
        return Date(parsed) if parsed is not None else None
    attribute_cls = TEXT_ATTRIBUTES.get(attribute_type)
    return attribute_cls(value) if attribute_cls else None
