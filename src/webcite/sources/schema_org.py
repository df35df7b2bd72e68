"""Schema.org JSON-LD metadata source.

Only the first JSON-LD object on the page is consulted. Authors and sites are
nested objects in the schema and get their own extraction strategies; every
other field is a plain string lookup.
"""

from __future__ import annotations

from typing import Any

from webcite.models import (
    TEXT_ATTRIBUTES,
    Attribute,
    Author,
    Authors,
    AttributeType,
    Date,
    Organization,
    Person,
    Site,
)
from webcite.options import MetadataType
from webcite.sources.base import ParseInfo
from webcite.utils import normalize_whitespace, parse_html_date

KEYS: dict[AttributeType, tuple[str, ...]] = {
    AttributeType.TITLE: ("headline", "alternativeHeadline"),
    AttributeType.AUTHOR: ("author",),
    AttributeType.LANGUAGE: ("inLanguage",),
    AttributeType.SITE: ("publisher", "sourceOrganization"),
    AttributeType.URL: ("mainEntityOfPage", "url"),
    AttributeType.DATE: ("datePublished", "dateModified"),
    AttributeType.TYPE: ("@type",),
}

AUTHOR_TYPES = {"Person": Person, "Organization": Organization}


class SchemaOrg:
    name = MetadataType.SCHEMA_ORG

    def parse(self, parse_info: ParseInfo, attribute_type: AttributeType) -> Attribute | None:
        parse_info.require(self.name)
        document = parse_info.document
        if document is None or not document.schema_org:
            return None
        schema = document.schema_org[0]
        keys = KEYS.get(attribute_type, ())
        if attribute_type is AttributeType.AUTHOR:
            return _author_attribute(schema, keys)
        if attribute_type is AttributeType.SITE:
            return _site_attribute(schema, keys)
        return _generic_attribute(schema, keys, attribute_type)


def _generic_attribute(
    schema: dict[str, Any], keys: tuple[str, ...], attribute_type: AttributeType
) -> Attribute | None:
    for key in keys:
        value = _string_value(schema.get(key))
        if value is None:
            continue
        if attribute_type is AttributeType.DATE:
            parsed = parse_html_date(value)
            if parsed is not None:
                return Date(parsed)
            continue
        attribute_cls = TEXT_ATTRIBUTES.get(attribute_type)
        if attribute_cls is not None:
            return attribute_cls(value)
    return None


def _string_value(value: Any) -> str | None:
    if isinstance(value, str):
        return value if value.strip() else None
    # "@type" may be a list; mainEntityOfPage may be {"@id": ...}.
    if isinstance(value, list) and value and isinstance(value[0], str):
        return value[0]
    if isinstance(value, dict) and isinstance(value.get("@id"), str):
        return value["@id"]
    return None


def _author_attribute(schema: dict[str, Any], keys: tuple[str, ...]) -> Attribute | None:
    for key in keys:
        value = schema.get(key)
        if isinstance(value, dict):
            value = [value]
        if not isinstance(value, list):
            continue
        authors = [author for author in map(_typed_author, value) if author is not None]
        if authors:
            return Authors(tuple(authors))
    return None


def _typed_author(entry: Any) -> Author | None:
    """Entries whose ``@type`` is not Person/Organization are dropped."""
    if not isinstance(entry, dict):
        return None
    type_name = entry.get("@type")
    author_cls = AUTHOR_TYPES.get(type_name) if isinstance(type_name, str) else None
    name = entry.get("name")
    if author_cls is None or not isinstance(name, str) or not name.strip():
        return None
    return author_cls(normalize_whitespace(name))


def _site_attribute(schema: dict[str, Any], keys: tuple[str, ...]) -> Attribute | None:
    for key in keys:
        value = schema.get(key)
        if isinstance(value, dict):
            name = value.get("name")
            if isinstance(name, str) and name.strip():
                return Site(name)
    return None
