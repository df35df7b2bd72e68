"""Metadata returned by an AI extraction call, mapped onto attributes.

The AI source is not part of the priority chain; the generator overlays its
values only onto fields every configured source left empty.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

from webcite.models import (
    Attribute,
    Authors,
    AttributeType,
    Date,
    Generic,
    Language,
    Publisher,
    Site,
    Title,
)
from webcite.utils import normalize_whitespace, parse_partial_date

# Fields a model is asked to fill, in overlay order.
AI_FIELDS = (
    AttributeType.TITLE,
    AttributeType.AUTHOR,
    AttributeType.DATE,
    AttributeType.SITE,
    AttributeType.PUBLISHER,
    AttributeType.LANGUAGE,
)


class AiExtractedMetadata(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str | None = None
    authors: list[str] | None = None
    date: str | None = None
    site: str | None = None
    publisher: str | None = None
    language: str | None = None

    @field_validator("authors", mode="before")
    @classmethod
    def _coerce_authors(cls, value: object) -> object:
        # Models sometimes answer with a single string instead of a list.
        if isinstance(value, str):
            return [value]
        return value


def attribute_from_ai(metadata: AiExtractedMetadata, attribute_type: AttributeType) -> Attribute | None:
    if attribute_type is AttributeType.AUTHOR:
        names = [normalize_whitespace(name) for name in metadata.authors or [] if name and name.strip()]
        return Authors(tuple(Generic(name) for name in names)) if names else None
    if attribute_type is AttributeType.DATE:
        if not metadata.date:
            return None
        value = parse_partial_date(metadata.date)
        return Date(value) if value is not None else None
    text_fields = {
        AttributeType.TITLE: (Title, metadata.title),
        AttributeType.SITE: (Site, metadata.site),
        AttributeType.PUBLISHER: (Publisher, metadata.publisher),
        AttributeType.LANGUAGE: (Language, metadata.language),
    }
    if attribute_type not in text_fields:
        return None
    attribute_cls, value = text_fields[attribute_type]
    if value is None or not value.strip():
        return None
    return attribute_cls(value.strip())
