"""Per-request generation options passed explicitly by the caller."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from webcite.models import AttributeType

if TYPE_CHECKING:
    from webcite.settings import Settings


class MetadataType(str, Enum):
    """Identity of a metadata source."""

    OPENGRAPH = "opengraph"
    SCHEMA_ORG = "schemaorg"
    HTML_META = "htmlmeta"
    DOI = "doi"
    CITOID = "citoid"
    AI = "ai"


DEFAULT_PRIORITY = (MetadataType.OPENGRAPH, MetadataType.SCHEMA_ORG, MetadataType.HTML_META)


class AttributePriority(BaseModel):
    """Ordered list of sources tried for one field."""

    model_config = ConfigDict(frozen=True)

    priority: tuple[MetadataType, ...] = DEFAULT_PRIORITY

    @classmethod
    def of(cls, *sources: MetadataType) -> "AttributePriority":
        return cls(priority=tuple(sources))


class AttributeConfig(BaseModel):
    """Source priority for every field; unset fields use the default order."""

    model_config = ConfigDict(frozen=True)

    priorities: dict[AttributeType, AttributePriority] = Field(default_factory=dict)

    @classmethod
    def uniform(cls, priority: AttributePriority) -> "AttributeConfig":
        """Apply the same priority list to every field."""
        return cls(priorities={attribute_type: priority for attribute_type in AttributeType})

    def get(self, attribute_type: AttributeType) -> AttributePriority:
        return self.priorities.get(attribute_type) or AttributePriority()

    def parsers_used(self) -> set[MetadataType]:
        used: set[MetadataType] = set()
        for attribute_type in AttributeType:
            used.update(self.get(attribute_type).priority)
        return used


class TranslationProvider(str, Enum):
    DEEPL = "deepl"
    GOOGLE = "google"


class TranslationOptions(BaseModel):
    """Title translation; disabled while ``target`` is unset."""

    model_config = ConfigDict(frozen=True)

    provider: TranslationProvider = TranslationProvider.DEEPL
    source: str | None = None
    target: str | None = None
    deepl_key: str | None = Field(default=None, repr=False)
    google_key: str | None = Field(default=None, repr=False)

    @property
    def enabled(self) -> bool:
        return bool(self.target)


class ArchiveOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    include: bool = True
    create_if_missing: bool = True


class AiProvider(str, Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


class AiExtractionOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    provider: AiProvider = AiProvider.OPENAI
    model: str | None = None
    api_key: str | None = Field(default=None, repr=False)


class GenerationOptions(BaseModel):
    """Everything a single ``generate`` call needs to know."""

    model_config = ConfigDict(frozen=True)

    attribute_config: AttributeConfig = Field(default_factory=AttributeConfig)
    translation: TranslationOptions = Field(default_factory=TranslationOptions)
    archive: ArchiveOptions = Field(default_factory=ArchiveOptions)
    ai: AiExtractionOptions = Field(default_factory=AiExtractionOptions)

    @classmethod
    def from_settings(
        cls,
        settings: "Settings",
        *,
        attribute_config: AttributeConfig | None = None,
        provider: TranslationProvider = TranslationProvider.DEEPL,
        source_lang: str | None = None,
        target_lang: str | None = None,
        archive: ArchiveOptions | None = None,
        ai_enabled: bool = False,
        ai_provider: AiProvider = AiProvider.OPENAI,
        ai_model: str | None = None,
    ) -> "GenerationOptions":
        """Build options whose credentials come from the loaded settings."""
        ai_key = (
            settings.openai_api_key if ai_provider is AiProvider.OPENAI else settings.anthropic_api_key
        )
        return cls(
            attribute_config=attribute_config or AttributeConfig(),
            translation=TranslationOptions(
                provider=provider,
                source=source_lang,
                target=target_lang,
                deepl_key=settings.deepl_api_key,
                google_key=settings.google_translate_api_key,
            ),
            archive=archive or ArchiveOptions(),
            ai=AiExtractionOptions(
                enabled=ai_enabled,
                provider=ai_provider,
                model=ai_model,
                api_key=ai_key,
            ),
        )


def parse_priority(value: str) -> AttributePriority:
    """Parse a comma-separated source list such as ``"schemaorg,opengraph"``."""
    names = [part.strip().lower() for part in value.split(",") if part.strip()]
    if not names:
        raise ValueError("priority list is empty")
    try:
        return AttributePriority(priority=tuple(MetadataType(name) for name in names))
    except ValueError as exc:
        known = ", ".join(member.value for member in MetadataType)
        raise ValueError(f"unknown metadata source in {value!r}; expected one of: {known}") from exc
