import pytest

from webcite.models import AttributeType
from webcite.options import (
    AiProvider,
    AttributeConfig,
    AttributePriority,
    DEFAULT_PRIORITY,
    GenerationOptions,
    MetadataType,
    parse_priority,
)
from webcite.settings import Settings


def test_settings_load_reads_environment(monkeypatch):
    monkeypatch.setenv("WEBCITE_ARCHIVE_RETRY_DELAY", "0.5")
    monkeypatch.setenv("WEBCITE_CITOID_URL", "https://citoid.example/api")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-secret")

    settings = Settings.load()

    assert settings.archive_retry_delay == 0.5
    assert settings.citoid_url == "https://citoid.example/api"
    assert settings.openai_api_key == "sk-secret"
    assert "sk-secret" not in repr(settings)
    assert settings.public_dump()["openai_api_key"] == "set"


def test_parse_priority():
    assert parse_priority(" SchemaOrg , opengraph ").priority == (
        MetadataType.SCHEMA_ORG,
        MetadataType.OPENGRAPH,
    )
    with pytest.raises(ValueError):
        parse_priority(" , ")
    with pytest.raises(ValueError, match="unknown metadata source"):
        parse_priority("opengraph,rss")


def test_attribute_config_defaults_and_sources_used():
    config = AttributeConfig(
        priorities={AttributeType.TITLE: AttributePriority.of(MetadataType.DOI)}
    )

    assert config.get(AttributeType.TITLE).priority == (MetadataType.DOI,)
    assert config.get(AttributeType.DATE).priority == DEFAULT_PRIORITY
    assert config.parsers_used() == {MetadataType.DOI, *DEFAULT_PRIORITY}


def test_options_from_settings_pick_provider_key():
    settings = Settings(openai_api_key="o-key", anthropic_api_key="a-key", deepl_api_key="d-key")

    openai = GenerationOptions.from_settings(settings, ai_enabled=True)
    anthropic = GenerationOptions.from_settings(
        settings, ai_enabled=True, ai_provider=AiProvider.ANTHROPIC, target_lang="en"
    )

    assert openai.ai.api_key == "o-key"
    assert anthropic.ai.api_key == "a-key"
    assert not openai.translation.enabled
    assert anthropic.translation.enabled
    assert anthropic.translation.deepl_key == "d-key"
