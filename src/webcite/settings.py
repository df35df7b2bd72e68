"""Configuration helpers for webcite."""

from __future__ import annotations

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

DEFAULT_USER_AGENT = "webcite/0.1 (citation generator; +https://pypi.org/project/webcite/)"


class Settings(BaseModel):
    """Runtime configuration loaded from env vars with sensible defaults."""

    log_level: str = "INFO"
    user_agent: str = DEFAULT_USER_AGENT
    http_timeout: float = 30.0
    archive_timeout: float = 120.0
    archive_retry_delay: float = 2.0
    wayback_availability_url: str = "https://archive.org/wayback/available"
    wayback_save_url: str = "https://web.archive.org/save"
    citoid_url: str = "https://en.wikipedia.org/api/rest_v1/data/citation/zotero"
    doi_resolver_url: str = "https://doi.org"
    deepl_api_key: str | None = Field(default=None, repr=False)
    google_translate_api_key: str | None = Field(default=None, repr=False)
    openai_api_key: str | None = Field(default=None, repr=False)
    anthropic_api_key: str | None = Field(default=None, repr=False)

    @classmethod
    def load(cls) -> "Settings":
        load_dotenv()
        defaults = cls()
        return cls(
            log_level=os.environ.get("WEBCITE_LOG_LEVEL", defaults.log_level),
            user_agent=os.environ.get("WEBCITE_USER_AGENT", defaults.user_agent),
            http_timeout=float(os.environ.get("WEBCITE_HTTP_TIMEOUT", defaults.http_timeout)),
            archive_timeout=float(
                os.environ.get("WEBCITE_ARCHIVE_TIMEOUT", defaults.archive_timeout)
            ),
            archive_retry_delay=float(
                os.environ.get("WEBCITE_ARCHIVE_RETRY_DELAY", defaults.archive_retry_delay)
            ),
            wayback_availability_url=os.environ.get(
                "WEBCITE_WAYBACK_AVAILABILITY_URL", defaults.wayback_availability_url
            ),
            wayback_save_url=os.environ.get("WEBCITE_WAYBACK_SAVE_URL", defaults.wayback_save_url),
            citoid_url=os.environ.get("WEBCITE_CITOID_URL", defaults.citoid_url),
            doi_resolver_url=os.environ.get("WEBCITE_DOI_RESOLVER_URL", defaults.doi_resolver_url),
            deepl_api_key=os.environ.get("DEEPL_API_KEY"),
            google_translate_api_key=os.environ.get("GOOGLE_TRANSLATE_API_KEY"),
            openai_api_key=os.environ.get("OPENAI_API_KEY"),
            anthropic_api_key=os.environ.get("ANTHROPIC_API_KEY"),
        )

    def public_dump(self) -> dict[str, object]:
        """Settings with credentials reduced to a set/unset marker."""
        payload = self.model_dump()
        for key in ("deepl_api_key", "google_translate_api_key", "openai_api_key", "anthropic_api_key"):
            payload[key] = "set" if payload[key] else None
        return payload


def get_settings() -> Settings:
    """Convenience accessor for lazy modules."""
    return Settings.load()
