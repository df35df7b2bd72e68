"""LLM-backed metadata extraction used to fill fields no source provided."""

from __future__ import annotations

import json
from typing import Protocol

import httpx
import structlog
from pydantic import ValidationError

from webcite.options import AiExtractionOptions, AiProvider
from webcite.settings import Settings
from webcite.sources.ai import AiExtractedMetadata
from webcite.utils import html_to_text

logger = structlog.get_logger(__name__)

OPENAI_URL = "https://api.openai.com/v1/chat/completions"
ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"
DEFAULT_MODELS = {
    AiProvider.OPENAI: "gpt-4o-mini",
    AiProvider.ANTHROPIC: "claude-3-haiku-20240307",
}

SYSTEM_PROMPT = """You are a metadata extraction assistant. Your task is to extract bibliographic reference information from web page content.

Extract the following fields if present:
- title: The main title of the article/page
- authors: List of author names (as an array of strings). Look for bylines like "By John Smith" or author credits.
- date: Publication date in ISO format (YYYY-MM-DD) if possible
- site: The website or publication name (e.g., "The New York Times", "BBC News", "Ekstra Bladet")
- publisher: The publishing organization or company. If publishing organization is not explicitly stated, use your best judgment based on the site.
- language: ISO 639-1 language code (e.g., "en", "de", "fr", "da" for Danish)

Return ONLY a valid JSON object with these fields. Use null for fields you cannot determine.
Do not include any explanation or markdown formatting."""


class ExtractionError(Exception):
    """The model could not be reached or returned no usable JSON."""


class MetadataExtractor(Protocol):
    async def extract(
        self, raw_html: str, url: str, options: AiExtractionOptions
    ) -> AiExtractedMetadata:
        ...


def build_user_prompt(url: str, text_content: str) -> str:
    return f"Extract metadata from this web page.\n\nURL: {url}\n\nContent:\n{text_content}"


def extract_json_from_text(text: str) -> dict:
    """Parse ``text`` as JSON, or the outermost ``{...}`` span inside it."""
    candidates = [text]
    start, end = text.find("{"), text.rfind("}")
    if start != -1 and end > start:
        candidates.append(text[start : end + 1])
    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except ValueError:
            continue
        if isinstance(data, dict):
            return data
    raise ExtractionError("could not find a JSON object in the response")


class AiExtractor:
    """Calls OpenAI chat completions or Anthropic messages over HTTP."""

    def __init__(self, client: httpx.AsyncClient, settings: Settings) -> None:
        self._client = client
        self._settings = settings

    async def extract(
        self, raw_html: str, url: str, options: AiExtractionOptions
    ) -> AiExtractedMetadata:
        if not options.api_key:
            raise ExtractionError(f"no API key configured for {options.provider.value}")
        model = options.model or DEFAULT_MODELS[options.provider]
        text_content = html_to_text(raw_html)
        logger.info("ai.request", provider=options.provider.value, model=model, chars=len(text_content))
        try:
            if options.provider is AiProvider.ANTHROPIC:
                content = await self._anthropic(model, options.api_key, url, text_content)
            else:
                content = await self._openai(model, options.api_key, url, text_content)
        except httpx.HTTPError as exc:
            raise ExtractionError(f"{options.provider.value}: {exc}") from exc
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise ExtractionError(f"{options.provider.value}: unexpected response") from exc
        try:
            return AiExtractedMetadata.model_validate(extract_json_from_text(content))
        except ValidationError as exc:
            raise ExtractionError(f"{options.provider.value}: malformed metadata") from exc

    async def _openai(self, model: str, api_key: str, url: str, text_content: str) -> str:
        body = {
            "model": model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_user_prompt(url, text_content)},
            ],
            "response_format": {"type": "json_object"},
            "temperature": 0.1,
        }
        response = await self._client.post(
            OPENAI_URL,
            json=body,
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=self._settings.http_timeout,
        )
        response.raise_for_status()
        return response.json()["choices"][0]["message"]["content"]

    async def _anthropic(self, model: str, api_key: str, url: str, text_content: str) -> str:
        body = {
            "model": model,
            "max_tokens": 1024,
            "messages": [
                {
                    "role": "user",
                    "content": f"{SYSTEM_PROMPT}\n\n{build_user_prompt(url, text_content)}",
                }
            ],
        }
        response = await self._client.post(
            ANTHROPIC_URL,
            json=body,
            headers={"x-api-key": api_key, "anthropic-version": ANTHROPIC_VERSION},
            timeout=self._settings.http_timeout,
        )
        response.raise_for_status()
        return response.json()["content"][0]["text"]
