"""Title translation through DeepL or Google Cloud Translation."""

from __future__ import annotations

import html
from typing import Protocol

import httpx
import structlog

from webcite.models import Attribute, Title, TranslatedTitle, Translation
from webcite.options import TranslationOptions, TranslationProvider
from webcite.settings import Settings

logger = structlog.get_logger(__name__)

DEEPL_FREE_URL = "https://api-free.deepl.com/v2/translate"
DEEPL_PRO_URL = "https://api.deepl.com/v2/translate"
GOOGLE_TRANSLATE_URL = "https://translation.googleapis.com/language/translate/v2"


class TranslationError(Exception):
    """The translation backend was unavailable or answered unexpectedly."""


class Translator(Protocol):
    async def translate(self, text: str, options: TranslationOptions) -> str:
        ...


class HttpTranslator:
    """Dispatches to the provider named in the options."""

    def __init__(self, client: httpx.AsyncClient, settings: Settings) -> None:
        self._client = client
        self._settings = settings

    async def translate(self, text: str, options: TranslationOptions) -> str:
        if not options.target:
            raise TranslationError("no target language")
        logger.info(
            "translation.request",
            provider=options.provider.value,
            source=options.source,
            target=options.target,
        )
        try:
            if options.provider is TranslationProvider.GOOGLE:
                translated = await self._google(text, options)
            else:
                translated = await self._deepl(text, options)
        except httpx.HTTPError as exc:
            raise TranslationError(f"{options.provider.value}: {exc}") from exc
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise TranslationError(f"{options.provider.value}: unexpected response") from exc
        return html.unescape(translated)

    async def _deepl(self, text: str, options: TranslationOptions) -> str:
        if not options.deepl_key:
            raise TranslationError("DeepL API key is not set")
        # Free-tier keys carry a ":fx" suffix and use a separate host.
        url = DEEPL_FREE_URL if options.deepl_key.endswith(":fx") else DEEPL_PRO_URL
        body: dict[str, object] = {"text": [text], "target_lang": options.target.upper()}
        if options.source:
            body["source_lang"] = options.source.upper()
        response = await self._client.post(
            url,
            json=body,
            headers={"Authorization": f"DeepL-Auth-Key {options.deepl_key}"},
            timeout=self._settings.http_timeout,
        )
        response.raise_for_status()
        return response.json()["translations"][0]["text"]

    async def _google(self, text: str, options: TranslationOptions) -> str:
        if not options.google_key:
            raise TranslationError("Google Translate API key is not set")
        params = {"key": options.google_key, "q": text, "target": options.target.lower()}
        if options.source:
            params["source"] = options.source.lower()
        response = await self._client.get(
            GOOGLE_TRANSLATE_URL, params=params, timeout=self._settings.http_timeout
        )
        response.raise_for_status()
        return response.json()["data"]["translations"][0]["translatedText"]


async def translate_title(
    translator: Translator, title: Attribute | None, options: TranslationOptions
) -> TranslatedTitle:
    """Translate a resolved ``Title``; raises ``TranslationError`` when impossible."""
    if not options.enabled:
        raise TranslationError("translation not requested")
    if not isinstance(title, Title):
        raise TranslationError("no title to translate")
    text = await translator.translate(title.value, options)
    return TranslatedTitle(Translation(text=text, language=options.target))
