"""Reference assembly: fetch, resolve, enrich, package."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

import httpx
import structlog

from webcite.models import (
    ArchiveDate,
    ArchiveUrl,
    Attribute,
    AttributeType,
    TranslatedTitle,
    Url,
)
from webcite.options import ArchiveOptions, GenerationOptions, MetadataType
from webcite.reference import NewsArticle, Reference
from webcite.settings import Settings
from webcite.sources import CitoidRecord, HtmlDocument, ParseInfo, should_skip_citoid
from webcite.sources.ai import AI_FIELDS, attribute_from_ai
from webcite.sources.base import HTML_SOURCES
from webcite.utils import extract_doi
from .ai_extractor import AiExtractor, ExtractionError, MetadataExtractor
from .archive import WaybackArchiver
from .citoid import CitoidClient, CitoidError
from .doi import DoiClient, DoiError
from .http import FetchError, HttpFetcher
from .resolver import MULTI_SOURCE_ORDER, AttributeCollection, MultiSourceAttributeCollection
from .translation import HttpTranslator, TranslationError, Translator, translate_title

logger = structlog.get_logger(__name__)

# Fields carried by the default reference shape.
REFERENCE_FIELDS = (
    AttributeType.TITLE,
    AttributeType.AUTHOR,
    AttributeType.DATE,
    AttributeType.LANGUAGE,
    AttributeType.SITE,
    AttributeType.URL,
    AttributeType.PUBLISHER,
)


class GenerationError(RuntimeError):
    """No reference can be produced for the target."""


class Archiver(Protocol):
    async def resolve(
        self, url: str | None, options: ArchiveOptions
    ) -> tuple[ArchiveUrl | None, ArchiveDate | None]:
        ...


def is_remote(target: str) -> bool:
    return target.lower().startswith(("http://", "https://"))


class ReferenceGenerator:
    """Turns a URL or local HTML file into a :class:`Reference`."""

    def __init__(
        self,
        fetcher: HttpFetcher,
        *,
        archiver: Archiver,
        translator: Translator,
        ai_extractor: MetadataExtractor,
        doi_client: DoiClient | None = None,
        citoid_client: CitoidClient | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._archiver = archiver
        self._translator = translator
        self._ai_extractor = ai_extractor
        self._doi_client = doi_client
        self._citoid_client = citoid_client

    @classmethod
    def create(cls, client: httpx.AsyncClient, settings: Settings) -> "ReferenceGenerator":
        """Wire every collaborator onto one shared HTTP client."""
        fetcher = HttpFetcher(client, settings)
        return cls(
            fetcher,
            archiver=WaybackArchiver(fetcher, settings),
            translator=HttpTranslator(client, settings),
            ai_extractor=AiExtractor(client, settings),
            doi_client=DoiClient(fetcher, settings),
            citoid_client=CitoidClient(fetcher, settings),
        )

    # Input ---------------------------------------------------------------

    async def fetch_parse_info(
        self,
        url: str,
        options: GenerationOptions | None = None,
        *,
        sources: Iterable[MetadataType] | None = None,
    ) -> ParseInfo:
        """Fetch the page once and prefetch only the sources that will be consulted."""
        if sources is None:
            sources = (options or GenerationOptions()).attribute_config.parsers_used()
        prepared = frozenset(sources) | HTML_SOURCES
        logger.info("generator.fetch", url=url, sources=sorted(source.value for source in prepared))
        try:
            raw_html = await self._fetcher.get_text(url)
        except FetchError as exc:
            raise GenerationError(f"could not fetch {url}: {exc}") from exc
        document = HtmlDocument.parse(raw_html)
        bibliography = None
        if MetadataType.DOI in prepared and document is not None:
            bibliography = await self._prefetch_bibliography(document)
        citoid = None
        if MetadataType.CITOID in prepared:
            citoid = await self._prefetch_citoid(url)
        return ParseInfo(
            raw_html=raw_html,
            url=url,
            document=document,
            bibliography=bibliography,
            citoid=citoid,
            prepared=prepared,
        )

    async def _prefetch_bibliography(self, document: HtmlDocument) -> dict[str, str] | None:
        doi = extract_doi(document.text_content)
        if doi is None or self._doi_client is None:
            return None
        try:
            return await self._doi_client.fetch_bibtex(doi)
        except (DoiError, FetchError) as exc:
            logger.warning("generator.doi_failed", doi=doi, error=str(exc))
            return None

    async def _prefetch_citoid(self, url: str) -> CitoidRecord | None:
        if self._citoid_client is None:
            return None
        if should_skip_citoid(url):
            logger.info("generator.citoid_skipped", url=url)
            return None
        try:
            record = await self._citoid_client.lookup(url)
        except (CitoidError, FetchError) as exc:
            logger.warning("generator.citoid_failed", url=url, error=str(exc))
            return None
        if not record.is_valid():
            logger.info("generator.citoid_invalid", url=url, title=record.title)
            return None
        return record

    async def parse_info_from_file(self, path: str | Path) -> ParseInfo:
        path = Path(path)
        try:
            raw_html = await asyncio.to_thread(path.read_text, encoding="utf-8", errors="replace")
        except OSError as exc:
            raise GenerationError(f"could not read {path}: {exc}") from exc
        return ParseInfo.build(raw_html)

    # Output --------------------------------------------------------------

    async def generate(self, target: str, options: GenerationOptions | None = None) -> Reference:
        options = options or GenerationOptions()
        if is_remote(target):
            parse_info = await self.fetch_parse_info(target, options)
        else:
            parse_info = await self.parse_info_from_file(target)
        return await self.generate_from_parse_info(parse_info, options)

    async def generate_from_parse_info(
        self, parse_info: ParseInfo, options: GenerationOptions | None = None
    ) -> Reference:
        options = options or GenerationOptions()
        if not parse_info.has_usable_data:
            raise GenerationError("document has no usable structure and no bibliographic record")

        collection = AttributeCollection.initialize(options.attribute_config, parse_info)
        resolved: dict[AttributeType, Attribute | None] = {
            attribute_type: collection.get(attribute_type) for attribute_type in REFERENCE_FIELDS
        }
        if resolved[AttributeType.URL] is None and parse_info.url:
            resolved[AttributeType.URL] = Url(parse_info.url)

        if options.ai.enabled:
            await self._overlay_ai(parse_info, options, resolved)

        translated_title = await self._translate(resolved[AttributeType.TITLE], options)
        archive_url, archive_date = await self._archive(resolved[AttributeType.URL], options.archive)

        logger.info(
            "generator.done",
            url=parse_info.url,
            resolved=sorted(t.value for t, value in resolved.items() if value is not None),
        )
        return NewsArticle(
            title=resolved[AttributeType.TITLE],
            translated_title=translated_title,
            author=resolved[AttributeType.AUTHOR],
            date=resolved[AttributeType.DATE],
            language=resolved[AttributeType.LANGUAGE],
            site=resolved[AttributeType.SITE],
            url=resolved[AttributeType.URL],
            publisher=resolved[AttributeType.PUBLISHER],
            archive_url=archive_url,
            archive_date=archive_date,
        )

    async def _overlay_ai(
        self,
        parse_info: ParseInfo,
        options: GenerationOptions,
        resolved: dict[AttributeType, Attribute | None],
    ) -> None:
        missing = [field for field in AI_FIELDS if resolved.get(field) is None]
        if not missing:
            logger.debug("generator.ai_not_needed")
            return
        if not parse_info.url:
            logger.info("generator.ai_skipped", reason="no_url")
            return
        try:
            metadata = await self._ai_extractor.extract(parse_info.raw_html, parse_info.url, options.ai)
        except ExtractionError as exc:
            logger.warning("generator.ai_failed", provider=options.ai.provider.value, error=str(exc))
            return
        for field in missing:
            attribute = attribute_from_ai(metadata, field)
            if attribute is not None:
                resolved[field] = attribute
                logger.info("generator.ai_fill", field=field.value)

    async def _translate(
        self, title: Attribute | None, options: GenerationOptions
    ) -> TranslatedTitle | None:
        if not options.translation.enabled:
            return None
        try:
            return await translate_title(self._translator, title, options.translation)
        except TranslationError as exc:
            logger.warning("translation.failed", error=str(exc))
            return None

    async def _archive(
        self, url: Attribute | None, options: ArchiveOptions
    ) -> tuple[ArchiveUrl | None, ArchiveDate | None]:
        if not options.include or not isinstance(url, Url):
            return None, None
        try:
            return await self._archiver.resolve(url.value, options)
        except FetchError as exc:
            logger.warning("archive.failed", url=url.value, error=str(exc))
            return None, None

    # Exploration ---------------------------------------------------------

    async def parse_all_metadata(self, url: str) -> MultiSourceAttributeCollection:
        parse_info = await self.fetch_parse_info(url, sources=MULTI_SOURCE_ORDER)
        return MultiSourceAttributeCollection.parse_all(parse_info)
