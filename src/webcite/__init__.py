"""Generate wiki, BibTeX and Harvard citations from web pages.

The coroutines below open a short-lived ``httpx.AsyncClient`` per call. Code
that issues many requests should build a
:class:`~webcite.services.generator.ReferenceGenerator` on its own client.
"""

from __future__ import annotations

import httpx

from webcite.options import GenerationOptions
from webcite.reference import GenericReference, NewsArticle, Reference, ScholarlyArticle
from webcite.services.generator import GenerationError, ReferenceGenerator
from webcite.services.resolver import MultiSourceAttributeCollection
from webcite.settings import Settings, get_settings
from webcite.sources import ParseInfo

__version__ = "0.1.0"


def _client(settings: Settings) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=settings.http_timeout, headers={"User-Agent": settings.user_agent})


async def generate(
    target: str, options: GenerationOptions | None = None, settings: Settings | None = None
) -> Reference:
    """Build a reference from a URL or a local HTML file path."""
    settings = settings or get_settings()
    async with _client(settings) as client:
        return await ReferenceGenerator.create(client, settings).generate(target, options)


async def generate_from_file(
    path: str, options: GenerationOptions | None = None, settings: Settings | None = None
) -> Reference:
    settings = settings or get_settings()
    async with _client(settings) as client:
        generator = ReferenceGenerator.create(client, settings)
        parse_info = await generator.parse_info_from_file(path)
        return await generator.generate_from_parse_info(parse_info, options)


async def fetch_parse_info(
    url: str, options: GenerationOptions | None = None, settings: Settings | None = None
) -> ParseInfo:
    """Fetch a page once so it can feed both generation and the multi-source view."""
    settings = settings or get_settings()
    async with _client(settings) as client:
        return await ReferenceGenerator.create(client, settings).fetch_parse_info(url, options)


async def generate_from_parse_info(
    parse_info: ParseInfo, options: GenerationOptions | None = None, settings: Settings | None = None
) -> Reference:
    settings = settings or get_settings()
    async with _client(settings) as client:
        return await ReferenceGenerator.create(client, settings).generate_from_parse_info(
            parse_info, options
        )


async def parse_all_metadata(url: str, settings: Settings | None = None) -> MultiSourceAttributeCollection:
    settings = settings or get_settings()
    async with _client(settings) as client:
        return await ReferenceGenerator.create(client, settings).parse_all_metadata(url)


def parse_all_metadata_from_parse_info(parse_info: ParseInfo) -> MultiSourceAttributeCollection:
    return MultiSourceAttributeCollection.parse_all(parse_info)


__all__ = [
    "GenerationError",
    "GenerationOptions",
    "GenericReference",
    "NewsArticle",
    "ParseInfo",
    "Reference",
    "ScholarlyArticle",
    "Settings",
    "fetch_parse_info",
    "generate",
    "generate_from_file",
    "generate_from_parse_info",
    "parse_all_metadata",
    "parse_all_metadata_from_parse_info",
]
