from pathlib import Path

import httpx
import pytest

from webcite.models import (
    ArchiveUrl,
    Authors,
    AttributeType,
    Generic,
    Language,
    Publisher,
    Site,
    Title,
    TranslatedTitle,
    Translation,
    Url,
    Year,
)
from webcite.options import (
    AiExtractionOptions,
    ArchiveOptions,
    AttributeConfig,
    AttributePriority,
    GenerationOptions,
    MetadataType,
    TranslationOptions,
)
from webcite.reference import NewsArticle
from webcite.services.ai_extractor import ExtractionError
from webcite.services.archive import WaybackArchiver
from webcite.services.doi import DoiClient
from webcite.services.generator import GenerationError, ReferenceGenerator
from webcite.services.http import HttpFetcher, TransportError
from webcite.services.translation import TranslationError
from webcite.settings import Settings
from webcite.sources import ParseInfo
from webcite.sources.ai import AiExtractedMetadata

PAGE_URL = "https://example.com/story"
PAGE_HTML = """
<html><head>
  <meta property="og:title" content="Deterministic title">
  <meta property="og:site_name" content="Example Times">
</head><body><p>Read more at doi 10.5555/demo.1</p></body></html>
"""

BIBTEX = """@article{Smith_2019,
  title = {Paper from {DOI}},
  author = {Smith, Jane and Doe, John},
  journal = {Journal of Demos},
  year = {2019},
  publisher = {Demo Press}
}"""


class _StubTranslator:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls = 0

    async def translate(self, text: str, options: TranslationOptions) -> str:
        self.calls += 1
        if self.fail:
            raise TranslationError("service down")
        return f"[{options.target}] {text}"


class _StubExtractor:
    def __init__(self, metadata: AiExtractedMetadata | None = None) -> None:
        self.metadata = metadata
        self.calls = 0

    async def extract(self, raw_html: str, url: str, options: AiExtractionOptions) -> AiExtractedMetadata:
        self.calls += 1
        if self.metadata is None:
            raise ExtractionError("model unavailable")
        return self.metadata


class _StubArchiver:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.urls: list[str | None] = []

    async def resolve(self, url: str | None, options: ArchiveOptions):
        self.urls.append(url)
        if self.fail:
            raise TransportError("timeout")
        return ArchiveUrl(f"https://web.archive.org/web/20240101000000/{url}"), None


def _page_handler(request: httpx.Request) -> httpx.Response:
    if request.url.host == "doi.example":
        assert request.headers["Accept"] == "application/x-bibtex"
        return httpx.Response(200, text=BIBTEX)
    if str(request.url) == PAGE_URL:
        return httpx.Response(200, text=PAGE_HTML)
    return httpx.Response(404)


def _generator(
    *,
    translator=None,
    extractor=None,
    archiver=None,
    handler=_page_handler,
) -> tuple[ReferenceGenerator, httpx.AsyncClient]:
    settings = Settings(doi_resolver_url="https://doi.example")
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    fetcher = HttpFetcher(client, settings)
    generator = ReferenceGenerator(
        fetcher,
        archiver=archiver or _StubArchiver(),
        translator=translator or _StubTranslator(),
        ai_extractor=extractor or _StubExtractor(),
        doi_client=DoiClient(fetcher, settings),
    )
    return generator, client


NO_ARCHIVE = ArchiveOptions(include=False)


@pytest.mark.asyncio
async def test_generate_from_url_resolves_and_falls_back_to_request_url() -> None:
    generator, client = _generator()
    async with client:
        reference = await generator.generate(PAGE_URL, GenerationOptions(archive=NO_ARCHIVE))

    assert isinstance(reference, NewsArticle)
    assert reference.title == Title("Deterministic title")
    assert reference.site == Site("Example Times")
    assert reference.url == Url(PAGE_URL)
    assert reference.translated_title is None
    assert reference.archive_url is None


@pytest.mark.asyncio
async def test_doi_bibliography_is_prefetched_when_configured() -> None:
    config = AttributeConfig.uniform(
        AttributePriority.of(MetadataType.DOI, MetadataType.OPENGRAPH)
    )
    generator, client = _generator()
    async with client:
        parse_info = await generator.fetch_parse_info(PAGE_URL, GenerationOptions(attribute_config=config))
        reference = await generator.generate_from_parse_info(
            parse_info, GenerationOptions(attribute_config=config, archive=NO_ARCHIVE)
        )

    assert parse_info.bibliography is not None
    assert MetadataType.DOI in parse_info.prepared
    assert reference.title == Title("Paper from DOI")
    assert reference.publisher == Publisher("Demo Press")
    assert reference.date is not None and reference.date.value == Year(2019)
    assert 'author = "Smith, Jane and Doe, John"' in reference.bibtex()


@pytest.mark.asyncio
async def test_doi_not_fetched_unless_configured() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.host != "doi.example"
        return _page_handler(request)

    generator, client = _generator(handler=handler)
    async with client:
        parse_info = await generator.fetch_parse_info(PAGE_URL, GenerationOptions())

    assert parse_info.bibliography is None
    assert MetadataType.DOI not in parse_info.prepared


@pytest.mark.asyncio
async def test_ai_fills_only_missing_fields() -> None:
    extractor = _StubExtractor(
        AiExtractedMetadata(
            title="AI title",
            authors=["Ada Writer"],
            site="AI site",
            publisher="AI Publisher",
            language="da",
        )
    )
    generator, client = _generator(extractor=extractor)
    options = GenerationOptions(archive=NO_ARCHIVE, ai=AiExtractionOptions(enabled=True, api_key="k"))
    async with client:
        reference = await generator.generate(PAGE_URL, options)

    assert extractor.calls == 1
    assert reference.title == Title("Deterministic title")
    assert reference.site == Site("Example Times")
    assert reference.author == Authors((Generic("Ada Writer"),))
    assert reference.publisher == Publisher("AI Publisher")
    assert reference.language == Language("da")


@pytest.mark.asyncio
async def test_ai_failure_and_missing_url_are_not_fatal() -> None:
    extractor = _StubExtractor(None)
    generator, client = _generator(extractor=extractor)
    options = GenerationOptions(archive=NO_ARCHIVE, ai=AiExtractionOptions(enabled=True, api_key="k"))
    async with client:
        reference = await generator.generate(PAGE_URL, options)
        local = await generator.generate_from_parse_info(ParseInfo.build(PAGE_HTML), options)

    assert reference.title == Title("Deterministic title")
    assert reference.author is None
    assert local.url is None
    assert extractor.calls == 1


@pytest.mark.asyncio
async def test_translation_success_and_failure() -> None:
    options = GenerationOptions(archive=NO_ARCHIVE, translation=TranslationOptions(target="da"))

    generator, client = _generator()
    async with client:
        reference = await generator.generate(PAGE_URL, options)
    assert reference.translated_title == TranslatedTitle(
        Translation(text="[da] Deterministic title", language="da")
    )

    failing = _StubTranslator(fail=True)
    generator, client = _generator(translator=failing)
    async with client:
        reference = await generator.generate(PAGE_URL, options)
    assert failing.calls == 1
    assert reference.translated_title is None
    assert reference.title == Title("Deterministic title")


@pytest.mark.asyncio
async def test_archive_uses_resolved_url_and_degrades_on_failure() -> None:
    archiver = _StubArchiver()
    generator, client = _generator(archiver=archiver)
    async with client:
        reference = await generator.generate(PAGE_URL, GenerationOptions())
    assert archiver.urls == [PAGE_URL]
    assert reference.archive_url == ArchiveUrl(f"https://web.archive.org/web/20240101000000/{PAGE_URL}")

    generator, client = _generator(archiver=_StubArchiver(fail=True))
    async with client:
        reference = await generator.generate(PAGE_URL, GenerationOptions())
    assert reference.archive_url is None
    assert reference.archive_date is None


@pytest.mark.asyncio
async def test_unusable_document_is_fatal() -> None:
    generator, client = _generator()
    async with client:
        with pytest.raises(GenerationError):
            await generator.generate_from_parse_info(ParseInfo.build("   "), GenerationOptions())


@pytest.mark.asyncio
async def test_fetch_failure_is_a_generation_error() -> None:
    generator, client = _generator()
    async with client:
        with pytest.raises(GenerationError):
            await generator.generate("https://example.com/missing", GenerationOptions())


@pytest.mark.asyncio
async def test_generate_from_local_file(tmp_path: Path) -> None:
    page = tmp_path / "page.html"
    page.write_text(PAGE_HTML, encoding="utf-8")
    archiver = _StubArchiver()
    generator, client = _generator(archiver=archiver)
    async with client:
        reference = await generator.generate(str(page), GenerationOptions())

    assert reference.title == Title("Deterministic title")
    assert reference.url is None
    assert archiver.urls == []


@pytest.mark.asyncio
async def test_parse_all_metadata_prefetches_doi() -> None:
    generator, client = _generator()
    async with client:
        collection = await generator.parse_all_metadata(PAGE_URL)

    titles = collection.get(AttributeType.TITLE)
    assert titles[MetadataType.OPENGRAPH] == Title("Deterministic title")
    assert titles[MetadataType.DOI] == Title("Paper from DOI")
    assert collection.default_source(AttributeType.TITLE) is MetadataType.OPENGRAPH


@pytest.mark.asyncio
async def test_archive_redirect_loop_leaves_archive_empty() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "archive.org":
            return httpx.Response(302, headers={"Location": str(request.url)})
        return _page_handler(request)

    settings = Settings(archive_retry_delay=0)
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    fetcher = HttpFetcher(client, settings)
    generator = ReferenceGenerator(
        fetcher,
        archiver=WaybackArchiver(fetcher, settings),
        translator=_StubTranslator(),
        ai_extractor=_StubExtractor(),
    )
    async with client:
        reference = await generator.generate(
            PAGE_URL, GenerationOptions(archive=ArchiveOptions(create_if_missing=False))
        )

    assert reference.title == Title("Deterministic title")
    assert reference.archive_url is None
    assert reference.archive_date is None


@pytest.mark.asyncio
async def test_page_redirect_loop_is_a_generation_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(302, headers={"Location": str(request.url)})

    generator, client = _generator(handler=handler)
    async with client:
        with pytest.raises(GenerationError):
            await generator.generate(PAGE_URL, GenerationOptions(archive=NO_ARCHIVE))
