import json

import httpx
import pytest

from webcite.options import AiExtractionOptions, AiProvider
from webcite.services.ai_extractor import AiExtractor, ExtractionError, extract_json_from_text
from webcite.settings import Settings

PAGE = "<html><head><script>ignored()</script></head><body><h1>Hello</h1></body></html>"


def _extractor(handler) -> tuple[AiExtractor, httpx.AsyncClient]:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return AiExtractor(client, Settings()), client


def test_extract_json_from_free_text() -> None:
    assert extract_json_from_text('{"title": "A"}') == {"title": "A"}
    assert extract_json_from_text('Sure! Here it is:\n{"title": "B"}\nThanks') == {"title": "B"}
    with pytest.raises(ExtractionError):
        extract_json_from_text("no json at all")


@pytest.mark.asyncio
async def test_openai_request_and_parse() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        assert request.headers["Authorization"] == "Bearer sk-test"
        assert body["model"] == "gpt-4o-mini"
        assert body["response_format"] == {"type": "json_object"}
        assert "ignored()" not in body["messages"][1]["content"]
        content = json.dumps({"title": "Hello", "authors": ["Jane Smith"], "date": "2024"})
        return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})

    extractor, client = _extractor(handler)
    options = AiExtractionOptions(enabled=True, api_key="sk-test")
    async with client:
        metadata = await extractor.extract(PAGE, "https://example.com", options)

    assert metadata.title == "Hello"
    assert metadata.authors == ["Jane Smith"]


@pytest.mark.asyncio
async def test_anthropic_reply_with_prose() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["x-api-key"] == "ak"
        assert request.headers["anthropic-version"] == "2023-06-01"
        assert json.loads(request.content)["model"] == "claude-3-haiku-20240307"
        text = 'Here is the metadata: {"site": "Example", "language": "en"}'
        return httpx.Response(200, json={"content": [{"type": "text", "text": text}]})

    extractor, client = _extractor(handler)
    options = AiExtractionOptions(enabled=True, provider=AiProvider.ANTHROPIC, api_key="ak")
    async with client:
        metadata = await extractor.extract(PAGE, "https://example.com", options)

    assert metadata.site == "Example"
    assert metadata.language == "en"


@pytest.mark.asyncio
async def test_missing_key_and_http_errors_raise() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500)

    extractor, client = _extractor(handler)
    async with client:
        with pytest.raises(ExtractionError):
            await extractor.extract(PAGE, "https://example.com", AiExtractionOptions(enabled=True))
        with pytest.raises(ExtractionError):
            await extractor.extract(
                PAGE, "https://example.com", AiExtractionOptions(enabled=True, api_key="k")
            )
