"""JSON API for webcite."""

from __future__ import annotations

from typing import Optional

import httpx
from fastapi import FastAPI, HTTPException, status
from pydantic import BaseModel

from webcite.log import configure_logging
from webcite.options import (
    AiProvider,
    ArchiveOptions,
    AttributeConfig,
    GenerationOptions,
    TranslationProvider,
    parse_priority,
)
from webcite.services import GenerationError, ReferenceGenerator
from webcite.services.generator import is_remote
from webcite.settings import Settings, get_settings


class ReferenceRequest(BaseModel):
    url: str
    priority: Optional[str] = None
    source_lang: Optional[str] = None
    target_lang: Optional[str] = None
    translator: TranslationProvider = TranslationProvider.DEEPL
    include_archive: bool = True
    create_archive: bool = True
    ai: bool = False
    ai_provider: AiProvider = AiProvider.OPENAI
    ai_model: Optional[str] = None


class MetadataRequest(BaseModel):
    url: str


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Factory used by uvicorn. ``transport`` replaces the network in tests."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    app = FastAPI(title="webcite")

    def client() -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=settings.http_timeout, transport=transport)

    def require_remote(url: str) -> None:
        # Local paths would let callers read files from the server.
        if not is_remote(url):
            raise HTTPException(status.HTTP_422_UNPROCESSABLE_ENTITY, detail="url must be http(s)")

    def options_for(request: ReferenceRequest) -> GenerationOptions:
        try:
            config = (
                AttributeConfig.uniform(parse_priority(request.priority))
                if request.priority
                else AttributeConfig()
            )
        except ValueError as exc:
            raise HTTPException(status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
        return GenerationOptions.from_settings(
            settings,
            attribute_config=config,
            provider=request.translator,
            source_lang=request.source_lang,
            target_lang=request.target_lang,
            archive=ArchiveOptions(include=request.include_archive, create_if_missing=request.create_archive),
            ai_enabled=request.ai,
            ai_provider=request.ai_provider,
            ai_model=request.ai_model,
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/reference")
    async def reference(request: ReferenceRequest) -> dict[str, object]:
        require_remote(request.url)
        options = options_for(request)
        async with client() as http_client:
            generator = ReferenceGenerator.create(http_client, settings)
            try:
                result = await generator.generate(request.url, options)
            except GenerationError as exc:
                raise HTTPException(status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
        return result.to_dict()

    @app.post("/api/metadata")
    async def metadata(request: MetadataRequest) -> dict[str, object]:
        require_remote(request.url)
        async with client() as http_client:
            generator = ReferenceGenerator.create(http_client, settings)
            try:
                collection = await generator.parse_all_metadata(request.url)
            except GenerationError as exc:
                raise HTTPException(status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
        return {"url": request.url, "fields": collection.to_dict()}

    return app
