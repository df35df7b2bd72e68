"""Client for Wikipedia's Citoid citation service."""

from __future__ import annotations

from urllib.parse import quote

import structlog
from pydantic import ValidationError

from webcite.services.http import FetchError, HttpFetcher
from webcite.settings import Settings
from webcite.sources.citoid import CitoidRecord

logger = structlog.get_logger(__name__)


class CitoidError(Exception):
    """Citoid had no usable record for the URL."""


class CitoidClient:
    def __init__(self, fetcher: HttpFetcher, settings: Settings) -> None:
        self._fetcher = fetcher
        self._settings = settings

    async def lookup(self, url: str) -> CitoidRecord:
        endpoint = f"{self._settings.citoid_url.rstrip('/')}/{quote(url, safe='')}"
        logger.info("citoid.lookup", url=url)
        try:
            payload = await self._fetcher.get_json(endpoint, headers={"Accept": "application/json"})
        except FetchError as exc:
            raise CitoidError(f"{url}: {exc}") from exc
        if not isinstance(payload, list) or not payload:
            raise CitoidError(f"{url}: no results")
        try:
            return CitoidRecord.model_validate(payload[0])
        except ValidationError as exc:
            raise CitoidError(f"{url}: unexpected record format") from exc
