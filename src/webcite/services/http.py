"""Thin page-fetch primitives over a shared ``httpx.AsyncClient``."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx
import structlog

from webcite.settings import Settings

logger = structlog.get_logger(__name__)


class FetchError(Exception):
    """Base error for talking to any external service."""


class TransportError(FetchError):
    """DNS, connect or timeout failure."""


class ResponseError(FetchError):
    """The service answered, but not with something usable."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class HttpFetcher:
    """GET helpers returning text, JSON or a redirect target."""

    def __init__(self, client: httpx.AsyncClient, settings: Settings) -> None:
        self._client = client
        self._settings = settings

    def _headers(self, headers: Mapping[str, str] | None) -> dict[str, str]:
        merged = {"User-Agent": self._settings.user_agent}
        if headers:
            merged.update(headers)
        return merged

    async def get(
        self,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, Any] | None = None,
        follow_redirects: bool = True,
        timeout: float | None = None,
    ) -> httpx.Response:
        logger.debug("http.get", url=url)
        try:
            return await self._client.get(
                url,
                headers=self._headers(headers),
                params=params,
                follow_redirects=follow_redirects,
                timeout=timeout or self._settings.http_timeout,
            )
        except httpx.TransportError as exc:
            logger.warning("http.transport_error", url=url, error=str(exc))
            raise TransportError(f"{url}: {exc}") from exc
        except httpx.HTTPError as exc:
            # Redirect loops and undecodable bodies.
            logger.warning("http.error", url=url, error=str(exc))
            raise ResponseError(f"{url}: {exc}") from exc

    async def get_text(self, url: str, *, headers: Mapping[str, str] | None = None) -> str:
        response = await self.get(url, headers=headers)
        _raise_for_status(response, url)
        return response.text

    async def get_json(
        self,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:
        response = await self.get(url, headers=headers, params=params, timeout=timeout)
        _raise_for_status(response, url)
        try:
            return response.json()
        except ValueError as exc:
            raise ResponseError(f"{url}: response is not JSON", response.status_code) from exc

    async def get_redirect_location(self, url: str, *, timeout: float | None = None) -> str:
        """Issue a GET without following redirects and return ``Location``."""
        response = await self.get(url, follow_redirects=False, timeout=timeout)
        location = response.headers.get("location")
        if not location:
            raise ResponseError(f"{url}: no redirect location", response.status_code)
        return location


def _raise_for_status(response: httpx.Response, url: str) -> None:
    if response.is_error:
        raise ResponseError(f"{url}: HTTP {response.status_code}", response.status_code)
