"""Wayback Machine snapshot lookup and creation.

Resolution runs query -> (save) -> (re-query): an existing snapshot is used
when one is found, otherwise a new capture is requested when the options allow
it. The capture timestamp is read from the save redirect; when that redirect
is unusable the availability API is asked once more after a short pause.
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass
from datetime import datetime, timezone

import structlog

from webcite.models import ArchiveDate, ArchiveUrl, DateTime
from webcite.options import ArchiveOptions
from webcite.services.http import HttpFetcher, ResponseError
from webcite.settings import Settings

logger = structlog.get_logger(__name__)

WAYBACK_TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"
LOCATION_PATTERN = re.compile(r"/web/(\d{14})")


@dataclass(slots=True)
class WaybackSnapshot:
    url: str
    timestamp: str


def parse_wayback_location(location: str) -> str | None:
    """Pull the 14-digit capture timestamp out of ``.../web/<ts>/<url>``."""
    match = LOCATION_PATTERN.search(location)
    if not match:
        return None
    # Reject longer digit runs such as "/web/2024012412150500/".
    end = match.end(1)
    if end < len(location) and location[end].isdigit():
        return None
    return match.group(1)


def parse_wayback_timestamp(timestamp: str) -> DateTime:
    """Wayback timestamps are ``YYYYMMDDHHMMSS`` in UTC."""
    parsed = datetime.strptime(timestamp, WAYBACK_TIMESTAMP_FORMAT)
    return DateTime(parsed.replace(tzinfo=timezone.utc))


class WaybackArchiver:
    def __init__(self, fetcher: HttpFetcher, settings: Settings) -> None:
        self._fetcher = fetcher
        self._settings = settings

    async def query(self, url: str, timestamp: str | None = None) -> WaybackSnapshot | None:
        """Closest existing snapshot; transport failures propagate."""
        params = {"url": url}
        if timestamp:
            params["timestamp"] = timestamp
        logger.info("archive.query", url=url)
        try:
            payload = await self._fetcher.get_json(
                self._settings.wayback_availability_url,
                params=params,
                timeout=self._settings.archive_timeout,
            )
        except ResponseError as exc:
            logger.info("archive.query_unusable", url=url, error=str(exc))
            return None
        closest = None
        if isinstance(payload, dict):
            snapshots = payload.get("archived_snapshots")
            if isinstance(snapshots, dict):
                closest = snapshots.get("closest")
        if not isinstance(closest, dict):
            logger.info("archive.not_found", url=url)
            return None
        snapshot_url, snapshot_ts = closest.get("url"), closest.get("timestamp")
        if not isinstance(snapshot_url, str) or not isinstance(snapshot_ts, str):
            return None
        return WaybackSnapshot(url=snapshot_url, timestamp=snapshot_ts)

    async def save(self, url: str) -> WaybackSnapshot | None:
        """Request a new capture and read its timestamp from the redirect."""
        save_url = f"{self._settings.wayback_save_url.rstrip('/')}/{url}"
        logger.info("archive.save", url=url)
        try:
            location = await self._fetcher.get_redirect_location(
                save_url, timeout=self._settings.archive_timeout
            )
        except ResponseError as exc:
            logger.warning("archive.save_no_redirect", url=url, error=str(exc))
            location = None
        timestamp = parse_wayback_location(location) if location else None
        if location and timestamp:
            return WaybackSnapshot(url=location, timestamp=timestamp)
        logger.info("archive.save_fallback", url=url, delay=self._settings.archive_retry_delay)
        await asyncio.sleep(self._settings.archive_retry_delay)
        return await self.query(url)

    async def resolve(
        self, url: str | None, options: ArchiveOptions
    ) -> tuple[ArchiveUrl | None, ArchiveDate | None]:
        if not options.include or not url:
            return None, None
        snapshot = await self.query(url)
        if snapshot is None and options.create_if_missing:
            snapshot = await self.save(url)
        if snapshot is None:
            return None, None
        try:
            archived_at = parse_wayback_timestamp(snapshot.timestamp)
        except ValueError:
            logger.warning("archive.bad_timestamp", url=url, timestamp=snapshot.timestamp)
            return None, None
        logger.info("archive.resolved", url=url, snapshot=snapshot.url)
        return ArchiveUrl(snapshot.url), ArchiveDate(archived_at)
