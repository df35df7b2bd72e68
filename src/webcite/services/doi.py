"""BibTeX lookup for DOIs via content negotiation on the DOI resolver."""

from __future__ import annotations

from urllib.parse import quote

import bibtexparser
import structlog
from bibtexparser.bparser import BibTexParser
from bibtexparser.customization import convert_to_unicode

from webcite.services.http import FetchError, HttpFetcher
from webcite.settings import Settings

logger = structlog.get_logger(__name__)


class DoiError(Exception):
    """The DOI could not be turned into a BibTeX entry."""


def parse_bibtex(text: str) -> dict[str, str]:
    """Return the first entry of a BibTeX document as a flat field map."""
    parser = BibTexParser(common_strings=True)
    parser.customization = convert_to_unicode
    try:
        database = bibtexparser.loads(text, parser=parser)
    except Exception as exc:  # bibtexparser raises bare pyparsing errors
        raise DoiError(f"unparseable BibTeX: {exc}") from exc
    if not database.entries:
        raise DoiError("BibTeX response holds no entries")
    return dict(database.entries[0])


class DoiClient:
    """Fetches ``application/x-bibtex`` for a DOI."""

    def __init__(self, fetcher: HttpFetcher, settings: Settings) -> None:
        self._fetcher = fetcher
        self._settings = settings

    async def fetch_bibtex(self, doi: str) -> dict[str, str]:
        url = f"{self._settings.doi_resolver_url.rstrip('/')}/{quote(doi, safe='/')}"
        logger.info("doi.fetch", doi=doi)
        try:
            text = await self._fetcher.get_text(url, headers={"Accept": "application/x-bibtex"})
        except FetchError as exc:
            raise DoiError(f"{doi}: {exc}") from exc
        return parse_bibtex(text)
