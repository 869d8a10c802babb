"""Scrape pipeline — resolve target, load HTML, extract summary."""

from __future__ import annotations

import logging
from typing import Any, Protocol
from urllib.parse import urlparse

from src.api.schemas import ScrapeResult

from .errors import InvalidInputError, ScrapeError
from .extractor import extract

logger = logging.getLogger(__name__)

_VALID_SCHEMES = {"http", "https"}


class PageSource(Protocol):
    """Protocol for the interchangeable ``url -> HTML`` strategies."""

    async def load(self, url: str) -> str: ...

    async def close(self) -> None: ...


def resolve_target(url: Any, default: str) -> str:
    """Pick the effective target URL and check it is an http(s) URL.

    ``None`` and the empty string fall back to *default*.
    """
    target = default if url is None or url == "" else url
    if not isinstance(target, str) or not target.strip():
        raise InvalidInputError("missing url")

    target = target.strip()
    try:
        parsed = urlparse(target)
        hostname = parsed.hostname
    except ValueError as exc:
        raise InvalidInputError(f"invalid url: {target[:200]}") from exc
    if parsed.scheme not in _VALID_SCHEMES or not hostname:
        raise InvalidInputError(f"invalid url: {target[:200]}")
    return target


class ScrapePipeline:
    """Composes one page source with the extractor."""

    def __init__(self, source: PageSource, default_url: str) -> None:
        self._source = source
        self._default_url = default_url

    @property
    def source(self) -> PageSource:
        return self._source

    async def scrape(self, url: Any = None) -> ScrapeResult:
        """Scrape *url* (or the default target) and return its summary.

        Raises ``ScrapeError`` for every failure; anything unexpected from the
        page source is wrapped so callers only handle one exception type.
        """
        target = resolve_target(url, self._default_url)
        source_name = type(self._source).__name__
        logger.info("scrape started", extra={"url": target, "source": source_name})

        try:
            html = await self._source.load(target)
        except ScrapeError as exc:
            logger.warning(
                "scrape failed",
                extra={"url": target, "kind": exc.kind, "status": exc.status, "error": exc.message},
            )
            raise
        except Exception as exc:
            logger.exception("scrape failed unexpectedly", extra={"url": target})
            raise ScrapeError(f"Error during scraping: {exc}") from exc

        result = extract(html, url=target)
        logger.info(
            "scrape completed",
            extra={
                "url": target,
                "html_length": len(html),
                "title": result.title[:80],
                "headings": len(result.headings),
                "links_count": result.links_count,
                "images_count": result.images_count,
                "schedule_items": len(result.schedule_items),
            },
        )
        return result

    async def close(self) -> None:
        """Release the page source; safe to call more than once."""
        await self._source.close()
