"""Direct-mode page loader — one plain HTTP GET, no script execution."""

from __future__ import annotations

import logging

import httpx

from .errors import HttpStatusError, InvalidInputError, TransportError

logger = logging.getLogger(__name__)

DESKTOP_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/118.0.0.0 Safari/537.36"
)

DISGUISE_HEADERS: dict[str, str] = {
    "User-Agent": DESKTOP_USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "DNT": "1",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "same-origin",
    "Sec-Fetch-User": "?1",
    "Cache-Control": "max-age=0",
}


def build_headers(url: str) -> dict[str, str]:
    """Return the disguise headers with ``Referer`` set to the target's origin."""
    headers = dict(DISGUISE_HEADERS)
    try:
        target = httpx.URL(url)
    except httpx.InvalidURL:
        return headers
    # netloc is IDNA-encoded and carries no userinfo
    if target.scheme and target.netloc:
        headers["Referer"] = f"{target.scheme}://{target.netloc.decode('ascii')}/"
    return headers


class DirectFetcher:
    """Loads pages with a single redirect-following GET."""

    def __init__(self, *, timeout: float = 30.0) -> None:
        self._timeout = timeout

    async def load(self, url: str) -> str:
        """Fetch *url* and return the response body as text."""
        logger.debug("direct fetch", extra={"url": url})
        try:
            async with httpx.AsyncClient(
                follow_redirects=True,
                headers=build_headers(url),
            ) as client:
                resp = await client.get(url, timeout=self._timeout)
                resp.raise_for_status()
        except httpx.InvalidURL as exc:
            raise InvalidInputError(f"invalid url: {exc}") from exc
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.warning("direct fetch returned error status", extra={"url": url, "status": status})
            raise HttpStatusError(status) from exc
        except httpx.HTTPError as exc:
            logger.warning("direct fetch failed", extra={"url": url}, exc_info=True)
            raise TransportError(f"fetch failed: {exc}") from exc

        return resp.text

    async def close(self) -> None:
        """Nothing to release; present for parity with the rendered loader."""
