"""Rendered-mode page loading — drive one browser page to settled HTML."""

from __future__ import annotations

import asyncio
import logging

from playwright.async_api import ConsoleMessage, Page, Request
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeout

from .errors import HttpStatusError, NavigationError, NavigationTimeoutError
from .session import BrowserSessionManager

logger = logging.getLogger(__name__)

# Slack on top of the per-step timeouts before the overall deadline fires
DEADLINE_MARGIN_SECONDS = 5.0


async def load_page(
    page: Page,
    url: str,
    *,
    navigation_timeout: float = 60.0,
    stabilization_delay: float = 2.0,
    content_ready_timeout: float = 5.0,
) -> str:
    """Navigate *page* to *url*, wait for it to settle, return the markup.

    Waits for network idle (bounded by ``navigation_timeout``), then a fixed
    ``stabilization_delay`` for client-rendered content, then for ``<body>``.
    """

    def on_console(msg: ConsoleMessage) -> None:
        logger.debug("browser console", extra={"url": url, "console_type": msg.type, "text": msg.text})

    def on_request_failed(request: Request) -> None:
        logger.debug(
            "browser sub-request failed",
            extra={"url": url, "request_url": request.url, "failure": request.failure},
        )

    page.on("console", on_console)
    page.on("requestfailed", on_request_failed)
    try:
        logger.debug("navigating", extra={"url": url, "timeout": navigation_timeout})
        try:
            response = await page.goto(
                url,
                wait_until="networkidle",
                timeout=navigation_timeout * 1000,
            )
        except PlaywrightTimeout as exc:
            logger.warning("navigation timed out", extra={"url": url, "timeout": navigation_timeout})
            raise NavigationTimeoutError(f"navigation timed out after {navigation_timeout}s") from exc
        except PlaywrightError as exc:
            logger.warning("navigation failed", extra={"url": url}, exc_info=True)
            raise NavigationError(f"navigation failed: {exc.message}") from exc

        if response is None:
            raise NavigationError("no response received", reason="no_response")
        logger.debug("navigation response", extra={"url": url, "status": response.status})
        if not response.ok:
            raise HttpStatusError(response.status, response.status_text)

        await asyncio.sleep(stabilization_delay)

        try:
            await page.wait_for_selector("body", timeout=content_ready_timeout * 1000)
        except PlaywrightError as exc:
            raise NavigationError(
                f"page content not ready: {exc.message}", reason="content_not_ready"
            ) from exc

        html = await page.content()
        logger.debug("page content received", extra={"url": url, "html_length": len(html)})
        return html
    finally:
        page.remove_listener("console", on_console)
        page.remove_listener("requestfailed", on_request_failed)


class RenderedLoader:
    """Loads pages through the shared browser session."""

    def __init__(
        self,
        sessions: BrowserSessionManager,
        *,
        navigation_timeout: float = 60.0,
        stabilization_delay: float = 2.0,
        content_ready_timeout: float = 5.0,
        deadline_margin: float = DEADLINE_MARGIN_SECONDS,
    ) -> None:
        self._sessions = sessions
        self._navigation_timeout = navigation_timeout
        self._stabilization_delay = stabilization_delay
        self._content_ready_timeout = content_ready_timeout
        self._deadline_margin = deadline_margin

    @property
    def deadline(self) -> float:
        """Upper bound, in seconds, on one full page load."""
        return (
            self._navigation_timeout
            + self._stabilization_delay
            + self._content_ready_timeout
            + self._deadline_margin
        )

    async def load(self, url: str) -> str:
        """Render *url* in an isolated page and return its HTML."""
        try:
            return await asyncio.wait_for(self._load(url), timeout=self.deadline)
        except asyncio.TimeoutError as exc:
            logger.warning("rendered load exceeded deadline", extra={"url": url, "deadline": self.deadline})
            raise NavigationTimeoutError(f"page load exceeded {self.deadline}s") from exc

    async def _load(self, url: str) -> str:
        async with self._sessions.page() as page:
            return await load_page(
                page,
                url,
                navigation_timeout=self._navigation_timeout,
                stabilization_delay=self._stabilization_delay,
                content_ready_timeout=self._content_ready_timeout,
            )

    async def close(self) -> None:
        await self._sessions.shutdown()
