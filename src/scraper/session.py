"""Shared headless-browser lifecycle.

``BrowserSessionManager`` owns the one Chromium instance of the process. It
launches it lazily, hands out one isolated context+page per request, retires
the instance after a fatal error so the next request gets a fresh one, and
closes everything on shutdown.

Usage::

    sessions = BrowserSessionManager(mobile=True)
    async with sessions.page() as page:
        await page.goto("https://example.com")
    await sessions.shutdown()
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator

from playwright.async_api import Browser, Page, Playwright, async_playwright

from .errors import ScrapeError, SessionClosedError, SessionFatalError
from .fetcher import DESKTOP_USER_AGENT

logger = logging.getLogger(__name__)

MOBILE_USER_AGENT = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 16_6 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/16.6 Mobile/15E148 Safari/604.1"
)

BASE_LAUNCH_ARGS: tuple[str, ...] = (
    "--disable-gpu",
    "--disable-dev-shm-usage",
    "--no-first-run",
    "--window-size=1920,1080",
)

PERMISSIVE_LAUNCH_ARGS: tuple[str, ...] = (
    "--ignore-certificate-errors",
    "--disable-web-security",
    "--disable-features=IsolateOrigins,site-per-process",
)

PAGE_HEADERS: dict[str, str] = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-us",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}


@dataclass(eq=False)
class _BrowserHandle:
    """One launched browser plus the bookkeeping needed to retire it safely."""

    browser: Browser
    generation: int
    active_pages: int = 0
    retired: bool = False
    closed: bool = False


class BrowserSessionManager:
    """Owns the process-wide browser instance and per-request pages."""

    def __init__(
        self,
        *,
        headless: bool = True,
        permissive: bool = True,
        mobile: bool = True,
        proxy_server: str = "",
        proxy_username: str = "",
        proxy_password: str = "",
        launch_timeout: float = 60.0,
    ) -> None:
        self._headless = headless
        self._permissive = permissive
        self._mobile = mobile
        self._proxy_server = proxy_server
        self._proxy_username = proxy_username
        self._proxy_password = proxy_password
        self._launch_timeout = launch_timeout

        self._lock = asyncio.Lock()
        self._playwright: Playwright | None = None
        self._current: _BrowserHandle | None = None
        self._retired: list[_BrowserHandle] = []
        self._pages: dict[int, _BrowserHandle] = {}
        self._generation = 0
        self._closed = False

    @property
    def launch_count(self) -> int:
        """Number of browser instances launched so far."""
        return self._generation

    @property
    def is_closed(self) -> bool:
        return self._closed

    def launch_options(self) -> dict[str, Any]:
        args = list(BASE_LAUNCH_ARGS)
        if self._permissive:
            args.extend(PERMISSIVE_LAUNCH_ARGS)
        options: dict[str, Any] = {
            "headless": self._headless,
            "args": args,
            "timeout": self._launch_timeout * 1000,
        }
        if self._proxy_server:
            proxy = {"server": self._proxy_server}
            if self._proxy_username:
                proxy["username"] = self._proxy_username
                proxy["password"] = self._proxy_password
            options["proxy"] = proxy
        return options

    def context_options(self) -> dict[str, Any]:
        options: dict[str, Any] = {
            "java_script_enabled": True,
            "extra_http_headers": dict(PAGE_HEADERS),
        }
        if self._mobile:
            options.update(
                user_agent=MOBILE_USER_AGENT,
                viewport={"width": 375, "height": 812},
                is_mobile=True,
                has_touch=True,
                device_scale_factor=3,
            )
        else:
            options.update(
                user_agent=DESKTOP_USER_AGENT,
                viewport={"width": 1920, "height": 1080},
            )
        if self._permissive:
            options.update(bypass_csp=True, ignore_https_errors=True)
        return options

    # ------------------------------------------------------------------ #
    # Page lifecycle

    async def acquire_page(self) -> Page:
        """Open a fresh, independently configured page on the shared browser."""
        handle = await self._checkout()
        browser = handle.browser
        try:
            context = await browser.new_context(**self.context_options())
        except asyncio.CancelledError:
            await self._checkin(handle)
            raise
        except Exception as exc:
            await self._checkin(handle)
            if not browser.is_connected():
                raise await self._disconnect_error(handle, exc) from exc
            logger.warning("browser context setup failed", exc_info=True)
            raise ScrapeError(f"page setup failed: {exc}") from exc

        try:
            page = await context.new_page()
        except asyncio.CancelledError:
            await self._close_quietly(context, "context")
            await self._checkin(handle)
            raise
        except Exception as exc:
            await self._close_quietly(context, "context")
            await self._checkin(handle)
            if not browser.is_connected():
                raise await self._disconnect_error(handle, exc) from exc
            logger.warning("page creation failed", exc_info=True)
            raise ScrapeError(f"page setup failed: {exc}") from exc

        self._pages[id(page)] = handle
        logger.debug(
            "page opened",
            extra={"generation": handle.generation, "active_pages": handle.active_pages},
        )
        return page

    async def release(self, page: Page) -> None:
        """Close *page* and its context. Never raises."""
        handle = self._pages.pop(id(page), None)
        await self._close_quietly(page, "page")
        await self._close_quietly(page.context, "context")
        if handle is not None:
            await self._checkin(handle)
            logger.debug(
                "page closed",
                extra={"generation": handle.generation, "active_pages": handle.active_pages},
            )

    @asynccontextmanager
    async def page(self) -> AsyncIterator[Page]:
        """Acquire a page for the duration of the block, always releasing it.

        An error raised inside the block while the browser has gone away is
        re-raised as ``SessionFatalError`` after the instance is retired, or as
        ``SessionClosedError`` when the manager was shut down meanwhile.
        """
        page = await self.acquire_page()
        handle = self._pages[id(page)]
        try:
            yield page
        except Exception as exc:
            if not handle.browser.is_connected():
                error = await self._disconnect_error(handle, exc)
                if not isinstance(exc, SessionFatalError):
                    raise error from exc
            raise
        finally:
            await self.release(page)

    async def shutdown(self) -> None:
        """Close every browser and stop the Playwright driver. Idempotent."""
        async with self._lock:
            if self._closed:
                return
            self._closed = True
            handles = list(self._retired)
            if self._current is not None:
                handles.append(self._current)
            self._current = None
            self._retired.clear()
            for handle in handles:
                handle.retired = True
                await self._close_browser(handle)
            if self._playwright is not None:
                try:
                    await self._playwright.stop()
                except Exception:
                    logger.warning("playwright stop failed", exc_info=True)
                self._playwright = None
        logger.info("browser session closed", extra={"browsers_closed": len(handles)})

    # ------------------------------------------------------------------ #
    # Internals; methods suffixed ``_locked`` expect ``self._lock`` held

    async def _checkout(self) -> _BrowserHandle:
        """Return a live browser handle with one more page counted against it."""
        async with self._lock:
            if self._closed:
                raise SessionClosedError("browser session is shut down")
            handle = self._current
            if handle is not None and not handle.browser.is_connected():
                logger.warning(
                    "browser disconnected, relaunching",
                    extra={"generation": handle.generation},
                )
                await self._retire_locked(handle)
                handle = None
            if handle is None:
                handle = await self._launch_locked()
            handle.active_pages += 1
            return handle

    async def _checkin(self, handle: _BrowserHandle) -> None:
        async with self._lock:
            handle.active_pages -= 1
            if handle.retired and handle.active_pages <= 0:
                await self._close_browser(handle)

    async def _launch_locked(self) -> _BrowserHandle:
        options = self.launch_options()
        logger.info(
            "launching browser",
            extra={
                "headless": self._headless,
                "permissive": self._permissive,
                "proxy": bool(self._proxy_server),
            },
        )
        try:
            if self._playwright is None:
                self._playwright = await async_playwright().start()
            browser = await self._playwright.chromium.launch(**options)
        except Exception as exc:
            logger.error("browser launch failed", exc_info=True)
            raise SessionFatalError(f"browser launch failed: {exc}") from exc

        self._generation += 1
        handle = _BrowserHandle(browser=browser, generation=self._generation)
        self._current = handle
        logger.info("browser ready", extra={"generation": handle.generation})
        return handle

    async def _disconnect_error(self, handle: _BrowserHandle, exc: Exception) -> SessionFatalError:
        """Retire a browser that went away and build the error for the caller."""
        if self._closed:
            return SessionClosedError("browser session shut down during request")
        logger.error(
            "browser disconnected during request",
            extra={"generation": handle.generation},
        )
        await self._retire(handle)
        return SessionFatalError(f"browser disconnected: {exc}")

    async def _retire(self, handle: _BrowserHandle) -> None:
        async with self._lock:
            await self._retire_locked(handle)

    async def _retire_locked(self, handle: _BrowserHandle) -> None:
        if handle.retired:
            return
        handle.retired = True
        if self._current is handle:
            self._current = None
        logger.warning(
            "browser retired",
            extra={"generation": handle.generation, "active_pages": handle.active_pages},
        )
        if handle.active_pages <= 0:
            await self._close_browser(handle)
        else:
            self._retired.append(handle)

    async def _close_browser(self, handle: _BrowserHandle) -> None:
        if handle in self._retired:
            self._retired.remove(handle)
        if handle.closed:
            return
        handle.closed = True
        await self._close_quietly(handle.browser, "browser")

    @staticmethod
    async def _close_quietly(target: Any, label: str) -> None:
        try:
            await target.close()
        except Exception:
            logger.warning("%s close failed", label, exc_info=True)
