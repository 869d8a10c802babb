"""Fixtures — in-memory Playwright fakes, stub page sources."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

DEMO_HTML = (
    "<html><head><title>Demo</title></head><body>"
    "<h1>Welcome</h1>"
    '<a href="/a">x</a><a href="/a">y</a>'
    '<div class="event-row">Arch-tempered hunt opens Friday</div>'
    "</body></html>"
)


class FakeResponse:
    def __init__(self, status: int = 200, status_text: str = "OK") -> None:
        self.status = status
        self.status_text = status_text
        self.ok = 200 <= status < 300


class FakePage:
    def __init__(self, context: FakeContext) -> None:
        self.context = context
        self.closed = False
        self.listeners: dict[str, list] = {}
        self.goto_calls: list[tuple[str, dict]] = []

    def on(self, event: str, handler) -> None:
        self.listeners.setdefault(event, []).append(handler)

    def remove_listener(self, event: str, handler) -> None:
        self.listeners[event].remove(handler)

    async def goto(self, url: str, **kwargs):
        self.goto_calls.append((url, kwargs))
        return await self.context.browser.owner.goto_handler(self, url)

    async def wait_for_selector(self, selector: str, **kwargs) -> None:
        return None

    async def content(self) -> str:
        return self.context.browser.owner.html

    async def close(self) -> None:
        self.closed = True


class FakeContext:
    def __init__(self, browser: FakeBrowser, options: dict) -> None:
        self.browser = browser
        self.options = options
        self.pages: list[FakePage] = []
        self.closed = False

    async def new_page(self) -> FakePage:
        page = FakePage(self)
        self.pages.append(page)
        return page

    async def close(self) -> None:
        self.closed = True


class FakeBrowser:
    def __init__(self, owner: FakePlaywright, options: dict) -> None:
        self.owner = owner
        self.options = options
        self.connected = True
        self.close_calls = 0
        self.contexts: list[FakeContext] = []

    def is_connected(self) -> bool:
        return self.connected

    async def new_context(self, **options) -> FakeContext:
        context = FakeContext(self, options)
        self.contexts.append(context)
        return context

    async def close(self) -> None:
        self.close_calls += 1
        self.connected = False


class FakeChromium:
    def __init__(self, owner: FakePlaywright) -> None:
        self._owner = owner

    async def launch(self, **options) -> FakeBrowser:
        # Yield so concurrent callers can pile up behind the launch
        await asyncio.sleep(0.01)
        browser = FakeBrowser(self._owner, options)
        self._owner.browsers.append(browser)
        return browser


class FakePlaywright:
    """Stands in for the object returned by ``async_playwright().start()``."""

    def __init__(self) -> None:
        self.browsers: list[FakeBrowser] = []
        self.chromium = FakeChromium(self)
        self.stopped = False
        self.html = DEMO_HTML

    async def goto_handler(self, page: FakePage, url: str):
        return FakeResponse(200)

    async def stop(self) -> None:
        self.stopped = True


@pytest.fixture
def fake_playwright():
    """Patch Playwright startup in the session module with an in-memory fake."""
    fake = FakePlaywright()
    starter = MagicMock()
    starter.start = AsyncMock(return_value=fake)
    with patch("src.scraper.session.async_playwright", return_value=starter):
        yield fake


class StubSource:
    """Page source returning canned HTML or raising a canned error."""

    def __init__(self, html: str = DEMO_HTML, error: Exception | None = None) -> None:
        self.html = html
        self.error = error
        self.urls: list[str] = []
        self.closed = False

    async def load(self, url: str) -> str:
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return self.html

    async def close(self) -> None:
        self.closed = True
