"""Single-page scrape pipeline with direct and rendered page sources."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .errors import (
    HttpStatusError,
    InvalidInputError,
    NavigationError,
    NavigationTimeoutError,
    ScrapeError,
    SessionClosedError,
    SessionFatalError,
    TransportError,
)
from .extractor import extract
from .fetcher import DirectFetcher
from .navigator import RenderedLoader, load_page
from .pipeline import PageSource, ScrapePipeline, resolve_target
from .session import BrowserSessionManager

if TYPE_CHECKING:
    from src.config import Settings

__all__ = [
    "BrowserSessionManager",
    "DirectFetcher",
    "HttpStatusError",
    "InvalidInputError",
    "NavigationError",
    "NavigationTimeoutError",
    "PageSource",
    "RenderedLoader",
    "ScrapeError",
    "ScrapePipeline",
    "SessionClosedError",
    "SessionFatalError",
    "TransportError",
    "build_page_source",
    "build_pipeline",
    "extract",
    "load_page",
    "resolve_target",
]

logger = logging.getLogger(__name__)


def build_page_source(settings: Settings) -> PageSource:
    """Build the page source selected by ``settings.scrape_mode``."""
    if settings.scrape_mode == "rendered":
        sessions = BrowserSessionManager(
            headless=settings.browser_headless,
            permissive=settings.browser_permissive,
            mobile=settings.browser_mobile,
            proxy_server=settings.proxy_server,
            proxy_username=settings.proxy_username,
            proxy_password=settings.proxy_password,
            launch_timeout=settings.browser_launch_timeout_seconds,
        )
        return RenderedLoader(
            sessions,
            navigation_timeout=settings.navigation_timeout_seconds,
            stabilization_delay=settings.stabilization_delay_seconds,
            content_ready_timeout=settings.content_ready_timeout_seconds,
        )
    return DirectFetcher(timeout=settings.fetch_timeout_seconds)


def build_pipeline(settings: Settings) -> ScrapePipeline:
    source = build_page_source(settings)
    logger.debug("page source selected", extra={"mode": settings.scrape_mode, "source": type(source).__name__})
    return ScrapePipeline(source, default_url=settings.default_target_url)
