"""Service layer — runs scrapes for the API routes and shapes their errors."""

from __future__ import annotations

import logging

from fastapi.responses import JSONResponse

from src.api.schemas import ErrorResponse, ScrapeResult
from src.scraper import ScrapeError, ScrapePipeline

logger = logging.getLogger(__name__)

# HTTP status returned for each ScrapeError kind
ERROR_STATUS: dict[str, int] = {
    "invalid_input": 400,
    "transport": 502,
    "http_status": 502,
    "navigation": 502,
    "navigation_timeout": 502,
    "session_fatal": 500,
    "session_closed": 503,
    "internal": 500,
}


def error_status_code(exc: ScrapeError) -> int:
    return ERROR_STATUS.get(exc.kind, 500)


def error_response(exc: ScrapeError) -> JSONResponse:
    """Render *exc* as the JSON error envelope."""
    body = ErrorResponse(error=exc.message, kind=exc.kind, status=exc.status)
    return JSONResponse(status_code=error_status_code(exc), content=body.model_dump())


async def run_scrape(pipeline: ScrapePipeline, url: object) -> ScrapeResult | JSONResponse:
    """Scrape *url*, returning the result or an error envelope response."""
    try:
        return await pipeline.scrape(url)
    except ScrapeError as exc:
        logger.info(
            "scrape request rejected",
            extra={"kind": exc.kind, "http_status": error_status_code(exc)},
        )
        return error_response(exc)
