"""GET/POST /api/scrape endpoint handlers."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from src.api.schemas import ErrorResponse, ScrapeRequest, ScrapeResult
from src.api.service import run_scrape
from src.scraper import ScrapePipeline

router = APIRouter(prefix="/api")

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


def _get_pipeline(request: Request) -> ScrapePipeline:
    return request.app.state.pipeline


@router.get("/scrape", response_model=ScrapeResult, responses=_ERROR_RESPONSES)
async def scrape_from_query(
    url: str | None = None,
    pipeline: ScrapePipeline = Depends(_get_pipeline),
):
    return await run_scrape(pipeline, url)


@router.post("/scrape", response_model=ScrapeResult, responses=_ERROR_RESPONSES)
async def scrape_from_body(
    body: ScrapeRequest | None = None,
    pipeline: ScrapePipeline = Depends(_get_pipeline),
):
    return await run_scrape(pipeline, body.url if body is not None else None)
