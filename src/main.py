"""FastAPI app entrypoint."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from src.api.routes import router
from src.api.service import error_response
from src.config import get_settings
from src.logging_config import setup_logging
from src.scraper import InvalidInputError, build_pipeline

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()

    # Initialize logging FIRST so all subsequent operations produce JSON logs
    setup_logging(settings.log_level)
    logger.info("starting scraper service")

    pipeline = build_pipeline(settings)

    app.state.settings = settings
    app.state.pipeline = pipeline

    logger.info(
        "scraper service ready",
        extra={
            "scrape_mode": settings.scrape_mode,
            "default_target_url": settings.default_target_url,
            "proxy": bool(settings.proxy_server),
        },
    )

    yield

    logger.info("shutting down scraper service")
    try:
        await pipeline.close()
    except Exception:
        logger.exception("pipeline shutdown failed")


app = FastAPI(title="Scraper Service", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in get_settings().cors_origins.split(",") if o.strip()],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)
app.include_router(router)


@app.exception_handler(RequestValidationError)
async def invalid_request(request: Request, exc: RequestValidationError):
    return error_response(InvalidInputError("invalid request body"))


@app.get("/health")
async def health():
    return {"status": "ok"}


def run() -> None:
    """Serve the app with uvicorn using host/port from settings."""
    settings = get_settings()
    uvicorn.run(
        "src.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
