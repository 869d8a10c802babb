"""Request/response Pydantic models."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ScrapeRequest(BaseModel):
    url: str | None = None


class ScrapeResult(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    url: str
    title: str = ""
    headings: list[str] = []
    links_count: int = 0
    images_count: int = 0
    links: list[str] = []
    images: list[str] = []
    schedule_items: list[str] = []


class ErrorResponse(BaseModel):
    error: str
    kind: str
    status: int | None = None
