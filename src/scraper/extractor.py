"""Bounded heuristic extraction of a page summary from raw HTML."""

from __future__ import annotations

import logging

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup

from src.api.schemas import ScrapeResult

from .rules import SCHEDULE_RULES, ExtractionRule

logger = logging.getLogger(__name__)

MAX_HEADINGS = 8
MAX_LINKS = 30
MAX_IMAGES = 30


def _collapse_whitespace(text: str) -> str:
    return " ".join(text.split())


def _title(soup: BeautifulSoup) -> str:
    tag = soup.title
    return tag.get_text().strip() if tag is not None else ""


def _headings(soup: BeautifulSoup, cap: int = MAX_HEADINGS) -> list[str]:
    headings: list[str] = []
    for tag in soup.css.iselect("h1, h2, h3"):
        if len(headings) >= cap:
            break
        text = tag.get_text().strip()
        if text:
            headings.append(text)
    return headings


def _unique_attribute(
    soup: BeautifulSoup, selector: str, attribute: str, cap: int
) -> tuple[list[str], int]:
    """Collect distinct attribute values in first-seen order.

    Returns the first ``cap`` values and the number of distinct values in the
    whole document.
    """
    seen: set[str] = set()
    values: list[str] = []
    for tag in soup.css.iselect(selector):
        raw = tag.get(attribute)
        if not isinstance(raw, str):
            continue
        value = raw.strip()
        if not value or value in seen:
            continue
        seen.add(value)
        if len(values) < cap:
            values.append(value)
    return values, len(seen)


def apply_rule(soup: BeautifulSoup, rule: ExtractionRule) -> list[str]:
    """Select text blocks for one rule, stopping once ``rule.cap`` are kept."""
    items: list[str] = []
    for tag in soup.css.iselect(rule.selector):
        if len(items) >= rule.cap:
            break
        text = _collapse_whitespace(tag.get_text())
        if len(text) > rule.min_length:
            items.append(text[: rule.max_length])
    return items


def run_rules(
    soup: BeautifulSoup, rules: tuple[ExtractionRule, ...] = SCHEDULE_RULES
) -> list[str]:
    """Return the items of the first rule, in priority order, that yields any."""
    for rule in rules:
        items = apply_rule(soup, rule)
        if items:
            logger.debug("extraction rule matched", extra={"rule": rule.name, "items": len(items)})
            return items
    return []


def extract(html: str, url: str = "") -> ScrapeResult:
    """Parse *html* and build the bounded page summary.

    Never raises: markup the parser rejects yields an empty result.
    """
    try:
        soup = BeautifulSoup(html or "", "html.parser")
    except ParserRejectedMarkup:
        logger.warning("html rejected by parser", extra={"url": url}, exc_info=True)
        return ScrapeResult(url=url)

    links, links_count = _unique_attribute(soup, "a[href]", "href", MAX_LINKS)
    images, images_count = _unique_attribute(soup, "img[src]", "src", MAX_IMAGES)

    return ScrapeResult(
        url=url,
        title=_title(soup),
        headings=_headings(soup),
        links_count=links_count,
        images_count=images_count,
        links=links,
        images=images,
        schedule_items=run_rules(soup),
    )
