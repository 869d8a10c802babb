"""Declarative extraction rules for schedule/event text blocks."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ExtractionRule:
    """A CSS selection strategy with its item cap and text length bounds.

    An element's collapsed text is kept when it is longer than ``min_length``
    and is cut to ``max_length`` characters.
    """

    name: str
    selector: str
    cap: int
    min_length: int
    max_length: int = 400


SCHEDULE_RULES: tuple[ExtractionRule, ...] = (
    ExtractionRule(
        name="schedule-classes",
        selector="[class*='schedule'], [class*='event'], [class*='quest']",
        cap=10,
        min_length=10,
    ),
    # Only consulted when the rule above yields nothing
    ExtractionRule(name="paragraphs", selector="p", cap=6, min_length=20),
)
