"""
Page Extractor
==============
Per-page extraction of the printed page number and question-start markers.

A PageExtractor holds only the read-only document position and a few
constants, so one instance can be shared by any number of workers.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, Optional

from .models import (
    HorizontalPosition,
    Page,
    PageSummary,
    PositionDescriptor,
    TextFragment,
    VerticalPosition,
)
from .patterns import (
    extract_page_number,
    looks_like_page_number,
    match_question_start,
)
from .position_detector import DEFAULT_MARGIN

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 30.0

# Top bucket reaches this far past the margin
TOP_BAND = 100.0


def derive_range(question_starts: list[int]) -> Optional[str]:
    """First-to-last range by appearance order, e.g. [21, 3] -> "21-3"."""
    if not question_starts:
        return None
    first = question_starts[0]
    last = question_starts[-1]
    if first == last:
        return str(first)
    return f"{first}-{last}"


def find_question_starts(page: Page) -> list[int]:
    """
    Question numbers starting on a page, in first-appearance order.
    Duplicates are dropped; the list is never sorted.
    """
    starts: list[int] = []
    seen: set[int] = set()

    for fragment in page.fragments:
        number = match_question_start(fragment.text)
        if number is None or number in seen:
            continue
        seen.add(number)
        starts.append(number)

    return starts


class PageExtractor:
    """Resolves page-level observations against one document position."""

    def __init__(
        self,
        position: Optional[PositionDescriptor],
        margin: float = DEFAULT_MARGIN,
        tolerance: float = DEFAULT_TOLERANCE,
    ):
        self.position = position
        self.margin = margin
        self.tolerance = tolerance

    def summarize(self, page: Page) -> PageSummary:
        """Build the PageSummary for a single page."""
        question_starts = find_question_starts(page)
        return PageSummary(
            printed_page=self.resolve_printed_page(page),
            range=derive_range(question_starts),
            question_starts=question_starts,
        )

    def resolve_printed_page(self, page: Page) -> Optional[int]:
        """
        Printed page number of a page, or None.

        The shape-matching fragment closest to the document position is
        tried first. Only if that yields nothing are fragments in the
        expected band scanned in order.
        """
        if self.position is None:
            return None

        shaped = [f for f in page.fragments if looks_like_page_number(f.text)]
        closest = self._closest(shaped)
        if closest is not None:
            value = self._first_valid_number([closest])
            if value is not None:
                return value

        value = self._first_valid_number(
            f for f in page.fragments if self._in_expected_band(f)
        )
        if value is None:
            logger.debug(f"No printed page number on page {page.index}")
        return value

    def _closest(self, fragments: list[TextFragment]) -> Optional[TextFragment]:
        """Nearest fragment to the position; ties keep the earliest."""
        best = None
        best_dist = math.inf
        for fragment in fragments:
            dist = math.hypot(
                fragment.x - self.position.x,
                fragment.y - self.position.y,
            )
            if dist < best_dist:
                best_dist = dist
                best = fragment
        return best

    def _first_valid_number(
        self, fragments: Iterable[TextFragment]
    ) -> Optional[int]:
        for fragment in fragments:
            if not looks_like_page_number(fragment.text):
                continue
            value = extract_page_number(fragment.text)
            if value is not None:
                return value
        return None

    def _in_expected_band(self, fragment: TextFragment) -> bool:
        position = self.position

        if position.vertical == VerticalPosition.BOTTOM:
            if not fragment.y > self.margin:
                return False
        elif position.vertical == VerticalPosition.TOP:
            if not fragment.y < self.margin + TOP_BAND:
                return False

        if position.horizontal == HorizontalPosition.LEFT:
            return fragment.x <= position.x + self.tolerance
        if position.horizontal == HorizontalPosition.RIGHT:
            return fragment.x >= position.x - self.tolerance
        return True
