"""
Position Detector
=================
Infers, once per document, where printed page numbers live on the page.

Each page votes with its first page-number-shaped fragment; the mean
position of all votes is bucketed into top/bottom and left/center/right.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from .models import (
    HorizontalPosition,
    Page,
    PositionDescriptor,
    TextFragment,
    VerticalPosition,
)
from .patterns import looks_like_page_number

logger = logging.getLogger(__name__)

# US Letter in points
DEFAULT_PAGE_HEIGHT = 792.0
DEFAULT_MARGIN = 72.0

LEFT_THRESHOLD = 0.33
RIGHT_THRESHOLD = 0.66


def first_page_number_candidate(page: Page) -> Optional[TextFragment]:
    """Return the first fragment on a page shaped like a page number."""
    for fragment in page.fragments:
        if looks_like_page_number(fragment.text):
            return fragment
    return None


def detect_page_number_position(
    pages: Sequence[Page],
    page_height: float = DEFAULT_PAGE_HEIGHT,
) -> Optional[PositionDescriptor]:
    """
    Infer the canonical printed page number position for a document.

    Args:
        pages: All pages of the document, in physical order.
        page_height: Fixed page height used for the top/bottom split.

    Returns:
        A PositionDescriptor, or None when no page carries a candidate.
    """
    candidates = [
        c for c in (first_page_number_candidate(p) for p in pages)
        if c is not None
    ]

    if not candidates:
        return None

    mean_x = sum(c.x for c in candidates) / len(candidates)
    mean_y = sum(c.y for c in candidates) / len(candidates)

    vertical = (
        VerticalPosition.BOTTOM
        if mean_y > page_height / 2
        else VerticalPosition.TOP
    )

    xs = [c.x for c in candidates]
    min_x, max_x = min(xs), max(xs)
    span = (max_x - min_x) or 1
    relative = (mean_x - min_x) / span

    horizontal = HorizontalPosition.CENTER
    if relative < LEFT_THRESHOLD:
        horizontal = HorizontalPosition.LEFT
    elif relative > RIGHT_THRESHOLD:
        horizontal = HorizontalPosition.RIGHT

    position = PositionDescriptor(
        vertical=vertical,
        horizontal=horizontal,
        x=mean_x,
        y=mean_y,
    )
    logger.debug(
        f"Page number position: {vertical.value}-{horizontal.value} "
        f"at ({mean_x:.2f}, {mean_y:.2f}) from {len(candidates)} pages"
    )
    return position
