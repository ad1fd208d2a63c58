"""
Text Patterns
=============
Shape rules shared by position detection and page extraction.

Printed page numbers and question-start markers are matched against
ordered pattern tables. The first matching entry wins, so the order of
each table is part of the contract.
"""

from __future__ import annotations

import re
from typing import Optional

# ─── Printed Page Numbers ─────────────────────────────────────────────────────

MAX_PAGE_NUMBER_LENGTH = 15

# Exclusive bounds for an accepted printed page number
MIN_PAGE_NUMBER = 0
MAX_PAGE_NUMBER = 10000

_LETTER = re.compile(r"[a-zA-Z]")

# "Page 1", "PAGE 12"
_PAGE_PREFIX_SHAPE = re.compile(r"page\s*\d+", re.IGNORECASE | re.ASCII)

# Accepted shapes, matched against the whole trimmed string
PAGE_NUMBER_SHAPES = [
    re.compile(r"\d+", re.ASCII),                   # "12"
    _PAGE_PREFIX_SHAPE,                             # "Page 12"
    re.compile(r"\d+\s*/\s*\d+", re.ASCII),         # "1 / 10"
    re.compile(r"\(\d+\)", re.ASCII),               # "(3)"
    re.compile(r"-\s*\d+\s*-", re.ASCII),           # "- 7 -"
]

# Value extractors, tried in priority order against the trimmed string
PAGE_NUMBER_EXTRACTORS = [
    re.compile(r"^(?:page\s*)?(\d+)", re.IGNORECASE | re.ASCII),
    re.compile(r"^(\d+)\s*/", re.ASCII),
    re.compile(r"^\((\d+)\)$", re.ASCII),
    re.compile(r"^-\s*(\d+)\s*-$", re.ASCII),
    re.compile(r"^(\d+)$", re.ASCII),
]


def looks_like_page_number(text: Optional[str]) -> bool:
    """
    Check whether a fragment's text has the shape of a printed page number.

    Running headers and footers that mix letters and digits
    (e.g. "F-block 12") are rejected unless the whole string is
    "page <digits>".
    """
    if not text:
        return False
    s = text.strip()
    if not s:
        return False

    if _LETTER.search(s) and not _PAGE_PREFIX_SHAPE.fullmatch(s):
        return False

    if len(s) > MAX_PAGE_NUMBER_LENGTH:
        return False

    return any(p.fullmatch(s) for p in PAGE_NUMBER_SHAPES)


def extract_page_number(text: Optional[str]) -> Optional[int]:
    """
    Parse the integer value out of page-number-shaped text.

    Returns None when no extractor matches or the value falls outside
    1-9999. Out-of-range values are never clamped.
    """
    if not text:
        return None
    s = text.strip()

    for pattern in PAGE_NUMBER_EXTRACTORS:
        m = pattern.match(s)
        if m:
            value = int(m.group(1))
            if MIN_PAGE_NUMBER < value < MAX_PAGE_NUMBER:
                return value
            return None
    return None


# ─── Question Start Markers ──────────────────────────────────────────────────

QUESTION_START_PATTERNS = [
    # "Q1", "Q.1", "Q 1", "Q. 1"
    re.compile(r"^Q\.?\s*(\d{1,3})\b", re.IGNORECASE | re.ASCII),
    # "Question 1"
    re.compile(r"^Question\s+(\d{1,3})\b", re.IGNORECASE | re.ASCII),
    # "Q(1)"
    re.compile(r"^Q\s*\((\d{1,3})\)", re.IGNORECASE | re.ASCII),
    # "(1)" at the very start, last resort
    re.compile(r"^\((\d{1,3})\)", re.ASCII),
]


def match_question_start(text: Optional[str]) -> Optional[int]:
    """Return the question number a fragment starts with, if any."""
    if not text:
        return None
    s = text.strip()

    for pattern in QUESTION_START_PATTERNS:
        m = pattern.match(s)
        if m:
            return int(m.group(1))
    return None
