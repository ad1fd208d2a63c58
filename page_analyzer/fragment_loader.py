"""
Fragment Loader
===============
Turns source documents into ordered pages of positioned text fragments.

Supported inputs:
    - PDF files, read with PyMuPDF (one fragment per text span)
    - pdf2json dumps ({"Pages": [{"Texts": [{"x", "y", "R": [{"T"}]}]}]})
    - plain dumps ({"pages": [[{"x", "y", "text"}, ...], ...]})

Fragments missing a coordinate or their text are skipped, never raised.
Only a document that cannot be read at all raises DocumentParseError.
"""

from __future__ import annotations

import json
import logging
import math
import os
import re
import threading
from pathlib import Path
from typing import Any, Optional
from urllib.parse import unquote

import fitz  # PyMuPDF

from .models import Page, TextFragment

logger = logging.getLogger(__name__)

_MALFORMED_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")

# PyMuPDF is not thread-safe; only one document is read at a time
_FITZ_LOCK = threading.Lock()


class DocumentParseError(RuntimeError):
    """The document could not be parsed into pages at all."""


# ─── Dispatch ─────────────────────────────────────────────────────────────────


def load_pages(path: str) -> list[Page]:
    """Load pages from a PDF or a JSON dump, chosen by file extension."""
    if Path(path).suffix.lower() == ".json":
        return load_json_pages(path)
    return load_pdf_pages(path)


# ─── PDF ──────────────────────────────────────────────────────────────────────


def load_pdf_pages(pdf_path: str) -> list[Page]:
    """
    Extract text spans from every page of a PDF.

    Raises:
        FileNotFoundError: If the PDF doesn't exist.
        DocumentParseError: If PyMuPDF cannot open or read it.
    """
    if not os.path.exists(pdf_path):
        raise FileNotFoundError(f"PDF not found: {pdf_path}")

    try:
        with _FITZ_LOCK, fitz.open(pdf_path) as doc:
            if not doc.is_pdf:
                raise DocumentParseError(f"Not a PDF document: {pdf_path}")
            pages = [
                Page(index=page_idx + 1, fragments=tuple(_page_spans(page)))
                for page_idx, page in enumerate(doc)
            ]
    except (RuntimeError, ValueError) as e:
        if isinstance(e, DocumentParseError):
            raise
        raise DocumentParseError(f"Cannot parse {pdf_path}: {e}") from e

    logger.info(f"Loaded {len(pages)} pages from {pdf_path}")
    return pages


def _page_spans(page: fitz.Page) -> list[TextFragment]:
    """Spans in PyMuPDF reading order, positioned at their origin."""
    fragments: list[TextFragment] = []
    page_dict = page.get_text("dict", flags=fitz.TEXT_PRESERVE_WHITESPACE)

    for block in page_dict.get("blocks", []):
        if block.get("type") != 0:
            continue
        for line in block.get("lines", []):
            for span in line.get("spans", []):
                text = span.get("text")
                origin = span.get("origin")
                if not text or not origin:
                    continue
                fragments.append(TextFragment(
                    x=origin[0],
                    y=origin[1],
                    text=text,
                ))
    return fragments


# ─── JSON Dumps ───────────────────────────────────────────────────────────────


def load_json_pages(json_path: str) -> list[Page]:
    """
    Read pages from a pdf2json or plain JSON dump on disk.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        DocumentParseError: If the file isn't valid JSON or has no pages.
    """
    if not os.path.exists(json_path):
        raise FileNotFoundError(f"JSON not found: {json_path}")

    try:
        with open(json_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DocumentParseError(f"Cannot parse {json_path}: {e}") from e

    if not isinstance(data, dict):
        raise DocumentParseError(f"Unsupported JSON layout in {json_path}")

    if "pages" in data:
        pages = pages_from_plain(data["pages"])
    else:
        pages = pages_from_pdf2json(data)

    logger.info(f"Loaded {len(pages)} pages from {json_path}")
    return pages


def pages_from_pdf2json(data: dict) -> list[Page]:
    """Convert a pdf2json document into pages, decoding each text run."""
    raw_pages = data.get("Pages")
    if raw_pages is None and isinstance(data.get("formImage"), dict):
        raw_pages = data["formImage"].get("Pages")
    if not isinstance(raw_pages, list):
        raise DocumentParseError("pdf2json data has no Pages list")

    pages = []
    for page_idx, raw_page in enumerate(raw_pages):
        texts = raw_page.get("Texts") if isinstance(raw_page, dict) else None
        fragments = []
        for raw in texts if isinstance(texts, list) else []:
            fragment = _pdf2json_fragment(raw)
            if fragment is None:
                logger.debug(f"Skipping malformed fragment on page {page_idx + 1}")
                continue
            fragments.append(fragment)
        pages.append(Page(index=page_idx + 1, fragments=tuple(fragments)))
    return pages


def pages_from_plain(raw_pages: Any) -> list[Page]:
    """Convert a list of pages, each a list (or {"fragments": [...]})."""
    if not isinstance(raw_pages, list):
        raise DocumentParseError("'pages' must be a list")

    pages = []
    for page_idx, raw_page in enumerate(raw_pages):
        if isinstance(raw_page, dict):
            raw_page = raw_page.get("fragments", [])
        fragments = []
        for raw in raw_page if isinstance(raw_page, list) else []:
            fragment = _plain_fragment(raw)
            if fragment is None:
                logger.debug(f"Skipping malformed fragment on page {page_idx + 1}")
                continue
            fragments.append(fragment)
        pages.append(Page(index=page_idx + 1, fragments=tuple(fragments)))
    return pages


def decode_text(raw: str) -> str:
    """Percent-decode pdf2json text, keeping the raw string if malformed."""
    if _MALFORMED_ESCAPE.search(raw):
        return raw
    try:
        return unquote(raw, errors="strict")
    except UnicodeDecodeError:
        return raw


def _coordinate(raw: dict, *keys: str) -> Optional[float]:
    for key in keys:
        value = raw.get(key)
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            continue
        try:
            number = float(value)
        except OverflowError:
            continue
        if math.isfinite(number):
            return number
    return None


def _pdf2json_fragment(raw: Any) -> Optional[TextFragment]:
    if not isinstance(raw, dict):
        return None
    x = _coordinate(raw, "x", "X")
    y = _coordinate(raw, "y", "Y")
    runs = raw.get("R")
    if x is None or y is None or not isinstance(runs, list) or not runs:
        return None
    first = runs[0]
    text = first.get("T") if isinstance(first, dict) else None
    if not isinstance(text, str):
        return None
    return TextFragment(x=x, y=y, text=decode_text(text))


def _plain_fragment(raw: Any) -> Optional[TextFragment]:
    if not isinstance(raw, dict):
        return None
    x = _coordinate(raw, "x")
    y = _coordinate(raw, "y")
    text = raw.get("text")
    if x is None or y is None or not isinstance(text, str):
        return None
    return TextFragment(x=x, y=y, text=text)
