"""
Data Models
===========
Pydantic models for page analysis input and output.
Output models serialize with camelCase keys (``model_dump(by_alias=True)``)
so downstream consumers keep their existing field names.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel


# ─── Enums ────────────────────────────────────────────────────────────────────


class VerticalPosition(str, Enum):
    """Vertical bucket of the printed page number."""
    TOP = "top"
    BOTTOM = "bottom"


class HorizontalPosition(str, Enum):
    """Horizontal bucket of the printed page number."""
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


# ─── Input Models ─────────────────────────────────────────────────────────────


class TextFragment(BaseModel):
    """
    One positioned span of text on a page.
    Coordinates use the upstream parser's space (origin top-left,
    y grows down the page).
    """
    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    text: str


class Page(BaseModel):
    """An ordered, immutable sequence of fragments at a 1-based index."""
    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=1, description="1-based physical page index")
    fragments: tuple[TextFragment, ...] = ()


class PositionDescriptor(BaseModel):
    """Document-wide location where printed page numbers are expected."""
    model_config = ConfigDict(frozen=True)

    vertical: VerticalPosition
    horizontal: HorizontalPosition
    x: float
    y: float


# ─── Output Models ────────────────────────────────────────────────────────────


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class PageSummary(_CamelModel):
    """Per-page observations. ``None`` values are final, not placeholders."""
    printed_page: Optional[int] = None
    range: Optional[str] = None
    question_starts: list[int] = Field(default_factory=list)


class AnalysisResult(_CamelModel):
    """
    Complete output of one document analysis.
    ``totalPages`` and ``printedPageSequence`` are derived from
    ``pageSummary`` so they always stay index-aligned with it.
    """
    file_name: str
    page_summary: list[PageSummary] = Field(default_factory=list)

    @computed_field(alias="totalPages")
    @property
    def total_pages(self) -> int:
        return len(self.page_summary)

    @computed_field(alias="printedPageSequence")
    @property
    def printed_page_sequence(self) -> list[Optional[int]]:
        return [summary.printed_page for summary in self.page_summary]

    def to_dict(self) -> dict:
        """Serialize with the public camelCase field names."""
        return self.model_dump(by_alias=True)


class BatchEntry(_CamelModel):
    """One slot of a batch run: either a result or the error that stopped it."""
    file_name: str
    result: Optional[AnalysisResult] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


# ─── Sequence Report ──────────────────────────────────────────────────────────


class SequenceBreak(BaseModel):
    """Two consecutive observations that do not step by exactly one."""
    page_index: int
    previous: int
    current: int


class SequenceReport(BaseModel):
    """Observed gaps and jumps in one analysis result. Never used to correct it."""
    file_name: str = ""
    total_pages: int = 0
    printed_numbers_found: bool = False
    pages_without_printed_number: list[int] = Field(default_factory=list)
    printed_page_breaks: list[SequenceBreak] = Field(default_factory=list)
    duplicate_printed_pages: list[int] = Field(default_factory=list)
    pages_without_questions: list[int] = Field(default_factory=list)
    question_jumps: list[SequenceBreak] = Field(default_factory=list)

    @computed_field
    @property
    def is_contiguous(self) -> bool:
        return not (
            self.pages_without_printed_number
            or self.printed_page_breaks
            or self.duplicate_printed_pages
        )
