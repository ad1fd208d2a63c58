"""
Page Analyzer Engine
====================
Main orchestrator that combines position detection and per-page
extraction into a complete document analysis.

Usage:
    engine = AnalyzerEngine(config)
    result = engine.analyze_file("path/to/exam.pdf")
    # result is an AnalysisResult; result.to_dict() is the JSON shape

Architecture:
    PDF / JSON → fragment_loader → Pages → detect_page_number_position →
    PositionDescriptor → PageExtractor (per page) → AnalysisResult
"""

from __future__ import annotations

import json
import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from .fragment_loader import load_pages
from .models import AnalysisResult, BatchEntry, Page
from .page_extractor import DEFAULT_TOLERANCE, PageExtractor
from .position_detector import (
    DEFAULT_MARGIN,
    DEFAULT_PAGE_HEIGHT,
    detect_page_number_position,
)

logger = logging.getLogger(__name__)


@dataclass
class AnalyzerConfig:
    """Configuration for the analyzer engine."""

    # Layout heuristics
    page_height: float = DEFAULT_PAGE_HEIGHT
    margin: float = DEFAULT_MARGIN
    tolerance: float = DEFAULT_TOLERANCE

    # Concurrency
    page_workers: int = 1
    max_workers: int = 4

    # Output settings
    output_dir: Optional[str] = None

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None


class AnalyzerEngine:
    """
    Document analysis engine.

    Orchestrates the pipeline:
        1. Fragment loading (PDF or JSON dump)
        2. Position detection (once per document)
        3. Per-page extraction (printed page + question starts)
        4. Optional JSON output

    Holds no per-document state, so one engine can analyze documents
    in parallel.
    """

    def __init__(self, config: Optional[AnalyzerConfig] = None):
        self.config = config or AnalyzerConfig()
        self._setup_logging()

    def _setup_logging(self):
        """Configure logging based on config."""
        log_level = getattr(logging, self.config.log_level.upper(), logging.INFO)
        formatter = logging.Formatter(
            "[%(asctime)s] %(levelname)-8s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        package_logger = logging.getLogger("page_analyzer")
        package_logger.setLevel(log_level)

        # Console handler
        if not package_logger.handlers:
            console = logging.StreamHandler()
            console.setLevel(log_level)
            console.setFormatter(formatter)
            package_logger.addHandler(console)

        # File handler
        if self.config.log_file:
            log_dir = Path(self.config.log_file).parent
            log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(
                self.config.log_file, encoding="utf-8"
            )
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            package_logger.addHandler(file_handler)

    def analyze(self, file_name: str, pages: Sequence[Page]) -> AnalysisResult:
        """
        Analyze already-parsed pages.

        Args:
            file_name: Display name reported in the result.
            pages: Pages in physical order.

        Returns:
            AnalysisResult with one PageSummary per page, in page order.
        """
        position = detect_page_number_position(
            pages,
            page_height=self.config.page_height,
        )
        if position is None:
            logger.info(f"{file_name}: no printed page number position found")

        extractor = PageExtractor(
            position,
            margin=self.config.margin,
            tolerance=self.config.tolerance,
        )

        if self.config.page_workers > 1 and len(pages) > 1:
            # map() yields in input order regardless of completion order
            with ThreadPoolExecutor(max_workers=self.config.page_workers) as pool:
                summaries = list(pool.map(extractor.summarize, pages))
        else:
            summaries = [extractor.summarize(page) for page in pages]

        return AnalysisResult(file_name=file_name, page_summary=summaries)

    def analyze_file(
        self,
        path: str,
        file_name: Optional[str] = None,
        output_name: Optional[str] = None,
    ) -> AnalysisResult:
        """
        Load and analyze a PDF or JSON dump.

        Args:
            path: PDF or JSON dump to analyze.
            file_name: Display name (defaults to the file's basename).
            output_name: JSON file name used when output_dir is set.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            DocumentParseError: If the document cannot be parsed.
        """
        path = os.path.abspath(path)
        file_name = file_name or os.path.basename(path)

        start_time = time.time()
        logger.info(f"Starting analysis of: {path}")

        pages = load_pages(path)
        result = self.analyze(file_name, pages)

        elapsed = time.time() - start_time
        logger.info(
            f"Analysis complete in {elapsed:.2f}s — "
            f"{result.total_pages} pages"
        )

        if self.config.output_dir:
            self.save_result(
                result, Path(self.config.output_dir), output_name=output_name
            )

        return result

    def analyze_batch(self, paths: Sequence[str]) -> list[BatchEntry]:
        """
        Analyze several documents independently.

        Returns exactly one BatchEntry per input path, in input order.
        A document that fails is reported in its own slot.
        """
        if not paths:
            return []

        output_names = unique_output_names(paths)
        workers = max(1, min(self.config.max_workers, len(paths)))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [
                pool.submit(self.analyze_file, p, output_name=name)
                for p, name in zip(paths, output_names)
            ]

        entries = []
        for path, future in zip(paths, futures):
            name = os.path.basename(path)
            try:
                entries.append(BatchEntry(file_name=name, result=future.result()))
            except Exception as e:
                logger.error(f"Failed to analyze {name}: {e}")
                entries.append(BatchEntry(file_name=name, error=str(e)))
        return entries

    def save_result(
        self,
        result: AnalysisResult,
        output_dir: Path,
        output_name: Optional[str] = None,
    ) -> Path:
        """Write a result to <output_dir>/<stem>_analysis.json."""
        output_dir.mkdir(parents=True, exist_ok=True)
        output_file = output_dir / (
            output_name or f"{output_stem(result.file_name)}_analysis.json"
        )
        with open(output_file, "w", encoding="utf-8") as f:
            json.dump(result.to_dict(), f, indent=2, ensure_ascii=False)
        logger.info(f"Saved JSON output: {output_file}")
        return output_file


def output_stem(file_name: str) -> str:
    """Filesystem-safe stem of a document name."""
    return "".join(
        c if c.isalnum() or c in "-_" else "_"
        for c in Path(file_name).stem
    )[:50]


def unique_output_names(paths: Sequence[str]) -> list[str]:
    """
    One output file name per path, in input order.
    Repeated stems get a numeric suffix: exam_analysis.json,
    exam_2_analysis.json, ...
    """
    names = []
    taken: set[str] = set()
    for path in paths:
        stem = output_stem(os.path.basename(path))
        name = f"{stem}_analysis.json"
        suffix = 2
        while name in taken:
            name = f"{stem}_{suffix}_analysis.json"
            suffix += 1
        taken.add(name)
        names.append(name)
    return names
