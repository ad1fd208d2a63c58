"""
Sequence Inspector
==================
Post-analysis report of what the printed page numbers and question
markers look like across a document:
    - Pages without a printed page number
    - Breaks in the printed page sequence (torn, missing or reordered pages)
    - Printed page numbers seen more than once
    - Pages without question markers
    - Jumps in the question sequence

The report only describes the result. It never corrects it.
"""

from __future__ import annotations

import logging
from collections import Counter

from .models import AnalysisResult, SequenceBreak, SequenceReport

logger = logging.getLogger(__name__)


class SequenceInspector:
    """Builds a SequenceReport for an AnalysisResult."""

    def inspect(self, result: AnalysisResult) -> SequenceReport:
        report = SequenceReport(
            file_name=result.file_name,
            total_pages=result.total_pages,
        )

        printed = result.printed_page_sequence
        report.printed_numbers_found = any(p is not None for p in printed)

        previous_printed = None
        for page_index, value in enumerate(printed, start=1):
            if value is None:
                report.pages_without_printed_number.append(page_index)
                continue
            if previous_printed is not None and value != previous_printed + 1:
                report.printed_page_breaks.append(SequenceBreak(
                    page_index=page_index,
                    previous=previous_printed,
                    current=value,
                ))
            previous_printed = value

        counts = Counter(p for p in printed if p is not None)
        report.duplicate_printed_pages = sorted(
            num for num, count in counts.items() if count > 1
        )

        previous_question = None
        for page_index, summary in enumerate(result.page_summary, start=1):
            if summary.range is None:
                report.pages_without_questions.append(page_index)
            for number in summary.question_starts:
                if (
                    previous_question is not None
                    and number != previous_question + 1
                ):
                    report.question_jumps.append(SequenceBreak(
                        page_index=page_index,
                        previous=previous_question,
                        current=number,
                    ))
                previous_question = number

        self._log(report)
        return report

    def _log(self, report: SequenceReport):
        logger.info(
            f"{report.file_name}: {report.total_pages} pages, "
            f"{len(report.pages_without_printed_number)} without printed number, "
            f"{len(report.printed_page_breaks)} page breaks, "
            f"{len(report.question_jumps)} question jumps"
        )
        for brk in report.printed_page_breaks:
            logger.debug(
                f"  • page {brk.page_index}: printed {brk.previous} -> {brk.current}"
            )
