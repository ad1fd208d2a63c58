"""
Page Analyzer
=============
Per-page printed page number and question-range extraction for
parsed documents.

Architecture:
    - Fragment Loader: Turns PDFs / JSON dumps into positioned text fragments
    - Position Detector: Infers where printed page numbers live, once per document
    - Page Extractor: Resolves each page's printed number and question starts
    - Sequence Inspector: Reports gaps and jumps without correcting them

Version: 1.0.0
"""

__version__ = "1.0.0"
