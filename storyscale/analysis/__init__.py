"""Heuristic analysis of gathered research text."""

from storyscale.analysis.analyzer import ContentAnalyzer, merge_analyses  # noqa: F401
from storyscale.analysis.tables import DEFAULT_TABLES, AnalysisTables  # noqa: F401
