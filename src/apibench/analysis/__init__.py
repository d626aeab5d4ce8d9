from __future__ import annotations

from apibench.analysis.compare import Comparison, compare_frameworks, summaries_frame
from apibench.analysis.report import export_report, format_report, report_frame

__all__ = [
    "Comparison",
    "compare_frameworks",
    "export_report",
    "format_report",
    "report_frame",
    "summaries_frame",
]
