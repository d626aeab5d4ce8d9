from __future__ import annotations

from pathlib import Path

import pandas as pd

from apibench.analysis.compare import compare_frameworks, summaries_frame
from apibench.errors import SetupError
from apibench.loadgen.runner import ComparisonReport

TABLE_COLUMNS = [
    "scenario",
    "framework",
    "requests_per_sec",
    "mean_ms",
    "p50_ms",
    "p90_ms",
    "p99_ms",
    "failures",
    "status",
]


def _status(row: pd.Series) -> str:
    if row["cancelled"]:
        return "partial"
    if row["degenerate"]:
        return "all failed"
    return "ok"


def report_frame(report: ComparisonReport) -> pd.DataFrame:
    frame = summaries_frame(report.summaries)
    if frame.empty:
        return frame
    frame = frame.copy()
    frame["status"] = frame.apply(_status, axis=1)
    return frame


def format_report(report: ComparisonReport, baseline: str | None = None) -> str:
    lines: list[str] = []
    frame = report_frame(report)
    if frame.empty:
        lines.append("No benchmarks completed.")
    else:
        columns = [c for c in TABLE_COLUMNS if c in frame.columns]
        lines.append(frame[columns].to_string(index=False, float_format=lambda v: f"{v:.2f}"))
        if baseline is None:
            baseline = str(frame["framework"].iloc[0])
        comparisons = compare_frameworks(frame, baseline)
        if comparisons:
            lines.append("")
            for comparison in comparisons:
                lines.append(
                    f"{comparison.scenario}: {comparison.message} "
                    f"(p99 {comparison.p99_delta_pct:+.1f}%)"
                )
    for item in report.unreachable:
        lines.append(f"{item.scenario}/{item.framework}: could not measure ({item.reason})")
    if report.skipped:
        lines.append(f"Skipped: {', '.join(report.skipped)}")
    if report.cancelled:
        lines.append("Run cancelled; results are partial.")
    return "\n".join(lines)


def export_report(report: ComparisonReport, path: Path) -> None:
    frame = report_frame(report)
    suffix = path.suffix.lower()
    if suffix not in (".csv", ".json"):
        raise SetupError(f"Unsupported export format: {path.suffix or path.name}")
    path.parent.mkdir(parents=True, exist_ok=True)
    if suffix == ".csv":
        frame.to_csv(path, index=False)
    else:
        frame.to_json(path, orient="records", indent=2)
