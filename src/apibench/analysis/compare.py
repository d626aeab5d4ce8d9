from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

import pandas as pd

from apibench.metrics import Summary

FRAME_COLUMNS = [
    "scenario",
    "framework",
    "requested",
    "completed",
    "successes",
    "failures",
    "duration_sec",
    "requests_per_sec",
    "mean_ms",
    "min_ms",
    "max_ms",
    "degenerate",
    "cancelled",
]


@dataclass(frozen=True, slots=True)
class Comparison:
    scenario: str
    framework: str
    baseline: str
    rps_ratio: float
    p99_delta_pct: float
    message: str

    @property
    def faster(self) -> bool:
        return self.rps_ratio > 1.0


def summaries_frame(summaries: Iterable[Summary]) -> pd.DataFrame:
    records = [dict(s.to_record()) for s in summaries]
    if not records:
        return pd.DataFrame(columns=FRAME_COLUMNS)
    return pd.DataFrame.from_records(records)


def compare_frameworks(frame: pd.DataFrame, baseline: str) -> list[Comparison]:
    comparisons: list[Comparison] = []
    if frame.empty:
        return comparisons
    measured = frame[~frame["degenerate"]]
    base = measured[measured["framework"] == baseline]
    others = measured[measured["framework"] != baseline]
    if base.empty or others.empty:
        return comparisons
    merged = others.merge(base, on="scenario", suffixes=("_cand", "_base"))
    for row in merged.itertuples(index=False):
        base_rps = row.requests_per_sec_base
        if base_rps <= 0:
            continue
        ratio = row.requests_per_sec_cand / base_rps
        if ratio <= 0:
            continue
        p99_delta = 0.0
        base_p99 = getattr(row, "p99_ms_base", 0.0)
        if base_p99 > 0:
            p99_delta = (getattr(row, "p99_ms_cand", 0.0) - base_p99) / base_p99 * 100
        if ratio >= 1.0:
            message = f"{row.framework_cand} is {ratio:.2f}x faster than {baseline}"
        else:
            message = f"{row.framework_cand} is {1 / ratio:.2f}x slower than {baseline}"
        comparisons.append(
            Comparison(
                scenario=row.scenario,
                framework=row.framework_cand,
                baseline=baseline,
                rps_ratio=ratio,
                p99_delta_pct=p99_delta,
                message=message,
            )
        )
    return comparisons
