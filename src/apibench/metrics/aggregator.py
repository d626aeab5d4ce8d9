from __future__ import annotations

import math
from typing import Iterable, Sequence

import numpy as np

from apibench.errors import SetupError
from apibench.metrics.models import FailureKind, Outcome, Summary


def summarize(
    outcomes: Iterable[Outcome],
    duration_sec: float,
    *,
    scenario: str,
    framework: str,
    requested: int | None = None,
    percentiles: Sequence[float] = (50.0, 90.0, 99.0),
    cancelled: bool = False,
) -> Summary:
    """Reduce a finished run into a Summary.

    Latency figures only use successful outcomes. Percentiles use the
    nearest-rank method: the value at rank ceil(q/100 * n) of the ascending
    latencies, with q=0 mapping to the minimum. The result does not depend on
    the order of ``outcomes``.
    """
    if duration_sec < 0:
        raise SetupError(f"duration must not be negative, got {duration_sec}")
    qs = [float(q) for q in percentiles]
    for q in qs:
        if not 0.0 <= q <= 100.0:
            raise SetupError(f"percentile out of range: {q}")

    breakdown = {kind: 0 for kind in FailureKind}
    latencies: list[float] = []
    completed = 0
    for outcome in outcomes:
        completed += 1
        if outcome.success:
            latencies.append(outcome.latency_ms)
        elif outcome.failure is not None:
            breakdown[outcome.failure] += 1

    successes = len(latencies)
    rps = completed / duration_sec if duration_sec > 0 else 0.0
    if latencies:
        ordered = np.sort(np.asarray(latencies, dtype=float))
        mean = math.fsum(latencies) / successes
        lo = float(ordered[0])
        hi = float(ordered[-1])
        values = np.percentile(ordered, qs, method="inverted_cdf") if qs else []
        pcts = {q: float(v) for q, v in zip(qs, values)}
    else:
        mean = lo = hi = 0.0
        pcts = {q: 0.0 for q in qs}

    return Summary(
        scenario=scenario,
        framework=framework,
        requested=requested if requested is not None else completed,
        completed=completed,
        successes=successes,
        failures=completed - successes,
        failure_breakdown=breakdown,
        duration_sec=duration_sec,
        requests_per_sec=rps,
        mean_ms=mean,
        min_ms=lo,
        max_ms=hi,
        percentiles_ms=pcts,
        degenerate=successes == 0,
        cancelled=cancelled,
    )
