from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping


class FailureKind(str, Enum):
    CONNECTION_REFUSED = "connection-refused"
    TIMEOUT = "timeout"
    TRANSPORT_ERROR = "transport-error"
    NON_2XX_STATUS = "non-2xx-status"


@dataclass(frozen=True, slots=True)
class Outcome:
    latency_ms: float
    success: bool
    status_code: int | None
    failure: FailureKind | None
    started_mono: float
    finished_mono: float
    bytes_received: int = 0

    def __post_init__(self) -> None:
        if self.success != (self.failure is None):
            raise ValueError("an outcome is either a success or carries exactly one failure kind")
        if self.failure is FailureKind.NON_2XX_STATUS and self.status_code is None:
            raise ValueError("non-2xx failure requires a status code")


@dataclass(frozen=True, slots=True)
class Summary:
    scenario: str
    framework: str
    requested: int
    completed: int
    successes: int
    failures: int
    failure_breakdown: Mapping[FailureKind, int]
    duration_sec: float
    requests_per_sec: float
    mean_ms: float
    min_ms: float
    max_ms: float
    percentiles_ms: Mapping[float, float] = field(default_factory=dict)
    degenerate: bool = False
    cancelled: bool = False

    @property
    def p50_ms(self) -> float:
        return self.percentile(50)

    @property
    def p90_ms(self) -> float:
        return self.percentile(90)

    @property
    def p99_ms(self) -> float:
        return self.percentile(99)

    @property
    def success_rate(self) -> float:
        if self.completed == 0:
            return 0.0
        return self.successes / self.completed

    def percentile(self, q: float) -> float:
        return self.percentiles_ms.get(float(q), 0.0)

    def to_record(self) -> Mapping[str, Any]:
        record: dict[str, Any] = {
            "scenario": self.scenario,
            "framework": self.framework,
            "requested": self.requested,
            "completed": self.completed,
            "successes": self.successes,
            "failures": self.failures,
            "duration_sec": self.duration_sec,
            "requests_per_sec": self.requests_per_sec,
            "mean_ms": self.mean_ms,
            "min_ms": self.min_ms,
            "max_ms": self.max_ms,
            "degenerate": self.degenerate,
            "cancelled": self.cancelled,
        }
        for q, value in self.percentiles_ms.items():
            record[f"p{q:g}_ms"] = value
        for kind, count in self.failure_breakdown.items():
            record[kind.value] = count
        return record
