from __future__ import annotations

from apibench.loadgen.client import send_request
from apibench.loadgen.driver import DriveResult, LoadDriver
from apibench.loadgen.probe import interruptible, retry_with_backoff, wait_until_ready
from apibench.loadgen.runner import ComparisonReport, Unreachable, run_comparison, run_session

__all__ = [
    "ComparisonReport",
    "DriveResult",
    "LoadDriver",
    "Unreachable",
    "interruptible",
    "retry_with_backoff",
    "run_comparison",
    "run_session",
    "send_request",
    "wait_until_ready",
]
