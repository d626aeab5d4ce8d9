from __future__ import annotations

from apibench.metrics.aggregator import summarize
from apibench.metrics.models import FailureKind, Outcome, Summary

__all__ = ["FailureKind", "Outcome", "Summary", "summarize"]
