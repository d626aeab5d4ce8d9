from __future__ import annotations

from apibench.config.models import (
    DEFAULT_CONCURRENCY,
    DEFAULT_REQUESTS,
    QUICK_CONCURRENCY,
    QUICK_REQUESTS,
    FrameworkTarget,
    ProbeConfig,
    RequestSpec,
    RunConfig,
)

__all__ = [
    "DEFAULT_CONCURRENCY",
    "DEFAULT_REQUESTS",
    "QUICK_CONCURRENCY",
    "QUICK_REQUESTS",
    "FrameworkTarget",
    "ProbeConfig",
    "RequestSpec",
    "RunConfig",
]
