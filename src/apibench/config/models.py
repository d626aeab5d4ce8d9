from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

import httpx

from apibench.errors import SetupError

DEFAULT_REQUESTS = 10_000
DEFAULT_CONCURRENCY = 50
QUICK_REQUESTS = 1_000
QUICK_CONCURRENCY = 10


@dataclass(frozen=True, slots=True)
class RunConfig:
    requests: int = DEFAULT_REQUESTS
    concurrency: int = DEFAULT_CONCURRENCY
    timeout_sec: float = 10.0
    warmup_requests: int = 0
    percentiles: tuple[float, ...] = (50.0, 90.0, 99.0)

    def __post_init__(self) -> None:
        if self.requests <= 0:
            raise SetupError(f"requests must be positive, got {self.requests}")
        if self.concurrency <= 0:
            raise SetupError(f"concurrency must be positive, got {self.concurrency}")
        if self.timeout_sec <= 0:
            raise SetupError(f"timeout_sec must be positive, got {self.timeout_sec}")
        if self.warmup_requests < 0:
            raise SetupError(f"warmup_requests must not be negative, got {self.warmup_requests}")
        for q in self.percentiles:
            if not 0.0 <= q <= 100.0:
                raise SetupError(f"percentile out of range: {q}")

    @property
    def effective_concurrency(self) -> int:
        return min(self.concurrency, self.requests)

    @classmethod
    def quick(cls, **overrides: Any) -> RunConfig:
        params: dict[str, Any] = {"requests": QUICK_REQUESTS, "concurrency": QUICK_CONCURRENCY}
        params.update(overrides)
        return cls(**params)

    def to_metadata(self) -> Mapping[str, Any]:
        return {
            "requests": self.requests,
            "concurrency": self.concurrency,
            "timeout_sec": self.timeout_sec,
            "warmup_requests": self.warmup_requests,
            "percentiles": list(self.percentiles),
        }


@dataclass(frozen=True, slots=True)
class ProbeConfig:
    path: str = "/"
    attempts: int = 10
    base_delay_sec: float = 0.1
    max_delay_sec: float = 2.0
    timeout_sec: float = 2.0

    def __post_init__(self) -> None:
        if self.attempts <= 0:
            raise SetupError(f"probe attempts must be positive, got {self.attempts}")
        if self.base_delay_sec < 0 or self.max_delay_sec < 0:
            raise SetupError("probe delays must not be negative")
        if self.timeout_sec <= 0:
            raise SetupError(f"probe timeout must be positive, got {self.timeout_sec}")


@dataclass(frozen=True, slots=True)
class FrameworkTarget:
    name: str
    base_url: str
    skip: bool = False
    headers: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.name:
            raise SetupError("framework name must not be empty")
        if not self.base_url:
            raise SetupError(f"framework {self.name} has no base URL")

    def url_for(self, path: str) -> str:
        return self.base_url.rstrip("/") + "/" + path.lstrip("/")


@dataclass(frozen=True, slots=True)
class RequestSpec:
    method: str
    url: str
    body: bytes | None = None
    content_type: str | None = None
    headers: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        method = self.method.strip().upper() if self.method else ""
        if not method or not method.isalpha():
            raise SetupError(f"invalid HTTP method: {self.method!r}")
        object.__setattr__(self, "method", method)
        try:
            url = httpx.URL(self.url)
        except (httpx.InvalidURL, TypeError) as exc:
            raise SetupError(f"invalid URL {self.url!r}: {exc}") from exc
        if url.scheme not in ("http", "https") or not url.host:
            raise SetupError(f"URL must be absolute http(s): {self.url!r}")

    def request_headers(self) -> dict[str, str]:
        headers = dict(self.headers)
        if self.content_type:
            headers["Content-Type"] = self.content_type
        return headers
