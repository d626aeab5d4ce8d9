from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Mapping

from apibench.config import FrameworkTarget, RequestSpec
from apibench.errors import SetupError


@dataclass(frozen=True, slots=True)
class Scenario:
    name: str
    method: str
    default_path: str
    description: str = ""
    paths: Mapping[str, str] = field(default_factory=dict)
    payload: Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise SetupError("scenario name must not be empty")
        if not self.default_path.startswith("/"):
            raise SetupError(f"scenario {self.name} path must start with '/': {self.default_path!r}")

    def path_for(self, framework: str) -> str:
        return self.paths.get(framework, self.default_path)

    def request_for(self, target: FrameworkTarget) -> RequestSpec:
        body = None
        content_type = None
        if self.payload is not None:
            body = json.dumps(self.payload).encode("utf-8")
            content_type = "application/json"
        return RequestSpec(
            method=self.method,
            url=target.url_for(self.path_for(target.name)),
            body=body,
            content_type=content_type,
            headers=target.headers,
        )
