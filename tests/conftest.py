from __future__ import annotations

import pytest

from apibench.config import RequestSpec
from helpers import CountingServer


@pytest.fixture
def spec() -> RequestSpec:
    return RequestSpec("GET", "http://bench.test/json")


@pytest.fixture
def server() -> CountingServer:
    return CountingServer()
