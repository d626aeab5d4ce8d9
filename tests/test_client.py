from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from apibench.config import RequestSpec
from apibench.errors import SetupError
from apibench.loadgen.client import send_request
from apibench.metrics import FailureKind
from helpers import mock_client


def _send(handler, spec: RequestSpec):
    async def go():
        async with mock_client(handler) as client:
            return await send_request(client, spec, timeout_sec=1.0)

    return asyncio.run(go())


def test_success_records_status_and_latency(spec: RequestSpec) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="Hello, World!")

    outcome = _send(handler, spec)
    assert outcome.success
    assert outcome.status_code == 200
    assert outcome.failure is None
    assert outcome.latency_ms >= 0
    assert outcome.finished_mono >= outcome.started_mono
    assert outcome.bytes_received == len(b"Hello, World!")


def test_non_2xx_is_a_failure_with_status(spec: RequestSpec) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503)

    outcome = _send(handler, spec)
    assert not outcome.success
    assert outcome.failure is FailureKind.NON_2XX_STATUS
    assert outcome.status_code == 503


@pytest.mark.parametrize(
    ("exc", "kind"),
    [
        (httpx.ConnectError("Connection refused"), FailureKind.CONNECTION_REFUSED),
        (httpx.ConnectTimeout("connect timed out"), FailureKind.TIMEOUT),
        (httpx.ReadTimeout("read timed out"), FailureKind.TIMEOUT),
        (httpx.RemoteProtocolError("Server disconnected"), FailureKind.TRANSPORT_ERROR),
        (httpx.ReadError("connection reset"), FailureKind.TRANSPORT_ERROR),
    ],
)
def test_transport_failures_are_classified(spec: RequestSpec, exc: Exception, kind: FailureKind) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        raise exc

    outcome = _send(handler, spec)
    assert not outcome.success
    assert outcome.failure is kind
    assert outcome.status_code is None


def test_post_sends_body_and_content_type() -> None:
    seen: dict[str, object] = {}

    async def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["content_type"] = request.headers.get("content-type")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": 1})

    spec = RequestSpec(
        "post",
        "http://bench.test/users",
        body=b'{"name": "a", "email": "a@example.com"}',
        content_type="application/json",
    )
    outcome = _send(handler, spec)
    assert outcome.success
    assert seen == {
        "method": "POST",
        "content_type": "application/json",
        "body": {"name": "a", "email": "a@example.com"},
    }


@pytest.mark.parametrize(
    ("method", "url"),
    [
        ("GET", "/relative/path"),
        ("GET", "ftp://bench.test/file"),
        ("GET", "http://"),
        ("", "http://bench.test/"),
        ("GE T", "http://bench.test/"),
    ],
)
def test_malformed_request_spec_is_a_setup_error(method: str, url: str) -> None:
    with pytest.raises(SetupError):
        RequestSpec(method, url)
