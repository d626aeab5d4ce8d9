from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

import httpx

from apibench.metrics import FailureKind, Outcome

Handler = Callable[[httpx.Request], Awaitable[httpx.Response]]


def mock_client(handler: Handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def make_outcome(latency_ms: float, failure: FailureKind | None = None, status: int | None = 200) -> Outcome:
    if failure is not None and failure is not FailureKind.NON_2XX_STATUS:
        status = None
    return Outcome(
        latency_ms=latency_ms,
        success=failure is None,
        status_code=status,
        failure=failure,
        started_mono=0.0,
        finished_mono=latency_ms / 1000.0,
    )


class CountingServer:
    """Async MockTransport handler that tracks calls and requests in flight."""

    def __init__(self, delay_sec: float = 0.0, status: int = 200, fail_after: int | None = None) -> None:
        self.delay_sec = delay_sec
        self.status = status
        self.fail_after = fail_after
        self.calls = 0
        self.in_flight = 0
        self.peak = 0
        self.bodies: list[bytes] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/health":
            return httpx.Response(200, text="ok")
        self.calls += 1
        if self.fail_after is not None and self.calls > self.fail_after:
            raise httpx.RemoteProtocolError("Server disconnected without sending a response.", request=request)
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            self.bodies.append(request.content)
            if self.delay_sec:
                await asyncio.sleep(self.delay_sec)
            else:
                await asyncio.sleep(0)
            return httpx.Response(self.status, json={"message": "Hello, World!"})
        finally:
            self.in_flight -= 1


class CrashingServer:
    """HTTP/1.1 keep-alive server on a real socket that dies after ``crash_after`` answers.

    ``/health`` is answered without counting. When the server dies it stops
    listening and drops every open connection, unanswered requests included.
    """

    body = b'{"message":"Hello, World!"}'

    def __init__(self, crash_after: int) -> None:
        self.crash_after = crash_after
        self.answered = 0
        self.crashed = False
        self.server: asyncio.AbstractServer | None = None
        self.writers: set[asyncio.StreamWriter] = set()

    async def start(self) -> str:
        self.server = await asyncio.start_server(self._handle, "127.0.0.1", 0)
        port = self.server.sockets[0].getsockname()[1]
        return f"http://127.0.0.1:{port}"

    def crash(self) -> None:
        self.crashed = True
        assert self.server is not None
        self.server.close()
        for writer in self.writers:
            writer.close()

    async def _handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self.writers.add(writer)
        try:
            while not self.crashed:
                head = await reader.readuntil(b"\r\n\r\n")
                if self.crashed:
                    break
                path = head.split(b"\r\n", 1)[0].split()[1]
                counted = path != b"/health"
                if counted:
                    self.answered += 1
                writer.write(
                    b"HTTP/1.1 200 OK\r\nContent-Type: application/json\r\nContent-Length: %d\r\n\r\n%s"
                    % (len(self.body), self.body)
                )
                if counted and self.answered >= self.crash_after:
                    self.crash()
                    break
                await writer.drain()
        except (asyncio.IncompleteReadError, ConnectionError):
            pass
        finally:
            writer.close()
