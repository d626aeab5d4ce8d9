from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, replace
from typing import AsyncIterator, Awaitable, Callable

import httpx

from apibench.config import RequestSpec, RunConfig
from apibench.errors import SetupError
from apibench.loadgen.client import send_request
from apibench.metrics import FailureKind, Outcome

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class DriveResult:
    outcomes: tuple[Outcome, ...]
    requested: int
    duration_sec: float
    cancelled: bool = False

    @property
    def completed(self) -> int:
        return len(self.outcomes)


class LoadDriver:
    """Runs ``config.requests`` attempts of one request over a bounded worker pool.

    Workers pull attempts from a shared counter, so a slow worker never holds
    back work the others could take. At most ``min(concurrency, requests)``
    requests are in flight at any time.

    Once the target has answered at least once, a refused connection means it
    went away mid-run, so those attempts are recorded as transport errors.
    """

    def __init__(self, client: httpx.AsyncClient, spec: RequestSpec, config: RunConfig) -> None:
        if not isinstance(spec, RequestSpec):
            raise SetupError(f"expected a RequestSpec, got {type(spec).__name__}")
        if config.requests <= 0 or config.concurrency <= 0:
            raise SetupError("requests and concurrency must be positive")
        self.client = client
        self.spec = spec
        self.config = config
        self.started_mono: float | None = None
        self.finished_mono: float | None = None
        self.dispatched = 0
        self.completed = 0
        self.in_flight = 0
        self.peak_in_flight = 0
        self.cancelled = False
        self.answered = False

    @property
    def duration_sec(self) -> float:
        if self.started_mono is None or self.finished_mono is None:
            return 0.0
        return max(0.0, self.finished_mono - self.started_mono)

    def _claim(self) -> bool:
        if self.dispatched >= self.config.requests:
            return False
        self.dispatched += 1
        if self.started_mono is None:
            self.started_mono = time.perf_counter()
        return True

    async def _worker(self, queue: asyncio.Queue[Outcome]) -> None:
        while self._claim():
            self.in_flight += 1
            self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
            try:
                outcome = await send_request(self.client, self.spec, self.config.timeout_sec)
            finally:
                self.in_flight -= 1
            queue.put_nowait(self._classify(outcome))

    def _classify(self, outcome: Outcome) -> Outcome:
        if outcome.status_code is not None:
            self.answered = True
        elif self.answered and outcome.failure is FailureKind.CONNECTION_REFUSED:
            return replace(outcome, failure=FailureKind.TRANSPORT_ERROR)
        return outcome

    async def outcomes(self, cancel: asyncio.Event | None = None) -> AsyncIterator[Outcome]:
        """Yield outcomes in completion order until all attempts finish or ``cancel`` is set."""
        total = self.config.requests
        queue: asyncio.Queue[Outcome] = asyncio.Queue()
        workers = [
            asyncio.create_task(self._worker(queue)) for _ in range(self.config.effective_concurrency)
        ]
        cancel_wait = asyncio.create_task(cancel.wait()) if cancel is not None else None
        try:
            while self.completed < total:
                if cancel is not None and cancel.is_set():
                    self.cancelled = True
                    break
                if queue.empty():
                    self._raise_worker_fault(workers)
                    getter = asyncio.create_task(queue.get())
                    waiting: set[asyncio.Future[object]] = {getter}
                    waiting.update(task for task in workers if not task.done())
                    if cancel_wait is not None:
                        waiting.add(cancel_wait)
                    await asyncio.wait(waiting, return_when=asyncio.FIRST_COMPLETED)
                    if not getter.done():
                        getter.cancel()
                        self._raise_worker_fault(workers)
                        continue
                    outcome = getter.result()
                else:
                    outcome = queue.get_nowait()
                self._record(outcome)
                yield outcome
            if self.cancelled:
                abandoned = self.in_flight
                for task in workers:
                    task.cancel()
                await asyncio.gather(*workers, return_exceptions=True)
                while not queue.empty():
                    outcome = queue.get_nowait()
                    self._record(outcome)
                    yield outcome
                logger.warning(
                    "run cancelled with %d of %d attempts completed (%d in flight abandoned)",
                    self.completed,
                    total,
                    abandoned,
                )
        finally:
            for task in workers:
                task.cancel()
            if cancel_wait is not None:
                cancel_wait.cancel()
            await asyncio.gather(*workers, return_exceptions=True)

    @staticmethod
    def _raise_worker_fault(workers: list[asyncio.Task[None]]) -> None:
        for task in workers:
            if task.done() and not task.cancelled() and task.exception() is not None:
                raise task.exception()

    def _record(self, outcome: Outcome) -> None:
        self.completed += 1
        if self.finished_mono is None or outcome.finished_mono > self.finished_mono:
            self.finished_mono = outcome.finished_mono

    async def run(
        self,
        cancel: asyncio.Event | None = None,
        progress: ProgressCallback | None = None,
    ) -> DriveResult:
        collected: list[Outcome] = []
        async for outcome in self.outcomes(cancel):
            collected.append(outcome)
            if progress:
                await progress(len(collected), self.config.requests)
        return DriveResult(
            outcomes=tuple(collected),
            requested=self.config.requests,
            duration_sec=self.duration_sec,
            cancelled=self.cancelled,
        )
