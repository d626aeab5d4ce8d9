from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

import httpx

from apibench.config import FrameworkTarget, ProbeConfig
from apibench.errors import RunCancelled, TargetUnreachable

logger = logging.getLogger(__name__)

T = TypeVar("T")


def backoff_delay(attempt: int, base_delay_sec: float, max_delay_sec: float) -> float:
    return min(max_delay_sec, base_delay_sec * (2 ** (attempt - 1)))


async def interruptible(awaitable: Awaitable[T], cancel: asyncio.Event | None) -> T:
    """Await ``awaitable`` unless ``cancel`` is set first, in which case raise RunCancelled."""
    if cancel is None:
        return await awaitable
    if cancel.is_set():
        if asyncio.iscoroutine(awaitable):
            awaitable.close()
        raise RunCancelled("cancelled")
    task = asyncio.ensure_future(awaitable)
    waiter = asyncio.create_task(cancel.wait())
    try:
        await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        waiter.cancel()
    if task.done():
        return task.result()
    task.cancel()
    await asyncio.gather(task, return_exceptions=True)
    raise RunCancelled("cancelled")


async def retry_with_backoff(
    predicate: Callable[[], Awaitable[bool]],
    attempts: int,
    base_delay_sec: float,
    max_delay_sec: float,
    cancel: asyncio.Event | None = None,
) -> int | None:
    """Call ``predicate`` until it returns True, sleeping with exponential backoff in between.

    Returns the attempt number that succeeded, or None once ``attempts`` are used up.
    Raises RunCancelled as soon as ``cancel`` is set, even mid-attempt or mid-sleep.
    """
    for attempt in range(1, attempts + 1):
        if await interruptible(predicate(), cancel):
            return attempt
        if attempt < attempts:
            delay = backoff_delay(attempt, base_delay_sec, max_delay_sec)
            await interruptible(asyncio.sleep(delay), cancel)
    return None


async def wait_until_ready(
    client: httpx.AsyncClient,
    target: FrameworkTarget,
    probe: ProbeConfig,
    cancel: asyncio.Event | None = None,
) -> int:
    url = target.url_for(probe.path)
    last_error = ""

    async def ready() -> bool:
        nonlocal last_error
        try:
            resp = await client.get(url, headers=dict(target.headers), timeout=probe.timeout_sec)
        except httpx.HTTPError as exc:
            last_error = f"{type(exc).__name__}: {exc}" if str(exc) else type(exc).__name__
            logger.debug("probe %s failed: %s", url, last_error)
            return False
        if resp.is_error:
            last_error = f"status {resp.status_code}"
            logger.debug("probe %s returned %d", url, resp.status_code)
            return False
        return True

    attempt = await retry_with_backoff(
        ready, probe.attempts, probe.base_delay_sec, probe.max_delay_sec, cancel
    )
    if attempt is None:
        raise TargetUnreachable(url, probe.attempts, last_error)
    logger.debug("%s ready after %d attempt(s)", url, attempt)
    return attempt
