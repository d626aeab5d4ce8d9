from __future__ import annotations

import time

import httpx

from apibench.config import RequestSpec
from apibench.metrics import FailureKind, Outcome


async def send_request(
    client: httpx.AsyncClient,
    spec: RequestSpec,
    timeout_sec: float,
) -> Outcome:
    start_mono = time.perf_counter()
    try:
        resp = await client.request(
            spec.method,
            spec.url,
            content=spec.body,
            headers=spec.request_headers(),
            timeout=timeout_sec,
        )
        finished = time.perf_counter()
        if resp.is_success:
            failure = None
        else:
            failure = FailureKind.NON_2XX_STATUS
        return Outcome(
            latency_ms=(finished - start_mono) * 1000.0,
            success=failure is None,
            status_code=resp.status_code,
            failure=failure,
            started_mono=start_mono,
            finished_mono=finished,
            bytes_received=len(resp.content or b""),
        )
    except httpx.TimeoutException:
        err = FailureKind.TIMEOUT
    except httpx.ConnectError:
        err = FailureKind.CONNECTION_REFUSED
    except httpx.HTTPError:
        err = FailureKind.TRANSPORT_ERROR
    finished = time.perf_counter()
    return Outcome(
        latency_ms=(finished - start_mono) * 1000.0,
        success=False,
        status_code=None,
        failure=err,
        started_mono=start_mono,
        finished_mono=finished,
    )
