from __future__ import annotations

import asyncio
import logging
from contextlib import AsyncExitStack
from dataclasses import dataclass, field
from typing import Callable, Iterable

import httpx

from apibench.config import FrameworkTarget, ProbeConfig, RunConfig
from apibench.errors import RunCancelled, TargetUnreachable
from apibench.loadgen.client import send_request
from apibench.loadgen.driver import LoadDriver, ProgressCallback
from apibench.loadgen.probe import interruptible, wait_until_ready
from apibench.metrics import Summary, summarize
from apibench.scenarios import Scenario

logger = logging.getLogger(__name__)

ClientFactory = Callable[[RunConfig], httpx.AsyncClient]
SummaryCallback = Callable[[Summary], None]


@dataclass(frozen=True, slots=True)
class Unreachable:
    scenario: str
    framework: str
    reason: str


@dataclass(slots=True)
class ComparisonReport:
    summaries: list[Summary] = field(default_factory=list)
    unreachable: list[Unreachable] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    cancelled: bool = False

    def summary_for(self, scenario: str, framework: str) -> Summary | None:
        for summary in self.summaries:
            if summary.scenario == scenario and summary.framework == framework:
                return summary
        return None


def default_client(config: RunConfig) -> httpx.AsyncClient:
    limits = httpx.Limits(
        max_connections=config.effective_concurrency,
        max_keepalive_connections=config.effective_concurrency,
    )
    return httpx.AsyncClient(limits=limits, timeout=config.timeout_sec)


async def run_session(
    target: FrameworkTarget,
    scenario: Scenario,
    config: RunConfig,
    *,
    probe: ProbeConfig | None = None,
    client: httpx.AsyncClient | None = None,
    cancel: asyncio.Event | None = None,
    progress: ProgressCallback | None = None,
) -> Summary:
    """Benchmark one scenario against one framework.

    Raises TargetUnreachable when the readiness probe gives up, and RunCancelled
    when `cancel` is set during the readiness check or warmup; no requests are
    measured in either case. Failures once the run has started end up in the
    Summary instead.
    """
    probe = probe or ProbeConfig()
    spec = scenario.request_for(target)
    async with AsyncExitStack() as stack:
        if client is None:
            client = await stack.enter_async_context(default_client(config))
        await wait_until_ready(client, target, probe, cancel)
        logger.info(
            "%s/%s: %s %s, %d requests, concurrency %d",
            scenario.name,
            target.name,
            spec.method,
            spec.url,
            config.requests,
            config.concurrency,
        )
        for _ in range(config.warmup_requests):
            await interruptible(send_request(client, spec, config.timeout_sec), cancel)
        result = await LoadDriver(client, spec, config).run(cancel, progress)

    summary = summarize(
        result.outcomes,
        result.duration_sec,
        scenario=scenario.name,
        framework=target.name,
        requested=result.requested,
        percentiles=config.percentiles,
        cancelled=result.cancelled,
    )
    logger.info(
        "%s/%s: %.1f req/s, mean %.2f ms, %d failures",
        scenario.name,
        target.name,
        summary.requests_per_sec,
        summary.mean_ms,
        summary.failures,
    )
    if summary.degenerate:
        logger.warning("%s/%s: no successful requests", scenario.name, target.name)
    return summary


async def run_comparison(
    targets: Iterable[FrameworkTarget],
    scenarios: Iterable[Scenario],
    config: RunConfig,
    *,
    probe: ProbeConfig | None = None,
    cancel: asyncio.Event | None = None,
    client_factory: ClientFactory | None = None,
    on_summary: SummaryCallback | None = None,
) -> ComparisonReport:
    report = ComparisonReport()
    active: list[FrameworkTarget] = []
    for target in targets:
        if target.skip:
            report.skipped.append(target.name)
            logger.info("skipping %s", target.name)
        else:
            active.append(target)
    factory = client_factory or default_client

    for scenario in scenarios:
        for target in active:
            if cancel is not None and cancel.is_set():
                report.cancelled = True
                return report
            async with factory(config) as client:
                try:
                    summary = await run_session(
                        target,
                        scenario,
                        config,
                        probe=probe,
                        client=client,
                        cancel=cancel,
                    )
                except TargetUnreachable as exc:
                    logger.error("%s/%s: %s", scenario.name, target.name, exc)
                    report.unreachable.append(Unreachable(scenario.name, target.name, str(exc)))
                    continue
                except RunCancelled:
                    logger.warning("%s/%s: cancelled before measuring", scenario.name, target.name)
                    report.cancelled = True
                    return report
            report.summaries.append(summary)
            if on_summary:
                on_summary(summary)
            if summary.cancelled:
                report.cancelled = True
                return report
    return report
