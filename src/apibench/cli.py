from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path

from apibench.analysis import export_report, format_report
from apibench.config import FrameworkTarget, ProbeConfig, RunConfig
from apibench.errors import SetupError
from apibench.loadgen.runner import ComparisonReport, run_comparison
from apibench.scenarios import default_targets, scenarios_for

logger = logging.getLogger("apibench")


def _parse_target(value: str) -> FrameworkTarget:
    name, sep, url = value.partition("=")
    if not sep or not name or not url:
        msg = f"expected NAME=URL, got {value!r}"
        raise argparse.ArgumentTypeError(msg)
    return FrameworkTarget(name=name, base_url=url)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Compare HTTP framework throughput and latency")
    parser.add_argument("-n", "--requests", type=int, default=None, help="Requests per benchmark")
    parser.add_argument("-c", "--concurrency", type=int, default=None, help="Requests in flight")
    parser.add_argument("--timeout", type=float, default=10.0, help="Per-request timeout (sec)")
    parser.add_argument("--warmup", type=int, default=0, help="Unmeasured requests before each run")
    parser.add_argument("--quick", action="store_true", help="Smaller smoke-test defaults")
    parser.add_argument("--scenario", action="append", dest="scenarios", help="Scenario name (repeatable)")
    parser.add_argument(
        "--target",
        action="append",
        dest="targets",
        type=_parse_target,
        help="Framework as NAME=URL (repeatable, replaces the defaults)",
    )
    parser.add_argument("--skip", action="append", default=[], help="Framework name to skip (repeatable)")
    parser.add_argument("--baseline", default=None, help="Framework other results are compared to")
    parser.add_argument("--probe-attempts", type=int, default=10)
    parser.add_argument("--output", type=Path, default=None, help="Write results to .csv or .json")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def config_from_args(args: argparse.Namespace) -> RunConfig:
    overrides: dict[str, object] = {"timeout_sec": args.timeout, "warmup_requests": args.warmup}
    if args.requests is not None:
        overrides["requests"] = args.requests
    if args.concurrency is not None:
        overrides["concurrency"] = args.concurrency
    if args.quick:
        return RunConfig.quick(**overrides)
    return RunConfig(**overrides)


def targets_from_args(args: argparse.Namespace) -> list[FrameworkTarget]:
    targets = args.targets or default_targets()
    skip = set(args.skip)
    return [
        FrameworkTarget(t.name, t.base_url, skip=t.skip or t.name in skip, headers=t.headers)
        for t in targets
    ]


async def _run(args: argparse.Namespace) -> ComparisonReport:
    config = config_from_args(args)
    scenarios = scenarios_for(args.scenarios)
    targets = targets_from_args(args)
    probe = ProbeConfig(attempts=args.probe_attempts)
    cancel = asyncio.Event()
    loop = asyncio.get_running_loop()
    loop.add_signal_handler(signal.SIGINT, cancel.set)
    try:
        return await run_comparison(targets, scenarios, config, probe=probe, cancel=cancel)
    finally:
        loop.remove_signal_handler(signal.SIGINT)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        report = asyncio.run(_run(args))
        print(format_report(report, baseline=args.baseline))
        if args.output is not None:
            export_report(report, args.output)
            logger.info("results written to %s", args.output)
    except SetupError as exc:
        logger.error("%s", exc)
        return 2
    return 1 if report.unreachable else 0


if __name__ == "__main__":
    sys.exit(main())
