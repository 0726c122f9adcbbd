from __future__ import annotations

import argparse
import asyncio
import logging
import signal

from rcpu.collectors import CounterSampler, check_capabilities, load_topology
from rcpu.config import settings
from rcpu.engine import RollingAverager, SampleChannel, SamplingLoop
from rcpu.errors import ConfigurationError
from rcpu.models import UtilizationSample
from rcpu.sinks import LogSink, TerminalTable

logger = logging.getLogger(__name__)


def positive_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"{value!r} is not a number")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"{value!r} must be greater than 0")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rcpu",
        description="Compare average CPU usage with SMT-adjusted usage (RCPU).",
    )
    parser.add_argument("--interval", type=positive_float, default=settings.sample_interval, help="seconds between samples")
    parser.add_argument("--topology-file", default=settings.topology_file, help="YAML topology instead of lscpu")
    parser.add_argument(
        "--skip-capability-check",
        action="store_true",
        default=settings.skip_capability_check,
        help="do not check CPU vendor and SMT state at startup",
    )
    parser.add_argument("--count", type=int, default=0, help="exit after this many samples (0 = run forever)")
    parser.add_argument("--no-table", action="store_true", help="log samples instead of drawing a table")
    parser.add_argument("--log-level", default=settings.log_level)
    return parser


async def run(args: argparse.Namespace) -> int:
    # ── startup ───────────────────────────────────────
    if not args.skip_capability_check:
        check_capabilities(settings.proc_root, settings.sys_root, settings.supported_vendors)
    topology = load_topology(args.topology_file, lscpu_timeout=settings.lscpu_timeout)

    done = asyncio.Event()
    channel = SampleChannel(maxsize=settings.channel_maxsize)
    averager = RollingAverager()
    channel.subscribe(averager.handle_sample)
    if args.no_table:
        channel.subscribe(LogSink().handle_sample)
    else:
        channel.subscribe(TerminalTable(max_rows=settings.table_rows).handle_sample)

    if args.count > 0:
        seen = 0

        async def _count(sample: UtilizationSample) -> None:
            nonlocal seen
            seen += 1
            if seen >= args.count:
                done.set()

        channel.subscribe(_count)

    sampling_loop = SamplingLoop(
        CounterSampler(settings.proc_root),
        topology,
        channel=channel,
        interval=args.interval,
    )

    event_loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        event_loop.add_signal_handler(sig, done.set)

    await channel.start()
    await sampling_loop.start()
    logger.info("Collector is running")

    await done.wait()

    # ── shutdown ──────────────────────────────────────
    await sampling_loop.stop()
    await channel.stop()
    for key, value in averager.annotations().items():
        logger.info("%s=%s", key, value)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=args.log_level.upper(),
    )
    try:
        return asyncio.run(run(args))
    except ConfigurationError as e:
        logger.error("Startup failed: %s", e)
        return 1
