"""Command-line front end: ``mlfq-sim``.

Parses the queue ladder, the job list, and the policy switches, runs the
simulation, prints the event log and the final statistics.

Examples::

    mlfq-sim -q 10,20 -a 20,100 -l 0,100,0,0:5,40,4,3 -B 50 -S
    mlfq-sim -c workload.json --verbose

Configuration comes either from flags or from a JSON file (``-c``), never
a mix of both.  The parsing helpers (``build_parser``, ``build_config``)
are pure and testable; ``main`` is the I/O entrypoint.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import TYPE_CHECKING

from mlfq_sim.config import (
    ConfigError,
    SchedulerConfig,
    SimulationConfig,
    load_config,
    parse_bool_list,
    parse_int,
    parse_int_list,
    parse_jobs,
    queue_configs_from_lists,
)
from mlfq_sim.logging import LogLevel
from mlfq_sim.simulation import format_report, simulate_config

if TYPE_CHECKING:
    from collections.abc import Sequence

DEFAULT_QUANTUMS = "10,10,10"
DEFAULT_ALLOTMENTS = "10,10,10"

# Flags that describe the simulation itself; they cannot be combined with -c.
_INLINE_OPTIONS = ("quantums", "allotments", "admit_front", "jobs", "boost", "io_bump", "io_stay")


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for ``mlfq-sim``."""
    parser = argparse.ArgumentParser(
        prog="mlfq-sim",
        description="Multi-Level Feedback Queue CPU scheduling simulator",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help="JSON file describing queues, jobs, and policy (instead of the flags below)",
    )
    parser.add_argument(
        "-q",
        "--quantums",
        help=f"comma-separated quantum per queue, top first (default {DEFAULT_QUANTUMS})",
    )
    parser.add_argument(
        "-a",
        "--allotments",
        help=f"comma-separated allotment per queue (default {DEFAULT_ALLOTMENTS})",
    )
    parser.add_argument(
        "--admit-front",
        help="comma-separated 0/1 per queue: admit new processes at the front",
    )
    parser.add_argument(
        "-l",
        "--jobs",
        help="jobs as arrival,workload,io_interval,io_duration separated by ':'",
    )
    parser.add_argument(
        "-B",
        "--boost",
        help="priority boost interval in ticks (0 disables, the default)",
    )
    parser.add_argument(
        "-I",
        "--io-bump",
        action="store_true",
        default=None,
        help="processes returning from I/O jump ahead in their queue",
    )
    parser.add_argument(
        "-S",
        "--io-stay",
        action="store_true",
        default=None,
        help="processes that block for I/O are not demoted",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v", "--verbose", action="store_true", help="also print debug events (idle, admission)"
    )
    verbosity.add_argument("--quiet", action="store_true", help="print only the statistics")
    return parser


def build_config(args: argparse.Namespace) -> SimulationConfig:
    """Turn parsed arguments into a SimulationConfig.

    Raises:
        ConfigError: If the arguments are inconsistent or malformed.

    """
    if args.config is not None:
        given = [name for name in _INLINE_OPTIONS if getattr(args, name) is not None]
        if given:
            flags = ", ".join("--" + name.replace("_", "-") for name in given)
            msg = f"--config cannot be combined with {flags}"
            raise ConfigError(msg)
        return load_config(args.config)

    if args.jobs is None:
        msg = "no jobs given (use --jobs or --config)"
        raise ConfigError(msg)

    quantums = parse_int_list(args.quantums or DEFAULT_QUANTUMS, what="quantum")
    allotments = parse_int_list(args.allotments or DEFAULT_ALLOTMENTS, what="allotment")
    admit_front = parse_bool_list(args.admit_front) if args.admit_front is not None else None
    scheduler = SchedulerConfig(
        priority_boost_interval=parse_int(args.boost, what="boost") if args.boost else 0,
        io_bump=bool(args.io_bump),
        io_stay=bool(args.io_stay),
    )
    return SimulationConfig(
        scheduler=scheduler,
        queues=tuple(queue_configs_from_lists(quantums, allotments, admit_front)),
        jobs=tuple(parse_jobs(args.jobs)),
    )


def main(argv: Sequence[str] | None = None) -> int:
    """Parse *argv*, run the simulation, and print the results.

    Returns:
        Process exit status (0 on success).  Invalid input exits with
        status 2 through ``argparse``.

    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = build_config(args)
    except ConfigError as e:
        parser.error(str(e))

    report = simulate_config(config)

    if not args.quiet:
        min_level = LogLevel.DEBUG if args.verbose else LogLevel.INFO
        for line in report.log.lines(min_level=min_level):
            print(line)  # noqa: T201
        print()  # noqa: T201
    print(format_report(report))  # noqa: T201
    return 0
