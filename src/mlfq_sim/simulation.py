"""Run a whole simulation and summarise it.

``simulate`` wires configuration into a ``Scheduler``, drives it until
every queue is empty, and packages the outcome as a ``SimulationReport``.
``format_report`` renders a report for a terminal.  Both the CLI and the
web app go through here, so they always agree.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from mlfq_sim.config import jobs_total_workload
from mlfq_sim.logging import Logger
from mlfq_sim.scheduler import ProcessStats, Scheduler

if TYPE_CHECKING:
    from collections.abc import Sequence

    from mlfq_sim.config import JobConfig, QueueConfig, SchedulerConfig, SimulationConfig


@dataclass(frozen=True)
class SimulationReport:
    """Outcome of a complete simulation.

    The averages are None when there were no jobs to average over.
    """

    end_time: int
    steps: int
    idle_time: int
    total_workload: int
    average_turnaround_time: int | None
    average_response_time: int | None
    processes: tuple[ProcessStats, ...]
    log: Logger

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready form of the report (without the log)."""
        return {
            "end_time": self.end_time,
            "steps": self.steps,
            "idle_time": self.idle_time,
            "total_workload": self.total_workload,
            "average_turnaround_time": self.average_turnaround_time,
            "average_response_time": self.average_response_time,
            "processes": [
                {
                    "pid": p.pid,
                    "start_time": p.start_time,
                    "workload": p.workload,
                    "finish_time": p.finish_time,
                    "response_time": p.response_time,
                    "turnaround_time": p.turnaround_time,
                }
                for p in self.processes
            ],
        }


def simulate(
    config: SchedulerConfig,
    queue_configs: Sequence[QueueConfig],
    jobs: Sequence[JobConfig],
    *,
    logger: Logger | None = None,
    max_steps: int | None = None,
) -> SimulationReport:
    """Run the MLFQ simulation for *jobs* to completion.

    Args:
        config: Policy switches.
        queue_configs: Queue ladder, highest priority first.
        jobs: Jobs to admit at time 0, in pid order.
        logger: Event log to write to (a fresh one if omitted).
        max_steps: Give up after this many steps (unbounded if None).

    Returns:
        The final statistics and the event log.

    Raises:
        SimulationLimitError: If *max_steps* is reached first.

    """
    scheduler = Scheduler(config, queue_configs, logger=logger)
    scheduler.add_jobs(jobs)
    steps = scheduler.run(max_steps=max_steps)
    has_jobs = scheduler.process_count > 0
    return SimulationReport(
        end_time=scheduler.current_time,
        steps=steps,
        idle_time=scheduler.total_idle_time(),
        total_workload=jobs_total_workload(jobs),
        average_turnaround_time=scheduler.average_turnaround_time() if has_jobs else None,
        average_response_time=scheduler.average_response_time() if has_jobs else None,
        processes=tuple(sorted(scheduler.finished, key=lambda p: p.pid)),
        log=scheduler.logger,
    )


def simulate_config(
    config: SimulationConfig,
    *,
    logger: Logger | None = None,
    max_steps: int | None = None,
) -> SimulationReport:
    """Run ``simulate`` on a parsed SimulationConfig."""
    return simulate(
        config.scheduler, config.queues, config.jobs, logger=logger, max_steps=max_steps
    )


def _fmt(value: int | None) -> str:
    return "n/a" if value is None else str(value)


def format_report(report: SimulationReport) -> str:
    """Render the per-process table and the aggregate statistics."""
    lines: list[str] = []
    if report.processes:
        lines.append(f"{'PID':>5} {'ARRIVAL':>8} {'WORK':>6} {'FINISH':>7} {'RESP':>6} {'TURN':>6}")
        lines.extend(
            f"{p.pid:>5} {p.start_time:>8} {p.workload:>6} {p.finish_time:>7} "
            f"{p.response_time:>6} {p.turnaround_time:>6}"
            for p in report.processes
        )
        lines.append("")
    lines.append(f"Finished at time {report.end_time} after {report.steps} steps.")
    lines.append(f"Total workload: {report.total_workload}")
    lines.append(f"Total idle time: {report.idle_time}")
    lines.append(f"Average turnaround time: {_fmt(report.average_turnaround_time)}")
    lines.append(f"Average response time: {_fmt(report.average_response_time)}")
    return "\n".join(lines)
