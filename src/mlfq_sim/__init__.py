"""MLFQ simulator -- replay Multi-Level Feedback Queue CPU scheduling.

Re-exports the public engine so callers can write::

    from mlfq_sim import JobConfig, QueueConfig, Scheduler, SchedulerConfig
"""

from mlfq_sim.config import (
    ConfigError,
    JobConfig,
    QueueConfig,
    SchedulerConfig,
    SimulationConfig,
)
from mlfq_sim.logging import LogEntry, Logger, LogLevel
from mlfq_sim.process import NEVER, Process, ProcessState
from mlfq_sim.queue import Queue
from mlfq_sim.scheduler import (
    ProcessStats,
    QueueView,
    Scheduler,
    SimulationLimitError,
    StepResult,
)
from mlfq_sim.simulation import SimulationReport, format_report, simulate

__all__ = [
    "NEVER",
    "ConfigError",
    "JobConfig",
    "LogEntry",
    "LogLevel",
    "Logger",
    "Process",
    "ProcessState",
    "ProcessStats",
    "Queue",
    "QueueConfig",
    "QueueView",
    "Scheduler",
    "SchedulerConfig",
    "SimulationConfig",
    "SimulationLimitError",
    "SimulationReport",
    "StepResult",
    "format_report",
    "simulate",
]
