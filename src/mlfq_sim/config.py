"""Configuration types: immutable descriptions of queues, jobs, and policy.

Three frozen dataclasses parameterise a simulation:

- **QueueConfig** -- one rung of the priority ladder (quantum, allotment,
  and whether newcomers go to the front or the back).
- **JobConfig** -- one job to admit (arrival, workload, I/O pattern).
- **SchedulerConfig** -- the MLFQ knobs (priority boost interval, I/O bump,
  I/O stay).

The rest of the module turns external text into these objects.  Two
input shapes are understood:

- Delimited strings, as typed on a command line::

      quantums    "10,20,40"
      allotments  "20,40,80"
      jobs        "0,100,10,5:20,50,0,0"   (arrival,workload,io_interval,io_duration)

- A JSON document (see ``config_from_mapping``), the same idea as the
  kernel image a bootloader reads from disk.

Everything here validates eagerly and raises ``ConfigError``; the engine
assumes its inputs are already sane.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from pathlib import Path

JOB_FIELDS = ("arrival_time", "workload", "io_interval", "io_duration")

_TRUE_WORDS = frozenset({"1", "true", "yes", "on", "y", "t"})
_FALSE_WORDS = frozenset({"0", "false", "no", "off", "n", "f"})


class ConfigError(ValueError):
    """Raise when simulation input cannot be turned into configuration.

    Examples: mismatched list lengths, a job with the wrong number of
    fields, a non-numeric value, a zero quantum.
    """


def _require_non_negative(owner: str, **values: int) -> None:
    for name, value in values.items():
        if isinstance(value, bool) or not isinstance(value, int):
            msg = f"{owner}: {name} must be an integer, got {value!r}"
            raise ConfigError(msg)
        if value < 0:
            msg = f"{owner}: {name} must be non-negative, got {value}"
            raise ConfigError(msg)


@dataclass(frozen=True)
class QueueConfig:
    """Describe one priority level.

    Attributes:
        quantum: Maximum CPU time granted per dispatch at this level.
        allotment: Total CPU time a process may use here before demotion.
        admit_at_front: Place newly admitted processes at the front of
            the level instead of the back.

    """

    quantum: int
    allotment: int
    admit_at_front: bool = False

    def __post_init__(self) -> None:
        """Reject non-positive quantum or allotment."""
        _require_non_negative("QueueConfig", quantum=self.quantum, allotment=self.allotment)
        if self.quantum == 0:
            msg = "QueueConfig: quantum must be at least 1"
            raise ConfigError(msg)
        if self.allotment == 0:
            msg = "QueueConfig: allotment must be at least 1"
            raise ConfigError(msg)


@dataclass(frozen=True)
class JobConfig:
    """Describe one job.

    An ``io_interval`` of 0 means the job never performs I/O.

    Attributes:
        arrival_time: Simulated time the job becomes runnable.
        workload: Total CPU time the job needs.
        io_interval: CPU time between two I/O requests.
        io_duration: Length of each I/O wait.

    """

    arrival_time: int
    workload: int
    io_interval: int = 0
    io_duration: int = 0

    def __post_init__(self) -> None:
        """Reject negative or non-integer fields."""
        _require_non_negative(
            "JobConfig",
            arrival_time=self.arrival_time,
            workload=self.workload,
            io_interval=self.io_interval,
            io_duration=self.io_duration,
        )

    @property
    def does_io(self) -> bool:
        """Return True if the job ever blocks for I/O."""
        return self.io_interval > 0


@dataclass(frozen=True)
class SchedulerConfig:
    """The MLFQ policy switches.

    Attributes:
        priority_boost_interval: Move everyone to the top queue every
            this many ticks (0 disables boosting).
        io_bump: A process returning from I/O jumps ahead of peers that
            become schedulable later.
        io_stay: A process that blocks for I/O is never demoted for it.

    """

    priority_boost_interval: int = 0
    io_bump: bool = False
    io_stay: bool = False

    def __post_init__(self) -> None:
        """Reject a negative boost interval."""
        _require_non_negative(
            "SchedulerConfig", priority_boost_interval=self.priority_boost_interval
        )


@dataclass(frozen=True)
class SimulationConfig:
    """Everything needed to run one simulation, as parsed from input."""

    scheduler: SchedulerConfig
    queues: tuple[QueueConfig, ...]
    jobs: tuple[JobConfig, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        """Require at least one queue."""
        if not self.queues:
            msg = "at least one queue is required"
            raise ConfigError(msg)


# -- Text parsing ------------------------------------------------------------


def parse_int(text: str, *, what: str = "value") -> int:
    """Parse a non-negative integer, raising ConfigError on failure."""
    try:
        value = int(text.strip())
    except ValueError:
        msg = f"invalid {what}: {text!r} is not an integer"
        raise ConfigError(msg) from None
    if value < 0:
        msg = f"invalid {what}: {value} is negative"
        raise ConfigError(msg)
    return value


def parse_bool(text: str) -> bool:
    """Parse a flag word such as ``1``, ``true``, ``no``."""
    word = text.strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    msg = f"invalid flag: {text!r}"
    raise ConfigError(msg)


def parse_int_list(text: str, *, what: str = "value") -> list[int]:
    """Parse a comma-separated list of integers (``"10,20,40"``)."""
    if not text.strip():
        msg = f"empty {what} list"
        raise ConfigError(msg)
    return [parse_int(part, what=what) for part in text.split(",")]


def parse_bool_list(text: str) -> list[bool]:
    """Parse a comma-separated list of flags (``"1,0,0"``)."""
    if not text.strip():
        msg = "empty flag list"
        raise ConfigError(msg)
    return [parse_bool(part) for part in text.split(",")]


def parse_job(text: str) -> JobConfig:
    """Parse one ``arrival,workload,io_interval,io_duration`` job."""
    parts = text.split(",")
    if len(parts) != len(JOB_FIELDS):
        msg = f"job {text!r} must have {len(JOB_FIELDS)} fields ({','.join(JOB_FIELDS)})"
        raise ConfigError(msg)
    values = [parse_int(part, what=name) for part, name in zip(parts, JOB_FIELDS, strict=True)]
    return JobConfig(*values)


def parse_jobs(text: str) -> list[JobConfig]:
    """Parse a colon-separated list of jobs."""
    if not text.strip():
        return []
    return [parse_job(chunk) for chunk in text.split(":")]


def queue_configs_from_lists(
    quantums: Sequence[int],
    allotments: Sequence[int],
    admit_at_front: Sequence[bool] | None = None,
) -> list[QueueConfig]:
    """Zip per-level lists into QueueConfigs, checking their lengths match.

    Args:
        quantums: Quantum for each level, top level first.
        allotments: Allotment for each level.
        admit_at_front: Optional admission flag for each level
            (defaults to back-of-queue everywhere).

    Raises:
        ConfigError: If the lists are empty or differ in length.

    """
    if not quantums:
        msg = "at least one queue is required"
        raise ConfigError(msg)
    if len(quantums) != len(allotments):
        msg = f"got {len(quantums)} quantums but {len(allotments)} allotments"
        raise ConfigError(msg)
    if admit_at_front is None:
        admit_at_front = [False] * len(quantums)
    elif len(admit_at_front) != len(quantums):
        msg = f"got {len(quantums)} quantums but {len(admit_at_front)} admission flags"
        raise ConfigError(msg)
    return [
        QueueConfig(quantum=q, allotment=a, admit_at_front=f)
        for q, a, f in zip(quantums, allotments, admit_at_front, strict=True)
    ]


# -- JSON documents ----------------------------------------------------------


def _as_int(value: Any, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"invalid {what}: {value!r} is not an integer"
        raise ConfigError(msg)
    return value


def _as_bool(value: Any, what: str) -> bool:
    if not isinstance(value, bool):
        msg = f"invalid {what}: {value!r} is not a boolean"
        raise ConfigError(msg)
    return value


def _job_from_json(item: Any) -> JobConfig:
    if isinstance(item, dict):
        unknown = set(item) - set(JOB_FIELDS)
        if unknown:
            msg = f"unknown job fields: {', '.join(sorted(unknown))}"
            raise ConfigError(msg)
        if "arrival_time" not in item or "workload" not in item:
            msg = "a job needs at least arrival_time and workload"
            raise ConfigError(msg)
        values = {name: _as_int(item[name], name) for name in JOB_FIELDS if name in item}
        return JobConfig(**values)
    if isinstance(item, list):
        if len(item) != len(JOB_FIELDS):
            msg = f"job {item!r} must have {len(JOB_FIELDS)} fields"
            raise ConfigError(msg)
        values = [_as_int(v, name) for v, name in zip(item, JOB_FIELDS, strict=True)]
        return JobConfig(*values)
    if isinstance(item, str):
        return parse_job(item)
    msg = f"invalid job entry: {item!r}"
    raise ConfigError(msg)


def _queue_from_json(item: Any) -> QueueConfig:
    if not isinstance(item, dict):
        msg = f"invalid queue entry: {item!r}"
        raise ConfigError(msg)
    try:
        quantum = _as_int(item["quantum"], "quantum")
        allotment = _as_int(item["allotment"], "allotment")
    except KeyError as e:
        msg = f"queue entry missing {e.args[0]!r}"
        raise ConfigError(msg) from None
    admit_at_front = _as_bool(item.get("admit_at_front", False), "admit_at_front")
    return QueueConfig(quantum=quantum, allotment=allotment, admit_at_front=admit_at_front)


def config_from_mapping(data: Any) -> SimulationConfig:
    """Build a SimulationConfig from a decoded JSON document.

    Expected shape::

        {
            "queues": [{"quantum": 10, "allotment": 20, "admit_at_front": false}],
            "jobs": [[0, 100, 10, 5], {"arrival_time": 3, "workload": 7}],
            "priority_boost_interval": 50,
            "io_bump": true,
            "io_stay": false
        }

    Raises:
        ConfigError: If the document is malformed.

    """
    if not isinstance(data, dict):
        msg = "configuration must be a JSON object"
        raise ConfigError(msg)
    queues_raw = data.get("queues")
    if not isinstance(queues_raw, list) or not queues_raw:
        msg = "'queues' must be a non-empty list"
        raise ConfigError(msg)
    jobs_raw = data.get("jobs", [])
    if not isinstance(jobs_raw, list):
        msg = "'jobs' must be a list"
        raise ConfigError(msg)
    scheduler = SchedulerConfig(
        priority_boost_interval=_as_int(
            data.get("priority_boost_interval", 0), "priority_boost_interval"
        ),
        io_bump=_as_bool(data.get("io_bump", False), "io_bump"),
        io_stay=_as_bool(data.get("io_stay", False), "io_stay"),
    )
    return SimulationConfig(
        scheduler=scheduler,
        queues=tuple(_queue_from_json(q) for q in queues_raw),
        jobs=tuple(_job_from_json(j) for j in jobs_raw),
    )


def load_config(path: Path) -> SimulationConfig:
    """Read a JSON configuration file.

    Raises:
        ConfigError: If the file is missing, unreadable, not JSON, or
            malformed.

    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        msg = f"configuration file not found: {path}"
        raise ConfigError(msg) from None
    except (OSError, UnicodeDecodeError) as e:
        msg = f"cannot read configuration file {path}: {e}"
        raise ConfigError(msg) from e
    except json.JSONDecodeError as e:
        msg = f"configuration file {path} is not valid JSON: {e}"
        raise ConfigError(msg) from None
    return config_from_mapping(data)


def config_to_mapping(config: SimulationConfig) -> dict[str, Any]:
    """Return the JSON-ready form of *config* (inverse of config_from_mapping)."""
    return {
        "queues": [
            {"quantum": q.quantum, "allotment": q.allotment, "admit_at_front": q.admit_at_front}
            for q in config.queues
        ],
        "jobs": [[j.arrival_time, j.workload, j.io_interval, j.io_duration] for j in config.jobs],
        "priority_boost_interval": config.scheduler.priority_boost_interval,
        "io_bump": config.scheduler.io_bump,
        "io_stay": config.scheduler.io_stay,
    }


def jobs_total_workload(jobs: Iterable[JobConfig]) -> int:
    """Return the CPU time the given jobs need in total."""
    return sum(job.workload for job in jobs)
