"""MLFQ scheduler: the control loop that ties processes and queues together.

The scheduler owns a ladder of queues (index 0 = highest priority) and
the simulated clock.  Each call to ``advance()`` makes exactly one
decision, following the MLFQ rules from *Operating Systems: Three Easy
Pieces*:

1. If Priority(A) > Priority(B), A runs (B doesn't).
2. If Priority(A) = Priority(B), A and B run round robin using the
   quantum of their queue.
3. A new job enters at the highest priority (queue 0).
4. Once a job uses up its allotment at a level, it moves down one level.
5. Every ``priority_boost_interval`` ticks, every job moves to queue 0.

Two switches refine rules 2 and 4 for jobs that block on I/O:

- **io_stay**: a job that blocks is never demoted for that slice, even
  if its allotment ran out.
- **io_bump**: a job that blocks is re-queued ahead of peers that become
  schedulable later, instead of at the back.

Time is event-driven: a dispatch advances the clock by the CPU time the
process actually used; when nothing is schedulable the CPU idles for a
single tick.
"""

from __future__ import annotations

from dataclasses import dataclass
from itertools import count
from typing import TYPE_CHECKING

from mlfq_sim.config import ConfigError
from mlfq_sim.logging import Logger, LogLevel
from mlfq_sim.process import Process, ProcessState
from mlfq_sim.queue import Queue

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from mlfq_sim.config import JobConfig, QueueConfig, SchedulerConfig

_SOURCE_SCHEDULER = "scheduler"
_SOURCE_PROCESS = "process"


class SimulationLimitError(RuntimeError):
    """Raise when a bounded run does not finish within its step budget."""


@dataclass(frozen=True)
class QueueView:
    """A snapshot of one queue, for inspection only.

    Members are listed front first.  Changing the ladder goes through the
    scheduler; a view has no way to add or remove processes.
    """

    level: int
    quantum: int
    allotment: int
    admit_at_front: bool
    processes: tuple[Process, ...]

    @classmethod
    def of(cls, level: int, queue: Queue) -> QueueView:
        """Snapshot *queue* at *level*."""
        return cls(
            level=level,
            quantum=queue.quantum,
            allotment=queue.allotment,
            admit_at_front=queue.admit_at_front,
            processes=tuple(queue.processes),
        )

    def __len__(self) -> int:
        """Return the number of members."""
        return len(self.processes)

    def is_empty(self) -> bool:
        """Return True if the queue held no process."""
        return not self.processes


@dataclass(frozen=True)
class ProcessStats:
    """Final timing figures of a finished process."""

    pid: int
    start_time: int
    workload: int
    finish_time: int
    response_time: int
    turnaround_time: int


@dataclass(frozen=True)
class StepResult:
    """What a single ``advance()`` did.

    Attributes:
        time_before: Clock value when the step began.
        time_after: Clock value when the step ended.
        pid: The dispatched process, or None for an idle tick.
        level: Queue the process was dispatched from.
        run_time: CPU time the process used.
        state: Process state after its slice.
        boosted: True if a priority boost happened first.

    """

    time_before: int
    time_after: int
    pid: int | None = None
    level: int | None = None
    run_time: int = 0
    state: ProcessState | None = None
    boosted: bool = False

    @property
    def idle(self) -> bool:
        """Return True if the CPU idled during this step."""
        return self.pid is None


class Scheduler:
    """Multilevel feedback queue scheduler over simulated time."""

    def __init__(
        self,
        config: SchedulerConfig,
        queue_configs: Sequence[QueueConfig],
        *,
        logger: Logger | None = None,
    ) -> None:
        """Create a scheduler with one queue per QueueConfig.

        Args:
            config: Priority boost and I/O policy switches.
            queue_configs: Queue parameters, highest priority first.
            logger: Event log to write to (a fresh one if omitted).

        Raises:
            ConfigError: If no queue is configured.

        """
        if not queue_configs:
            msg = "A scheduler needs at least one queue"
            raise ConfigError(msg)
        self._config = config
        self._queues: list[Queue] = [Queue.from_config(qc) for qc in queue_configs]
        self._logger = logger if logger is not None else Logger()
        self._current_time = 0
        self._last_boost_time = 0
        self._next_pid = count()
        self._process_count = 0
        self._idle_streak = 0
        self._idle_total = 0
        self._turnaround_total = 0
        self._response_total = 0
        self._finished: list[ProcessStats] = []

    # -- Inspection -----------------------------------------------------------

    @property
    def config(self) -> SchedulerConfig:
        """Return the policy switches."""
        return self._config

    @property
    def queues(self) -> list[QueueView]:
        """Return read-only views of the queue ladder, highest priority first."""
        return [QueueView.of(level, queue) for level, queue in enumerate(self._queues)]

    @property
    def logger(self) -> Logger:
        """Return the event log."""
        return self._logger

    @property
    def current_time(self) -> int:
        """Return the simulated clock."""
        return self._current_time

    @property
    def last_boost_time(self) -> int:
        """Return the time of the last priority boost (0 if none)."""
        return self._last_boost_time

    @property
    def process_count(self) -> int:
        """Return how many processes have been admitted."""
        return self._process_count

    @property
    def finished(self) -> list[ProcessStats]:
        """Return the stats of finished processes, in finishing order."""
        return list(self._finished)

    def level_of(self, pid: int) -> int | None:
        """Return the queue index holding *pid*, or None if absent."""
        for level, queue in enumerate(self._queues):
            if any(p.pid == pid for p in queue.processes):
                return level
        return None

    # -- Admission ------------------------------------------------------------

    def add_job(self, job: JobConfig) -> Process:
        """Admit *job* as a new process at the highest priority.

        Returns:
            The newly created process.

        """
        process = Process.from_job(job, pid=next(self._next_pid))
        self._process_count += 1
        self._queues[0].add_process(process)
        if job.does_io:
            io = f"I/O every {job.io_interval} for {job.io_duration}"
        else:
            io = "no I/O"
        self._logger.log(
            LogLevel.DEBUG,
            f"Process {process.pid} admitted: arrival {job.arrival_time}, "
            f"workload {job.workload}, {io}.",
            source=_SOURCE_SCHEDULER,
            time=self._current_time,
        )
        return process

    def add_jobs(self, jobs: Iterable[JobConfig]) -> None:
        """Admit several jobs in order."""
        for job in jobs:
            self.add_job(job)

    # -- Stepping -------------------------------------------------------------

    def is_finished(self) -> bool:
        """Return True once every queue is empty."""
        return all(q.is_empty() for q in self._queues)

    def advance(self) -> StepResult:
        """Make one scheduling decision and advance the clock.

        Returns:
            A summary of the step.

        Raises:
            RuntimeError: If every queue is already empty.

        """
        if self.is_finished():
            msg = f"Cannot advance: no processes left at time {self._current_time}"
            raise RuntimeError(msg)

        time_before = self._current_time
        boosted = self._priority_boost_due()
        if boosted:
            self._priority_boost()

        level = self._find_runnable_queue()
        if level is None:
            self._idle_streak += 1
            self._idle_total += 1
            self._current_time += 1
            return StepResult(
                time_before=time_before, time_after=self._current_time, boosted=boosted
            )

        queue = self._queues[level]
        process = queue.take_next_schedulable_process(self._current_time)
        if process is None:
            msg = f"Queue {level} reported a schedulable process but yielded none"
            raise RuntimeError(msg)

        self._log_idle_streak()
        self._log_start(process)
        run_time = process.run(queue.quantum, self._current_time)
        self._current_time += run_time
        self._log_slice(process, run_time)

        if process.is_finished:
            self._retire(process)
        else:
            self._requeue(process, level)

        return StepResult(
            time_before=time_before,
            time_after=self._current_time,
            pid=process.pid,
            level=level,
            run_time=run_time,
            state=process.state,
            boosted=boosted,
        )

    def run(self, *, max_steps: int | None = None) -> int:
        """Advance until every queue is empty.

        Args:
            max_steps: Stop with an error after this many steps
                (unbounded if None).

        Returns:
            The number of steps taken.

        Raises:
            SimulationLimitError: If *max_steps* is reached first.

        """
        steps = 0
        while not self.is_finished():
            if max_steps is not None and steps >= max_steps:
                msg = (
                    f"Simulation not finished after {max_steps} steps "
                    f"(time {self._current_time})"
                )
                raise SimulationLimitError(msg)
            self.advance()
            steps += 1
        return steps

    # -- Statistics -----------------------------------------------------------

    def total_idle_time(self) -> int:
        """Return the number of ticks the CPU spent idle."""
        return self._idle_total

    def average_turnaround_time(self) -> int:
        """Return the mean turnaround time over all admitted processes.

        Raises:
            RuntimeError: If no process was ever admitted.

        """
        return self._average(self._turnaround_total, "turnaround")

    def average_response_time(self) -> int:
        """Return the mean response time over all admitted processes.

        Raises:
            RuntimeError: If no process was ever admitted.

        """
        return self._average(self._response_total, "response")

    def _average(self, total: int, what: str) -> int:
        if self._process_count == 0:
            msg = f"No average {what} time: no processes were admitted"
            raise RuntimeError(msg)
        return total // self._process_count

    # -- MLFQ rules -----------------------------------------------------------

    def _priority_boost_due(self) -> bool:
        """Return True if rule 5 fires now."""
        interval = self._config.priority_boost_interval
        if interval == 0:
            return False
        return self._current_time - self._last_boost_time >= interval

    def _priority_boost(self) -> None:
        """Move every process below the top queue back to queue 0."""
        top = self._queues[0]
        moved = 0
        for queue in self._queues[1:]:
            for process in queue.pop_all():
                top.add_process(process)
                moved += 1
        self._last_boost_time = self._current_time
        self._logger.log(
            LogLevel.INFO,
            f"Priority boost: {moved} process(es) moved to queue 0.",
            source=_SOURCE_SCHEDULER,
            time=self._current_time,
        )

    def _find_runnable_queue(self) -> int | None:
        """Return the highest-priority queue with a schedulable process."""
        for level, queue in enumerate(self._queues):
            if queue.has_schedulable_process(self._current_time):
                return level
        return None

    def _retire(self, process: Process) -> None:
        """Fold a finished process into the statistics and drop it."""
        response = process.response_time
        turnaround = process.turnaround_time
        if response is None or turnaround is None:
            msg = f"Process {process.pid} finished without timing figures"
            raise RuntimeError(msg)
        self._response_total += response
        self._turnaround_total += turnaround
        self._finished.append(
            ProcessStats(
                pid=process.pid,
                start_time=process.start_time,
                workload=process.workload,
                finish_time=self._current_time,
                response_time=response,
                turnaround_time=turnaround,
            )
        )
        self._logger.log(
            LogLevel.INFO,
            f"Process {process.pid} finished. Response time: {response}. "
            f"Turnaround time: {turnaround}.",
            source=_SOURCE_SCHEDULER,
            time=self._current_time,
        )

    def _requeue(self, process: Process, level: int) -> None:
        """Demote *process* (rule 4) or put it back at *level*."""
        do_io_stay = self._config.io_stay and process.is_blocked
        lowest = len(self._queues) - 1

        if process.allotment == 0 and not do_io_stay and level < lowest:
            self._queues[level + 1].add_process(process)
            self._logger.log(
                LogLevel.INFO,
                f"Process {process.pid} priority reduced to {level + 1}.",
                source=_SOURCE_SCHEDULER,
                time=self._current_time,
            )
            return

        if process.allotment == 0 and not do_io_stay:
            self._logger.log(
                LogLevel.WARNING,
                f"Process {process.pid} used its allotment in lowest queue {level}; "
                "no lower queue to demote to.",
                source=_SOURCE_SCHEDULER,
                time=self._current_time,
            )
        elif do_io_stay:
            self._logger.log(
                LogLevel.INFO,
                f"Process {process.pid} stays in queue {level} after I/O.",
                source=_SOURCE_SCHEDULER,
                time=self._current_time,
            )
        do_io_bump = self._config.io_bump and process.is_blocked
        self._queues[level].put_process_back(process, bump=do_io_bump)
        if do_io_bump:
            self._logger.log(
                LogLevel.INFO,
                f"Process {process.pid} bumped in queue {level} after I/O.",
                source=_SOURCE_SCHEDULER,
                time=self._current_time,
            )

    # -- Event log helpers ----------------------------------------------------

    def _log_idle_streak(self) -> None:
        if self._idle_streak == 0:
            return
        self._logger.log(
            LogLevel.DEBUG,
            f"CPU idle for {self._idle_streak} ticks.",
            source=_SOURCE_SCHEDULER,
            time=self._current_time,
        )
        self._idle_streak = 0

    def _log_start(self, process: Process) -> None:
        if process.state is ProcessState.READY:
            message = f"Process {process.pid} start running."
        elif process.state is ProcessState.BLOCKED:
            message = f"Process {process.pid} resume running from I/O."
        else:
            return
        self._logger.log(LogLevel.INFO, message, source=_SOURCE_PROCESS, time=self._current_time)

    def _log_slice(self, process: Process, run_time: int) -> None:
        if process.state is ProcessState.BLOCKED:
            message = (
                f"Process {process.pid} blocked after running for {run_time}. "
                f"It will perform I/O for {process.io_duration}."
            )
        elif process.state is ProcessState.FINISHED:
            message = f"Process {process.pid} finished after running for {run_time}."
        else:
            message = f"Process {process.pid} run for {run_time}."
        self._logger.log(LogLevel.INFO, message, source=_SOURCE_PROCESS, time=self._current_time)
