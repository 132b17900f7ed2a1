"""Simulated process: the unit of work the MLFQ scheduler moves around.

A process is created from a ``JobConfig`` when the scheduler admits the
job.  It tracks how much of its workload it has done, when it may next
run, how much of its allotment at the current level it has left, and
its response and turnaround times.

State machine::

    READY → RUNNING → FINISHED
              ↓  ↑
             BLOCKED

Each call to ``run()`` moves a READY or BLOCKED process to RUNNING and
then lets it execute one slice.  A slice ends in one of three ways:

1. The job reaches an I/O boundary first: it BLOCKS and may run again
   ``io_duration`` ticks later.
2. The job's remaining work fits in the quantum: it FINISHES.
3. Otherwise it uses the whole quantum and stays RUNNING.

I/O boundaries are cyclic on ``work_done``: a job with ``io_interval=4``
blocks after every 4 units of CPU time, except when that boundary is
also the end of its workload.
"""

from __future__ import annotations

import sys
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mlfq_sim.config import JobConfig

# next_schedule_time of a finished process
NEVER = sys.maxsize


class ProcessState(StrEnum):
    """Lifecycle states of a simulated process.

    - READY: admitted, has never run.
    - RUNNING: used its last slice fully and can continue.
    - BLOCKED: waiting for an I/O to complete.
    - FINISHED: all work done; never runs again.
    """

    READY = "ready"
    RUNNING = "running"
    BLOCKED = "blocked"
    FINISHED = "finished"


class Process:
    """One schedulable job inside the simulation.

    Only the queue that holds it (or the scheduler, while the process is
    checked out for a dispatch) may change it.  Illegal state transitions
    raise RuntimeError.
    """

    def __init__(
        self,
        *,
        pid: int,
        workload: int,
        start_time: int = 0,
        io_interval: int = 0,
        io_duration: int = 0,
    ) -> None:
        """Create a READY process.

        Args:
            pid: Identifier assigned by the scheduler.
            workload: Total CPU time the process needs.
            start_time: Arrival time; the process cannot run before it.
            io_interval: CPU time between I/O requests (0 = no I/O).
            io_duration: Length of each I/O wait.

        """
        self._pid = pid
        self._workload = workload
        self._start_time = start_time
        self._io_interval = io_interval
        self._io_duration = io_duration
        self._work_done = 0
        self._next_schedule_time = start_time
        self._allotment = 0
        self._response_time: int | None = None
        self._turnaround_time: int | None = None
        self._state = ProcessState.READY

    @classmethod
    def from_job(cls, job: JobConfig, *, pid: int) -> Process:
        """Create a process for *job*."""
        return cls(
            pid=pid,
            workload=job.workload,
            start_time=job.arrival_time,
            io_interval=job.io_interval,
            io_duration=job.io_duration,
        )

    @property
    def pid(self) -> int:
        """Return the process identifier."""
        return self._pid

    @property
    def workload(self) -> int:
        """Return the total CPU time required."""
        return self._workload

    @property
    def work_done(self) -> int:
        """Return the CPU time consumed so far."""
        return self._work_done

    @property
    def remaining(self) -> int:
        """Return the CPU time still needed."""
        return self._workload - self._work_done

    @property
    def start_time(self) -> int:
        """Return the arrival time."""
        return self._start_time

    @property
    def io_interval(self) -> int:
        """Return the CPU time between I/O requests (0 = never)."""
        return self._io_interval

    @property
    def io_duration(self) -> int:
        """Return the length of each I/O wait."""
        return self._io_duration

    @property
    def next_schedule_time(self) -> int:
        """Return the earliest time the process may run again."""
        return self._next_schedule_time

    @property
    def allotment(self) -> int:
        """Return the budget left at the current priority level."""
        return self._allotment

    @allotment.setter
    def allotment(self, value: int) -> None:
        """Reset the budget (done by a queue on admission)."""
        if value < 0:
            msg = f"Allotment of process {self._pid} cannot be negative: {value}"
            raise ValueError(msg)
        self._allotment = value

    @property
    def response_time(self) -> int | None:
        """Return first-run time minus arrival, or None if never run."""
        return self._response_time

    @property
    def turnaround_time(self) -> int | None:
        """Return finish time minus arrival, or None if not finished."""
        return self._turnaround_time

    @property
    def state(self) -> ProcessState:
        """Return the current state."""
        return self._state

    @property
    def is_blocked(self) -> bool:
        """Return True if the process is waiting for I/O."""
        return self._state is ProcessState.BLOCKED

    @property
    def is_finished(self) -> bool:
        """Return True if the process has done all its work."""
        return self._state is ProcessState.FINISHED

    def _transition(self, action: str, expected: ProcessState, target: ProcessState) -> None:
        """Enforce a state transition.

        Raises:
            RuntimeError: If the process is not in the expected state.

        """
        if self._state is not expected:
            msg = f"Cannot {action}: process {self._pid} is {self._state}, expected {expected}"
            raise RuntimeError(msg)
        self._state = target

    def start(self) -> None:
        """Transition READY → RUNNING. First dispatch."""
        self._transition("start", ProcessState.READY, ProcessState.RUNNING)

    def resume(self) -> None:
        """Transition BLOCKED → RUNNING. I/O completed, dispatched again."""
        self._transition("resume", ProcessState.BLOCKED, ProcessState.RUNNING)

    def block(self) -> None:
        """Transition RUNNING → BLOCKED. Issue an I/O request."""
        self._transition("block", ProcessState.RUNNING, ProcessState.BLOCKED)

    def finish(self) -> None:
        """Transition RUNNING → FINISHED. All work done."""
        self._transition("finish", ProcessState.RUNNING, ProcessState.FINISHED)

    def _time_until_io(self) -> int | None:
        """Return CPU time left before the next I/O request, or None."""
        if self._io_interval == 0:
            return None
        return self._io_interval - self._work_done % self._io_interval

    def run(self, quantum: int, at_time: int) -> int:
        """Run for at most *quantum* ticks starting at *at_time*.

        Args:
            quantum: Time slice granted by the current queue.
            at_time: Simulated time the slice starts.

        Returns:
            The CPU time actually used (never more than *quantum*).

        Raises:
            RuntimeError: If the process has already finished.

        """
        if self._state is ProcessState.FINISHED:
            msg = f"Cannot run: process {self._pid} has already finished"
            raise RuntimeError(msg)
        if self._state is ProcessState.READY:
            self.start()
        elif self._state is ProcessState.BLOCKED:
            self.resume()

        if self._response_time is None:
            self._response_time = at_time - self._start_time

        remaining = self.remaining
        until_io = self._time_until_io()

        if until_io is not None and until_io < remaining and until_io <= quantum:
            run_time = until_io
            self._work_done += run_time
            self._next_schedule_time = at_time + self._io_duration
            self.block()
        elif remaining <= quantum:
            run_time = remaining
            self._work_done = self._workload
            self._next_schedule_time = NEVER
            self._turnaround_time = at_time - self._start_time + remaining
            self.finish()
        else:
            run_time = quantum
            self._work_done += quantum
            self._next_schedule_time = at_time + quantum

        self._allotment = max(0, self._allotment - run_time)
        return run_time

    def __repr__(self) -> str:
        """Return a debug-friendly representation."""
        return (
            f"Process(pid={self._pid}, state={self._state}, "
            f"work={self._work_done}/{self._workload}, next={self._next_schedule_time})"
        )
