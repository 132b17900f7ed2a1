"""One priority level of the multilevel feedback queue.

A Queue holds the processes currently at its level, in order.  The order
matters: when several members are schedulable at the same instant, the
one nearest the front runs first.

Admission (``add_process``) resets the process's allotment to the
level's allotment and places it at the front or the back, depending on
``admit_at_front``.  After a slice that neither finishes the process nor
changes its level, ``put_process_back`` re-inserts it, either at the
back (round robin) or, for an I/O bump, ahead of every member that
becomes schedulable strictly later.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mlfq_sim.config import QueueConfig
    from mlfq_sim.process import Process


class Queue:
    """An ordered list of processes sharing a quantum and an allotment."""

    def __init__(self, *, quantum: int, allotment: int, admit_at_front: bool = False) -> None:
        """Create an empty queue.

        Args:
            quantum: Time slice granted per dispatch from this queue.
            allotment: CPU budget per process before demotion.
            admit_at_front: Insert newly admitted processes at the front.

        """
        self._quantum = quantum
        self._allotment = allotment
        self._admit_at_front = admit_at_front
        self._processes: list[Process] = []

    @classmethod
    def from_config(cls, config: QueueConfig) -> Queue:
        """Create an empty queue from a QueueConfig."""
        return cls(
            quantum=config.quantum,
            allotment=config.allotment,
            admit_at_front=config.admit_at_front,
        )

    @property
    def quantum(self) -> int:
        """Return the time slice for this level."""
        return self._quantum

    @property
    def allotment(self) -> int:
        """Return the per-process budget for this level."""
        return self._allotment

    @property
    def admit_at_front(self) -> bool:
        """Return True if newcomers are placed at the front."""
        return self._admit_at_front

    @property
    def processes(self) -> list[Process]:
        """Return a snapshot of the members, front first."""
        return list(self._processes)

    def __len__(self) -> int:
        """Return the number of members."""
        return len(self._processes)

    def is_empty(self) -> bool:
        """Return True if the queue holds no process."""
        return not self._processes

    def add_process(self, process: Process) -> None:
        """Admit *process* at this level, resetting its allotment."""
        process.allotment = self._allotment
        if self._admit_at_front:
            self._processes.insert(0, process)
        else:
            self._processes.append(process)

    def has_schedulable_process(self, now: int) -> bool:
        """Return True if any member may run at time *now*."""
        return any(p.next_schedule_time <= now for p in self._processes)

    def take_next_schedulable_process(self, now: int) -> Process | None:
        """Remove and return the front-most member that may run at *now*.

        Returns:
            The process, or None if no member is schedulable.

        """
        for i, proc in enumerate(self._processes):
            if proc.next_schedule_time <= now:
                del self._processes[i]
                return proc
        return None

    def put_process_back(self, process: Process, *, bump: bool = False) -> None:
        """Re-insert a process after a slice at this level.

        Without *bump* the process goes to the back.  With *bump* it goes
        just before the first member whose next schedule time is strictly
        later than its own; members due at the same time stay ahead of it.
        """
        if bump:
            for i, proc in enumerate(self._processes):
                if proc.next_schedule_time > process.next_schedule_time:
                    self._processes.insert(i, process)
                    return
        self._processes.append(process)

    def pop_all(self) -> list[Process]:
        """Empty the queue and return its former members in order."""
        processes, self._processes = self._processes, []
        return processes

    def __repr__(self) -> str:
        """Return a debug-friendly representation."""
        pids = [p.pid for p in self._processes]
        return f"Queue(quantum={self._quantum}, allotment={self._allotment}, pids={pids})"
