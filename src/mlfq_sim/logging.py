"""Simulation event log.

The scheduler records what happens at each step as a structured entry
stamped with the simulated time, instead of printing it.  Callers decide
what to do with the trace: the CLI prints it, the web app returns it as
JSON, and tests inspect it directly.

Severities:

- DEBUG: bookkeeping (admissions, idle stretches).
- INFO: scheduling decisions (dispatches, blocks, demotions, boosts).
- WARNING: a rule that could not apply, such as a process that used up
  its allotment in the lowest queue and has nowhere left to go.
"""

from dataclasses import dataclass
from enum import IntEnum


class LogLevel(IntEnum):
    """Severity of an event; ordered so ``min_level`` filters work."""

    DEBUG = 0
    INFO = 1
    WARNING = 2


@dataclass(frozen=True)
class LogEntry:
    """One event in the trace.

    Attributes:
        level: How noteworthy the event is.
        message: What happened, in words.
        source: Component that reported it ("scheduler" or "process").
        time: Simulated clock when it was recorded.

    """

    level: LogLevel
    message: str
    source: str
    time: int = 0

    def __str__(self) -> str:
        """Format as ``[t=TIME] [LEVEL] source: message``."""
        return f"[t={self.time}] [{self.level.name}] {self.source}: {self.message}"


class Logger:
    """Chronological, append-only trace of simulation events."""

    def __init__(self) -> None:
        """Create an empty trace."""
        self._entries: list[LogEntry] = []

    @property
    def entries(self) -> list[LogEntry]:
        """Return a copy of every entry, oldest first."""
        return list(self._entries)

    def __len__(self) -> int:
        """Return the number of entries."""
        return len(self._entries)

    def log(self, level: LogLevel, message: str, *, source: str, time: int = 0) -> None:
        """Record an event at simulated *time*."""
        self._entries.append(LogEntry(level=level, message=message, source=source, time=time))

    def filter(
        self,
        *,
        min_level: LogLevel = LogLevel.DEBUG,
        source: str | None = None,
    ) -> list[LogEntry]:
        """Return the entries at or above *min_level*, optionally from one *source*."""
        return [
            e
            for e in self._entries
            if e.level >= min_level and (source is None or e.source == source)
        ]

    def lines(self, *, min_level: LogLevel = LogLevel.DEBUG) -> list[str]:
        """Return the formatted entries at or above *min_level*."""
        return [str(e) for e in self.filter(min_level=min_level)]
