"""Session logging — an audit trail of what the shell did.

Three kinds of event end up here while a session runs:

- the **dispatcher** notes whether each command went to a builtin or to
  an external program (DEBUG), and **redirection** lists the operators
  it found on the line (DEBUG);
- the **launcher** records each child's pid and exit status (INFO);
- every diagnostic written to standard error is repeated as an ERROR
  entry whose source is the command that failed.

Nothing is printed while the session runs.  Standard output and error
belong to the commands (and may be redirected into a user's file), so
the entries are kept in memory and written out only when ``nanosh`` is
started with ``--log-file``.

Design choices:
    - ``LogLevel`` is an ``IntEnum``, so ``--log-level`` thresholds are
      plain comparisons.
    - ``LogEntry`` renders as ``[LEVEL] source: message``, the line
      format of the dumped log file.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import TextIO


class LogLevel(IntEnum):
    """Severity levels for log entries."""

    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


@dataclass(frozen=True)
class LogEntry:
    """One event from the session.

    Attributes:
        level: How important the event is.
        message: What happened, e.g. ``"pid 42 (ls) exited with status 0"``.
        source: ``"dispatcher"``, ``"redirection"``, ``"launcher"``, or the
            name of the command that reported an error.

    """

    level: LogLevel
    message: str
    source: str

    def __str__(self) -> str:
        """Format as ``[LEVEL] source: message``."""
        return f"[{self.level.name}] {self.source}: {self.message}"


class Logger:
    """In-memory session log that drops entries below ``min_level``."""

    def __init__(self, min_level: LogLevel = LogLevel.DEBUG) -> None:
        """Create an empty logger.

        Args:
            min_level: Threshold set from ``--log-level`` or
                ``NANOSH_LOG_LEVEL``.

        """
        self.min_level = min_level
        self._entries: list[LogEntry] = []

    @property
    def entries(self) -> list[LogEntry]:
        """Return a copy of the session's entries, oldest first."""
        return list(self._entries)

    def log(self, level: LogLevel, message: str, *, source: str) -> None:
        """Record an event unless it falls below the threshold."""
        if level >= self.min_level:
            self._entries.append(LogEntry(level, message, source))

    def filter(
        self,
        *,
        min_level: LogLevel | None = None,
        source: str | None = None,
    ) -> list[LogEntry]:
        """Select entries by severity and origin.

        ``filter(source="launcher")`` lists child exits, and
        ``filter(min_level=LogLevel.ERROR)`` lists what went wrong.

        Args:
            min_level: Keep entries at or above this level.
            source: Keep entries from this source only.

        Returns:
            The matching entries, oldest first.

        """
        return [
            entry
            for entry in self._entries
            if (min_level is None or entry.level >= min_level)
            and (source is None or entry.source == source)
        ]

    def dump(self, stream: TextIO) -> None:
        """Write every entry to *stream*, one per line."""
        stream.writelines(f"{entry}\n" for entry in self._entries)

    def clear(self) -> None:
        """Forget every entry."""
        self._entries.clear()

    def __len__(self) -> int:
        """Return the number of entries."""
        return len(self._entries)
