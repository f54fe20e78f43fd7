"""
Time source for invoice deadlines.

``InvoiceProcessor.process_invoice`` may be given an absolute deadline; before
each of its six stages it asks its clock for the current instant and stops
with ``DeadlineExceededError`` once that instant has reached the deadline.
The CLI turns ``--timeout SECONDS`` into such a deadline using
``SystemClock``.  Tests inject ``DeterministicClock`` and move it forward
from inside a fake collaborator to expire a deadline mid-pipeline.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone


class Clock(ABC):
    """Source of timezone-aware instants, comparable with a deadline."""

    @abstractmethod
    def now(self) -> datetime:
        ...


class SystemClock(Clock):
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Clock that only moves when told to.

    ``now()`` keeps returning the start instant plus whatever ``advance``
    has added; ``set_time`` jumps to a new start and drops the offset.
    """

    def __init__(self, start: datetime | None = None):
        self._start = start or datetime(2026, 1, 1, tzinfo=timezone.utc)
        self._offset = timedelta()

    def now(self) -> datetime:
        return self._start + self._offset

    def set_time(self, time: datetime) -> None:
        self._start = time
        self._offset = timedelta()

    def advance(self, seconds: float = 1) -> None:
        self._offset += timedelta(seconds=seconds)
