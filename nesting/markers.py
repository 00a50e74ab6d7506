"""
Instance marker bookkeeping.

Flattening tags every inherited label with a marker so that two distinct
containers sharing a name never merge during nesting. Markers come from a
locked counter, so rapid successive calls and concurrent blocks still get
distinct values.
"""
import itertools
import threading

from core.models import Label


class MarkerSource:
    """Monotonically increasing, thread-safe marker generator."""

    def __init__(self, start: int = 1):
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def next_marker(self) -> int:
        with self._lock:
            return next(self._counter)

    def mark(self, label: Label) -> Label:
        """Return ``label`` with a fresh marker, replacing any existing one."""
        return label.with_marker(self.next_marker())


# Process-wide default
default_markers = MarkerSource()
