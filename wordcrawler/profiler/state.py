"""
Thread-safe registry of accumulated call timings.
"""

import threading
from typing import Dict, TextIO, Tuple


def format_duration(seconds: float) -> str:
    """Format a duration as ``XmYsZms``."""
    total_ms = int(round(seconds * 1000))
    minutes, remainder = divmod(total_ms, 60_000)
    secs, millis = divmod(remainder, 1000)
    return f"{minutes}m {secs}s {millis}ms"


class ProfilingState:
    """Total time spent per (owner, operation) pair."""

    def __init__(self):
        self._lock = threading.Lock()
        self._durations: Dict[Tuple[str, str], float] = {}

    def record(self, owner: str, operation: str, elapsed: float):
        """Add ``elapsed`` seconds to the total for ``owner#operation``."""
        if elapsed < 0:
            raise ValueError("elapsed time must be non-negative")
        key = (owner, operation)
        with self._lock:
            self._durations[key] = self._durations.get(key, 0.0) + elapsed

    def totals(self) -> Dict[str, float]:
        with self._lock:
            return {f"{owner}#{operation}": total
                    for (owner, operation), total in self._durations.items()}

    def write(self, writer: TextIO):
        """Write one line per recorded operation, sorted by key."""
        for key, total in sorted(self.totals().items()):
            writer.write(f"{key} took {format_duration(total)}\n")
