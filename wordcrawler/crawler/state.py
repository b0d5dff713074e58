"""
Shared accumulator for a single crawl: the visited set and the word tally.
"""

import threading
from typing import Dict, FrozenSet, Mapping, Set


class CrawlState:
    """
    Visited URLs and word counts shared by every task of one crawl.

    The only mutations offered are ``claim`` and ``merge``; both run under a
    single lock so a URL is claimed at most once and no increment is lost,
    whether callers are event-loop tasks or plain threads.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._visited: Set[str] = set()
        self._counts: Dict[str, int] = {}

    def claim(self, url: str) -> bool:
        """
        Record ``url`` as visited.

        Returns:
            True if this call inserted the URL, False if it was already present
        """
        with self._lock:
            if url in self._visited:
                return False
            self._visited.add(url)
            return True

    def merge(self, word_counts: Mapping[str, int]):
        """Add one page's word counts into the running totals."""
        if not word_counts:
            return
        with self._lock:
            for word, count in word_counts.items():
                self._counts[word] = self._counts.get(word, 0) + count

    def visited_count(self) -> int:
        with self._lock:
            return len(self._visited)

    def snapshot_counts(self) -> Dict[str, int]:
        """Get a copy of the current word totals."""
        with self._lock:
            return dict(self._counts)

    def snapshot_visited(self) -> FrozenSet[str]:
        with self._lock:
            return frozenset(self._visited)

    def __repr__(self) -> str:
        return f"CrawlState(visited={self.visited_count()}, words={len(self.snapshot_counts())})"
