"""Test doubles for crawl collaborators."""

import asyncio
from collections import Counter
from typing import Dict, Iterable, List, Optional, Tuple

from wordcrawler.crawler.fetcher import FetchError
from wordcrawler.crawler.parser import PageContribution


class FakeFetcher:
    """Serves a fixed link graph: url -> (word_counts, links)."""

    def __init__(self, pages: Dict[str, Tuple[Dict[str, int], List[str]]],
                 failures: Iterable[str] = (), errors: Iterable[str] = (),
                 delay: float = 0.0):
        self.pages = pages
        self.failures = set(failures)
        self.errors = set(errors)
        self.delay = delay
        self.calls = Counter()

    async def fetch(self, url: str) -> PageContribution:
        self.calls[url] += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if url in self.failures:
            raise FetchError(url, "simulated failure")
        if url in self.errors:
            raise RuntimeError(f"boom: {url}")
        if url not in self.pages:
            raise FetchError(url, "not found")
        word_counts, links = self.pages[url]
        return PageContribution(word_counts=dict(word_counts), links=list(links))


class FakeClock:
    """Returns ``values`` in order, then repeats the last value forever."""

    def __init__(self, *values: float):
        self.values = list(values) or [0.0]
        self.index = 0

    def __call__(self) -> float:
        value = self.values[min(self.index, len(self.values) - 1)]
        self.index += 1
        return value


def page(words: Optional[Dict[str, int]] = None, *links: str):
    return (words or {}, list(links))
