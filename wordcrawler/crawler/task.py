"""
Recursive crawl task: claim a URL, fetch it, merge its words, crawl its links.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .fetcher import FetchError
from .job import CrawlJobSpec
from .parser import PageContribution
from .state import CrawlState
from ..utils.logger import get_crawler_logger
from ..utils.monitoring import CrawlMetrics


@dataclass(frozen=True)
class CrawlContext:
    """Collaborators shared by every task of one crawl."""
    job: CrawlJobSpec
    state: CrawlState
    fetcher: object
    limiter: asyncio.Semaphore
    clock: Callable[[], float]
    metrics: Optional[CrawlMetrics] = None


class CrawlTask:
    """
    One unit of crawl work for a single URL.

    ``run`` completes only after every child task spawned for the page's
    links has completed. Failures are contained to the task's own subtree.
    """

    def __init__(self, url: str, depth_remaining: int, deadline: float, context: CrawlContext):
        self.url = url
        self.depth_remaining = depth_remaining
        self.deadline = deadline
        self.context = context
        self.logger = get_crawler_logger(__name__, url=url, depth=depth_remaining)

    async def run(self):
        """Crawl this URL and, recursively, the pages it links to."""
        # Checks, claim and fetch all happen inside a worker slot; the slot
        # is released before the children are joined.
        async with self.context.limiter:
            if not self._should_fetch():
                return
            contribution = await self._fetch()

        if contribution is None:
            return

        self.context.state.merge(contribution.word_counts)

        children = [
            CrawlTask(link, self.depth_remaining - 1, self.deadline, self.context)
            for link in contribution.links
        ]
        if children:
            await self._join(children)

    def _should_fetch(self) -> bool:
        """Evaluate the short-circuit conditions in order, then claim the URL."""
        if self.depth_remaining == 0:
            self._skip('depth')
            return False
        if self.context.clock() > self.deadline:
            self._skip('deadline')
            return False
        if self.context.job.is_ignored(self.url):
            self._skip('ignored')
            return False
        if not self.context.state.claim(self.url):
            self._skip('duplicate')
            return False
        return True

    async def _fetch(self) -> Optional[PageContribution]:
        """Fetch the page while holding a worker slot. Returns None on failure."""
        metrics = self.context.metrics

        started = time.monotonic()
        try:
            contribution = await self.context.fetcher.fetch(self.url)
        except FetchError as e:
            self.logger.warning(f"Failed to fetch {self.url}: {e.reason}")
            if metrics:
                metrics.record_fetch_error('fetch')
            return None
        except Exception as e:
            self.logger.error(f"Unexpected error fetching {self.url}: {e}", exc_info=True)
            if metrics:
                metrics.record_fetch_error(type(e).__name__)
            return None

        if metrics:
            metrics.record_page_fetched(time.monotonic() - started)
        self.logger.debug(f"Fetched {self.url}: {len(contribution.links)} links")
        return contribution

    async def _join(self, children):
        """Run child tasks concurrently and wait for all of them."""
        results = await asyncio.gather(
            *(child.run() for child in children),
            return_exceptions=True
        )
        for child, result in zip(children, results):
            if isinstance(result, Exception):
                self.logger.error(f"Crawl task for {child.url} failed: {result}",
                                  exc_info=result)

    def _skip(self, reason: str):
        self.logger.debug(f"Skipping {self.url} ({reason})")
        if self.context.metrics:
            self.context.metrics.record_skip(reason)

    def __repr__(self) -> str:
        return f"CrawlTask(url={self.url!r}, depth_remaining={self.depth_remaining})"
