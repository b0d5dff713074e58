"""
Crawler scheduler that runs a parallel, depth- and time-bounded crawl.
"""

import asyncio
import logging
import time
from typing import Callable, Iterable, List, Mapping, Optional
from dataclasses import dataclass, field
from types import MappingProxyType

from .fetcher import PageFetcher
from .job import CrawlJobSpec
from .ranker import sort_word_counts
from .state import CrawlState
from .task import CrawlContext, CrawlTask
from ..utils.config import hardware_concurrency
from ..utils.monitoring import CrawlMetrics


@dataclass(frozen=True)
class CrawlResult:
    """Outcome of a crawl: the popular words and the number of URLs visited."""
    word_counts: Mapping[str, int] = field(default_factory=dict)
    urls_visited: int = 0

    def __post_init__(self):
        # Read-only view over a private copy of the counts
        object.__setattr__(self, 'word_counts', MappingProxyType(dict(self.word_counts)))

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'word_counts': dict(self.word_counts),
            'urls_visited': self.urls_visited
        }


class CrawlerScheduler:
    """
    Coordinates a crawl over a bounded pool of workers.

    One root CrawlTask is started per seed URL. All tasks share a single
    CrawlState, which is ranked once every task has completed.
    """

    def __init__(self, job: CrawlJobSpec, fetcher=None,
                 clock: Callable[[], float] = time.monotonic,
                 metrics: Optional[CrawlMetrics] = None,
                 user_agent: Optional[str] = None, request_timeout: int = 30,
                 ignored_words: Iterable[str] = ()):
        self.job = job
        self.fetcher = fetcher
        self.clock = clock
        self.metrics = metrics
        self.user_agent = user_agent
        self.request_timeout = request_timeout
        self.ignored_words = list(ignored_words)
        self.logger = logging.getLogger(__name__)

        self.workers = min(job.parallelism, self.max_parallelism())

    @staticmethod
    def max_parallelism() -> int:
        """Upper bound on the worker pool size."""
        return hardware_concurrency()

    def crawl(self, start_pages: Optional[List[str]] = None) -> CrawlResult:
        """Blocking wrapper around ``crawl_async``."""
        return asyncio.run(self.crawl_async(start_pages))

    async def crawl_async(self, start_pages: Optional[List[str]] = None) -> CrawlResult:
        """
        Crawl from the given seed URLs.

        Args:
            start_pages: Seed URLs (defaults to the job's start pages)

        Returns:
            CrawlResult with the ranked popular words and visited count
        """
        seeds = list(self.job.start_pages if start_pages is None else start_pages)
        deadline = self.clock() + self.job.timeout

        if self.job.max_depth < 1:
            self.logger.info("max_depth is below 1, nothing to crawl")
            return CrawlResult()

        roots = [url for url in seeds if not self.job.is_ignored(url)]
        if len(roots) < len(seeds):
            self.logger.info(f"Dropped {len(seeds) - len(roots)} ignored seed URLs")

        state = CrawlState()
        start_time = time.monotonic()
        self.logger.info(f"Starting crawl of {len(roots)} seed URLs with {self.workers} workers, "
                         f"max depth {self.job.max_depth}, timeout {self.job.timeout}s")

        if self.fetcher is not None:
            await self._run_tasks(roots, deadline, state, self.fetcher)
        else:
            async with self._build_fetcher() as fetcher:
                await self._run_tasks(roots, deadline, state, fetcher)

        counts = state.snapshot_counts()
        result = CrawlResult(
            word_counts=sort_word_counts(counts, self.job.popular_word_count) if counts else {},
            urls_visited=state.visited_count()
        )

        self._log_final_stats(result, len(counts), time.monotonic() - start_time)
        return result

    def _build_fetcher(self) -> PageFetcher:
        kwargs = {}
        if self.user_agent:
            kwargs['user_agent'] = self.user_agent
        return PageFetcher(
            request_timeout=self.request_timeout,
            parse_workers=self.workers,
            ignored_words=self.ignored_words,
            **kwargs
        )

    async def _run_tasks(self, roots: List[str], deadline: float, state: CrawlState, fetcher):
        """Start one root task per seed and wait for the whole task tree."""
        context = CrawlContext(
            job=self.job,
            state=state,
            fetcher=fetcher,
            limiter=asyncio.Semaphore(self.workers),
            clock=self.clock,
            metrics=self.metrics
        )
        tasks = [CrawlTask(url, self.job.max_depth, deadline, context) for url in roots]

        results = await asyncio.gather(*(task.run() for task in tasks), return_exceptions=True)
        for task, result in zip(tasks, results):
            if isinstance(result, Exception):
                self.logger.error(f"Root crawl task for {task.url} failed: {result}",
                                  exc_info=result)

    def _log_final_stats(self, result: CrawlResult, distinct_words: int, elapsed: float):
        """Log final crawl statistics."""
        self.logger.info("=== CRAWL COMPLETED ===")
        self.logger.info(f"URLs visited: {result.urls_visited}")
        self.logger.info(f"Distinct words: {distinct_words}")
        self.logger.info(f"Total time: {elapsed:.2f} seconds")
        if self.metrics:
            self.logger.info(f"Crawl metrics: {self.metrics.snapshot()}")
