"""
Web crawler core components.
"""

from .job import CrawlJobSpec
from .state import CrawlState
from .ranker import rank_words, sort_word_counts
from .parser import ContentParser, PageContribution
from .fetcher import PageFetcher, FetchError
from .task import CrawlTask, CrawlContext
from .scheduler import CrawlerScheduler, CrawlResult

__all__ = [
    'CrawlJobSpec', 'CrawlState',
    'rank_words', 'sort_word_counts',
    'ContentParser', 'PageContribution',
    'PageFetcher', 'FetchError',
    'CrawlTask', 'CrawlContext',
    'CrawlerScheduler', 'CrawlResult'
]
