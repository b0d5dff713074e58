"""
Immutable description of one crawl job.
"""

import re
from dataclasses import dataclass, field
from typing import Iterable, Pattern, Tuple

from ..utils.config import ConfigurationError


@dataclass(frozen=True)
class CrawlJobSpec:
    """Parameters shared read-only by every task of a crawl."""
    start_pages: Tuple[str, ...] = ()
    ignored_urls: Tuple[Pattern, ...] = field(default_factory=tuple)
    max_depth: int = 0
    timeout: float = 1.0
    popular_word_count: int = 0
    parallelism: int = 1

    def __post_init__(self):
        if self.max_depth < 0:
            raise ConfigurationError("max_depth must be non-negative")
        if self.timeout < 0:
            raise ConfigurationError("timeout must be non-negative")
        if self.popular_word_count < 0:
            raise ConfigurationError("popular_word_count must be non-negative")
        if self.parallelism < 1:
            raise ConfigurationError("parallelism must be at least 1")

    @classmethod
    def create(cls, start_pages: Iterable[str] = (), ignored_urls: Iterable[str] = (),
               **kwargs) -> 'CrawlJobSpec':
        """
        Build a job spec from plain strings.

        Args:
            start_pages: Seed URLs
            ignored_urls: Regular expressions matched against full URLs
            **kwargs: Remaining CrawlJobSpec fields

        Raises:
            ConfigurationError: If a pattern does not compile or a field is invalid
        """
        patterns = []
        for expression in ignored_urls:
            try:
                patterns.append(re.compile(expression))
            except re.error as e:
                raise ConfigurationError(f"Invalid ignored_urls pattern {expression!r}: {e}")

        return cls(
            start_pages=tuple(start_pages),
            ignored_urls=tuple(patterns),
            **kwargs
        )

    def is_ignored(self, url: str) -> bool:
        """Check whether any ignore pattern matches the whole URL."""
        return any(pattern.fullmatch(url) for pattern in self.ignored_urls)
