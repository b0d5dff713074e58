"""
Monitoring and metrics collection for a crawl.
"""

import logging
from typing import Dict, Optional

from prometheus_client import CollectorRegistry, Counter, Histogram, start_http_server


SKIP_REASONS = ('depth', 'deadline', 'ignored', 'duplicate')


class CrawlMetrics:
    """
    Prometheus metrics for one crawl.

    Each instance owns its own CollectorRegistry, so several crawls in one
    process never share counters.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.logger = logging.getLogger(__name__)
        self.registry = registry or CollectorRegistry()

        self.pages_fetched = Counter(
            'crawler_pages_fetched_total',
            'Total number of pages fetched and merged',
            registry=self.registry
        )
        self.fetch_errors = Counter(
            'crawler_fetch_errors_total',
            'Total number of failed fetches',
            ['error_type'],
            registry=self.registry
        )
        self.tasks_skipped = Counter(
            'crawler_tasks_skipped_total',
            'Crawl tasks that returned without fetching',
            ['reason'],
            registry=self.registry
        )
        self.fetch_duration = Histogram(
            'crawler_fetch_duration_seconds',
            'Time spent fetching and parsing one page',
            registry=self.registry
        )

    def record_page_fetched(self, duration: float):
        """Record a successful fetch."""
        self.pages_fetched.inc()
        self.fetch_duration.observe(duration)

    def record_fetch_error(self, error_type: str):
        self.fetch_errors.labels(error_type=error_type).inc()

    def record_skip(self, reason: str):
        """Record a task that short-circuited for ``reason``."""
        self.tasks_skipped.labels(reason=reason).inc()

    def _sample(self, name: str, labels: Optional[Dict[str, str]] = None) -> float:
        return self.registry.get_sample_value(name, labels or {}) or 0.0

    def snapshot(self) -> Dict[str, float]:
        """Get current values of all crawl counters."""
        values = {
            'pages_fetched': self._sample('crawler_pages_fetched_total'),
            'fetch_errors': sum(
                metric.value
                for family in self.fetch_errors.collect()
                for metric in family.samples
                if metric.name.endswith('_total')
            ),
        }
        for reason in SKIP_REASONS:
            values[f'skipped_{reason}'] = self._sample(
                'crawler_tasks_skipped_total', {'reason': reason}
            )
        return values

    def start_server(self, port: int):
        """Start the Prometheus metrics HTTP server for this registry."""
        start_http_server(port, registry=self.registry)
        self.logger.info(f"Prometheus metrics server started on port {port}")
