#!/usr/bin/env python3
"""
Main entry point for the word crawler.
"""

import asyncio
import argparse
import logging
import sys
from typing import List, Optional

from wordcrawler.crawler.fetcher import PageFetcher
from wordcrawler.crawler.scheduler import CrawlerScheduler
from wordcrawler.profiler import Profiler
from wordcrawler.storage import ResultWriter, ResourceError
from wordcrawler.utils.config import Config, ConfigurationError, load_config
from wordcrawler.utils.logger import setup_logging, log_system_info
from wordcrawler.utils.monitoring import CrawlMetrics


class CrawlerApp:
    """Main application class for the word crawler."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self.profiler = Profiler()

    def setup_logging(self, config: Config):
        """Setup logging configuration."""
        setup_logging(
            level=config.logging.level,
            log_file=config.logging.file,
            log_format=config.logging.format,
            enable_json=config.logging.json
        )

    async def run(self, config: Config):
        """Run the crawl described by ``config`` and write its outputs."""
        job = config.to_job_spec()
        metrics = CrawlMetrics()
        if config.monitoring.metrics_enabled:
            metrics.start_server(config.monitoring.prometheus_port)

        self.logger.info("=== WEB CRAWLER STARTING ===")
        self.logger.info(f"Seed URLs: {list(job.start_pages)}")
        self.logger.info(f"Max depth: {job.max_depth}")
        self.logger.info(f"Timeout: {job.timeout}s")
        self.logger.info(f"Requested parallelism: {job.parallelism}")
        log_system_info()

        scheduler = CrawlerScheduler(job, metrics=metrics)
        fetcher = PageFetcher(
            user_agent=config.crawler.user_agent,
            request_timeout=config.crawler.request_timeout,
            parse_workers=scheduler.workers,
            ignored_words=config.crawler.ignored_words
        )

        async with self.profiler.wrap(fetcher, ['fetch']) as profiled_fetcher:
            scheduler.fetcher = profiled_fetcher
            crawler = self.profiler.wrap(scheduler, ['crawl_async'])
            result = await crawler.crawl_async()

        self.logger.info("=== WEB CRAWLER FINISHED ===")

        writer = ResultWriter(result)
        if config.crawler.result_path:
            writer.write(config.crawler.result_path)
        else:
            writer.write(sys.stdout)

        if config.crawler.profile_output_path:
            self.profiler.write_data(config.crawler.profile_output_path)
        else:
            self.profiler.write_data(sys.stdout)

        return result


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wordcrawler",
        description="Crawl a site and report its most popular words",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py config.yaml       # Crawl using the given configuration
        """
    )
    parser.add_argument(
        'config',
        nargs='*',
        help='Path to the crawl configuration file (YAML or JSON)'
    )
    parser.add_argument(
        '--version',
        action='version',
        version='wordcrawler 1.0.0'
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args, extras = parser.parse_known_args(argv)

    # Exactly one configuration path; anything else prints usage
    if extras or len(args.config) != 1:
        parser.print_usage()
        return 0

    try:
        config = load_config(args.config[0])
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    app = CrawlerApp()
    app.setup_logging(config)
    try:
        asyncio.run(app.run(config))
    except ResourceError as e:
        app.logger.error(f"Fatal error: {e}")
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
