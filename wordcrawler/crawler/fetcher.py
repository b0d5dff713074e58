"""
Page fetcher that downloads a URL and parses it into a PageContribution.
"""

import asyncio
import aiohttp
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, Iterable, Optional
from urllib.parse import urlparse
from urllib.request import url2pathname
from aiohttp import ClientSession, ClientTimeout, ClientError

from .parser import ContentParser, PageContribution


DEFAULT_USER_AGENT = 'wordcrawler/1.0'

TEXT_CONTENT_TYPES = (
    'text/html',
    'text/plain',
    'application/xhtml+xml',
)


class FetchError(Exception):
    """Raised when a single URL cannot be fetched or parsed."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class PageFetcher:
    """
    Fetches web pages (http, https and file URLs) and parses them.

    Downloads happen on the event loop through a shared aiohttp session;
    HTML parsing is handed to a thread pool so a slow page does not stall
    other fetches.
    """

    def __init__(self, user_agent: str = DEFAULT_USER_AGENT, request_timeout: int = 30,
                 parse_workers: int = 1, ignored_words: Optional[Iterable[str]] = None,
                 max_content_size: int = 10 * 1024 * 1024):
        self.user_agent = user_agent
        self.request_timeout = request_timeout
        self.parse_workers = parse_workers
        self.max_content_size = max_content_size

        self.logger = logging.getLogger(__name__)
        self.parser = ContentParser(ignored_words=ignored_words)

        # Session management
        self.session: Optional[ClientSession] = None
        self.executor: Optional[ThreadPoolExecutor] = None

        # Statistics
        self.stats = {
            'total_requests': 0,
            'successful_requests': 0,
            'failed_requests': 0,
            'total_bytes_downloaded': 0
        }

    async def __aenter__(self):
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def start(self):
        """Initialize the fetcher session and parse pool."""
        if self.session is None:
            timeout = ClientTimeout(total=self.request_timeout)
            headers = {'User-Agent': self.user_agent}

            self.session = aiohttp.ClientSession(
                timeout=timeout,
                headers=headers,
                connector=aiohttp.TCPConnector(
                    limit=self.parse_workers * 2,
                    ttl_dns_cache=300,
                    use_dns_cache=True
                )
            )
        if self.executor is None:
            self.executor = ThreadPoolExecutor(
                max_workers=self.parse_workers,
                thread_name_prefix='page-parser'
            )
        self.logger.info(f"PageFetcher started with {self.parse_workers} parse workers")

    async def close(self):
        """Close the session and shut the parse pool down."""
        if self.session:
            await self.session.close()
            self.session = None
        if self.executor:
            self.executor.shutdown(wait=True)
            self.executor = None
        self.logger.info("PageFetcher closed")

    async def fetch(self, url: str) -> PageContribution:
        """
        Fetch and parse a single URL.

        Args:
            url: The URL to fetch

        Returns:
            PageContribution with the page's word counts and links

        Raises:
            FetchError: If the page cannot be retrieved or parsed
        """
        if self.session is None or self.executor is None:
            raise RuntimeError("PageFetcher is not started")

        start_time = time.monotonic()
        self.stats['total_requests'] += 1

        try:
            if urlparse(url).scheme == 'file':
                content = await self._read_file(url)
            else:
                content = await self._download(url)

            loop = asyncio.get_running_loop()
            contribution = await loop.run_in_executor(
                self.executor, self.parser.parse, url, content
            )
        except FetchError:
            self.stats['failed_requests'] += 1
            raise
        except asyncio.TimeoutError:
            self.stats['failed_requests'] += 1
            raise FetchError(url, "Request timeout")
        except ClientError as e:
            self.stats['failed_requests'] += 1
            raise FetchError(url, f"Client error: {e}")

        self.stats['successful_requests'] += 1
        self.stats['total_bytes_downloaded'] += len(content)
        self.logger.debug(f"Fetched {url} in {time.monotonic() - start_time:.2f}s")
        return contribution

    async def _download(self, url: str) -> str:
        async with self.session.get(url) as response:
            if not 200 <= response.status < 300:
                raise FetchError(url, f"HTTP status {response.status}")

            content_type = response.headers.get('content-type', '').lower()
            if not self._is_text_content(content_type):
                raise FetchError(url, f"Non-text content type: {content_type}")

            return await self._read_content_safely(url, response)

    async def _read_file(self, url: str) -> str:
        """Read a file: URL from local disk."""
        path = Path(url2pathname(urlparse(url).path))
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(self.executor, self._read_text, path)
        except OSError as e:
            raise FetchError(url, f"Cannot read file: {e}")

    def _read_text(self, path: Path) -> str:
        if path.stat().st_size > self.max_content_size:
            raise OSError(f"File too large: {path}")
        return path.read_text(encoding='utf-8', errors='replace')

    def _is_text_content(self, content_type: str) -> bool:
        """Check if content type is text-based."""
        return any(text_type in content_type for text_type in TEXT_CONTENT_TYPES)

    async def _read_content_safely(self, url: str, response: aiohttp.ClientResponse) -> str:
        """
        Read response content with a size limit.

        Raises:
            FetchError: If the body exceeds ``max_content_size``
        """
        content_length = response.headers.get('content-length')
        if content_length:
            try:
                declared_size = int(content_length)
            except ValueError:
                raise FetchError(url, f"Invalid content-length: {content_length!r}")
            if declared_size > self.max_content_size:
                raise FetchError(url, f"Content too large ({content_length} bytes)")

        # Read content in chunks to respect size limit
        content_bytes = b''
        async for chunk in response.content.iter_chunked(8192):
            content_bytes += chunk
            if len(content_bytes) > self.max_content_size:
                raise FetchError(url, "Content exceeded size limit during reading")

        encoding = response.charset or 'utf-8'
        try:
            return content_bytes.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            return content_bytes.decode('utf-8', errors='replace')

    def get_stats(self) -> Dict[str, int]:
        """Get fetcher statistics."""
        return self.stats.copy()
