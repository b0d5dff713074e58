"""
Page parser that turns HTML into word counts and outbound links.
"""

import re
import logging
import string
from collections import Counter
from typing import Dict, Iterable, List, Optional
from urllib.parse import urljoin, urlparse, urlunparse
from dataclasses import dataclass, field
from bs4 import BeautifulSoup, Comment


CRAWLABLE_SCHEMES = ('http', 'https', 'file')


@dataclass
class PageContribution:
    """Word counts and outbound links produced by one page."""
    word_counts: Dict[str, int] = field(default_factory=dict)
    links: List[str] = field(default_factory=list)


class ContentParser:
    """
    Parses HTML content into a PageContribution.

    Words are the whitespace separated tokens of the visible text, stripped of
    punctuation and lower-cased. Tokens matching any ignored-word pattern
    are dropped.
    """

    def __init__(self, ignored_words: Optional[Iterable[str]] = None):
        self.ignored_words = [re.compile(p) for p in (ignored_words or [])]
        self.logger = logging.getLogger(__name__)

        self.punctuation_pattern = re.compile(f"[{re.escape(string.punctuation)}]")

    def parse(self, url: str, html_content: str) -> PageContribution:
        """
        Parse HTML content and extract words and links.

        Args:
            url: The URL of the page, used to resolve relative links
            html_content: Raw HTML content

        Returns:
            PageContribution for the page
        """
        soup = BeautifulSoup(html_content, 'lxml')

        # Remove script and style elements
        for script in soup(["script", "style", "noscript"]):
            script.decompose()

        # Remove comments
        for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
            comment.extract()

        contribution = PageContribution(
            word_counts=self._count_words(soup),
            links=self._extract_links(soup, url)
        )

        self.logger.debug(f"Parsed {url}: {sum(contribution.word_counts.values())} words, "
                          f"{len(contribution.links)} links")
        return contribution

    def _count_words(self, soup: BeautifulSoup) -> Dict[str, int]:
        """Count normalized words in the page text."""
        root = soup.find('body') or soup
        text = root.get_text(separator=' ')

        counts = Counter()
        for token in text.split():
            word = self.normalize_word(token)
            if word and not self.is_ignored_word(word):
                counts[word] += 1
        return dict(counts)

    def normalize_word(self, token: str) -> str:
        """Strip punctuation and lower-case a token."""
        return self.punctuation_pattern.sub('', token).lower()

    def is_ignored_word(self, word: str) -> bool:
        return any(pattern.fullmatch(word) for pattern in self.ignored_words)

    def _extract_links(self, soup: BeautifulSoup, base_url: str) -> List[str]:
        """Extract and normalize links, keeping document order."""
        links = []
        seen = set()

        for link in soup.find_all('a', href=True):
            href = link['href'].strip()
            if not href or href.startswith('#'):
                continue

            # Resolve relative URLs
            absolute_url = urljoin(base_url, href)
            normalized_url = self._normalize_url(absolute_url)

            if self._is_valid_url(normalized_url) and normalized_url not in seen:
                seen.add(normalized_url)
                links.append(normalized_url)

        return links

    def _normalize_url(self, url: str) -> str:
        """Normalize URL by lower-casing the host and removing the fragment."""
        parsed = urlparse(url)
        return urlunparse((
            parsed.scheme,
            parsed.netloc.lower(),
            parsed.path,
            parsed.params,
            parsed.query,
            ''  # Remove fragment
        ))

    def _is_valid_url(self, url: str) -> bool:
        """Check if URL is valid for crawling."""
        parsed = urlparse(url)

        if parsed.scheme not in CRAWLABLE_SCHEMES:
            return False

        # Local files have no host
        if parsed.scheme == 'file':
            return bool(parsed.path)

        return bool(parsed.netloc)
