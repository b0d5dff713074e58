"""
Ranking of aggregated word counts into the popular-words list.
"""

from typing import Dict, List, Mapping, Tuple


def _rank_key(item: Tuple[str, int]) -> Tuple[int, int, str]:
    word, count = item
    # Higher counts first, then longer words, then alphabetical
    return (-count, -len(word), word)


def rank_words(counts: Mapping[str, int], limit: int) -> List[Tuple[str, int]]:
    """
    Rank word counts and keep the top entries.

    Ordering is by count (descending), then word length (descending), then
    alphabetical order. The result does not depend on the iteration order
    of ``counts``.

    Args:
        counts: Mapping of word to cumulative count
        limit: Maximum number of entries to return

    Returns:
        List of (word, count) pairs, best first
    """
    if not counts or limit <= 0:
        return []
    return sorted(counts.items(), key=_rank_key)[:limit]


def sort_word_counts(counts: Mapping[str, int], limit: int) -> Dict[str, int]:
    """Return the ranked top ``limit`` words as an insertion-ordered dict."""
    return dict(rank_words(counts, limit))
