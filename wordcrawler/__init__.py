"""
wordcrawler

A parallel, depth- and time-bounded web crawler that tallies word frequencies.
"""

__version__ = "1.0.0"
__description__ = "A parallel web crawler that ranks the most popular words of a site"
