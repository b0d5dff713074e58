"""
Output layer for crawl results.
"""

from .result_writer import ResultWriter, ResourceError

__all__ = ['ResultWriter', 'ResourceError']
