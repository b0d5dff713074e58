"""
Method timing for crawler components.
"""

from .profiler import Profiler, ProfiledProxy
from .state import ProfilingState

__all__ = ['Profiler', 'ProfiledProxy', 'ProfilingState']
