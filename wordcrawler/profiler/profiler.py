"""
Explicit profiling wrapper: times selected operations of an object.
"""

import functools
import inspect
import logging
import time
from datetime import datetime, timezone
from email.utils import format_datetime
from pathlib import Path
from typing import Any, Callable, Iterable, TextIO, Union

from .state import ProfilingState
from ..storage.result_writer import ResourceError


class ProfiledProxy:
    """Delegates to a target, timing calls to the listed operations."""

    def __init__(self, target: Any, operations: Iterable[str], profiler: 'Profiler'):
        object.__setattr__(self, '_target', target)
        object.__setattr__(self, '_operations', frozenset(operations))
        object.__setattr__(self, '_profiler', profiler)

    def __getattr__(self, name: str) -> Any:
        attr = getattr(self._target, name)
        if name in self._operations and callable(attr):
            return self._profiler.instrument(attr, type(self._target).__name__, name)
        return attr

    def __setattr__(self, name: str, value: Any):
        setattr(self._target, name, value)

    async def __aenter__(self):
        await self._target.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return await self._target.__aexit__(exc_type, exc_val, exc_tb)

    def __repr__(self) -> str:
        return f"ProfiledProxy({self._target!r})"


class Profiler:
    """
    Records how long wrapped operations take.

    All timings live in this instance's ProfilingState, so independent
    profilers never see each other's data.
    """

    def __init__(self, clock: Callable[[], float] = time.perf_counter):
        self.clock = clock
        self.state = ProfilingState()
        self.start_time = datetime.now(timezone.utc)
        self.logger = logging.getLogger(__name__)

    def wrap(self, target: Any, operations: Iterable[str]) -> ProfiledProxy:
        """
        Wrap ``target`` so calls to ``operations`` are timed.

        Raises:
            ValueError: If none of the operations exist on the target
        """
        operations = list(operations)
        present = [op for op in operations if callable(getattr(target, op, None))]
        if not present:
            raise ValueError(
                f"{type(target).__name__} has none of the operations {operations}"
            )
        return ProfiledProxy(target, present, self)

    def instrument(self, func: Callable, owner: str, operation: str) -> Callable:
        """Return a timed version of ``func``, sync or async."""
        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_timed(*args, **kwargs):
                start = self.clock()
                try:
                    return await func(*args, **kwargs)
                finally:
                    self.state.record(owner, operation, self.clock() - start)
            return async_timed

        @functools.wraps(func)
        def timed(*args, **kwargs):
            start = self.clock()
            try:
                return func(*args, **kwargs)
            finally:
                self.state.record(owner, operation, self.clock() - start)
        return timed

    def write_data(self, sink: Union[str, Path, TextIO]):
        """
        Write the profiling report.

        Args:
            sink: A path (appended to) or a writable text stream

        Raises:
            ResourceError: If the report cannot be written
        """
        try:
            if isinstance(sink, (str, Path)):
                with open(sink, 'a', encoding='utf-8') as writer:
                    self._write(writer)
            else:
                self._write(sink)
                sink.flush()
        except OSError as e:
            raise ResourceError(f"Cannot write profiling data to {sink}: {e}") from e

    def _write(self, writer: TextIO):
        writer.write(f"Run at {format_datetime(self.start_time, usegmt=True)}\n")
        self.state.write(writer)
        writer.write("\n")
