"""
Serialization of crawl results to JSON files or streams.
"""

import json
import logging
from pathlib import Path
from typing import TextIO, Union


class ResourceError(OSError):
    """Raised when crawl output cannot be written."""


class ResultWriter:
    """Writes a CrawlResult as JSON."""

    def __init__(self, result):
        self.result = result
        self.logger = logging.getLogger(__name__)

    def to_json(self) -> str:
        return json.dumps(self.result.to_dict(), ensure_ascii=False, indent=2)

    def write(self, sink: Union[str, Path, TextIO]):
        """
        Write the result to a path (overwritten) or a text stream.

        Raises:
            ResourceError: If the result cannot be written
        """
        try:
            if isinstance(sink, (str, Path)):
                path = Path(sink)
                path.parent.mkdir(parents=True, exist_ok=True)
                with open(path, 'w', encoding='utf-8') as f:
                    f.write(self.to_json())
                    f.write("\n")
                self.logger.info(f"Crawl result written to {path}")
            else:
                sink.write(self.to_json())
                sink.write("\n")
                sink.flush()
        except OSError as e:
            raise ResourceError(f"Cannot write crawl result to {sink}: {e}") from e
