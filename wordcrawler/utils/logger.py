"""
Logging utilities for the web crawler.
"""

import logging
import logging.handlers
import json
import platform
import sys
from pathlib import Path
from typing import Dict, Any, Optional
from datetime import datetime, timezone

import psutil


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        # Add exception info if present
        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        # Add crawl context fields
        if hasattr(record, 'extra_fields'):
            log_entry.update(record.extra_fields)

        return json.dumps(log_entry, ensure_ascii=False)


class CrawlerLogAdapter(logging.LoggerAdapter):
    """Logger adapter that attaches crawl context (url, depth) to records."""

    def __init__(self, logger: logging.Logger, extra: Optional[Dict[str, Any]] = None):
        super().__init__(logger, extra or {})

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        """Add extra context to log messages."""
        extra = kwargs.setdefault('extra', {})
        fields = dict(self.extra)
        fields.update(extra.get('extra_fields', {}))
        extra['extra_fields'] = fields
        return msg, kwargs


class NoisyLoggerFilter(logging.Filter):
    """Filter to suppress noisy third-party logs."""

    def __init__(self, suppress_modules: Optional[list] = None):
        super().__init__()
        self.suppress_modules = suppress_modules or [
            'aiohttp.access',
            'urllib3.connectionpool',
        ]

    def filter(self, record: logging.LogRecord) -> bool:
        return not any(record.name.startswith(module) for module in self.suppress_modules)


def setup_logging(level: str = 'INFO',
                  log_file: Optional[str] = None,
                  log_format: str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                  enable_json: bool = False) -> logging.Logger:
    """
    Setup logging for the crawler.

    Console output always goes to stderr so that results written to stdout
    stay machine readable.

    Args:
        level: Root log level name
        log_file: Optional path of a rotating log file
        log_format: Format string for the plain text formatter
        enable_json: Enable JSON formatted logging

    Returns:
        Configured root logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Clear existing handlers
    root_logger.handlers.clear()

    formatter = JSONFormatter() if enable_json else logging.Formatter(log_format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(NoisyLoggerFilter())
    root_logger.addHandler(console_handler)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)

        # File handler with rotation
        file_handler = logging.handlers.RotatingFileHandler(
            path,
            maxBytes=50 * 1024 * 1024,  # 50MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        file_handler.addFilter(NoisyLoggerFilter())
        root_logger.addHandler(file_handler)

    # Configure third-party loggers
    for logger_name in ('aiohttp', 'asyncio', 'urllib3'):
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    root_logger.debug(f"Logging initialized (level={level}, file={log_file}, json={enable_json})")
    return root_logger


def get_crawler_logger(name: str, **extra_context) -> CrawlerLogAdapter:
    """
    Get a crawler-specific logger with additional context.

    Args:
        name: Logger name
        **extra_context: Context fields included in every record

    Returns:
        CrawlerLogAdapter instance
    """
    return CrawlerLogAdapter(logging.getLogger(name), extra_context)


def log_system_info():
    """Log system information relevant to sizing the worker pool."""
    logger = logging.getLogger(__name__)

    logger.info(f"Platform: {platform.platform()}")
    logger.info(f"Python version: {sys.version.split()[0]}")
    logger.info(f"CPU cores: {psutil.cpu_count()}")
    logger.info(f"Memory: {psutil.virtual_memory().total / 1024**3:.1f} GB")
