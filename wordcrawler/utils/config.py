"""
Configuration management for the web crawler.
"""

import re
import yaml
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field, fields

import psutil


class ConfigurationError(ValueError):
    """Raised when the crawl configuration is missing or malformed."""


def hardware_concurrency() -> int:
    """Number of logical CPUs available to the process."""
    return psutil.cpu_count() or 1


@dataclass
class CrawlerConfig:
    """Configuration for crawler behavior."""
    start_pages: List[str] = field(default_factory=list)
    ignored_urls: List[str] = field(default_factory=list)
    ignored_words: List[str] = field(default_factory=list)
    parallelism: int = field(default_factory=hardware_concurrency)
    max_depth: int = 0
    timeout_seconds: float = 1.0
    popular_word_count: int = 0
    result_path: str = ""
    profile_output_path: str = ""
    user_agent: str = "wordcrawler/1.0"
    request_timeout: int = 30


@dataclass
class LoggingConfig:
    """Configuration for logging."""
    level: str = "INFO"
    file: Optional[str] = None
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    json: bool = False


@dataclass
class MonitoringConfig:
    """Configuration for monitoring."""
    metrics_enabled: bool = False
    prometheus_port: int = 8000


@dataclass
class Config:
    """Main configuration class."""
    crawler: CrawlerConfig = field(default_factory=CrawlerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)

    def to_job_spec(self):
        """Build the immutable CrawlJobSpec for this configuration."""
        from ..crawler.job import CrawlJobSpec

        crawler = self.crawler
        return CrawlJobSpec.create(
            start_pages=crawler.start_pages,
            ignored_urls=crawler.ignored_urls,
            max_depth=crawler.max_depth,
            timeout=crawler.timeout_seconds,
            popular_word_count=crawler.popular_word_count,
            parallelism=crawler.parallelism,
        )


def _build_section(section_cls, name: str, data: Any):
    """Instantiate a config dataclass, rejecting unknown keys."""
    if data is None:
        return section_cls()
    if not isinstance(data, dict):
        raise ConfigurationError(f"Section '{name}' must be a mapping")

    known = {f.name for f in fields(section_cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigurationError(f"Unknown keys in section '{name}': {', '.join(unknown)}")

    try:
        return section_cls(**data)
    except TypeError as e:
        raise ConfigurationError(f"Invalid section '{name}': {e}")


class ConfigManager:
    """Manages configuration loading and validation."""

    def __init__(self, config_path: str = "config.yaml"):
        self.config_path = Path(config_path)
        self._config: Optional[Config] = None
        self.logger = logging.getLogger(__name__)

    def load_config(self) -> Config:
        """
        Load configuration from a YAML (or JSON) file.

        Raises:
            ConfigurationError: If the file is missing, unreadable or invalid
        """
        if not self.config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {self.config_path}")

        try:
            with open(self.config_path, 'r', encoding='utf-8') as file:
                config_data = yaml.safe_load(file)
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file {self.config_path}: {e}")
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Malformed configuration file {self.config_path}: {e}")

        self._config = self.parse(config_data)
        return self._config

    def parse(self, config_data: Optional[Dict[str, Any]]) -> Config:
        """Build and validate a Config from already-parsed data."""
        if config_data is None:
            config_data = {}
        if not isinstance(config_data, dict):
            raise ConfigurationError("Configuration root must be a mapping")

        unknown = sorted(set(config_data) - {'crawler', 'logging', 'monitoring'})
        if unknown:
            raise ConfigurationError(f"Unknown configuration sections: {', '.join(unknown)}")

        config = Config(
            crawler=_build_section(CrawlerConfig, 'crawler', config_data.get('crawler')),
            logging=_build_section(LoggingConfig, 'logging', config_data.get('logging')),
            monitoring=_build_section(MonitoringConfig, 'monitoring', config_data.get('monitoring')),
        )
        self._validate_config(config)
        return config

    def _validate_config(self, config: Config):
        """Validate configuration values."""
        crawler = config.crawler

        for key in ('start_pages', 'ignored_urls', 'ignored_words'):
            value = getattr(crawler, key)
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ConfigurationError(f"{key} must be a list of strings")

        # Validate numeric values
        for key in ('parallelism', 'max_depth', 'popular_word_count', 'request_timeout'):
            value = getattr(crawler, key)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(f"{key} must be an integer")

        if isinstance(crawler.timeout_seconds, bool) or \
                not isinstance(crawler.timeout_seconds, (int, float)):
            raise ConfigurationError("timeout_seconds must be a number")

        if crawler.parallelism < 1:
            raise ConfigurationError("parallelism must be at least 1")

        if crawler.max_depth < 0:
            raise ConfigurationError("max_depth must be non-negative")

        if crawler.timeout_seconds < 0:
            raise ConfigurationError("timeout_seconds must be non-negative")

        if crawler.popular_word_count < 0:
            raise ConfigurationError("popular_word_count must be non-negative")

        if crawler.request_timeout < 1:
            raise ConfigurationError("request_timeout must be at least 1")

        if config.logging.level.upper() not in logging.getLevelNamesMapping():
            raise ConfigurationError(f"Unknown log level: {config.logging.level}")

        for expression in crawler.ignored_words:
            try:
                re.compile(expression)
            except re.error as e:
                raise ConfigurationError(f"Invalid ignored_words pattern {expression!r}: {e}")

        # Compiles the ignored_urls patterns as a side effect
        config.to_job_spec()

        self.logger.debug("Configuration validation passed")

    @property
    def config(self) -> Config:
        """Get the loaded configuration."""
        if not self._config:
            raise ConfigurationError("Configuration not loaded. Call load_config() first.")
        return self._config


def load_config(config_path: str = "config.yaml") -> Config:
    """Load configuration from file."""
    return ConfigManager(config_path).load_config()
