"""
Configuration management for the site indexer.
"""

import re
import yaml
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Dict, List, Any, Optional, Iterable, Set
from urllib.parse import urlparse

from ..errors import ConfigError


DEFAULT_USER_AGENT = "SiteIndexer/1.0 (+https://github.com/site-indexer)"

DEFAULT_EXCLUDE_PATTERNS = [
    r'(?i).*\.(jpg|jpeg|png|gif|pdf|doc|docx)$',
    r'.*/admin/.*',
    r'.*/api/.*',
]


@dataclass
class CrawlerConfig:
    """Configuration for crawler behavior."""
    max_depth: int = 2
    max_pages: int = 100
    delay_between_requests: float = 0.2
    max_concurrent_requests: int = 5
    request_timeout: int = 15
    user_agent: str = DEFAULT_USER_AGENT
    cookie: Optional[str] = None
    respect_robots_txt: bool = True
    allowed_domains: List[str] = field(default_factory=list)
    exclude_patterns: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))
    min_content_length: int = 100
    max_content_size: int = 10 * 1024 * 1024


@dataclass
class SearchConfig:
    """Configuration for query defaults."""
    max_results: int = 10
    fuzzy_enabled: bool = True


@dataclass
class LoggingConfig:
    """Configuration for logging."""
    level: str = "INFO"
    file: Optional[str] = "logs/site_indexer.log"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    json: bool = False


@dataclass
class MonitoringConfig:
    """Configuration for monitoring."""
    metrics_enabled: bool = True
    prometheus_port: Optional[int] = None


@dataclass
class Config:
    """Main configuration class."""
    crawler: CrawlerConfig = field(default_factory=CrawlerConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)


def _build_section(section_cls, data: Optional[Dict[str, Any]], name: str):
    if data is None:
        return section_cls()
    if not isinstance(data, dict):
        raise ConfigError(f"Section '{name}' must be a mapping")

    known = {f.name for f in fields(section_cls)}
    unknown = set(data) - known
    if unknown:
        raise ConfigError(f"Unknown keys in section '{name}': {', '.join(sorted(unknown))}")
    return section_cls(**data)


class ConfigManager:
    """Manages configuration loading and validation."""

    def __init__(self, config_path: str = "config.yaml"):
        self.config_path = Path(config_path)
        self._config: Optional[Config] = None

    def load_config(self) -> Config:
        """Load configuration from YAML file."""
        if not self.config_path.exists():
            raise ConfigError(f"Configuration file not found: {self.config_path}")

        with open(self.config_path, 'r') as file:
            try:
                config_data = yaml.safe_load(file) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {self.config_path}: {e}") from e

        self._config = config_from_dict(config_data)
        return self._config

    @property
    def config(self) -> Config:
        """Get the loaded configuration."""
        if not self._config:
            raise ConfigError("Configuration not loaded. Call load_config() first.")
        return self._config


def config_from_dict(config_data: Dict[str, Any]) -> Config:
    """Build and validate a Config from parsed YAML."""
    if not isinstance(config_data, dict):
        raise ConfigError("Configuration root must be a mapping")

    unknown = set(config_data) - {'crawler', 'search', 'logging', 'monitoring'}
    if unknown:
        raise ConfigError(f"Unknown configuration sections: {', '.join(sorted(unknown))}")

    config = Config(
        crawler=_build_section(CrawlerConfig, config_data.get('crawler'), 'crawler'),
        search=_build_section(SearchConfig, config_data.get('search'), 'search'),
        logging=_build_section(LoggingConfig, config_data.get('logging'), 'logging'),
        monitoring=_build_section(MonitoringConfig, config_data.get('monitoring'), 'monitoring')
    )
    validate_crawler_config(config.crawler)

    if config.search.max_results < 1:
        raise ConfigError("search.max_results must be at least 1")

    logging.getLogger(__name__).debug("Configuration validation passed")
    return config


def validate_crawler_config(crawler: CrawlerConfig):
    """Validate crawler values. Raises ConfigError."""
    if crawler.max_depth < 0:
        raise ConfigError("max_depth must be non-negative")

    if crawler.max_pages < 1:
        raise ConfigError("max_pages must be at least 1")

    if crawler.delay_between_requests < 0:
        raise ConfigError("delay_between_requests must be non-negative")

    if crawler.max_concurrent_requests < 1:
        raise ConfigError("max_concurrent_requests must be at least 1")

    if crawler.request_timeout <= 0:
        raise ConfigError("request_timeout must be positive")

    for pattern in crawler.exclude_patterns:
        try:
            re.compile(pattern)
        except re.error as e:
            raise ConfigError(f"Invalid exclude pattern {pattern!r}: {e}") from e


def validate_seed_urls(urls: Iterable[str]) -> List[str]:
    """Return the seed URLs, raising ConfigError for any that cannot be parsed."""
    seeds = list(urls)
    if not seeds:
        raise ConfigError("At least one seed URL must be provided")

    for url in seeds:
        try:
            parsed = urlparse(url)
        except ValueError as e:
            raise ConfigError(f"Unparseable seed URL {url!r}: {e}") from e
        if not parsed.scheme or not parsed.netloc:
            raise ConfigError(f"Unparseable seed URL {url!r}: missing scheme or host")
    return seeds


def domains_from_seeds(urls: Iterable[str]) -> Set[str]:
    """Allowed domains derived from seed hosts, with and without ``www.``."""
    domains = set()
    for url in urls:
        host = (urlparse(url).hostname or '').lower()
        if not host:
            continue
        bare = host[4:] if host.startswith('www.') else host
        domains.update({bare, f"www.{bare}"})
    return domains


def load_config(config_path: str = "config.yaml") -> Config:
    """Load configuration from file."""
    return ConfigManager(config_path).load_config()
