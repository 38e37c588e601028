"""
Utility modules for the site indexer.
"""

from .config import (
    Config, ConfigManager, CrawlerConfig, SearchConfig, LoggingConfig, MonitoringConfig,
    load_config, config_from_dict, domains_from_seeds, validate_seed_urls
)

__all__ = [
    'Config', 'ConfigManager', 'CrawlerConfig', 'SearchConfig', 'LoggingConfig',
    'MonitoringConfig', 'load_config', 'config_from_dict', 'domains_from_seeds',
    'validate_seed_urls'
]
