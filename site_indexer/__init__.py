"""
Site Indexer

Crawls a bounded set of pages from seed URLs and builds a ranked,
typo-tolerant full-text index over them.
"""

__version__ = "1.0.0"
__description__ = "Concurrent website crawler with an in-memory TF-IDF search index"

from .app import WebsiteIndexerApp
from .errors import SiteIndexerError, ConfigError, FetchError, ExtractionError, ValidationError
from .models import WebPage, WebSearchResult

__all__ = [
    'WebsiteIndexerApp', 'WebPage', 'WebSearchResult',
    'SiteIndexerError', 'ConfigError', 'FetchError', 'ExtractionError', 'ValidationError'
]
