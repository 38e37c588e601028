"""
Crawl engine components.
"""

from .url_frontier import URLFrontier, URLTask
from .url_filter import URLFilter
from .fetcher import WebFetcher
from .parser import HTMLPageExtractor, PageExtractor, ParsedPage, resolve_url
from .scheduler import CrawlerScheduler, CrawlStats

__all__ = [
    'URLFrontier', 'URLTask', 'URLFilter', 'WebFetcher',
    'HTMLPageExtractor', 'PageExtractor', 'ParsedPage', 'resolve_url',
    'CrawlerScheduler', 'CrawlStats'
]
