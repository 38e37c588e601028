"""
Boundary between the command line and the crawl/search core.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from .crawler.scheduler import CrawlerScheduler
from .crawler.parser import PageExtractor
from .models import WebSearchResult
from .search.engine import WebsiteSearchEngine
from .utils.config import CrawlerConfig, validate_crawler_config, validate_seed_urls
from .utils.monitoring import CrawlerMonitor


class WebsiteIndexerApp:
    """
    Crawl, index, then answer queries.

    Indexing happens only after the crawl has finished; queries are served
    from whatever the last ``index_website`` call produced, added to any
    pages indexed before.
    """

    def __init__(self, search_engine: Optional[WebsiteSearchEngine] = None,
                 monitor: Optional[CrawlerMonitor] = None,
                 fetcher=None, extractor: Optional[PageExtractor] = None):
        self.search_engine = search_engine or WebsiteSearchEngine()
        self.monitor = monitor or CrawlerMonitor()
        self.fetcher = fetcher
        self.extractor = extractor
        self.last_crawl_stats: Dict[str, Any] = {}
        self.logger = logging.getLogger(__name__)

    async def index_website(self, urls: Iterable[str],
                            config: Optional[CrawlerConfig] = None) -> Dict[str, Any]:
        """
        Crawl ``urls`` and index every page found.

        Raises:
            ConfigError: if a seed URL cannot be parsed or the config is invalid
        """
        config = config or CrawlerConfig()
        validate_crawler_config(config)
        seeds = validate_seed_urls(urls)

        scheduler = CrawlerScheduler(config, fetcher=self.fetcher,
                                     extractor=self.extractor, monitor=self.monitor)
        pages = await scheduler.crawl(seeds)
        self.last_crawl_stats = scheduler.get_stats()

        if not pages:
            self.logger.warning(f"Crawl of {len(seeds)} seed URL(s) produced no pages; "
                                "check the seeds, allowed domains and exclude patterns")

        indexed = self.search_engine.index_pages(pages)
        self.monitor.record_documents_indexed(indexed)

        stats = self.get_stats()
        self.logger.info("=== Indexing Statistics ===")
        for key, value in stats.items():
            self.logger.info(f"{key}: {value}")
        return stats

    def search(self, query: str, max_results: int = 10,
               fuzzy_enabled: bool = True) -> List[WebSearchResult]:
        self.monitor.record_search()
        return self.search_engine.search_pages(query, max_results, fuzzy_enabled)

    def get_stats(self) -> Dict[str, Any]:
        return self.search_engine.get_index_stats()

    def get_suggestions(self, term: str) -> List[str]:
        return self.search_engine.get_suggestions(term)
