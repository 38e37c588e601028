"""
Crawler scheduler that runs the worker pool over a shared frontier.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional
from urllib.parse import urlparse

from .url_frontier import URLFrontier, URLTask
from .url_filter import URLFilter
from .fetcher import WebFetcher
from .parser import HTMLPageExtractor, PageExtractor, ParsedPage
from ..errors import ExtractionError, FetchError
from ..models import WebPage
from ..utils.config import CrawlerConfig
from ..utils.logger import get_crawler_logger
from ..utils.monitoring import CrawlerMonitor


@dataclass
class CrawlStats:
    """Statistics for crawl operations."""
    start_time: float
    pages_crawled: int = 0
    fetch_errors: int = 0
    extraction_errors: int = 0
    pages_skipped: int = 0
    urls_queued: int = 0
    end_time: Optional[float] = None

    @property
    def elapsed_time(self) -> float:
        return (self.end_time or time.time()) - self.start_time

    @property
    def pages_per_minute(self) -> float:
        elapsed_minutes = self.elapsed_time / 60
        return self.pages_crawled / elapsed_minutes if elapsed_minutes > 0 else 0


class CrawlerScheduler:
    """
    Bounded breadth-first crawl.

    A fixed pool of ``max_concurrent_requests`` workers shares one frontier.
    Fetches are gated by a semaphore of the same size and spaced pool-wide
    by ``delay_between_requests``. Per-URL failures are logged and yield no
    page; they never stop the crawl.
    """

    def __init__(self, config: CrawlerConfig, fetcher=None,
                 extractor: Optional[PageExtractor] = None,
                 monitor: Optional[CrawlerMonitor] = None):
        self.config = config
        self.logger = logging.getLogger(__name__)
        self.url_filter = URLFilter(config.allowed_domains, config.exclude_patterns)
        self.extractor = extractor or HTMLPageExtractor()
        self.monitor = monitor

        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher or WebFetcher(
            user_agent=config.user_agent,
            request_timeout=config.request_timeout,
            cookie=config.cookie,
            max_content_size=config.max_content_size,
            connection_limit=config.max_concurrent_requests
        )

        self.stats = CrawlStats(start_time=time.time())
        self.frontier: Optional[URLFrontier] = None
        self.crawled_pages: Dict[str, WebPage] = {}
        self._semaphore: Optional[asyncio.Semaphore] = None
        self._pacing_lock: Optional[asyncio.Lock] = None
        self._last_request_time = float("-inf")
        self.is_running = False

    async def crawl(self, seed_urls: Iterable[str]) -> List[WebPage]:
        """
        Crawl from ``seed_urls`` and return the pages that had usable content.

        Seeds failing the URL filter are dropped with a warning.
        """
        if self.is_running:
            raise RuntimeError("Crawler is already running")

        self.is_running = True
        self.stats = CrawlStats(start_time=time.time())
        self.frontier = URLFrontier()
        self.crawled_pages = {}
        self._semaphore = asyncio.Semaphore(self.config.max_concurrent_requests)
        self._pacing_lock = asyncio.Lock()
        self._last_request_time = float("-inf")

        try:
            seeds = list(seed_urls)
            added = await self._add_seed_urls(seeds)
            self.logger.info(f"Starting crawl with {added}/{len(seeds)} seed URLs, "
                             f"{self.config.max_concurrent_requests} workers")

            if self._owns_fetcher:
                await self.fetcher.start()

            workers = [
                asyncio.create_task(self._worker(f"worker-{i}"))
                for i in range(self.config.max_concurrent_requests)
            ]
            await asyncio.gather(*workers)

        finally:
            if self._owns_fetcher:
                await self.fetcher.close()
            self.is_running = False
            self.stats.end_time = time.time()

        self._log_final_stats()
        return list(self.crawled_pages.values())

    async def _add_seed_urls(self, seeds: List[str]) -> int:
        added = 0
        for url in seeds:
            if not self.url_filter.is_allowed(url):
                self.logger.warning(f"Seed URL rejected by filter: {url}")
                continue
            if await self.frontier.add_url(URLTask(url=url, depth=0)):
                added += 1
        self.stats.urls_queued += added
        return added

    async def _worker(self, worker_id: str):
        """
        Worker coroutine that processes URLs from the frontier.
        """
        logger = get_crawler_logger(__name__, worker_id=worker_id)
        logger.debug("Worker started")

        while len(self.crawled_pages) < self.config.max_pages:
            url_task = await self.frontier.get_next_url()
            if url_task is None:
                break

            try:
                await self._process_url(url_task, logger)
            except Exception as e:
                # Never let one URL take a worker down.
                logger.error(f"Unexpected error processing {url_task.url}: {e}", exc_info=True)
                self._record_error('unexpected')
            finally:
                await self.frontier.task_done()

        logger.debug("Worker finished")

    async def _process_url(self, url_task: URLTask, logger):
        """Claim, pace, fetch and extract one URL, then queue its links."""
        if not self.frontier.claim(url_task.url):
            return
        if url_task.depth > self.config.max_depth:
            logger.debug(f"Skipping URL beyond max depth: {url_task.url}")
            return

        async with self._semaphore:
            if self._limit_reached():
                return
            await self._wait_for_request_slot()

            start_time = time.time()
            try:
                html = await self.fetcher.fetch(url_task.url)
                parsed = self.extractor.extract(html, url_task.url)
            except FetchError as e:
                logger.log_url_event(logging.WARNING, url_task.url, f"Failed to fetch ({e.reason})",
                                     extra={'depth': url_task.depth})
                self.stats.fetch_errors += 1
                self._record_error('fetch')
                return
            except ExtractionError as e:
                logger.log_url_event(logging.WARNING, url_task.url, f"Failed to extract ({e.reason})",
                                     extra={'depth': url_task.depth})
                self.stats.extraction_errors += 1
                self._record_error('extraction')
                return
            fetch_time = time.time() - start_time

        if len(parsed.content) < self.config.min_content_length:
            logger.debug(f"Skipping thin page ({len(parsed.content)} chars): {url_task.url}")
            self.stats.pages_skipped += 1
            if self.monitor:
                self.monitor.record_page_skipped(url_task.url, 'thin_content')
            return

        if not await self._record_page(url_task.url, parsed, fetch_time, logger):
            return

        if url_task.depth < self.config.max_depth:
            await self._queue_new_urls(url_task, parsed.links, logger)

    async def _wait_for_request_slot(self):
        """
        Sleep out whatever remains of the politeness delay since the last
        request made by any worker, then claim the clock for this request.
        """
        async with self._pacing_lock:
            loop = asyncio.get_running_loop()
            elapsed = loop.time() - self._last_request_time
            if elapsed < self.config.delay_between_requests:
                await asyncio.sleep(self.config.delay_between_requests - elapsed)
            self._last_request_time = loop.time()

    async def _record_page(self, url: str, parsed: ParsedPage, fetch_time: float, logger) -> bool:
        if self._limit_reached():
            return False

        self.crawled_pages[url] = WebPage(
            url=url,
            title=parsed.title or self._fallback_title(url),
            content=parsed.content,
            meta_description=parsed.meta_description,
            keywords=tuple(parsed.keywords),
            headings=tuple(parsed.headings),
            last_modified=time.time()
        )
        self.stats.pages_crawled = len(self.crawled_pages)
        if self.monitor:
            self.monitor.record_page_crawled(url, fetch_time)

        processed = self.stats.pages_crawled
        if processed % 10 == 0:
            logger.info(f"Processed {processed} pages...")

        if self._limit_reached():
            self.logger.info(f"Reached max pages limit: {self.config.max_pages}")
            await self.frontier.close()
        return True

    async def _queue_new_urls(self, url_task: URLTask, links: List[str], logger):
        """Queue new URLs found in parsed content."""
        added_count = 0
        for link in links:
            if self.frontier.is_visited(link) or not self.url_filter.is_allowed(link):
                continue
            task = URLTask(url=link, depth=url_task.depth + 1, parent_url=url_task.url)
            if await self.frontier.add_url(task):
                added_count += 1

        self.stats.urls_queued += added_count
        if self.monitor:
            self.monitor.update_queue_size(self.frontier.qsize())
        if added_count:
            logger.debug(f"Queued {added_count} new URLs from {url_task.url}")

    def _limit_reached(self) -> bool:
        return len(self.crawled_pages) >= self.config.max_pages

    def _record_error(self, error_type: str):
        if self.monitor:
            self.monitor.record_error(error_type)

    @staticmethod
    def _fallback_title(url: str) -> str:
        last_segment = urlparse(url).path.rstrip('/').rsplit('/', 1)[-1]
        return last_segment or "Untitled"

    def _log_final_stats(self):
        """Log final crawl statistics."""
        frontier_stats = self.frontier.get_stats() if self.frontier else {}

        self.logger.info("=== CRAWL COMPLETED ===")
        self.logger.info(f"Pages crawled: {self.stats.pages_crawled}")
        self.logger.info(f"Pages skipped: {self.stats.pages_skipped}")
        self.logger.info(f"Errors: fetch={self.stats.fetch_errors}, extraction={self.stats.extraction_errors}")
        self.logger.info(f"URLs visited: {frontier_stats.get('total_visited', 0)}, "
                         f"left in queue: {frontier_stats.get('total_queued', 0)}")
        self.logger.info(f"Total time: {self.stats.elapsed_time:.2f} seconds "
                         f"({self.stats.pages_per_minute:.1f} pages/min)")

    def get_stats(self) -> Dict:
        """Get current crawl statistics."""
        return {
            'pages_crawled': self.stats.pages_crawled,
            'pages_skipped': self.stats.pages_skipped,
            'fetch_errors': self.stats.fetch_errors,
            'extraction_errors': self.stats.extraction_errors,
            'urls_queued': self.stats.urls_queued,
            'elapsed_time': self.stats.elapsed_time,
            'pages_per_minute': self.stats.pages_per_minute,
            'is_running': self.is_running
        }
