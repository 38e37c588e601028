"""
Web page fetcher built on aiohttp.
"""

import asyncio
import aiohttp
import logging
import time
from typing import Optional, Dict
from aiohttp import ClientSession, ClientTimeout, ClientError

from ..errors import FetchError


HTML_CONTENT_TYPES = ('text/html', 'application/xhtml+xml')


class WebFetcher:
    """
    Fetches HTML pages over a shared aiohttp session.

    ``fetch`` returns the decoded document or raises FetchError; pacing and
    concurrency limits belong to the scheduler.
    """

    def __init__(self, user_agent: str, request_timeout: int = 15,
                 cookie: Optional[str] = None, max_content_size: int = 10 * 1024 * 1024,
                 connection_limit: int = 10):
        self.user_agent = user_agent
        self.request_timeout = request_timeout
        self.cookie = cookie
        self.max_content_size = max_content_size
        self.connection_limit = connection_limit

        self.logger = logging.getLogger(__name__)
        self.session: Optional[ClientSession] = None

        self.stats = {
            'total_requests': 0,
            'successful_requests': 0,
            'failed_requests': 0,
            'total_bytes_downloaded': 0
        }

    async def __aenter__(self):
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def start(self):
        """Initialize the fetcher session."""
        if self.session is None:
            timeout = ClientTimeout(total=self.request_timeout)
            headers = {'User-Agent': self.user_agent}
            if self.cookie:
                headers['Cookie'] = self.cookie

            self.session = aiohttp.ClientSession(
                timeout=timeout,
                headers=headers,
                connector=aiohttp.TCPConnector(
                    limit=self.connection_limit * 2,
                    ttl_dns_cache=300
                )
            )
            self.logger.debug("WebFetcher session started")

    async def close(self):
        """Close the fetcher session."""
        if self.session:
            await self.session.close()
            self.session = None
            self.logger.debug("WebFetcher session closed")

    async def fetch(self, url: str) -> str:
        """
        Fetch a single URL.

        Args:
            url: The URL to fetch

        Returns:
            Decoded HTML

        Raises:
            FetchError: on timeout, connection failure, HTTP error status,
                non-HTML content or oversized body
        """
        if self.session is None:
            await self.start()

        start_time = time.time()
        self.stats['total_requests'] += 1

        try:
            async with self.session.get(url) as response:
                if response.status >= 400:
                    raise FetchError(url, f"HTTP {response.status}")

                content_type = response.headers.get('content-type', '').lower()
                if not self._is_html_content(content_type):
                    raise FetchError(url, f"Non-HTML content type '{content_type}'")

                content = await self._read_content_safely(url, response)

        except FetchError:
            self.stats['failed_requests'] += 1
            raise
        except asyncio.TimeoutError as e:
            self.stats['failed_requests'] += 1
            raise FetchError(url, "Request timeout", e) from e
        except ClientError as e:
            self.stats['failed_requests'] += 1
            raise FetchError(url, f"Client error: {e}", e) from e

        self.stats['successful_requests'] += 1
        self.stats['total_bytes_downloaded'] += len(content)
        self.logger.debug(f"Fetched {url} ({len(content)} chars) in {time.time() - start_time:.2f}s")
        return content

    @staticmethod
    def _is_html_content(content_type: str) -> bool:
        return any(html_type in content_type for html_type in HTML_CONTENT_TYPES)

    async def _read_content_safely(self, url: str, response: aiohttp.ClientResponse) -> str:
        """Read the body in chunks, refusing anything over ``max_content_size``."""
        content_length = response.headers.get('content-length')
        if content_length and content_length.isdigit() and int(content_length) > self.max_content_size:
            raise FetchError(url, f"Content too large ({content_length} bytes)")

        content_bytes = bytearray()
        async for chunk in response.content.iter_chunked(8192):
            content_bytes.extend(chunk)
            if len(content_bytes) > self.max_content_size:
                raise FetchError(url, "Content exceeded size limit during reading")

        encoding = response.charset or 'utf-8'
        try:
            return content_bytes.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            return content_bytes.decode('utf-8', errors='replace')

    def get_stats(self) -> Dict[str, int]:
        """Get fetcher statistics."""
        return self.stats.copy()
