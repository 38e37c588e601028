"""
Shared helpers for the site indexer tests.
"""

import asyncio
import sys
from pathlib import Path
from typing import Dict, Iterable, List

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from site_indexer.errors import FetchError


FILLER = (
    "This page carries enough ordinary prose to pass the minimum content "
    "length check that the crawler applies before it keeps a page."
)


def make_html(title: str, body: str = FILLER, links: Iterable[str] = (),
              description: str = "", keywords: str = "") -> str:
    """Build a small but complete HTML document."""
    anchors = ''.join(f'<a href="{link}">link</a> ' for link in links)
    meta = ''
    if description:
        meta += f'<meta name="description" content="{description}">'
    if keywords:
        meta += f'<meta name="keywords" content="{keywords}">'
    return (
        f"<html><head><title>{title}</title>{meta}</head>"
        f"<body><h1>{title}</h1><p>{body}</p>{anchors}</body></html>"
    )


class FakeFetcher:
    """In-memory fetcher that records every request."""

    def __init__(self, pages: Dict[str, str], latency: float = 0.01):
        self.pages = pages
        self.latency = latency
        self.requests: List[str] = []
        self.request_times: List[float] = []
        self.active = 0
        self.max_active = 0

    async def fetch(self, url: str) -> str:
        self.requests.append(url)
        self.request_times.append(asyncio.get_running_loop().time())
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.latency)
            if url not in self.pages:
                raise FetchError(url, "HTTP 404")
            return self.pages[url]
        finally:
            self.active -= 1


@pytest.fixture
def site_pages():
    """A seed page linking to five same-host pages, each linking one level deeper."""
    base = "http://example.com"
    pages = {f"{base}/": make_html("Home", links=[f"/page{i}" for i in range(1, 6)])}
    for i in range(1, 6):
        pages[f"{base}/page{i}"] = make_html(f"Page {i}", links=[f"/deep{i}"])
        pages[f"{base}/deep{i}"] = make_html(f"Deep {i}")
    return pages
