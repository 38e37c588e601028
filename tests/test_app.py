"""
Tests for the WebsiteIndexerApp boundary.
"""

import logging

import pytest

from site_indexer import WebsiteIndexerApp, ConfigError
from site_indexer.utils.config import CrawlerConfig

from conftest import FakeFetcher, make_html


BASE = "http://example.com"


def _site():
    return {
        f"{BASE}/": make_html("Rust Programming", body="Rust is a systems language. " * 5,
                              links=["/go"], keywords="compiler, safety"),
        f"{BASE}/go": make_html("Go Programming", body="Go is great for systems programming. " * 4),
    }


def _config(**overrides):
    settings = dict(max_depth=1, max_pages=10, delay_between_requests=0,
                    max_concurrent_requests=2, allowed_domains=["example.com"])
    settings.update(overrides)
    return CrawlerConfig(**settings)


class TestWebsiteIndexerApp:
    """Test indexing and querying through the app boundary"""

    @pytest.mark.asyncio
    async def test_index_and_search(self):
        app = WebsiteIndexerApp(fetcher=FakeFetcher(_site()))
        stats = await app.index_website([f"{BASE}/"], _config())

        assert stats['indexed_pages'] == 2
        assert stats['total_documents'] == 2

        results = app.search("programming", max_results=10, fuzzy_enabled=True)
        assert {r.web_page.url for r in results} == {f"{BASE}/", f"{BASE}/go"}
        assert all(r.match_count > 0 for r in results)

        rust = app.search("compiler")
        assert [r.web_page.url for r in rust] == [f"{BASE}/"]

    @pytest.mark.asyncio
    async def test_typo_and_suggestions(self):
        app = WebsiteIndexerApp(fetcher=FakeFetcher(_site()))
        await app.index_website([f"{BASE}/"], _config())

        results = app.search("langage")
        assert [r.web_page.url for r in results] == [f"{BASE}/"]
        assert results[0].fuzzy_matches == {"langage": "language"}
        assert app.get_suggestions("langage") == ["language"]
        assert app.search("langage", fuzzy_enabled=False) == []

    @pytest.mark.asyncio
    async def test_unparseable_seed_rejected(self):
        app = WebsiteIndexerApp(fetcher=FakeFetcher(_site()))
        with pytest.raises(ConfigError):
            await app.index_website(["not a url"], _config())

    @pytest.mark.asyncio
    async def test_invalid_config_rejected(self):
        app = WebsiteIndexerApp(fetcher=FakeFetcher(_site()))
        with pytest.raises(ConfigError):
            await app.index_website([f"{BASE}/"], _config(max_pages=0))

    @pytest.mark.asyncio
    async def test_zero_pages_warns(self, caplog):
        app = WebsiteIndexerApp(fetcher=FakeFetcher(_site()))
        with caplog.at_level(logging.WARNING):
            stats = await app.index_website(["http://blocked.com/"], _config())

        assert stats['indexed_pages'] == 0
        assert stats['total_documents'] == 0
        assert stats['total_content_size'] == 0
        assert any("produced no pages" in record.message for record in caplog.records)

    @pytest.mark.asyncio
    async def test_metrics_recorded(self):
        app = WebsiteIndexerApp(fetcher=FakeFetcher(_site()))
        await app.index_website([f"{BASE}/"], _config())
        app.search("rust")

        values = app.monitor.metrics.get_current_values()
        assert values['pages_crawled_total'] == 2
        assert values['documents_indexed_total'] == 2
        assert values['searches_total'] == 1
        assert "site_indexer_pages_crawled_total 2.0" in app.monitor.metrics.export_text()
