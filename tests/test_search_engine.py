"""
Tests for the search orchestrator: enrichment, snippets and statistics.
"""

from site_indexer.models import WebPage
from site_indexer.search.engine import WebsiteSearchEngine


def _page(url, title, content, **kwargs):
    return WebPage(url=url, title=title, content=content, **kwargs)


class TestWebsiteSearchEngine:
    """Test WebsiteSearchEngine"""

    def setup_method(self):
        self.engine = WebsiteSearchEngine()
        self.pages = [
            _page("http://example.com/rust", "Rust Programming", "Rust is a systems language",
                  meta_description="Learn rust", keywords=["memory safety"], headings=["Ownership"]),
            _page("http://example.com/go", "Go Programming", "Go is great for systems programming"),
        ]
        self.engine.index_pages(self.pages)

    def test_enriched_content_layout(self):
        page = _page("http://x.com", "Title", "Body", meta_description="Desc",
                     keywords=["kw"], headings=["Head"])
        assert WebsiteSearchEngine.build_enriched_content(page) == \
            "Title Title Title Desc Desc Head Head kw kw Body"

    def test_pages_are_hashable(self):
        page = self.pages[0]
        assert page.keywords == ("memory safety",)
        assert page.headings == ("Ownership",)
        assert {page, page} == {page}
        assert hash(page) == hash(_page(page.url, page.title, page.content,
                                        meta_description="Learn rust",
                                        keywords=["memory safety"], headings=["Ownership"],
                                        last_modified=page.last_modified))

    def test_enriched_content_skips_empty_description(self):
        page = _page("http://x.com", "T", "Body")
        assert WebsiteSearchEngine.build_enriched_content(page) == "T T T Body"

    def test_search_returns_pages(self):
        results = self.engine.search_pages("programming")
        assert {r.web_page.url for r in results} == {p.url for p in self.pages}
        for result in results:
            assert result.matched_terms == {"programming"}

    def test_metadata_fields_are_searchable(self):
        results = self.engine.search_pages("ownership")
        assert [r.web_page.url for r in results] == ["http://example.com/rust"]
        assert self.engine.search_pages("safety")[0].web_page.url == "http://example.com/rust"

    def test_fuzzy_correction_reported(self):
        results = self.engine.search_pages("rogramming", fuzzy_enabled=True)
        assert len(results) == 2
        assert results[0].fuzzy_matches == {"rogramming": "programming"}

    def test_snippet_with_ellipsis_and_marking(self):
        content = "filler " * 20 + "the quick brown fox jumps over the fence"
        page = _page("http://x.com", "Fox", content)
        snippet = self.engine.generate_snippet(page, "quick")
        assert snippet.startswith("...")
        assert "**quick**" in snippet
        assert len(snippet) <= 3 + 300 + 4

    def test_snippet_without_ellipsis_near_start(self):
        page = _page("http://x.com", "Fox", "Quick thinking wins. quickly now")
        snippet = self.engine.generate_snippet(page, "quick")
        assert snippet == "**Quick** thinking wins. quickly now"

    def test_snippet_without_match_starts_at_beginning(self):
        content = "a" * 500
        snippet = self.engine.generate_snippet(_page("http://x.com", "A", content), "missing")
        assert snippet == "a" * 200

    def test_match_count_whole_words(self):
        page = _page("http://x.com", "Quick facts", "quick, quicker, Quick! quick")
        assert self.engine.count_matches(page, "quick") == 4
        assert self.engine.count_matches(page, "quick facts") == 5

    def test_results_carry_snippet_and_count(self):
        result = self.engine.search_pages("systems")[0]
        assert "**systems**" in result.snippet
        assert result.match_count == 1

    def test_stats(self):
        stats = self.engine.get_index_stats()
        assert stats['total_documents'] == 2
        assert stats['indexed_pages'] == 2
        total = sum(len(p.content) for p in self.pages)
        assert stats['total_content_size'] == total
        assert stats['average_page_size'] == total // 2
        assert 'memory_usage' in stats

    def test_empty_engine(self):
        engine = WebsiteSearchEngine()
        assert engine.search_pages("anything") == []
        stats = engine.get_index_stats()
        assert stats['total_documents'] == 0
        assert stats['average_page_size'] == 0
        assert stats['average_terms_per_document'] == 0

    def test_suggestions(self):
        assert self.engine.get_suggestions("Sistems") == ["systems"]
