"""
Search orchestrator: turns crawled pages into documents and decorates hits.
"""

import logging
import re
from typing import Dict, List, Any, Iterable, Optional

from ..models import WebPage, WebSearchResult
from .inverted_index import Document, InvertedIndex


SNIPPET_BEFORE = 100
SNIPPET_AFTER = 200


class WebsiteSearchEngine:
    """
    Indexes web pages and serves ranked, snippeted results.

    The index only distinguishes title from body, so the description,
    headings and keywords are repeated ahead of the content to weigh them.
    """

    def __init__(self, index: Optional[InvertedIndex] = None):
        self.index = index or InvertedIndex()
        self.indexed_pages: Dict[str, WebPage] = {}
        self.logger = logging.getLogger(__name__)

    def index_pages(self, pages: Iterable[WebPage]) -> int:
        """Index crawled pages. Returns the number of pages submitted."""
        count = 0
        for page in pages:
            self.indexed_pages[page.url] = page
            self.index.add_document(Document(
                id=page.url,
                title=page.title,
                content=self.build_enriched_content(page)
            ))
            count += 1

        self.logger.info(f"Indexed {count} web pages ({self.index.total_documents} documents in index)")
        return count

    @staticmethod
    def build_enriched_content(page: WebPage) -> str:
        parts = [page.title] * 3
        if page.meta_description:
            parts.extend([page.meta_description] * 2)
        for heading in page.headings:
            parts.extend([heading] * 2)
        for keyword in page.keywords:
            parts.extend([keyword] * 2)
        parts.append(page.content)
        return ' '.join(parts)

    def search_pages(self, query: str, max_results: int = 10,
                     fuzzy_enabled: bool = True) -> List[WebSearchResult]:
        results = self.index.search(query, max_results, fuzzy_enabled)

        web_results = []
        for result in results:
            page = self.indexed_pages.get(result.document.id)
            if page is None:
                continue
            web_results.append(WebSearchResult(
                web_page=page,
                score=result.score,
                matched_terms=result.matched_terms,
                fuzzy_matches=result.fuzzy_matches,
                snippet=self.generate_snippet(page, query),
                match_count=self.count_matches(page, query)
            ))

        self.logger.debug(f"Query '{query}' returned {len(web_results)} results")
        return web_results

    @staticmethod
    def _query_terms(query: str) -> List[str]:
        return [term for term in query.lower().split() if term]

    def generate_snippet(self, page: WebPage, query: str) -> str:
        """
        Window of the content around the first query term hit.

        Whole-word hits inside the window are wrapped in ``**``; a leading
        ``...`` marks a window that does not start at the beginning.
        """
        query_terms = self._query_terms(query)
        content = page.content
        lowered = content.lower()

        offsets = [lowered.find(term) for term in query_terms]
        offsets = [offset for offset in offsets if offset >= 0]
        first_match = min(offsets) if offsets else 0

        start = max(0, first_match - SNIPPET_BEFORE)
        end = min(len(content), first_match + SNIPPET_AFTER)
        snippet = content[start:end]

        for term in query_terms:
            snippet = re.sub(
                rf'\b{re.escape(term)}\b',
                lambda match: f"**{match.group(0)}**",
                snippet,
                flags=re.IGNORECASE
            )

        return f"...{snippet}" if start > 0 else snippet

    def count_matches(self, page: WebPage, query: str) -> int:
        """Total whole-word occurrences of every query term in title and content."""
        text = f"{page.title} {page.content}".lower()
        return sum(
            len(re.findall(rf'\b{re.escape(term)}\b', text))
            for term in self._query_terms(query)
        )

    def get_index_stats(self) -> Dict[str, Any]:
        stats = self.index.get_index_stats()
        total_content_size = sum(page.content_length for page in self.indexed_pages.values())
        stats.update({
            'indexed_pages': len(self.indexed_pages),
            'total_content_size': total_content_size,
            'average_page_size': (
                total_content_size // len(self.indexed_pages) if self.indexed_pages else 0
            )
        })
        return stats

    def get_suggestions(self, term: str) -> List[str]:
        return self.index.get_suggestions(term.lower())
