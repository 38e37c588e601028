"""
Data containers shared by the crawler and the search engine.
"""

import time
from dataclasses import dataclass, field
from typing import Dict, Set, Tuple


@dataclass(frozen=True)
class WebPage:
    """A crawled page. Identity is its URL."""
    url: str
    title: str
    content: str
    meta_description: str = ""
    keywords: Tuple[str, ...] = ()
    headings: Tuple[str, ...] = ()
    last_modified: float = field(default_factory=time.time)
    content_length: int = -1

    def __post_init__(self):
        if self.content_length < 0:
            object.__setattr__(self, 'content_length', len(self.content))
        object.__setattr__(self, 'keywords', tuple(self.keywords))
        object.__setattr__(self, 'headings', tuple(self.headings))


@dataclass
class WebSearchResult:
    """A ranked hit with its page, snippet and match count."""
    web_page: WebPage
    score: float
    matched_terms: Set[str]
    fuzzy_matches: Dict[str, str] = field(default_factory=dict)
    snippet: str = ""
    match_count: int = 0
