"""
Inverted index with TF-IDF ranking, title boosting and fuzzy fallback.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Set, Optional, Any

import psutil

from .fuzzy import FuzzyMatcher
from .tokenizer import TextProcessor, is_title_position


TITLE_BOOST = 2.0
FUZZY_PENALTY_PER_EDIT = 0.2
FUZZY_SUGGESTIONS = 3


@dataclass(frozen=True)
class Document:
    """Unit of indexing."""
    id: str
    title: str
    content: str


@dataclass(frozen=True)
class Posting:
    """Occurrences of one term in one document."""
    document_id: str
    term_frequency: int
    positions: List[int] = field(default_factory=list)
    title_boost: bool = False


@dataclass
class SearchResult:
    """Scored document for a query."""
    document: Document
    score: float
    matched_terms: Set[str]
    fuzzy_matches: Dict[str, str] = field(default_factory=dict)


def tfidf(term_frequency: int, document_frequency: int, total_documents: int) -> float:
    """Log-scaled term frequency times inverse document frequency."""
    if document_frequency <= 0 or term_frequency <= 0 or total_documents <= 0:
        return 0.0
    tf = 1.0 + math.log(term_frequency)
    idf = math.log(total_documents / document_frequency)
    return tf * idf


def memory_snapshot() -> str:
    """Resident and virtual memory of this process, in MB."""
    memory = psutil.Process().memory_info()
    return f"Used: {memory.rss // 1024 // 1024}MB, Total: {memory.vms // 1024 // 1024}MB"


class InvertedIndex:
    """
    In-memory inverted index.

    Not safe for concurrent writers; documents are added in a single pass
    after the crawl finishes. Adding a document whose id is already indexed
    replaces the previous version.
    """

    def __init__(self, text_processor: Optional[TextProcessor] = None,
                 fuzzy_matcher: Optional[FuzzyMatcher] = None):
        self.text_processor = text_processor or TextProcessor()
        self.fuzzy_matcher = fuzzy_matcher or FuzzyMatcher()
        self.logger = logging.getLogger(__name__)

        self.index: Dict[str, List[Posting]] = {}
        self.document_frequency: Dict[str, int] = {}
        self.documents: Dict[str, Document] = {}
        self._document_terms: Dict[str, List[str]] = {}

    @property
    def total_documents(self) -> int:
        return len(self.documents)

    def add_document(self, document: Document):
        """Tokenize title and content and append one posting per distinct term."""
        if document.id in self.documents:
            self.logger.debug(f"Replacing previously indexed document: {document.id}")
            self.remove_document(document.id)

        self.documents[document.id] = document

        title_tokens = self.text_processor.tokenize_with_positions(document.title, is_title=True)
        content_tokens = self.text_processor.tokenize_with_positions(document.content, is_title=False)

        all_tokens: Dict[str, List[int]] = {}
        for term, positions in title_tokens.items():
            all_tokens.setdefault(term, []).extend(positions)
        for term, positions in content_tokens.items():
            all_tokens.setdefault(term, []).extend(positions)

        for term, positions in all_tokens.items():
            posting = Posting(
                document_id=document.id,
                term_frequency=len(positions),
                positions=positions,
                title_boost=any(is_title_position(p) for p in positions)
            )
            self.index.setdefault(term, []).append(posting)
            self.document_frequency[term] = self.document_frequency.get(term, 0) + 1
            self.fuzzy_matcher.add_term(term)

        self._document_terms[document.id] = list(all_tokens)
        self.logger.debug(f"Indexed {document.id}: {len(all_tokens)} distinct terms")

    def remove_document(self, document_id: str) -> bool:
        """Drop a document and every posting that refers to it."""
        if document_id not in self.documents:
            return False

        for term in self._document_terms.pop(document_id, []):
            postings = [p for p in self.index.get(term, []) if p.document_id != document_id]
            if postings:
                self.index[term] = postings
                self.document_frequency[term] -= 1
            else:
                self.index.pop(term, None)
                self.document_frequency.pop(term, None)
            self.fuzzy_matcher.remove_term(term)

        del self.documents[document_id]
        return True

    def search(self, query: str, max_results: int = 10, enable_fuzzy: bool = True) -> List[SearchResult]:
        """
        Rank documents for ``query``.

        Terms without an exact posting list fall back to up to three fuzzy
        corrections, each scored with a penalty per edit. Equal scores are
        ordered by document id.
        """
        query_terms = list(dict.fromkeys(self.text_processor.tokenize(query)))
        if not query_terms or not self.documents or max_results <= 0:
            return []

        document_scores: Dict[str, float] = {}
        document_matched_terms: Dict[str, Set[str]] = {}
        fuzzy_matches: Dict[str, str] = {}

        for term in query_terms:
            postings = self.index.get(term)
            if postings:
                self._accumulate(term, postings, 1.0, document_scores, document_matched_terms)
                continue

            if not enable_fuzzy:
                continue

            for suggestion in self.fuzzy_matcher.find_suggestions(term, FUZZY_SUGGESTIONS):
                suggested_postings = self.index.get(suggestion.term)
                if not suggested_postings:
                    continue
                fuzzy_matches.setdefault(term, suggestion.term)
                penalty = 1.0 - suggestion.edit_distance * FUZZY_PENALTY_PER_EDIT
                self._accumulate(suggestion.term, suggested_postings, penalty,
                                 document_scores, document_matched_terms)

        ranked = sorted(document_scores.items(), key=lambda item: (-item[1], item[0]))

        return [
            SearchResult(
                document=self.documents[doc_id],
                score=score,
                matched_terms=document_matched_terms.get(doc_id, set()),
                fuzzy_matches=dict(fuzzy_matches)
            )
            for doc_id, score in ranked[:max_results]
        ]

    def _accumulate(self, term: str, postings: List[Posting], weight: float,
                    document_scores: Dict[str, float],
                    document_matched_terms: Dict[str, Set[str]]):
        document_frequency = self.document_frequency.get(term, 0)
        for posting in postings:
            score = tfidf(posting.term_frequency, document_frequency, self.total_documents)
            boost = TITLE_BOOST if posting.title_boost else 1.0
            document_scores[posting.document_id] = (
                document_scores.get(posting.document_id, 0.0) + score * weight * boost
            )
            document_matched_terms.setdefault(posting.document_id, set()).add(term)

    def postings(self, term: str) -> List[Posting]:
        return list(self.index.get(term, []))

    def get_document_frequency(self, term: str) -> int:
        return self.document_frequency.get(term, 0)

    def get_suggestions(self, term: str) -> List[str]:
        return [s.term for s in self.fuzzy_matcher.find_suggestions(term)]

    def get_index_stats(self) -> Dict[str, Any]:
        """Get index statistics."""
        total_postings = sum(len(postings) for postings in self.index.values())
        return {
            'total_documents': self.total_documents,
            'total_terms': len(self.index),
            'average_terms_per_document': (
                total_postings // self.total_documents if self.total_documents else 0
            ),
            'memory_usage': memory_snapshot()
        }

    def __contains__(self, document_id: str) -> bool:
        return document_id in self.documents

    def __len__(self) -> int:
        return self.total_documents
