"""
Full-text search components.
"""

from .tokenizer import TextProcessor, STOP_WORDS
from .edit_distance import levenshtein
from .fuzzy import FuzzyMatcher, TermSuggestion
from .inverted_index import InvertedIndex, Document, Posting, SearchResult, tfidf
from .engine import WebsiteSearchEngine

__all__ = [
    'TextProcessor', 'STOP_WORDS', 'levenshtein',
    'FuzzyMatcher', 'TermSuggestion',
    'InvertedIndex', 'Document', 'Posting', 'SearchResult', 'tfidf',
    'WebsiteSearchEngine'
]
