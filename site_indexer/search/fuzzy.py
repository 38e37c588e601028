"""
Typo-tolerant term correction over the indexed vocabulary.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List

from .edit_distance import levenshtein


@dataclass(frozen=True)
class TermSuggestion:
    """A vocabulary term close to a query term."""
    term: str
    edit_distance: int
    frequency: int


class FuzzyMatcher:
    """
    Keeps a term -> document count table and ranks corrections from it.

    Counts are documents containing the term, not raw occurrences; the
    inverted index calls ``add_term`` once per (term, document) pair.
    """

    def __init__(self, max_edit_distance: int = 2, min_term_length: int = 3):
        self.max_edit_distance = max_edit_distance
        self.min_term_length = min_term_length
        self.term_frequencies: Dict[str, int] = {}
        self.logger = logging.getLogger(__name__)

    def add_term(self, term: str):
        self.term_frequencies[term] = self.term_frequencies.get(term, 0) + 1

    def remove_term(self, term: str):
        count = self.term_frequencies.get(term, 0) - 1
        if count > 0:
            self.term_frequencies[term] = count
        else:
            self.term_frequencies.pop(term, None)

    def frequency(self, term: str) -> int:
        return self.term_frequencies.get(term, 0)

    def find_suggestions(self, term: str, max_suggestions: int = 5) -> List[TermSuggestion]:
        """
        Rank vocabulary terms within ``max_edit_distance`` of ``term``.

        Ordered by edit distance, then by descending document frequency,
        then alphabetically. A verbatim hit is returned alone.
        """
        if len(term) < self.min_term_length or max_suggestions <= 0:
            return []

        if term in self.term_frequencies:
            return [TermSuggestion(term, 0, self.term_frequencies[term])]

        suggestions = []
        for candidate, frequency in self.term_frequencies.items():
            if abs(len(candidate) - len(term)) > self.max_edit_distance:
                continue
            distance = levenshtein(term, candidate, self.max_edit_distance)
            if distance <= self.max_edit_distance:
                suggestions.append(TermSuggestion(candidate, distance, frequency))

        suggestions.sort(key=lambda s: (s.edit_distance, -s.frequency, s.term))
        self.logger.debug(f"Found {len(suggestions)} suggestions for '{term}'")
        return suggestions[:max_suggestions]

    def __len__(self) -> int:
        return len(self.term_frequencies)

    def __contains__(self, term: str) -> bool:
        return term in self.term_frequencies
