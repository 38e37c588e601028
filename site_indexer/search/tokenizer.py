"""
Text normalization into index terms.
"""

import re
from typing import Dict, List


STOP_WORDS = frozenset([
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "is", "are", "was", "were", "be", "been", "being",
    "have", "has", "had", "do", "does", "did", "will", "would", "could",
    "should", "may", "might", "can", "this", "that", "these", "those",
    "from", "up", "out", "down", "off", "over", "under", "again", "further",
    "then", "once", "here", "there", "when", "where", "why", "how", "all",
    "any", "both", "each", "few", "more", "most", "other", "some", "such",
    "no", "nor", "not", "only", "own", "same", "so", "than", "too", "very",
])

MIN_TOKEN_LENGTH = 3


class TextProcessor:
    """
    Turns free text into index terms.

    Title positions are stored as ``-(index + 1)`` so a single position list
    tells both how often a term occurs and whether it occurs in the title.
    """

    def __init__(self):
        self.non_alnum_pattern = re.compile(r'[^a-z0-9\s]')

    def tokenize(self, text: str) -> List[str]:
        """Lowercase, strip punctuation, drop short tokens and stop words."""
        if not text:
            return []
        normalized = self.non_alnum_pattern.sub(' ', text.lower())
        return [
            token for token in normalized.split()
            if len(token) >= MIN_TOKEN_LENGTH and token not in STOP_WORDS
        ]

    def tokenize_with_positions(self, text: str, is_title: bool = False) -> Dict[str, List[int]]:
        """Map each term to its ordered positions in the filtered token stream."""
        positions: Dict[str, List[int]] = {}
        for index, token in enumerate(self.tokenize(text)):
            positions.setdefault(token, []).append(-index - 1 if is_title else index)
        return positions


def is_title_position(position: int) -> bool:
    return position < 0
