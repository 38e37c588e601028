"""
Tests for the fuzzy matcher, TF-IDF scoring and the inverted index.
"""

import math

import pytest

from site_indexer.search.fuzzy import FuzzyMatcher, TermSuggestion
from site_indexer.search.inverted_index import InvertedIndex, Document, tfidf


class TestFuzzyMatcher:
    """Test FuzzyMatcher suggestions"""

    def setup_method(self):
        self.matcher = FuzzyMatcher()
        for term, count in [("programming", 3), ("program", 2), ("python", 5),
                            ("pythons", 1), ("typhon", 1)]:
            for _ in range(count):
                self.matcher.add_term(term)

    def test_short_terms_get_nothing(self):
        assert self.matcher.find_suggestions("py") == []

    def test_exact_term_returned_alone(self):
        assert self.matcher.find_suggestions("python") == [TermSuggestion("python", 0, 5)]

    def test_ranked_by_distance_then_frequency(self):
        suggestions = self.matcher.find_suggestions("pythn")
        assert [s.term for s in suggestions] == ["python", "pythons"]
        assert [s.edit_distance for s in suggestions] == [1, 2]

    def test_equal_distance_prefers_frequent_terms(self):
        matcher = FuzzyMatcher()
        matcher.add_term("cart")
        for _ in range(3):
            matcher.add_term("card")
        matcher.add_term("carp")
        assert [s.term for s in matcher.find_suggestions("carx")] == ["card", "carp", "cart"]

    def test_max_suggestions(self):
        assert len(self.matcher.find_suggestions("pythn", max_suggestions=1)) == 1

    def test_distant_terms_excluded(self):
        assert self.matcher.find_suggestions("javascript") == []

    def test_remove_term(self):
        self.matcher.remove_term("typhon")
        assert "typhon" not in self.matcher
        self.matcher.remove_term("python")
        assert self.matcher.frequency("python") == 4


class TestTfIdf:
    """Test tf-idf scoring"""

    def test_formula(self):
        assert tfidf(2, 1, 4) == pytest.approx((1 + math.log(2)) * math.log(4))

    def test_zero_document_frequency(self):
        assert tfidf(3, 0, 10) == 0.0

    def test_non_decreasing_in_term_frequency(self):
        scores = [tfidf(tf, 2, 10) for tf in range(1, 20)]
        assert scores == sorted(scores)

    def test_non_increasing_in_document_frequency(self):
        scores = [tfidf(3, df, 10) for df in range(1, 11)]
        assert scores == sorted(scores, reverse=True)


class TestInvertedIndex:
    """Test InvertedIndex ingestion and ranking"""

    def setup_method(self):
        self.index = InvertedIndex()
        self.index.add_document(Document("doc1", "Rust Programming", "Rust is a systems language"))
        self.index.add_document(Document("doc2", "Go Programming", "Go is great for systems programming"))

    def test_one_posting_per_document(self):
        postings = self.index.postings("programming")
        assert sorted(p.document_id for p in postings) == ["doc1", "doc2"]
        assert self.index.get_document_frequency("programming") == 2

    def test_term_frequency_counts_title_and_body(self):
        by_doc = {p.document_id: p for p in self.index.postings("programming")}
        assert by_doc["doc1"].term_frequency == 1
        assert by_doc["doc2"].term_frequency == 2
        assert by_doc["doc2"].positions == [-1, 2]

    def test_title_boost_flag(self):
        rust = self.index.postings("rust")[0]
        systems = self.index.postings("systems")[0]
        assert rust.title_boost is True
        assert systems.title_boost is False

    def test_search_exact_term(self):
        results = self.index.search("programming")
        assert {r.document.id for r in results} == {"doc1", "doc2"}
        for result in results:
            assert result.matched_terms == {"programming"}
            assert result.fuzzy_matches == {}

    def test_search_with_typo(self):
        results = self.index.search("rogramming", enable_fuzzy=True)
        assert {r.document.id for r in results} == {"doc1", "doc2"}
        assert results[0].fuzzy_matches == {"rogramming": "programming"}

    def test_typo_without_fuzzy(self):
        assert self.index.search("rogramming", enable_fuzzy=False) == []

    def test_empty_query_and_empty_index(self):
        assert self.index.search("") == []
        assert self.index.search("the and of") == []
        assert InvertedIndex().search("anything") == []

    def test_title_boost_doubles_score(self):
        index = InvertedIndex()
        index.add_document(Document("a", "Python Guide", "learn basics"))
        index.add_document(Document("b", "Cooking", "python snake"))
        index.add_document(Document("c", "Gardening", "plants soil"))
        results = index.search("python")
        assert [r.document.id for r in results] == ["a", "b"]
        assert results[0].score == pytest.approx(2 * results[1].score)

    def test_fuzzy_penalty(self):
        index = InvertedIndex()
        index.add_document(Document("a", "Notes", "python snake"))
        index.add_document(Document("b", "Other", "plants soil"))
        exact = index.search("python")[0].score
        fuzzy = index.search("pythn")[0].score
        assert fuzzy == pytest.approx(exact * 0.8)

    def test_ties_ordered_by_document_id(self):
        index = InvertedIndex()
        for doc_id in ["zeta", "alpha", "mid"]:
            index.add_document(Document(doc_id, "Shared", "common words"))
        index.add_document(Document("other", "Else", "nothing here"))
        results = index.search("common")
        assert [r.document.id for r in results] == ["alpha", "mid", "zeta"]

    def test_max_results(self):
        assert len(self.index.search("programming", max_results=1)) == 1
        assert self.index.search("programming", max_results=0) == []

    def test_reindexing_replaces_document(self):
        self.index.add_document(Document("doc1", "Rust Programming", "Rust is a systems language"))
        assert len(self.index.postings("rust")) == 1
        assert self.index.get_document_frequency("programming") == 2
        assert self.index.total_documents == 2

        self.index.add_document(Document("doc1", "Haskell", "functional"))
        assert self.index.postings("rust") == []
        assert self.index.get_document_frequency("programming") == 1
        assert self.index.fuzzy_matcher.frequency("programming") == 1
        assert "rust" not in self.index.fuzzy_matcher

    def test_suggestions(self):
        assert self.index.get_suggestions("sistems") == ["systems"]

    def test_stats(self):
        stats = self.index.get_index_stats()
        assert stats['total_documents'] == 2
        # rust, programming, systems, language, great
        assert stats['total_terms'] == 5
        # doc1: rust, programming, systems, language; doc2: programming, great, systems
        assert stats['average_terms_per_document'] == 3
        assert stats['memory_usage'].startswith("Used:")
