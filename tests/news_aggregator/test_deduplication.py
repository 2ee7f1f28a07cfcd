"""
Tests for exact-key deduplication and title-similarity duplicate detection
"""

import pytest

from src.news_aggregator.services.deduplication import DeduplicationService
from tests.conftest import make_article


@pytest.fixture
def dedup():
    return DeduplicationService()


# ============================================================================
# EXACT-KEY DEDUPLICATION
# ============================================================================

class TestDeduplicate:

    def test_empty_input(self, dedup):
        assert dedup.deduplicate([]) == []

    def test_keeps_higher_relevance_copy(self, dedup):
        low = make_article("Apple beats estimates!", "https://example.com/a", relevance_score=10)
        high = make_article("apple beats estimates", "HTTPS://EXAMPLE.COM/A", relevance_score=40)

        unique = dedup.deduplicate([low, high])

        assert len(unique) == 1
        assert unique[0].relevance_score == 40

    def test_first_copy_wins_on_equal_relevance(self, dedup):
        first = make_article("Apple beats estimates", "https://example.com/a", source_name="Reuters")
        second = make_article("Apple beats estimates", "https://example.com/a", source_name="CNBC")

        assert dedup.deduplicate([first, second])[0].source_name == "Reuters"

    def test_same_title_different_url_is_kept(self, dedup):
        articles = [
            make_article("Apple beats estimates", "https://example.com/a"),
            make_article("Apple beats estimates", "https://other.com/a"),
        ]
        assert len(dedup.deduplicate(articles)) == 2

    def test_output_never_larger_and_idempotent(self, dedup):
        articles = [
            make_article("One", "https://e.com/1"),
            make_article("Two", "https://e.com/2"),
            make_article("one", "https://e.com/1"),
            make_article("Three", "https://e.com/3"),
            make_article("Two!", "https://e.com/2"),
        ]
        once = dedup.deduplicate(articles)
        twice = dedup.deduplicate(once)

        assert len(once) == 3
        assert len(once) <= len(articles)
        assert [a.dedup_key for a in twice] == [a.dedup_key for a in once]


# ============================================================================
# TITLE SIMILARITY
# ============================================================================

class TestTitleSimilarity:

    def test_containment(self, dedup):
        assert dedup.titles_similar("Apple launches new iPhone", "Apple launches new iPhone in Europe")

    def test_word_overlap_above_threshold(self, dedup):
        assert dedup.titles_similar(
            "Apple quarterly earnings exceed analyst expectations",
            "Quarterly earnings: Apple expectations exceed analyst forecasts",
        )

    def test_unrelated_titles(self, dedup):
        assert not dedup.titles_similar("Apple opens store in Mumbai", "Microsoft cuts cloud prices")

    def test_empty_title_never_similar(self, dedup):
        assert not dedup.titles_similar("", "Apple")

    def test_detect_duplicates_points_at_first_accepted(self, dedup):
        articles = [
            make_article("Apple launches new iPhone", "https://e.com/1"),
            make_article("Microsoft cuts cloud prices", "https://e.com/2"),
            make_article("Apple launches new iPhone in Europe", "https://e.com/3"),
            make_article("APPLE LAUNCHES NEW IPHONE!", "https://e.com/4"),
        ]

        flags = dedup.detect_duplicates(articles)

        assert flags == [
            (False, None),
            (False, None),
            (True, "https://e.com/1"),
            (True, "https://e.com/1"),
        ]
