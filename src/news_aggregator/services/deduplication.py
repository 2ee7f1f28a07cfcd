# src/news_aggregator/services/deduplication.py
"""
Deduplication Service
Exact-key deduplication for aggregation, and title-similarity duplicate
detection for processing.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from src.news_aggregator.schemas.article import RawArticle
from src.news_aggregator.utils.text import normalize_title

logger = logging.getLogger(__name__)


class DeduplicationService:
    """
    Service to remove or flag duplicate news articles.

    Strategies:
    1. Exact key (normalized title + normalized URL) - aggregation, drops
       the lower-relevance copy
    2. Title similarity (hash, containment, word overlap) - processing,
       flags the later copy with a reference to the first
    """

    def __init__(self, word_overlap_threshold: float = 0.7, min_word_length: int = 4):
        """
        Args:
            word_overlap_threshold: Shared-word ratio above which two titles are duplicates
            min_word_length: Only words at least this long count towards overlap
        """
        self.word_overlap_threshold = word_overlap_threshold
        self.min_word_length = min_word_length

    def deduplicate(self, articles: Sequence[RawArticle]) -> List[RawArticle]:
        """
        Drop exact duplicates. On key collision keep the higher relevance
        score; the first-seen position is preserved.
        """
        if not articles:
            return []

        by_key: Dict[str, RawArticle] = {}
        for article in articles:
            key = article.dedup_key
            existing = by_key.get(key)
            if existing is None or article.relevance_score > existing.relevance_score:
                by_key[key] = article

        unique = list(by_key.values())
        logger.info(f"[Dedup] Input: {len(articles)}, Output: {len(unique)}")
        return unique

    def titles_similar(self, title1: str, title2: str) -> bool:
        """
        Containment of one normalized title in the other, or shared-word
        ratio above the threshold (over the shorter title's long words).
        """
        normalized1 = normalize_title(title1)
        normalized2 = normalize_title(title2)
        if not normalized1 or not normalized2:
            return False

        if normalized1 in normalized2 or normalized2 in normalized1:
            return True

        words1 = [w for w in normalized1.split(" ") if len(w) >= self.min_word_length]
        words2 = [w for w in normalized2.split(" ") if len(w) >= self.min_word_length]
        if not words1 or not words2:
            return False

        words2_set = set(words2)
        common = [w for w in words1 if w in words2_set]
        overlap_ratio = len(common) / min(len(words1), len(words2))
        return overlap_ratio > self.word_overlap_threshold

    def detect_duplicates(
        self,
        articles: Sequence[RawArticle],
    ) -> List[Tuple[bool, Optional[str]]]:
        """
        Flag duplicates in order. Each article is checked against the
        already-accepted (non-duplicate) articles before it.

        Returns:
            One (is_duplicate, duplicate_of_url) pair per input article
        """
        accepted: List[RawArticle] = []
        accepted_by_hash: Dict[str, RawArticle] = {}
        flags: List[Tuple[bool, Optional[str]]] = []

        for article in articles:
            title_hash = normalize_title(article.title)
            original = accepted_by_hash.get(title_hash)

            if original is None:
                for existing in accepted:
                    if self.titles_similar(article.title, existing.title):
                        original = existing
                        break

            if original is not None:
                flags.append((True, original.source_url))
                continue

            accepted.append(article)
            accepted_by_hash[title_hash] = article
            flags.append((False, None))

        duplicates = sum(1 for is_dup, _ in flags if is_dup)
        logger.debug(f"[Dedup] Title check: {len(articles)} articles, {duplicates} duplicates")
        return flags
