# src/news_aggregator/services/processing_service.py
"""
News Processing Service
Re-scores aggregated articles for relevance and quality, flags
duplicates, applies the filter criteria and sorts the survivors.
"""

import re
import time
from collections import Counter
from datetime import datetime
from functools import cmp_to_key
from typing import List, Optional, Sequence

from src.database.models.record_schemas import NewsArticleCreate
from src.news_aggregator.schemas.article import RawArticle, ScoredArticle
from src.news_aggregator.schemas.results import FilterCriteria, ProcessingResult
from src.news_aggregator.services.deduplication import DeduplicationService
from src.news_aggregator.utils.text import count_word_matches
from src.utils.time_utils import hours_since, utc_now
from src.utils.logger.custom_logging import LoggerMixin


CREDIBLE_SOURCES = [
    "reuters", "bloomberg", "wall street journal", "financial times",
    "cnbc", "marketwatch", "yahoo finance", "techcrunch", "forbes",
]

BUSINESS_KEYWORDS = [
    "earnings", "revenue", "profit", "loss", "merger", "acquisition",
    "ipo", "stock", "shares", "ceo", "cfo", "executive", "board",
    "investment", "funding", "partnership", "contract", "deal",
]

SPAM_PATTERNS = [
    re.compile(r"click here", re.IGNORECASE),
    re.compile(r"free money", re.IGNORECASE),
    re.compile(r"guaranteed", re.IGNORECASE),
    re.compile(r"act now", re.IGNORECASE),
    re.compile(r"limited time", re.IGNORECASE),
    re.compile(r"\$\$\$"),
    re.compile(r"!!!"),
]

COMPANY_TERM_STOPWORDS = {"inc", "corp", "ltd", "llc", "co", "the"}


class NewsProcessingService(LoggerMixin):
    """
    Processor pipeline:
    1. Relevance (starts from the incoming score)
    2. Quality (0-100 normalized to 0-1)
    3. Duplicate detection against already-accepted articles
    4. Filter by criteria
    5. Sort: relevance, then quality, then publish date
    """

    RELEVANCE_SORT_BAND = 5.0
    QUALITY_SORT_BAND = 0.1

    def __init__(self, dedup_service: Optional[DeduplicationService] = None):
        super().__init__()
        self.dedup_service = dedup_service or DeduplicationService()

    # ========================================================================
    # PUBLIC API
    # ========================================================================

    def process_and_filter_news(
        self,
        articles: Sequence[RawArticle],
        company_name: str,
        criteria: Optional[FilterCriteria] = None,
        now: Optional[datetime] = None,
    ) -> ProcessingResult:
        """
        Run the full pipeline.

        Args:
            articles: Aggregated articles
            company_name: Company the articles should be about
            criteria: Thresholds, defaults when omitted
            now: Reference time for recency and age (defaults to current UTC)

        Returns:
            ProcessingResult with counts, rejections and the sorted articles
        """
        start_time = time.time()
        criteria = criteria or FilterCriteria()
        now = now or utc_now()

        # ===== PHASE 1: RELEVANCE + QUALITY =====
        scored = [
            ScoredArticle.from_raw(
                article,
                relevance_score=self.calculate_relevance(article, company_name, now),
                quality_score=self.calculate_quality(article),
            )
            for article in articles
        ]

        # ===== PHASE 2: DUPLICATE DETECTION =====
        flags = self.dedup_service.detect_duplicates(scored)
        scored = [
            article.model_copy(update={"is_duplicate": is_dup, "duplicate_of": dup_of})
            for article, (is_dup, dup_of) in zip(scored, flags)
        ]
        duplicates_removed = sum(1 for a in scored if a.is_duplicate)

        # ===== PHASE 3: FILTER =====
        rejections: Counter = Counter()
        kept: List[ScoredArticle] = []
        for article in scored:
            reason = self.rejection_reason(article, criteria, now)
            if reason:
                rejections[reason] += 1
            else:
                kept.append(article)

        # ===== PHASE 4: SORT =====
        kept = self.sort_articles(kept)

        processing_time_ms = int((time.time() - start_time) * 1000)
        self.logger.info(
            f"[Processor] '{company_name}': {len(articles)} in, {len(kept)} kept, "
            f"{duplicates_removed} duplicates, rejections={dict(rejections)} ({processing_time_ms}ms)"
        )

        return ProcessingResult(
            original_count=len(articles),
            filtered_count=len(kept),
            duplicates_removed=duplicates_removed,
            articles=kept,
            processing_time_ms=processing_time_ms,
            rejections=dict(rejections),
        )

    def to_news_articles(self, articles: Sequence[ScoredArticle], company_id: int) -> List[NewsArticleCreate]:
        """Persistence-ready records. Highlights are filled in later by generation."""
        return [
            NewsArticleCreate(
                company_id=company_id,
                title=article.title,
                content=article.content,
                highlights=[],
                source_url=article.source_url,
                source_name=article.source_name,
                published_at=article.published_at,
            )
            for article in articles
        ]

    # ========================================================================
    # SCORING
    # ========================================================================

    @staticmethod
    def company_terms(company_name: str) -> List[str]:
        return [
            term for term in company_name.lower().split()
            if len(term) > 2 and term not in COMPANY_TERM_STOPWORDS
        ]

    def calculate_relevance(self, article: RawArticle, company_name: str, now: datetime) -> float:
        """
        Scoring:
        - incoming relevance score as the base
        - company term in title: 15 per whole-word hit
        - company term in title + body: 3 per whole-word hit
        - full company name anywhere: +25
        - credible source: +10
        - recency: up to +15 decaying over 24h, then up to +5 over the next 48h
        - business keyword present: +5 each
        Capped at 100.
        """
        score = article.relevance_score or 0.0
        title_lower = article.title.lower()
        article_text = f"{article.title} {article.content}".lower()

        for term in self.company_terms(company_name):
            score += count_word_matches(term, title_lower) * 15
            score += count_word_matches(term, article_text) * 3

        if company_name.lower() in article_text:
            score += 25

        source_lower = article.source_name.lower()
        if any(source in source_lower for source in CREDIBLE_SOURCES):
            score += 10

        hours_old = hours_since(article.published_at, now)
        if hours_old < 24:
            score += 15 * (1 - hours_old / 24)
        elif hours_old < 72:
            score += 5 * (1 - (hours_old - 24) / 48)

        score += 5 * sum(1 for keyword in BUSINESS_KEYWORDS if keyword in article_text)

        return min(score, 100.0)

    def calculate_quality(self, article: RawArticle) -> float:
        """Structural quality on 0-100, returned normalized to 0-1."""
        score = 0

        title_length = len(article.title)
        if 20 <= title_length <= 100:
            score += 20
        elif 10 <= title_length <= 150:
            score += 10

        content_length = len(article.content)
        if content_length >= 100:
            score += 20
        elif content_length >= 50:
            score += 10

        if any(p.search(article.title) or p.search(article.content) for p in SPAM_PATTERNS):
            score -= 30

        first_char = article.title[:1]
        if first_char == first_char.upper():
            score += 5

        if article.source_url.startswith("https://"):
            score += 5

        if article.source_name and len(article.source_name) > 3:
            score += 10

        return max(0, min(score, 100)) / 100

    # ========================================================================
    # FILTER + SORT
    # ========================================================================

    def rejection_reason(self, article: ScoredArticle, criteria: FilterCriteria, now: datetime) -> Optional[str]:
        """First failed criterion, or None when the article is kept."""
        if article.relevance_score < criteria.min_relevance_score * 100:
            return "low_relevance"
        if article.quality_score < criteria.min_quality_score:
            return "low_quality"
        if hours_since(article.published_at, now) > criteria.max_age_hours:
            return "too_old"
        if criteria.exclude_duplicates and article.is_duplicate:
            return "duplicate"

        article_text = f"{article.title} {article.content}".lower()
        if criteria.required_keywords and not any(k.lower() in article_text for k in criteria.required_keywords):
            return "missing_required_keyword"
        if any(k.lower() in article_text for k in criteria.excluded_keywords):
            return "excluded_keyword"
        return None

    def _compare(self, a: ScoredArticle, b: ScoredArticle) -> float:
        relevance_diff = b.relevance_score - a.relevance_score
        if abs(relevance_diff) > self.RELEVANCE_SORT_BAND:
            return relevance_diff

        quality_diff = b.quality_score - a.quality_score
        if abs(quality_diff) > self.QUALITY_SORT_BAND:
            return quality_diff

        return b.published_at.timestamp() - a.published_at.timestamp()

    def sort_articles(self, articles: Sequence[ScoredArticle]) -> List[ScoredArticle]:
        return sorted(articles, key=cmp_to_key(self._compare))
