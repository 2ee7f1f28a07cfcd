# src/news_aggregator/services/keyword_matcher.py
"""
Keyword Matcher Service
Company-term matching and relevance heuristics shared by sources and the
aggregator.
"""

import math
import logging
from datetime import datetime
from typing import List, Optional

from src.news_aggregator.schemas.article import RawArticle
from src.news_aggregator.utils.text import count_occurrences
from src.utils.time_utils import hours_since

logger = logging.getLogger(__name__)


class KeywordMatcher:
    """
    Scores how strongly an article is about a company.

    Features:
    - Case-insensitive term frequency in title and body
    - Exact full-name bonus
    - Recency bonus with exponential decay over 72h
    - Premium source bonus
    """

    MIN_TERM_LENGTH = 3
    TITLE_WEIGHT = 10
    CONTENT_WEIGHT = 2
    CONTENT_SAMPLE_CHARS = 500
    EXACT_NAME_BONUS = 20
    RECENCY_WINDOW_HOURS = 72
    RECENCY_MAX_BONUS = 15
    PREMIUM_SOURCE_BONUS = 5
    PREMIUM_SOURCES = ["reuters", "bloomberg", "wsj", "ft.com", "cnbc"]

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    def company_terms(self, company_name: str) -> List[str]:
        """Lower-cased words of the name longer than 2 chars."""
        return [t for t in company_name.lower().split() if len(t) >= self.MIN_TERM_LENGTH]

    def term_frequency_score(self, company_name: str, title: str, content: str) -> float:
        """Title hits x10 + body hits x2, capped at 100."""
        score = 0
        for term in self.company_terms(company_name):
            score += count_occurrences(term, title) * self.TITLE_WEIGHT
            score += count_occurrences(term, content) * self.CONTENT_WEIGHT
        return float(min(score, 100))

    def basic_relevance(
        self,
        article: RawArticle,
        company_name: str,
        now: Optional[datetime] = None,
    ) -> float:
        """
        Locally computed relevance used for aggregation ranking.

        Scoring:
        - company term in title: 10 per hit
        - company term in first 500 body chars: 2 per hit
        - exact company name in title or body sample: +20
        - published within 72h: +15 * exp(-hours / 24)
        - premium source: +5

        Returns a value in [0, 100] rounded to 2 decimals.
        """
        title_lower = article.title.lower()
        content_sample = article.content.lower()[: self.CONTENT_SAMPLE_CHARS]
        name_lower = company_name.lower().strip()

        score = 0.0
        for term in self.company_terms(company_name):
            score += title_lower.count(term) * self.TITLE_WEIGHT
            score += content_sample.count(term) * self.CONTENT_WEIGHT

        if name_lower and (name_lower in title_lower or name_lower in content_sample):
            score += self.EXACT_NAME_BONUS

        hours_old = hours_since(article.published_at, now)
        if 0 <= hours_old < self.RECENCY_WINDOW_HOURS:
            score += self.RECENCY_MAX_BONUS * math.exp(-hours_old / 24)

        source_lower = article.source_name.lower()
        if any(source in source_lower for source in self.PREMIUM_SOURCES):
            score += self.PREMIUM_SOURCE_BONUS

        return round(min(score, 100.0), 2)

    def mentions_any(self, text: str, keywords: List[str]) -> bool:
        text_lower = text.lower()
        return any(k.lower() in text_lower for k in keywords if k)
