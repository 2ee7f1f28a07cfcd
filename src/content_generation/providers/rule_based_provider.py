# src/content_generation/providers/rule_based_provider.py
"""
Rule-based generation provider. Needs no credentials and no network, so
a request can always complete even when every AI backend is down.
"""

import time
from typing import Optional

from src.content_generation.providers.base_provider import GenerationConfig, GenerationProvider
from src.content_generation.schemas.highlights import (
    Highlight,
    HighlightCategory,
    HighlightRequest,
    HighlightResult,
)
from src.content_generation.schemas.social import (
    SocialContentRequest,
    SocialContentResult,
    SocialPlatform,
    SocialPost,
)
from src.content_generation.services.social_formatter import SocialPostFormatter
from src.news_aggregator.services.highlight_extractor import SimpleHighlightExtractor

POSITIVE_WORDS = [
    "growth", "success", "profit", "gain", "increase", "rise", "strong",
    "better", "improve", "win", "achieve", "breakthrough", "innovation",
    "launch", "expand", "record", "best", "excellent", "outstanding",
]
NEGATIVE_WORDS = [
    "loss", "decline", "fall", "drop", "weak", "worse", "fail", "crisis",
    "problem", "issue", "concern", "risk", "threat", "lawsuit", "scandal",
    "layoff", "cut", "reduce", "struggle",
]

CATEGORY_KEYWORDS = [
    (HighlightCategory.FINANCIAL, ["revenue", "profit", "earnings", "quarter", "dividend"]),
    (HighlightCategory.STRATEGIC, ["partnership", "acquisition", "merger", "ceo", "executive", "leadership"]),
    (HighlightCategory.OPERATIONAL, ["product", "launch", "release", "factory", "supply"]),
    (HighlightCategory.MARKET, ["market", "stock", "shares", "investors", "analysts"]),
]

# {company}, {text}; one template per sentiment
TEMPLATES = {
    SocialPlatform.LINKEDIN: {
        "positive": "{company} growth update: {text} What are your thoughts on this business development?",
        "negative": "Important business update on {company}: {text} How should the industry respond?",
        "neutral": "{company} business update: {text} What does this mean for the market?",
    },
    SocialPlatform.TWITTER: {
        "positive": "Just in: {company} - {text} Thoughts?",
        "negative": "Just in: {company} - {text} What do you think?",
        "neutral": "Just in: {company} - {text} Thoughts?",
    },
    SocialPlatform.FACEBOOK: {
        "positive": "Great news from {company}! {text} What do you think this means?",
        "negative": "Have you heard about {company}? {text} What's your opinion?",
        "neutral": "Interesting development at {company}: {text} What do you think?",
    },
    SocialPlatform.INSTAGRAM: {
        "positive": "The {company} story continues: {text}",
        "negative": "A closer look at {company}: {text}",
        "neutral": "Behind the scenes at {company}: {text}",
    },
}


def detect_sentiment(text: str) -> str:
    """'positive' / 'negative' when one side leads by more than one hit."""
    lower = text.lower()
    positive = sum(1 for w in POSITIVE_WORDS if w in lower)
    negative = sum(1 for w in NEGATIVE_WORDS if w in lower)
    if positive > negative + 1:
        return "positive"
    if negative > positive + 1:
        return "negative"
    return "neutral"


def categorize(text: str) -> HighlightCategory:
    lower = text.lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(k in lower for k in keywords):
            return category
    return HighlightCategory.GENERAL


class RuleBasedGenerationProvider(GenerationProvider):
    """Heuristic highlights and template posts."""

    def __init__(
        self,
        config: Optional[GenerationConfig] = None,
        extractor: Optional[SimpleHighlightExtractor] = None,
        formatter: Optional[SocialPostFormatter] = None,
    ):
        super().__init__(config)
        self.extractor = extractor or SimpleHighlightExtractor()
        self.formatter = formatter or SocialPostFormatter()

    @property
    def provider_id(self) -> str:
        return "rule_based"

    @property
    def is_last_resort(self) -> bool:
        return True

    async def extract_highlights(self, request: HighlightRequest) -> HighlightResult:
        start = time.perf_counter()
        sentences = self.extractor.extract_from_article(request.title, request.content, request.max_highlights)
        if not sentences:
            sentences = [request.title]

        # Article order is treated as importance order: 4, 3, 2, ...
        highlights = [
            Highlight(
                text=sentence[:500],
                importance=max(1, 4 - index),
                category=categorize(sentence),
            )
            for index, sentence in enumerate(sentences)
        ]
        elapsed = int((time.perf_counter() - start) * 1000)
        self.logger.debug(f"[RuleBased] {len(highlights)} highlights for '{request.company_name}'")
        return HighlightResult(highlights=highlights, processing_time_ms=elapsed, model="rule-based")

    def build_post(self, request: SocialContentRequest, platform: SocialPlatform) -> SocialPost:
        ranked = sorted(request.highlights, key=lambda h: h.importance, reverse=True)
        top = ranked[0]
        sentiment = detect_sentiment(" ".join(h.text for h in ranked))
        text = top.text if top.text.rstrip().endswith((".", "!", "?")) else f"{top.text.rstrip()}."

        content = TEMPLATES[platform][sentiment].format(company=request.company_name, text=text)
        hashtags = self.formatter.suggest_hashtags(ranked[:3], request.company_name, platform)
        return self.formatter.build_post(platform, content, hashtags)

    async def generate_social_content(self, request: SocialContentRequest) -> SocialContentResult:
        start = time.perf_counter()
        posts = [self.build_post(request, platform) for platform in request.platforms]
        elapsed = int((time.perf_counter() - start) * 1000)
        self.logger.debug(f"[RuleBased] {len(posts)} posts for '{request.company_name}'")
        return SocialContentResult(posts=posts, processing_time_ms=elapsed, model="rule-based")
