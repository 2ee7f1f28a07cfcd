# src/content_generation/services/social_formatter.py
"""
Social Post Formatter
Hashtag suggestion, hashtag sanitizing and per-platform length enforcement.
"""

import re
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from src.content_generation.schemas.highlights import Highlight, HighlightCategory
from src.content_generation.schemas.social import SocialPlatform, SocialPost, compute_character_count

MAX_HASHTAG_LENGTH = 30
COMPANY_TAG_MAX_CHARS = 20
ELLIPSIS = "..."

_HASHTAG_RE = re.compile(r"^#[A-Za-z0-9_]+$")
_NON_ALNUM_SPACE_RE = re.compile(r"[^a-zA-Z0-9\s]")
_WHITESPACE_RE = re.compile(r"\s+")

# (tag, relevance 1-5)
CATEGORY_HASHTAGS: Dict[HighlightCategory, List[Tuple[str, int]]] = {
    HighlightCategory.FINANCIAL: [("#Finance", 4), ("#Earnings", 4), ("#Investment", 3)],
    HighlightCategory.OPERATIONAL: [("#Operations", 3), ("#Business", 4), ("#Strategy", 3)],
    HighlightCategory.STRATEGIC: [("#Strategy", 4), ("#Growth", 4), ("#Innovation", 3)],
    HighlightCategory.MARKET: [("#Market", 4), ("#Industry", 3), ("#Trends", 3)],
    HighlightCategory.GENERAL: [("#News", 3), ("#Business", 4), ("#Update", 2)],
}

PLATFORM_HASHTAGS: Dict[SocialPlatform, List[Tuple[str, int]]] = {
    SocialPlatform.LINKEDIN: [("#LinkedIn", 2), ("#Professional", 3), ("#BusinessNews", 4)],
    SocialPlatform.TWITTER: [("#Breaking", 3), ("#News", 4), ("#Business", 3)],
    SocialPlatform.FACEBOOK: [("#Business", 4), ("#News", 3), ("#Community", 2)],
    SocialPlatform.INSTAGRAM: [("#Business", 3), ("#Entrepreneur", 3), ("#Success", 2)],
}

COMPANY_TAG_RELEVANCE = 5


def company_hashtag(company_name: str) -> Optional[str]:
    """'Apple Inc.' -> '#AppleInc'; None when fewer than 3 usable chars."""
    cleaned = _WHITESPACE_RE.sub("", _NON_ALNUM_SPACE_RE.sub("", company_name))[:COMPANY_TAG_MAX_CHARS]
    return f"#{cleaned}" if len(cleaned) > 2 else None


def sanitize_hashtags(tags: Iterable, platform: SocialPlatform) -> List[str]:
    """
    Prefix '#', drop malformed or over-long tags and case-insensitive
    repeats, cut to the platform's hashtag maximum.
    """
    cleaned: List[str] = []
    seen = set()
    for tag in tags:
        if not isinstance(tag, str):
            continue
        tag = tag.strip()
        if not tag:
            continue
        if not tag.startswith("#"):
            tag = f"#{tag}"
        if len(tag) > MAX_HASHTAG_LENGTH or not _HASHTAG_RE.match(tag):
            continue
        if tag.lower() in seen:
            continue
        seen.add(tag.lower())
        cleaned.append(tag)
    return cleaned[: platform.max_hashtags]


class SocialPostFormatter:
    """Builds posts that always fit their platform's character ceiling."""

    def suggest_hashtags(
        self,
        highlights: Sequence[Highlight],
        company_name: str,
        platform: SocialPlatform,
        limit: Optional[int] = None,
    ) -> List[str]:
        """
        Company tag (relevance 5), then category and platform tags ranked
        by relevance; the first occurrence of a tag wins on ties.
        """
        limit = platform.max_hashtags if limit is None else limit
        candidates: List[Tuple[str, int]] = []

        tag = company_hashtag(company_name)
        if tag:
            candidates.append((tag, COMPANY_TAG_RELEVANCE))

        categories: List[HighlightCategory] = []
        for highlight in highlights:
            category = HighlightCategory(highlight.category)
            if category not in categories:
                categories.append(category)
        for category in categories:
            candidates.extend(CATEGORY_HASHTAGS.get(category, CATEGORY_HASHTAGS[HighlightCategory.GENERAL]))

        candidates.extend(PLATFORM_HASHTAGS[platform])

        ranked = sorted(candidates, key=lambda c: c[1], reverse=True)
        selected: List[str] = []
        for tag, _ in ranked:
            if tag.lower() not in (s.lower() for s in selected):
                selected.append(tag)
        return selected[:limit]

    def enforce_character_limit(
        self,
        content: str,
        hashtags: Sequence[str],
        platform: SocialPlatform,
    ) -> Tuple[str, List[str], int]:
        """
        Drop trailing hashtags (keeping at least one), then trim the content
        with an ellipsis until the post fits.

        Returns:
            (content, hashtags, character_count) with character_count <= platform.max_length
        """
        limit = platform.max_length
        tags = list(hashtags)

        while compute_character_count(content, tags) > limit and len(tags) > 1:
            tags.pop()

        if compute_character_count(content, tags) > limit:
            room = max(0, limit - len(" ".join(tags)) - 1 - len(ELLIPSIS))
            content = content[:room] + ELLIPSIS

        if compute_character_count(content, tags) > limit:
            # A single tag too long to leave room for any content
            tags = []
            content = content[: max(0, limit - 1 - len(ELLIPSIS))] + ELLIPSIS

        return content, tags, compute_character_count(content, tags)

    def build_post(self, platform: SocialPlatform, content: str, hashtags: Sequence[str]) -> SocialPost:
        """Sanitized, length-enforced post."""
        content = (content or "").strip()
        tags = sanitize_hashtags(hashtags, platform)
        content, tags, count = self.enforce_character_limit(content, tags, platform)
        return SocialPost(platform=platform, content=content, hashtags=tags, character_count=count)
