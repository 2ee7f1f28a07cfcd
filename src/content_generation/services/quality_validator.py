# src/content_generation/services/quality_validator.py
"""
Content Quality Validator
Pure, stateless scoring of highlights and social posts. Each check
deducts from 100; the score never goes below 0.
"""

import re
from enum import Enum
from typing import List, Optional, Sequence, Set

from src.content_generation.schemas.generation import QualityReport
from src.content_generation.schemas.highlights import Highlight, HighlightCategory
from src.content_generation.schemas.social import SocialContentResult, SocialPlatform, SocialPost

DEFAULT_ACCEPTANCE_THRESHOLD = 60.0

MIN_HIGHLIGHT_LENGTH = 10
MAX_HIGHLIGHT_LENGTH = 300
MIN_POST_CONTENT_LENGTH = 20
MAX_HASHTAG_LENGTH = 30
DUPLICATE_SIMILARITY = 0.8

GENERIC_PHRASES = [
    "the company",
    "it is important",
    "this is significant",
    "according to reports",
    "industry experts",
    "market analysts",
    "sources say",
]

_SPECIFIC_TERMS_RE = re.compile(
    r"\b(revenue|profit|loss|growth|decline|increase|decrease|million|billion|percent|%)\b",
    re.IGNORECASE,
)
_DIGIT_RE = re.compile(r"\d")
_HASHTAG_RE = re.compile(r"^#[a-zA-Z0-9_]+$")

LINKEDIN_BUSINESS_KEYWORDS = [
    "revenue", "growth", "market", "industry", "business",
    "strategy", "investment", "performance", "earnings",
]
TWITTER_ENGAGEMENT_HOOKS = ["what do you think", "thoughts?", "breaking:", "just in:", "🧵", "thread"]
FACEBOOK_CONVERSATIONAL_CUES = ["what", "how", "why", "do you", "have you", "thoughts", "opinion"]
INSTAGRAM_VISUAL_WORDS = ["behind", "inside", "look", "see", "watch", "story", "journey"]

PLATFORM_OPTIMIZATION = {
    SocialPlatform.LINKEDIN: (LINKEDIN_BUSINESS_KEYWORDS, "Lacks business/professional keywords"),
    SocialPlatform.TWITTER: (TWITTER_ENGAGEMENT_HOOKS, "Lacks engagement hooks or trending elements"),
    SocialPlatform.FACEBOOK: (FACEBOOK_CONVERSATIONAL_CUES, "Lacks conversational tone or discussion starters"),
    SocialPlatform.INSTAGRAM: (INSTAGRAM_VISUAL_WORDS, "Lacks visual storytelling elements"),
}


def _word_set(text: str) -> Set[str]:
    return set(text.lower().split())


def text_similarity(text1: str, text2: str) -> float:
    """Jaccard similarity of the lower-cased word sets."""
    set1, set2 = _word_set(text1), _word_set(text2)
    union = set1 | set2
    if not union:
        return 0.0
    return len(set1 & set2) / len(union)


def _category_value(category) -> str:
    return category.value if isinstance(category, Enum) else str(category)


class ContentQualityValidator:
    """
    Scores highlights and social content against structural rules.

    A result is acceptable when its score reaches the threshold. Highlights
    that break the data model (importance outside 1-5, unknown category)
    are never acceptable, whatever the score.
    """

    def __init__(
        self,
        highlight_threshold: float = DEFAULT_ACCEPTANCE_THRESHOLD,
        social_threshold: float = DEFAULT_ACCEPTANCE_THRESHOLD,
    ):
        self.highlight_threshold = highlight_threshold
        self.social_threshold = social_threshold

    # ========================================================================
    # HIGHLIGHTS
    # ========================================================================

    def validate_highlights(
        self,
        highlights: Sequence[Highlight],
        company_name: str,
        threshold: Optional[float] = None,
    ) -> QualityReport:
        threshold = self.highlight_threshold if threshold is None else threshold
        issues: List[str] = []
        warnings: List[str] = []
        score = 100.0
        flags = {
            "too_generic": False,
            "lacks_concreteness": False,
            "poor_importance_scoring": False,
            "incorrect_categorization": False,
        }
        structurally_invalid = False

        if not highlights:
            issues.append("No highlights provided")
            score -= 50

        company_lower = company_name.lower()
        name_variations = [
            company_lower,
            re.sub(r"\s+", "", company_lower),
            company_lower.split(" ")[0],
        ]

        for index, highlight in enumerate(highlights, start=1):
            text = highlight.text
            text_lower = text.lower()

            if len(text) < MIN_HIGHLIGHT_LENGTH:
                issues.append(f"Highlight {index} is too short ({len(text)} chars)")
                score -= 10
            if len(text) > MAX_HIGHLIGHT_LENGTH:
                warnings.append(f"Highlight {index} is quite long ({len(text)} chars)")
                score -= 5

            if any(phrase in text_lower for phrase in GENERIC_PHRASES):
                flags["too_generic"] = True
                warnings.append(f"Highlight {index} contains generic phrases")
                score -= 8

            if not _DIGIT_RE.search(text) and not _SPECIFIC_TERMS_RE.search(text):
                flags["lacks_concreteness"] = True
                warnings.append(f"Highlight {index} lacks concrete data or specific facts")
                score -= 5

            if not any(v and v in text_lower for v in name_variations):
                warnings.append(f"Highlight {index} doesn't clearly reference the company")
                score -= 3

            if not 1 <= highlight.importance <= 5:
                flags["poor_importance_scoring"] = True
                structurally_invalid = True
                issues.append(
                    f"Highlight {index} has invalid importance score: {highlight.importance} "
                    f"(importance must be 1-5)"
                )
                score -= 10

            category = _category_value(highlight.category)
            if category not in HighlightCategory.values():
                flags["incorrect_categorization"] = True
                structurally_invalid = True
                issues.append(f"Highlight {index} has invalid category: {category}")
                score -= 8

        if self._has_near_duplicates(highlights):
            warnings.append("Some highlights appear to be duplicates or very similar")
            score -= 10

        if len(highlights) > 1 and len({h.importance for h in highlights}) == 1:
            flags["poor_importance_scoring"] = True
            warnings.append("All highlights have the same importance score")
            score -= 5

        score = max(0.0, score)
        return QualityReport(
            score=score,
            is_acceptable=score >= threshold and not structurally_invalid,
            issues=issues,
            warnings=warnings,
            flags=flags,
        )

    @staticmethod
    def _has_near_duplicates(highlights: Sequence[Highlight]) -> bool:
        for i in range(len(highlights)):
            for j in range(i + 1, len(highlights)):
                if text_similarity(highlights[i].text, highlights[j].text) > DUPLICATE_SIMILARITY:
                    return True
        return False

    # ========================================================================
    # SOCIAL CONTENT
    # ========================================================================

    def validate_social_content(
        self,
        result: SocialContentResult,
        requested_platforms: Sequence[SocialPlatform],
        company_name: str,
        threshold: Optional[float] = None,
    ) -> QualityReport:
        threshold = self.social_threshold if threshold is None else threshold
        issues: List[str] = []
        warnings: List[str] = []
        score = 100.0
        flags = {
            "exceeds_character_limit": False,
            "poor_hashtag_quality": False,
            "inappropriate_tone": False,
            "lacks_platform_optimization": False,
        }

        provided = {post.platform for post in result.posts}
        missing = [SocialPlatform(p).value for p in requested_platforms if SocialPlatform(p) not in provided]
        if missing:
            issues.append(f"Missing content for platforms: {', '.join(missing)}")
            score -= 20

        company_lower = company_name.lower()
        company_tag = re.sub(r"\s+", "", company_lower)

        for index, post in enumerate(result.posts, start=1):
            platform = post.platform.value
            content_lower = post.content.lower()

            if post.character_count > post.platform.max_length:
                flags["exceeds_character_limit"] = True
                issues.append(
                    f"{platform} post {index} exceeds character limit: "
                    f"{post.character_count}/{post.platform.max_length}"
                )
                score -= 15

            if len(post.content) < MIN_POST_CONTENT_LENGTH:
                issues.append(f"{platform} post {index} content is too short")
                score -= 10

            mentions_company = company_lower in content_lower or any(
                company_tag in tag.lower() for tag in post.hashtags
            )
            if not mentions_company:
                warnings.append(f"{platform} post {index} doesn't clearly reference the company")
                score -= 5

            hashtag_issues, penalty = self.check_hashtags(post.hashtags, post.platform)
            if hashtag_issues:
                flags["poor_hashtag_quality"] = True
                warnings.append(f"{platform} post {index} has hashtag issues: {', '.join(hashtag_issues)}")
                score -= penalty

            optimization_issue = self.check_platform_optimization(post)
            if optimization_issue:
                flags["lacks_platform_optimization"] = True
                warnings.append(f"{platform} post {index} lacks platform optimization: {optimization_issue}")
                score -= 8

            tone_issue = self.check_tone(post.content, post.platform)
            if tone_issue:
                flags["inappropriate_tone"] = True
                warnings.append(f"{platform} post {index} may have inappropriate tone: {tone_issue}")
                score -= 5

        score = max(0.0, score)
        return QualityReport(
            score=score,
            is_acceptable=score >= threshold,
            issues=issues,
            warnings=warnings,
            flags=flags,
        )

    @staticmethod
    def check_hashtags(hashtags: Sequence[str], platform: SocialPlatform):
        """Returns (issues, penalty)."""
        issues: List[str] = []
        penalty = 0

        if len(hashtags) > platform.max_hashtags:
            issues.append(f"Too many hashtags ({len(hashtags)}/{platform.max_hashtags})")
            penalty += 5
        if not hashtags:
            issues.append("No hashtags provided")
            penalty += 8

        for index, tag in enumerate(hashtags, start=1):
            if not tag.startswith("#"):
                issues.append(f"Hashtag {index} missing # symbol")
                penalty += 2
            if len(tag) > MAX_HASHTAG_LENGTH:
                issues.append(f"Hashtag {index} too long")
                penalty += 2
            if not _HASHTAG_RE.match(tag):
                issues.append(f"Hashtag {index} contains invalid characters")
                penalty += 3

        return issues, penalty

    @staticmethod
    def check_platform_optimization(post: SocialPost) -> Optional[str]:
        signals, message = PLATFORM_OPTIMIZATION[post.platform]
        content_lower = post.content.lower()
        if any(signal in content_lower for signal in signals):
            return None
        return message

    @staticmethod
    def check_tone(content: str, platform: SocialPlatform) -> Optional[str]:
        content_lower = content.lower()
        if ("urgent" in content_lower or "breaking" in content_lower) and platform != SocialPlatform.TWITTER:
            return "Breaking news tone inappropriate for platform"
        if ("dm me" in content_lower or "link in bio" in content_lower) and platform == SocialPlatform.LINKEDIN:
            return "Casual social media language inappropriate for LinkedIn"
        return None
