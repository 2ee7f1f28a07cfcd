# src/content_generation/schemas/social.py
"""
Social Content Schemas
The four supported platforms form a closed set; each carries its own
character and hashtag ceilings.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, model_validator

from src.content_generation.schemas.highlights import Highlight


@dataclass(frozen=True)
class PlatformSpec:
    max_length: int
    optimal_length: int
    max_hashtags: int
    recommended_hashtags: int


class SocialPlatform(str, Enum):
    LINKEDIN = "linkedin"
    TWITTER = "twitter"
    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"

    @property
    def spec(self) -> PlatformSpec:
        return PLATFORM_SPECS[self]

    @property
    def max_length(self) -> int:
        return self.spec.max_length

    @property
    def optimal_length(self) -> int:
        return self.spec.optimal_length

    @property
    def max_hashtags(self) -> int:
        return self.spec.max_hashtags

    @property
    def recommended_hashtags(self) -> int:
        return self.spec.recommended_hashtags


PLATFORM_SPECS: Dict[SocialPlatform, PlatformSpec] = {
    SocialPlatform.LINKEDIN: PlatformSpec(max_length=300, optimal_length=150, max_hashtags=5, recommended_hashtags=3),
    SocialPlatform.TWITTER: PlatformSpec(max_length=280, optimal_length=200, max_hashtags=3, recommended_hashtags=2),
    SocialPlatform.FACEBOOK: PlatformSpec(max_length=250, optimal_length=180, max_hashtags=4, recommended_hashtags=2),
    SocialPlatform.INSTAGRAM: PlatformSpec(max_length=200, optimal_length=150, max_hashtags=5, recommended_hashtags=4),
}


class Tone(str, Enum):
    PROFESSIONAL = "professional"
    CASUAL = "casual"
    ENTHUSIASTIC = "enthusiastic"


def compute_character_count(content: str, hashtags: List[str]) -> int:
    """Length of the post as published: content, one space, space-joined hashtags."""
    return len(content) + 1 + len(" ".join(hashtags))


class SocialPost(BaseModel):
    """One ready-to-publish post."""
    platform: SocialPlatform
    content: str = Field(..., description="Post text without hashtags")
    hashtags: List[str] = Field(default_factory=list, description="Each '#'-prefixed")
    character_count: Optional[int] = Field(None, description="Filled from content + hashtags when omitted")

    @model_validator(mode="after")
    def _fill_character_count(self) -> "SocialPost":
        if self.character_count is None:
            self.character_count = compute_character_count(self.content, self.hashtags)
        return self

    @property
    def within_limit(self) -> bool:
        return self.character_count <= self.platform.max_length


class SocialContentRequest(BaseModel):
    """Input for social post generation."""
    highlights: List[Highlight] = Field(..., min_length=1)
    company_name: str = Field(..., min_length=1)
    platforms: List[SocialPlatform] = Field(..., min_length=1)
    tone: Tone = Tone.PROFESSIONAL


class SocialContentResult(BaseModel):
    """Provider output for one generation call."""
    posts: List[SocialPost] = Field(default_factory=list)
    processing_time_ms: int = 0
    model: str = ""

    def post_for(self, platform: SocialPlatform) -> Optional[SocialPost]:
        return next((p for p in self.posts if p.platform == platform), None)
