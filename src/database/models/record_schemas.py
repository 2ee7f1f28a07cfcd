"""
Pydantic views of the stored records.

Repositories return these (never ORM rows) so callers hold plain,
detached values.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.content_generation.schemas.highlights import Highlight
from src.content_generation.schemas.social import SocialPlatform
from src.utils.time_utils import ensure_utc


class _Record(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# COMPANY
# ============================================================================
class CompanyCreate(_Record):
    name: str = Field(..., min_length=1, max_length=255)
    aliases: List[str] = Field(default_factory=list)
    ticker: Optional[str] = Field(None, max_length=20)


class CompanySchema(CompanyCreate):
    id: int
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


# ============================================================================
# NEWS ARTICLE
# ============================================================================
class NewsArticleCreate(_Record):
    company_id: int
    title: str = Field(..., min_length=1)
    content: str = ""
    highlights: List[Highlight] = Field(default_factory=list)
    source_url: str = Field(..., min_length=1)
    source_name: str = ""
    published_at: datetime


class NewsArticleSchema(NewsArticleCreate):
    id: int
    fetched_at: datetime

    @field_validator("published_at", "fetched_at")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


# ============================================================================
# SOCIAL CONTENT
# ============================================================================
class SocialContentCreate(_Record):
    article_id: int
    platform: SocialPlatform
    content: str
    hashtags: List[str] = Field(default_factory=list)
    character_count: int = 0


class SocialContentSchema(SocialContentCreate):
    id: int
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)
