# src/news_aggregator/schemas/article.py
"""
Article Schemas
RawArticle is what every source returns; ScoredArticle is what the
processor emits after re-scoring and duplicate detection.
"""

import hashlib
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from src.news_aggregator.utils.text import normalize_title
from src.utils.time_utils import ensure_utc


class NewsSource(str, Enum):
    """News data sources"""
    NEWSAPI = "newsapi"
    ALPHA_VANTAGE = "alpha_vantage"


class RawArticle(BaseModel):
    """
    Candidate article returned by a news source.

    Ephemeral, lives for one request.
    """
    title: str = Field(..., min_length=1, description="Headline")
    content: str = Field(default="", description="Body or summary text")
    source_url: str = Field(..., min_length=1, description="Original article URL")
    source_name: str = Field(default="", description="Publisher name (e.g. Reuters)")
    published_at: datetime = Field(..., description="Publication time, UTC")
    relevance_score: float = Field(default=0.0, ge=0.0, le=100.0, description="Source-local relevance 0-100")
    provider: Optional[str] = Field(None, description="Source that produced this article")

    # For deduplication
    url_hash: Optional[str] = Field(None, description="SHA256 prefix of the lower-cased URL")
    title_normalized: Optional[str] = Field(None, description="Lower-cased, punctuation-stripped title")

    @field_validator("published_at")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    def model_post_init(self, __context) -> None:
        """Generate dedup fields after initialization"""
        if not self.url_hash and self.source_url:
            self.url_hash = hashlib.sha256(self.source_url.lower().encode()).hexdigest()[:16]
        if not self.title_normalized and self.title:
            self.title_normalized = normalize_title(self.title)

    @property
    def dedup_key(self) -> str:
        """Normalized title + normalized URL."""
        return f"{self.title_normalized}-{self.source_url.strip().lower()}"


class ScoredArticle(RawArticle):
    """Processor output: re-scored relevance plus quality and duplicate flags."""
    quality_score: float = Field(default=0.0, ge=0.0, le=1.0, description="Structural quality 0-1")
    is_duplicate: bool = False
    duplicate_of: Optional[str] = Field(None, description="source_url of the article this duplicates")

    @classmethod
    def from_raw(cls, article: RawArticle, **updates) -> "ScoredArticle":
        data = article.model_dump()
        data.update(updates)
        return cls(**data)
