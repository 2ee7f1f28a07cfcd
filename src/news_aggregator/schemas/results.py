# src/news_aggregator/schemas/results.py
"""
Aggregation / Processing result schemas
"""

from typing import Dict, List

from pydantic import BaseModel, Field

from src.news_aggregator.schemas.article import RawArticle, ScoredArticle


DEFAULT_EXCLUDED_KEYWORDS = ["obituary", "death", "died", "funeral"]


class SourceError(BaseModel):
    """A captured per-source failure. Reported, never raised on its own."""
    code: str = Field(..., description="TIMEOUT, CLIENT_ERROR, ...")
    source: str
    message: str


class AggregationResult(BaseModel):
    """Merged, deduplicated and relevance-sorted articles from all sources."""
    articles: List[RawArticle] = Field(default_factory=list)
    sources: List[str] = Field(default_factory=list, description="Sources that returned successfully")
    errors: List[SourceError] = Field(default_factory=list)

    # Stats
    total_fetched: int = Field(default=0, description="Articles fetched before dedup")
    after_dedup: int = 0
    processing_time_ms: int = 0
    source_times_ms: Dict[str, int] = Field(default_factory=dict)


class FilterCriteria(BaseModel):
    """
    Processor thresholds.

    min_relevance_score is on the 0-1 scale and is compared against
    relevance / 100.
    """
    min_relevance_score: float = Field(default=0.3, ge=0.0, le=1.0)
    max_age_hours: float = Field(default=168, gt=0)
    min_quality_score: float = Field(default=0.4, ge=0.0, le=1.0)
    exclude_duplicates: bool = True
    required_keywords: List[str] = Field(default_factory=list, description="Keep only articles mentioning any of these")
    excluded_keywords: List[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDED_KEYWORDS))


class ProcessingResult(BaseModel):
    original_count: int = 0
    filtered_count: int = Field(default=0, description="Articles kept after filtering")
    duplicates_removed: int = 0
    articles: List[ScoredArticle] = Field(default_factory=list)
    processing_time_ms: int = 0
    # reason -> number of articles dropped for it
    rejections: Dict[str, int] = Field(default_factory=dict)


class SourceHealth(BaseModel):
    status: str = Field(..., description="healthy / degraded / unhealthy")
    sources: Dict[str, bool] = Field(default_factory=dict)
    errors: Dict[str, str] = Field(default_factory=dict)
