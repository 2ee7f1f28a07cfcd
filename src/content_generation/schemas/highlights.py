# src/content_generation/schemas/highlights.py
"""
Highlight Schemas
Short, scored statements extracted from one article.
"""

from enum import Enum
from typing import List

from pydantic import BaseModel, Field


class HighlightCategory(str, Enum):
    FINANCIAL = "financial"
    OPERATIONAL = "operational"
    STRATEGIC = "strategic"
    MARKET = "market"
    GENERAL = "general"

    @classmethod
    def values(cls) -> List[str]:
        return [c.value for c in cls]


class Highlight(BaseModel):
    """One key point of an article. Embedded in its parent article, never stored alone."""
    text: str = Field(..., min_length=1, max_length=500, description="Highlight sentence")
    importance: int = Field(default=3, description="1 (minor) to 5 (critical)")
    category: HighlightCategory = Field(default=HighlightCategory.GENERAL)


class HighlightRequest(BaseModel):
    """Input for highlight extraction."""
    title: str = Field(..., min_length=1)
    content: str = Field(default="")
    source_name: str = Field(default="")
    company_name: str = Field(..., min_length=1)
    max_highlights: int = Field(default=3, ge=1, le=10)


class HighlightResult(BaseModel):
    """Provider output for one extraction call."""
    highlights: List[Highlight] = Field(default_factory=list)
    processing_time_ms: int = 0
    model: str = ""
