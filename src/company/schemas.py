# src/company/schemas.py
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from src.database.models.record_schemas import CompanySchema


class MatchType(str, Enum):
    EXACT = "exact"
    TICKER = "ticker"
    ALIAS = "alias"
    FUZZY = "fuzzy"


class CompanyMatch(BaseModel):
    company: CompanySchema
    confidence: float = Field(..., ge=0.0, le=1.0)
    match_type: MatchType


class ResolutionResult(BaseModel):
    """Outcome of resolving one free-text company name."""
    canonical_name: str = Field(..., description="Normalized name (trimmed input when invalid)")
    matches: List[CompanyMatch] = Field(default_factory=list, description="Sorted by confidence, descending")
    is_valid: bool = True
    validation_errors: List[str] = Field(default_factory=list)

    @property
    def best_match(self) -> Optional[CompanyMatch]:
        return self.matches[0] if self.matches else None
