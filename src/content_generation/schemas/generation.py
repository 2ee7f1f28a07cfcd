# src/content_generation/schemas/generation.py
"""
Generation provenance, quality and provider-health schemas.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

from src.utils.time_utils import utc_now

T = TypeVar("T")


class ProviderStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class ProviderHealth(BaseModel):
    provider: str
    status: ProviderStatus
    response_time_ms: Optional[int] = None
    last_checked: datetime = Field(default_factory=utc_now)
    error: Optional[str] = None

    @property
    def is_healthy(self) -> bool:
        return self.status == ProviderStatus.HEALTHY


class GenerationAttempt(BaseModel):
    """Provenance of one provider call. Never persisted."""
    provider: str
    success: bool
    quality_score: Optional[float] = None
    duration_ms: int = 0
    error: Optional[str] = None
    error_code: Optional[str] = None


class QualityReport(BaseModel):
    """Validator verdict. A low score is a soft signal, never an exception."""
    score: float = Field(..., ge=0.0, le=100.0)
    is_acceptable: bool
    issues: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    flags: Dict[str, Any] = Field(default_factory=dict)


class GenerationResponse(BaseModel, Generic[T]):
    """Best result of an orchestrated call together with every attempt made."""
    data: T
    primary_attempt: GenerationAttempt
    fallback_attempt: Optional[GenerationAttempt] = None
    attempts: List[GenerationAttempt] = Field(default_factory=list)
    final_quality_score: float = 0.0
    total_processing_time_ms: int = 0
    quality_report: Optional[QualityReport] = None
    is_acceptable: bool = False
    provider: str = ""
