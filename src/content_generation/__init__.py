"""
Request -> Health order -> Primary provider ─→ Quality gate ─→ Response
                           (fallback hop) ──┘        (best-so-far)

Services and providers are imported from their own modules; the package
root only re-exports the schemas, which the record layer depends on.
"""
from src.content_generation.schemas.generation import (
    GenerationAttempt,
    GenerationResponse,
    ProviderHealth,
    ProviderStatus,
    QualityReport,
)
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
    Tone,
)

__all__ = [
    "GenerationAttempt",
    "GenerationResponse",
    "ProviderHealth",
    "ProviderStatus",
    "QualityReport",
    "Highlight",
    "HighlightCategory",
    "HighlightRequest",
    "HighlightResult",
    "SocialContentRequest",
    "SocialContentResult",
    "SocialPlatform",
    "SocialPost",
    "Tone",
]
