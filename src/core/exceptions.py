"""
Typed exceptions for the news and content pipeline.

Per-branch failures (one news source, one generation provider) are captured
as data by the components that fan out. Only whole-pipeline failures are
raised to the caller.
"""

from typing import Any, Dict, List, Optional


class NewsServiceError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(NewsServiceError):
    """Raised for bad input. Never retried.

    All reasons are collected before raising, so the caller sees every
    problem with the field at once.
    """

    def __init__(self, field: str, reasons: List[str]):
        message = f"Invalid {field}: " + "; ".join(reasons)
        super().__init__(message, {"field": field, "reasons": list(reasons)})
        self.field = field
        self.reasons = list(reasons)


class SourceUnavailableError(NewsServiceError):
    """One news source failed or timed out.

    Fatal only when every source failed and nothing was collected.
    """

    def __init__(self, code: str, source: str, message: str):
        super().__init__(message, {"code": code, "source": source})
        self.code = code
        self.source = source

    def to_dict(self) -> Dict[str, str]:
        return {"code": self.code, "source": self.source, "message": self.message}


class ProviderError(NewsServiceError):
    """A generation provider failed. Triggers the fallback hop."""

    def __init__(
        self,
        code: str,
        provider: str,
        message: str,
        original_error: Optional[BaseException] = None,
    ):
        super().__init__(message, {"code": code, "provider": provider})
        self.code = code
        self.provider = provider
        self.original_error = original_error


class AllProvidersFailedError(ProviderError):
    """No provider returned any usable result.

    Carries the code and provider of the last failure seen.
    """

    def __init__(self, last_error: ProviderError, attempted: List[str]):
        message = (
            f"All generation providers failed ({', '.join(attempted) or 'none available'}); "
            f"last error from {last_error.provider}: {last_error.message}"
        )
        super().__init__(last_error.code, last_error.provider, message, original_error=last_error)
        self.last_error = last_error
        self.attempted = list(attempted)
        self.details["attempted"] = self.attempted


class NotFoundError(NewsServiceError):
    """A record required by the caller does not exist."""

    def __init__(self, entity: str, key: Any):
        super().__init__(f"{entity} not found: {key}", {"entity": entity, "key": key})
        self.entity = entity
        self.key = key
