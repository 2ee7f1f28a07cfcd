"""
Free text -> Validate -> Normalize -> Match (exact / ticker / alias / fuzzy) -> Company
"""
from src.company.normalization import normalize_company_name, validate_company_name
from src.company.resolver import CompanyResolver
from src.company.schemas import CompanyMatch, MatchType, ResolutionResult

__all__ = [
    "normalize_company_name",
    "validate_company_name",
    "CompanyResolver",
    "CompanyMatch",
    "MatchType",
    "ResolutionResult",
]
