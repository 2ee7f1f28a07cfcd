# src/company/resolver.py
"""
Company Resolver
Maps free-text company names onto canonical Company records.
"""

from typing import List, Optional

from rapidfuzz.distance import Levenshtein

from src.company.normalization import normalize_company_name, validate_company_name
from src.company.schemas import CompanyMatch, MatchType, ResolutionResult
from src.core.exceptions import NotFoundError, ValidationError
from src.database.models.record_schemas import CompanyCreate, CompanySchema
from src.database.repository.company_repository import CompanyRepository
from src.utils.logger.custom_logging import LoggerMixin


class CompanyResolver(LoggerMixin):
    """
    Matching order per known company:
    1. exact canonical name -> 1.0
    2. ticker -> 0.95
    3. alias -> 0.9
    4. fuzzy (normalized Levenshtein with containment and word boosts)

    Only candidates above MIN_MATCH_CONFIDENCE are reported.
    """

    EXACT_CONFIDENCE = 1.0
    TICKER_CONFIDENCE = 0.95
    ALIAS_CONFIDENCE = 0.9
    SUBSTRING_FLOOR = 0.7
    WORD_MATCH_WEIGHT = 0.8
    MIN_MATCH_CONFIDENCE = 0.3
    AUTO_MATCH_CONFIDENCE = 0.8
    SEARCH_MIN_CONFIDENCE = 0.5

    def __init__(self, company_repository: CompanyRepository):
        super().__init__()
        self.companies = company_repository

    # ========================================================================
    # RESOLVE
    # ========================================================================

    async def resolve(self, free_text: str) -> ResolutionResult:
        """
        Validate, normalize and match ``free_text`` against known companies.

        Invalid input is reported through ``is_valid`` and
        ``validation_errors`` with no matching attempted.
        """
        errors = validate_company_name(free_text)
        if errors:
            self.logger.info(f"[Resolver] Rejected input {free_text!r}: {errors}")
            return ResolutionResult(
                canonical_name=free_text.strip() if isinstance(free_text, str) else "",
                is_valid=False,
                validation_errors=errors,
            )

        canonical = normalize_company_name(free_text)
        if not canonical:
            errors = ["Company name contains invalid characters"]
            self.logger.info(f"[Resolver] Rejected input {free_text!r}: nothing left after normalization")
            return ResolutionResult(canonical_name="", is_valid=False, validation_errors=errors)

        matches = await self._find_matches(canonical, free_text.strip())
        self.logger.debug(
            f"[Resolver] {free_text!r} -> {canonical!r}, "
            f"{len(matches)} matches (best={matches[0].confidence if matches else None})"
        )
        return ResolutionResult(canonical_name=canonical, matches=matches)

    async def _find_matches(self, canonical: str, raw: str) -> List[CompanyMatch]:
        matches = []
        for company in await self.companies.find_all():
            match = self.score_match(canonical, company, raw)
            if match is not None and match.confidence > self.MIN_MATCH_CONFIDENCE:
                matches.append(match)
        matches.sort(key=lambda m: m.confidence, reverse=True)
        return matches

    def score_match(self, canonical: str, company: CompanySchema, raw: Optional[str] = None) -> Optional[CompanyMatch]:
        """Confidence of ``company`` for an already-normalized input."""
        input_lower = canonical.lower()
        name_lower = company.name.lower()

        if input_lower == name_lower:
            return CompanyMatch(company=company, confidence=self.EXACT_CONFIDENCE, match_type=MatchType.EXACT)

        if company.ticker and input_lower == company.ticker.lower():
            return CompanyMatch(company=company, confidence=self.TICKER_CONFIDENCE, match_type=MatchType.TICKER)

        # The raw spelling is checked as well, aliases keep what users typed
        candidates = {input_lower}
        if raw:
            candidates.add(raw.lower())
        if any(alias.lower() in candidates for alias in company.aliases):
            return CompanyMatch(company=company, confidence=self.ALIAS_CONFIDENCE, match_type=MatchType.ALIAS)

        fuzzy = self.fuzzy_score(input_lower, name_lower)
        if fuzzy > self.MIN_MATCH_CONFIDENCE:
            return CompanyMatch(company=company, confidence=round(fuzzy, 4), match_type=MatchType.FUZZY)
        return None

    def fuzzy_score(self, source: str, target: str) -> float:
        """
        1 - levenshtein / max_len, raised to at least 0.7 on containment,
        otherwise raised to the word-overlap ratio x 0.8 when any word matches.
        """
        if not source or not target:
            return 1.0 if source == target else 0.0
        max_length = max(len(source), len(target))

        similarity = 1 - Levenshtein.distance(source, target) / max_length

        if source in target or target in source:
            return max(similarity, self.SUBSTRING_FLOOR)

        source_words = source.split(" ")
        target_words = target.split(" ")
        word_matches = sum(
            1 for word in source_words
            if any(t in word or word in t for t in target_words)
        )
        if word_matches > 0:
            word_score = word_matches / max(len(source_words), len(target_words))
            return max(similarity, word_score * self.WORD_MATCH_WEIGHT)

        return similarity

    # ========================================================================
    # FIND OR CREATE / ALIASES / SEARCH
    # ========================================================================

    async def find_or_create(self, company_name: str, ticker: Optional[str] = None) -> CompanySchema:
        """
        Return the best match when its confidence exceeds 0.8, otherwise
        create a company under the normalized name.

        Raises:
            ValidationError: input failed validation
        """
        result = await self.resolve(company_name)
        if not result.is_valid:
            raise ValidationError("company_name", result.validation_errors)

        best = result.best_match
        if best is not None and best.confidence > self.AUTO_MATCH_CONFIDENCE:
            self.logger.info(
                f"[Resolver] '{company_name}' matched '{best.company.name}' "
                f"({best.match_type.value}, {best.confidence})"
            )
            return best.company

        raw = company_name.strip()
        created = await self.companies.create(CompanyCreate(
            name=result.canonical_name,
            ticker=ticker.strip().upper() if ticker else None,
            aliases=[raw] if raw != result.canonical_name else [],
        ))
        self.logger.info(f"[Resolver] Created company '{created.name}' (id={created.id})")
        return created

    async def add_alias(self, company_id: int, alias: str) -> CompanySchema:
        """
        Append the normalized alias unless already present (case-insensitive).

        Raises:
            ValidationError: alias failed validation
            NotFoundError: no company with that id
        """
        errors = validate_company_name(alias)
        if errors:
            raise ValidationError("alias", errors)

        company = await self.companies.find_by_id(company_id)
        if company is None:
            raise NotFoundError("company", company_id)

        normalized = normalize_company_name(alias)
        if any(a.lower() == normalized.lower() for a in company.aliases):
            return company

        updated = await self.companies.update(company_id, {"aliases": [*company.aliases, normalized]})
        self.logger.info(f"[Resolver] Added alias '{normalized}' to company {company_id}")
        return updated

    async def search(self, query: str, min_confidence: Optional[float] = None) -> List[CompanyMatch]:
        """Known companies matching ``query`` above ``min_confidence`` (default 0.5)."""
        threshold = self.SEARCH_MIN_CONFIDENCE if min_confidence is None else min_confidence
        result = await self.resolve(query)
        if not result.is_valid:
            return []
        return [m for m in result.matches if m.confidence > threshold]
