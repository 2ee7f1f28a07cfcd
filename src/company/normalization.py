# src/company/normalization.py
"""
Company name validation and deterministic normalization.

normalize_company_name is idempotent: applying it to its own output
returns the same string.
"""

import re
from typing import List

COMMON_SUFFIXES = [
    "inc", "incorporated", "corp", "corporation", "ltd", "limited",
    "llc", "co", "company", "group", "holdings", "enterprises",
    "technologies", "tech", "systems", "solutions", "services",
]
COMMON_PREFIXES = ["the"]
CONNECTOR_WORDS = {"and", "of", "the", "for", "in", "on", "at", "by"}

MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 255

_INVALID_CHARS_RE = re.compile(r"[^A-Za-z0-9\s&.-]")
_ALNUM_RE = re.compile(r"[A-Za-z0-9]")
_ONLY_DIGITS_RE = re.compile(r"^\d+$")
_WHITESPACE_RE = re.compile(r"\s+")
_ALPHA_RE = re.compile(r"^[a-zA-Z]+$")

_PREFIX_RES = [re.compile(rf"^{p}\s+", re.IGNORECASE) for p in COMMON_PREFIXES]
_SUFFIX_RES = [re.compile(rf"\s+{s}\.?\s*$", re.IGNORECASE) for s in COMMON_SUFFIXES]


def validate_company_name(value) -> List[str]:
    """Every reason the input is unusable; empty when it is valid."""
    if not value or not isinstance(value, str):
        return ["Company name is required"]

    errors = []
    trimmed = value.strip()
    if not trimmed:
        errors.append("Company name cannot be empty")
    if len(trimmed) < MIN_NAME_LENGTH:
        errors.append(f"Company name must be at least {MIN_NAME_LENGTH} characters long")
    if len(trimmed) > MAX_NAME_LENGTH:
        errors.append(f"Company name cannot exceed {MAX_NAME_LENGTH} characters")
    if _ONLY_DIGITS_RE.match(trimmed):
        errors.append("Company name cannot be only numbers")
    # Symbols and whitespace only, e.g. "@@ !!"
    if trimmed and not _ALNUM_RE.search(trimmed):
        errors.append("Company name contains invalid characters")
    return errors


def _strip_affixes(name: str) -> str:
    # Repeat until stable so stacked suffixes ("Acme Group Holdings") all go
    while True:
        previous = name
        for pattern in _PREFIX_RES:
            name = pattern.sub("", name)
        for pattern in _SUFFIX_RES:
            name = pattern.sub("", name)
        name = name.strip()
        if name == previous:
            return name


def capitalize_company_name(name: str) -> str:
    """
    Abbreviations (alphabetic words of up to 3 letters) upper-case,
    connector words lower-case unless first, everything else title-case.
    """
    words = []
    for index, word in enumerate(name.split(" ")):
        if not word:
            continue
        lower = word.lower()
        if index > 0 and lower in CONNECTOR_WORDS:
            words.append(lower)
        elif len(word) <= 3 and _ALPHA_RE.match(word):
            words.append(word.upper())
        else:
            words.append(word[0].upper() + word[1:].lower())
    return " ".join(words)


def normalize_company_name(value: str) -> str:
    """
    "The Apple Inc." -> "Apple", "international business machines corp" ->
    "International Business Machines".
    """
    lower = _INVALID_CHARS_RE.sub("", value.lower())
    lower = _WHITESPACE_RE.sub(" ", lower).strip()
    lower = _strip_affixes(lower)
    lower = _WHITESPACE_RE.sub(" ", lower).strip()
    return capitalize_company_name(lower)
