"""
Text helpers shared by sources, aggregation and processing.
"""

import re
from typing import List

_NON_WORD_RE = re.compile(r"[^\w\s]")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_title(title: str) -> str:
    """Lower-case, punctuation stripped, whitespace collapsed."""
    stripped = _NON_WORD_RE.sub("", (title or "").lower().strip())
    return _WHITESPACE_RE.sub(" ", stripped).strip()


def strip_punctuation(text: str) -> str:
    return _NON_WORD_RE.sub("", text)


def count_occurrences(needle: str, haystack: str) -> int:
    """Non-overlapping substring count, case-insensitive."""
    if not needle:
        return 0
    return haystack.lower().count(needle.lower())


def count_word_matches(term: str, text: str) -> int:
    """Whole-word occurrences of ``term`` in ``text``, case-insensitive."""
    if not term:
        return 0
    return len(re.findall(rf"\b{re.escape(term)}\b", text, flags=re.IGNORECASE))


def split_words(text: str) -> List[str]:
    return [w for w in _WHITESPACE_RE.split((text or "").lower().strip()) if w]
