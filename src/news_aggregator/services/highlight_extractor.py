# src/news_aggregator/services/highlight_extractor.py
"""
Heuristic highlight extraction: no model, just sentence splitting.
"""

import re
from typing import List

_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
_WHITESPACE_RE = re.compile(r"\s+")


class SimpleHighlightExtractor:
    """Picks the first reasonably sized sentences of an article."""

    MIN_SENTENCE_CHARS = 20
    MAX_SENTENCE_CHARS = 200
    MIN_TITLE_CHARS = 10

    def extract_highlights(self, content: str, max_highlights: int = 3) -> List[str]:
        """
        Sentences strictly between 20 and 200 chars, in article order,
        each terminated with a period.
        """
        if not content or not content.strip():
            return []

        clean = _WHITESPACE_RE.sub(" ", content).strip()
        sentences = [s.strip() for s in _SENTENCE_SPLIT_RE.split(clean)]
        sentences = [
            s for s in sentences
            if self.MIN_SENTENCE_CHARS < len(s) < self.MAX_SENTENCE_CHARS
        ]
        return [f"{s}." for s in sentences[:max_highlights]]

    def extract_from_article(self, title: str, content: str, max_highlights: int = 3) -> List[str]:
        """Title first (when longer than 10 chars), then content sentences."""
        highlights: List[str] = []
        if title and len(title) > self.MIN_TITLE_CHARS:
            highlights.append(title)

        highlights.extend(self.extract_highlights(content, max(max_highlights - 1, 0)))
        return highlights[:max_highlights]
