# src/content_generation/providers/response_parser.py
"""
Parse model output into validated highlights and posts.

Raises ProviderError(PARSE_ERROR) when the output has no usable JSON.
"""

import json
import re
from typing import Any, List, Optional, Sequence

from src.content_generation.schemas.highlights import Highlight, HighlightCategory
from src.content_generation.schemas.social import SocialPlatform, SocialPost
from src.content_generation.services.social_formatter import SocialPostFormatter
from src.core.exceptions import ProviderError

_JSON_BLOCK_RE = re.compile(r"\{[\s\S]*\}")

DEFAULT_IMPORTANCE = 3


def extract_json_block(text: Optional[str], provider: str) -> dict:
    """First '{' to last '}' of the model output, parsed."""
    if not text or not text.strip():
        raise ProviderError("EMPTY_RESPONSE", provider, f"{provider} returned an empty response")

    match = _JSON_BLOCK_RE.search(text)
    if not match:
        raise ProviderError("PARSE_ERROR", provider, "No JSON found in response")
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise ProviderError("PARSE_ERROR", provider, f"Invalid JSON in response: {e}", e)
    if not isinstance(parsed, dict):
        raise ProviderError("PARSE_ERROR", provider, "Response JSON is not an object")
    return parsed


def clean_importance(value: Any) -> int:
    """Rounded 1-5; anything else becomes 3."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return DEFAULT_IMPORTANCE
    if number != number or number < 1 or number > 5:
        return DEFAULT_IMPORTANCE
    return int(round(number))


def clean_category(value: Any) -> HighlightCategory:
    if isinstance(value, str) and value.strip().lower() in HighlightCategory.values():
        return HighlightCategory(value.strip().lower())
    return HighlightCategory.GENERAL


def _clean_text(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Invalid text content")
    return value.strip()


def parse_highlights(text: Optional[str], provider: str, limit: Optional[int] = None) -> List[Highlight]:
    parsed = extract_json_block(text, provider)
    items = parsed.get("highlights")
    if not isinstance(items, list):
        raise ProviderError("PARSE_ERROR", provider, "Invalid highlights format")

    highlights = []
    try:
        for item in items:
            if not isinstance(item, dict):
                raise ValueError("Highlight entry is not an object")
            highlights.append(Highlight(
                text=_clean_text(item.get("text"))[:500],
                importance=clean_importance(item.get("importance")),
                category=clean_category(item.get("category")),
            ))
    except ValueError as e:
        raise ProviderError("PARSE_ERROR", provider, f"Failed to parse highlights response: {e}", e)

    return highlights[:limit] if limit else highlights


def parse_social_posts(
    text: Optional[str],
    provider: str,
    requested_platforms: Sequence[SocialPlatform],
    formatter: Optional[SocialPostFormatter] = None,
) -> List[SocialPost]:
    """
    Keep the first post of each requested platform; hashtags sanitized and
    the post fitted to its platform's ceiling.
    """
    formatter = formatter or SocialPostFormatter()
    parsed = extract_json_block(text, provider)
    items = parsed.get("posts")
    if not isinstance(items, list):
        raise ProviderError("PARSE_ERROR", provider, "Invalid posts format")

    requested = {SocialPlatform(p) for p in requested_platforms}
    posts: List[SocialPost] = []
    seen = set()
    try:
        for item in items:
            if not isinstance(item, dict):
                continue
            platform_value = str(item.get("platform", "")).strip().lower()
            if platform_value not in {p.value for p in requested}:
                continue
            platform = SocialPlatform(platform_value)
            if platform in seen:
                continue

            hashtags = item.get("hashtags")
            posts.append(formatter.build_post(
                platform,
                _clean_text(item.get("content")),
                hashtags if isinstance(hashtags, list) else [],
            ))
            seen.add(platform)
    except ValueError as e:
        raise ProviderError("PARSE_ERROR", provider, f"Failed to parse social content response: {e}", e)

    return posts
