# src/content_generation/providers/anthropic_provider.py
"""
Anthropic generation provider (Messages API).
"""

import asyncio
import time
from typing import Optional

import anthropic
from anthropic import AsyncAnthropic

from src.content_generation.providers.base_provider import GenerationConfig, GenerationProvider
from src.content_generation.providers.prompts import (
    HIGHLIGHT_SYSTEM_PROMPT,
    SOCIAL_SYSTEM_PROMPT,
    build_highlight_prompt,
    build_social_prompt,
)
from src.content_generation.providers.response_parser import parse_highlights, parse_social_posts
from src.content_generation.schemas.highlights import HighlightRequest, HighlightResult
from src.content_generation.schemas.social import SocialContentRequest, SocialContentResult


class AnthropicGenerationProvider(GenerationProvider):
    """Provider backed by the official Anthropic SDK."""

    def __init__(
        self,
        api_key: str,
        model: str = "claude-3-5-haiku-latest",
        config: Optional[GenerationConfig] = None,
        client: Optional[AsyncAnthropic] = None,
    ):
        super().__init__(config)
        if not api_key and client is None:
            raise ValueError("ANTHROPIC_API_KEY is required")
        self.api_key = api_key
        self.model = model
        self._client = client

    @property
    def provider_id(self) -> str:
        return "anthropic"

    @property
    def model_name(self) -> str:
        return self.model

    def _get_client(self) -> AsyncAnthropic:
        if self._client is None:
            self._client = AsyncAnthropic(api_key=self.api_key, timeout=self.config.timeout_seconds)
        return self._client

    async def _complete(self, system_prompt: str, user_prompt: str, max_tokens: Optional[int] = None) -> str:
        try:
            response = await asyncio.wait_for(
                self._get_client().messages.create(
                    model=self.model,
                    max_tokens=max_tokens or self.config.max_tokens,
                    temperature=self.config.temperature,
                    system=system_prompt,
                    messages=[{"role": "user", "content": user_prompt}],
                ),
                timeout=self.config.timeout_seconds,
            )
        except (asyncio.TimeoutError, anthropic.APITimeoutError) as e:
            raise self.error("TIMEOUT", f"Anthropic request timed out after {self.config.timeout_ms}ms", e)
        except anthropic.APIError as e:
            raise self.error("API_ERROR", f"Anthropic API error: {e}", e)

        text = "".join(
            block.text for block in (response.content or []) if getattr(block, "type", None) == "text"
        )
        if not text.strip():
            raise self.error("EMPTY_RESPONSE", "Anthropic returned empty or non-text response")
        return text

    async def extract_highlights(self, request: HighlightRequest) -> HighlightResult:
        start = time.perf_counter()
        text = await self._complete(HIGHLIGHT_SYSTEM_PROMPT, build_highlight_prompt(request))
        highlights = parse_highlights(text, self.provider_id, request.max_highlights)

        elapsed = int((time.perf_counter() - start) * 1000)
        self.logger.info(f"[Anthropic] Extracted {len(highlights)} highlights in {elapsed}ms")
        return HighlightResult(highlights=highlights, processing_time_ms=elapsed, model=self.model)

    async def generate_social_content(self, request: SocialContentRequest) -> SocialContentResult:
        start = time.perf_counter()
        text = await self._complete(SOCIAL_SYSTEM_PROMPT, build_social_prompt(request), max(self.config.max_tokens, 1500))
        posts = parse_social_posts(text, self.provider_id, request.platforms)

        elapsed = int((time.perf_counter() - start) * 1000)
        self.logger.info(f"[Anthropic] Generated {len(posts)} posts in {elapsed}ms")
        return SocialContentResult(posts=posts, processing_time_ms=elapsed, model=self.model)

    async def ping(self) -> None:
        await asyncio.wait_for(
            self._get_client().messages.create(
                model=self.model,
                max_tokens=5,
                messages=[{"role": "user", "content": "Hello"}],
            ),
            timeout=self.config.timeout_seconds,
        )

    async def close(self):
        if self._client is not None:
            await self._client.close()
            self._client = None
