# src/content_generation/providers/openai_provider.py
"""
OpenAI generation provider (chat completions in JSON mode).
"""

import asyncio
import time
from typing import Any, Dict, List, Optional

import openai
from openai import AsyncOpenAI

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

# Models that require max_completion_tokens instead of max_tokens
NEW_API_MODELS = ["o1", "o3", "gpt-5"]


def is_new_api_model(model_name: str) -> bool:
    model_lower = model_name.lower()
    return any(model_lower.startswith(prefix) for prefix in NEW_API_MODELS)


class OpenAIGenerationProvider(GenerationProvider):
    """
    Provider backed by the official OpenAI SDK.

    Requests use response_format=json_object so the reply is always a
    single JSON document.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        config: Optional[GenerationConfig] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        super().__init__(config)
        if not api_key and client is None:
            raise ValueError("OPENAI_API_KEY is required")
        self.api_key = api_key
        self.model = model
        self._client = client

    @property
    def provider_id(self) -> str:
        return "openai"

    @property
    def model_name(self) -> str:
        return self.model

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self.api_key, timeout=self.config.timeout_seconds)
        return self._client

    def _completion_params(self, max_tokens: int) -> Dict[str, Any]:
        params: Dict[str, Any] = {"temperature": self.config.temperature}
        if is_new_api_model(self.model):
            params["max_completion_tokens"] = max_tokens
            params.pop("temperature")
        else:
            params["max_tokens"] = max_tokens
        return params

    async def _complete(self, system_prompt: str, user_prompt: str, max_tokens: Optional[int] = None) -> str:
        messages: List[Dict[str, str]] = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]
        try:
            response = await asyncio.wait_for(
                self._get_client().chat.completions.create(
                    model=self.model,
                    messages=messages,
                    response_format={"type": "json_object"},
                    **self._completion_params(max_tokens or self.config.max_tokens),
                ),
                timeout=self.config.timeout_seconds,
            )
        except (asyncio.TimeoutError, openai.APITimeoutError) as e:
            raise self.error("TIMEOUT", f"OpenAI request timed out after {self.config.timeout_ms}ms", e)
        except openai.APIError as e:
            raise self.error("API_ERROR", f"OpenAI API error: {e}", e)

        if not response.choices:
            raise self.error("EMPTY_RESPONSE", "OpenAI returned no choices")
        content = response.choices[0].message.content
        if not content:
            raise self.error("EMPTY_RESPONSE", "OpenAI returned empty content")
        return content

    async def extract_highlights(self, request: HighlightRequest) -> HighlightResult:
        start = time.perf_counter()
        text = await self._complete(HIGHLIGHT_SYSTEM_PROMPT, build_highlight_prompt(request))
        highlights = parse_highlights(text, self.provider_id, request.max_highlights)

        elapsed = int((time.perf_counter() - start) * 1000)
        self.logger.info(f"[OpenAI] Extracted {len(highlights)} highlights in {elapsed}ms")
        return HighlightResult(highlights=highlights, processing_time_ms=elapsed, model=self.model)

    async def generate_social_content(self, request: SocialContentRequest) -> SocialContentResult:
        start = time.perf_counter()
        text = await self._complete(SOCIAL_SYSTEM_PROMPT, build_social_prompt(request), max(self.config.max_tokens, 1500))
        posts = parse_social_posts(text, self.provider_id, request.platforms)

        elapsed = int((time.perf_counter() - start) * 1000)
        self.logger.info(f"[OpenAI] Generated {len(posts)} posts in {elapsed}ms")
        return SocialContentResult(posts=posts, processing_time_ms=elapsed, model=self.model)

    async def ping(self) -> None:
        await asyncio.wait_for(self._get_client().models.list(), timeout=self.config.timeout_seconds)

    async def close(self):
        if self._client is not None:
            await self._client.close()
            self._client = None
