"""Google Gemini provider implementation using google-genai SDK."""

from __future__ import annotations

import base64
import logging

from google import genai
from google.genai import types

from stealthassist.infra.providers.base import (
    IMAGE_MEDIA_TYPE,
    MAX_OUTPUT_TOKENS,
    TEMPERATURE,
    LLMProvider,
)
from stealthassist.models import ChatMessage, TokenUsage
from stealthassist.prompts import build_gemini_history

logger = logging.getLogger(__name__)


def _image_part(image_base64: str) -> dict:
    return {"inline_data": {"mime_type": IMAGE_MEDIA_TYPE, "data": base64.b64decode(image_base64)}}


class GeminiProvider(LLMProvider):
    """Google Gemini API provider."""

    def __init__(self, api_key: str, *, timeout: float = 60.0) -> None:
        self._client = genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=int(timeout * 1000)),
        )

    @property
    def provider_name(self) -> str:
        return "gemini"

    def chat(
        self,
        model: str,
        system_prompt: str,
        history: list[ChatMessage],
        message: str,
        *,
        image_base64: str | None = None,
    ) -> tuple[str, TokenUsage | None]:
        parts: list[dict] = [{"text": message}]
        if image_base64:
            parts.append(_image_part(image_base64))
        contents = [*build_gemini_history(history), {"role": "user", "parts": parts}]

        response = self._client.models.generate_content(
            model=model,
            contents=contents,
            config=types.GenerateContentConfig(
                system_instruction=system_prompt,
                max_output_tokens=MAX_OUTPUT_TOKENS,
                temperature=TEMPERATURE,
            ),
        )
        return response.text, self._usage(response)

    def analyze_image(
        self, model: str, image_base64: str, question: str
    ) -> tuple[str, TokenUsage | None]:
        response = self._client.models.generate_content(
            model=model,
            contents=[{"role": "user", "parts": [{"text": question}, _image_part(image_base64)]}],
            config=types.GenerateContentConfig(max_output_tokens=MAX_OUTPUT_TOKENS),
        )
        return response.text, self._usage(response)

    @staticmethod
    def _usage(response) -> TokenUsage | None:
        meta = getattr(response, "usage_metadata", None)
        if meta is None:
            return None
        return TokenUsage(
            prompt_tokens=meta.prompt_token_count or 0,
            completion_tokens=meta.candidates_token_count or 0,
            total_tokens=meta.total_token_count or 0,
            call_count=1,
        )
