"""OpenAI (GPT-4) provider implementation."""

from __future__ import annotations

import logging

from openai import OpenAI

from stealthassist.infra.providers.base import (
    IMAGE_MEDIA_TYPE,
    MAX_OUTPUT_TOKENS,
    TEMPERATURE,
    LLMProvider,
)
from stealthassist.models import ChatMessage, TokenUsage
from stealthassist.prompts import build_message_history

logger = logging.getLogger(__name__)


def _image_part(image_base64: str) -> dict:
    return {
        "type": "image_url",
        "image_url": {"url": f"data:{IMAGE_MEDIA_TYPE};base64,{image_base64}"},
    }


class OpenAIProvider(LLMProvider):
    """OpenAI Chat Completions provider."""

    def __init__(
        self,
        api_key: str,
        *,
        timeout: float = 60.0,
        max_retries: int = 0,
    ) -> None:
        self._client = OpenAI(api_key=api_key, timeout=timeout, max_retries=max_retries)

    @property
    def provider_name(self) -> str:
        return "gpt4"

    def close(self) -> None:
        self._client.close()

    def chat(
        self,
        model: str,
        system_prompt: str,
        history: list[ChatMessage],
        message: str,
        *,
        image_base64: str | None = None,
    ) -> tuple[str, TokenUsage | None]:
        if image_base64:
            content: str | list = [{"type": "text", "text": message}, _image_part(image_base64)]
        else:
            content = message
        messages = [
            {"role": "system", "content": system_prompt},
            *build_message_history(history),
            {"role": "user", "content": content},
        ]
        response = self._client.chat.completions.create(
            model=model,
            messages=messages,
            max_tokens=MAX_OUTPUT_TOKENS,
            temperature=TEMPERATURE,
        )
        return response.choices[0].message.content, self._usage(response)

    def analyze_image(
        self, model: str, image_base64: str, question: str
    ) -> tuple[str, TokenUsage | None]:
        response = self._client.chat.completions.create(
            model=model,
            messages=[
                {
                    "role": "user",
                    "content": [{"type": "text", "text": question}, _image_part(image_base64)],
                }
            ],
            max_tokens=MAX_OUTPUT_TOKENS,
        )
        return response.choices[0].message.content, self._usage(response)

    @staticmethod
    def _usage(response) -> TokenUsage | None:
        # Some compatible backends omit usage
        if getattr(response, "usage", None) is None:
            return None
        return TokenUsage(
            prompt_tokens=response.usage.prompt_tokens,
            completion_tokens=response.usage.completion_tokens,
            total_tokens=response.usage.total_tokens,
            call_count=1,
        )
