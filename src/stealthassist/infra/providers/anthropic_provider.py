"""Anthropic (Claude) provider implementation."""

from __future__ import annotations

import logging

import anthropic

from stealthassist.infra.providers.base import IMAGE_MEDIA_TYPE, MAX_OUTPUT_TOKENS, LLMProvider
from stealthassist.models import ChatMessage, TokenUsage
from stealthassist.prompts import build_message_history

logger = logging.getLogger(__name__)


def _image_block(image_base64: str) -> dict:
    return {
        "type": "image",
        "source": {"type": "base64", "media_type": IMAGE_MEDIA_TYPE, "data": image_base64},
    }


class AnthropicProvider(LLMProvider):
    """Anthropic Messages API provider."""

    def __init__(
        self,
        api_key: str,
        *,
        timeout: float = 60.0,
        max_retries: int = 0,
    ) -> None:
        self._client = anthropic.Anthropic(
            api_key=api_key, timeout=timeout, max_retries=max_retries
        )

    @property
    def provider_name(self) -> str:
        return "claude"

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
        messages = build_message_history(history)
        if image_base64:
            content: str | list = [{"type": "text", "text": message}, _image_block(image_base64)]
        else:
            content = message
        messages.append({"role": "user", "content": content})

        response = self._client.messages.create(
            model=model,
            max_tokens=MAX_OUTPUT_TOKENS,
            system=system_prompt,
            messages=messages,
        )
        return response.content[0].text, self._usage(response)

    def analyze_image(
        self, model: str, image_base64: str, question: str
    ) -> tuple[str, TokenUsage | None]:
        response = self._client.messages.create(
            model=model,
            max_tokens=MAX_OUTPUT_TOKENS,
            messages=[
                {
                    "role": "user",
                    "content": [{"type": "text", "text": question}, _image_block(image_base64)],
                }
            ],
        )
        return response.content[0].text, self._usage(response)

    @staticmethod
    def _usage(response) -> TokenUsage | None:
        resp_usage = getattr(response, "usage", None)
        if resp_usage is None:
            return None
        return TokenUsage(
            prompt_tokens=resp_usage.input_tokens,
            completion_tokens=resp_usage.output_tokens,
            total_tokens=resp_usage.input_tokens + resp_usage.output_tokens,
            call_count=1,
        )
