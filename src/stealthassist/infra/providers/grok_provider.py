"""xAI Grok provider: raw HTTP against an OpenAI-compatible chat endpoint."""

from __future__ import annotations

import logging

import httpx

from stealthassist.infra.providers.base import MAX_OUTPUT_TOKENS, TEMPERATURE, LLMProvider
from stealthassist.models import ChatMessage, TokenUsage
from stealthassist.prompts import build_message_history

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.x.ai/v1"


class GrokProvider(LLMProvider):
    """Grok has no first-party Python SDK; requests go through httpx.

    Text only. The image payload passed to chat() is ignored.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        *,
        timeout: float = 60.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self._base_url,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
        )

    @property
    def provider_name(self) -> str:
        return "grok"

    def close(self) -> None:
        self._client.close()

    @property
    def base_url(self) -> str:
        return self._base_url

    def chat(
        self,
        model: str,
        system_prompt: str,
        history: list[ChatMessage],
        message: str,
        *,
        image_base64: str | None = None,
    ) -> tuple[str, TokenUsage | None]:
        payload = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                *build_message_history(history),
                {"role": "user", "content": message},
            ],
            "max_tokens": MAX_OUTPUT_TOKENS,
            "temperature": TEMPERATURE,
        }
        resp = self._client.post("/chat/completions", json=payload)
        resp.raise_for_status()
        data = resp.json()

        text = data["choices"][0]["message"]["content"]
        usage_data = data.get("usage")
        usage = None
        if usage_data:
            usage = TokenUsage(
                prompt_tokens=usage_data.get("prompt_tokens", 0),
                completion_tokens=usage_data.get("completion_tokens", 0),
                total_tokens=usage_data.get("total_tokens", 0),
                call_count=1,
            )
        return text, usage
