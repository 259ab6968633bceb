"""Vendor client tests."""

import base64
import json
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import httpx
import pytest
import respx

from stealthassist.exceptions import UnsupportedCapabilityError
from stealthassist.infra.providers.anthropic_provider import AnthropicProvider
from stealthassist.infra.providers.base import LLMProvider
from stealthassist.infra.providers.gemini_provider import GeminiProvider
from stealthassist.infra.providers.grok_provider import DEFAULT_BASE_URL, GrokProvider
from stealthassist.infra.providers.openai_provider import OpenAIProvider
from stealthassist.models import ChatMessage, Sender, TokenUsage

IMAGE_B64 = base64.b64encode(b"\x89PNG fake").decode("ascii")

HISTORY = [
    ChatMessage(Sender.USER, "earlier question"),
    ChatMessage(Sender.ASSISTANT, "earlier answer"),
]


# ── Fixtures ──


def _openai_response(text="hello", prompt=100, completion=50, total=150):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=text))],
        usage=SimpleNamespace(
            prompt_tokens=prompt, completion_tokens=completion, total_tokens=total
        ),
    )


def _anthropic_response(text="hello", input_t=80, output_t=40):
    return SimpleNamespace(
        content=[SimpleNamespace(text=text)],
        usage=SimpleNamespace(input_tokens=input_t, output_tokens=output_t),
    )


def _gemini_response(text="hello", prompt=90, completion=45, total=135):
    return SimpleNamespace(
        text=text,
        usage_metadata=SimpleNamespace(
            prompt_token_count=prompt,
            candidates_token_count=completion,
            total_token_count=total,
        ),
    )


# ── Base ABC ──


class TestLLMProviderABC:
    def test_cannot_instantiate_abc(self):
        with pytest.raises(TypeError):
            LLMProvider()  # type: ignore[abstract]

    def test_analyze_image_unsupported_by_default(self):
        class TextOnly(LLMProvider):
            provider_name = "text-only"

            def chat(self, model, system_prompt, history, message, *, image_base64=None):
                return "", None

        with pytest.raises(UnsupportedCapabilityError):
            TextOnly().analyze_image("m", IMAGE_B64, "q")


# ── Anthropic ──


class TestAnthropicProvider:
    @patch("stealthassist.infra.providers.anthropic_provider.anthropic.Anthropic")
    def test_init_creates_client_without_retries(self, mock_cls):
        p = AnthropicProvider(api_key="sk-ant", timeout=30.0)
        assert p.provider_name == "claude"
        mock_cls.assert_called_once_with(api_key="sk-ant", timeout=30.0, max_retries=0)

    @patch("stealthassist.infra.providers.anthropic_provider.anthropic.Anthropic")
    def test_chat_builds_history_and_returns_usage(self, mock_cls):
        mock_instance = MagicMock()
        mock_instance.messages.create.return_value = _anthropic_response("answer", 80, 40)
        mock_cls.return_value = mock_instance

        text, usage = AnthropicProvider(api_key="k").chat("claude-x", "sys", HISTORY, "now?")

        assert text == "answer"
        assert usage == TokenUsage(80, 40, 120, 1)
        mock_instance.messages.create.assert_called_once_with(
            model="claude-x",
            max_tokens=1000,
            system="sys",
            messages=[
                {"role": "user", "content": "earlier question"},
                {"role": "assistant", "content": "earlier answer"},
                {"role": "user", "content": "now?"},
            ],
        )

    @patch("stealthassist.infra.providers.anthropic_provider.anthropic.Anthropic")
    def test_chat_attaches_image_to_last_turn(self, mock_cls):
        mock_instance = MagicMock()
        mock_instance.messages.create.return_value = _anthropic_response()
        mock_cls.return_value = mock_instance

        AnthropicProvider(api_key="k").chat("m", "sys", [], "look", image_base64=IMAGE_B64)

        last = mock_instance.messages.create.call_args.kwargs["messages"][-1]
        assert last["content"][0] == {"type": "text", "text": "look"}
        assert last["content"][1]["source"] == {
            "type": "base64",
            "media_type": "image/png",
            "data": IMAGE_B64,
        }

    @patch("stealthassist.infra.providers.anthropic_provider.anthropic.Anthropic")
    def test_analyze_image_single_turn_no_system(self, mock_cls):
        mock_instance = MagicMock()
        mock_instance.messages.create.return_value = _anthropic_response("a cat")
        mock_cls.return_value = mock_instance

        text, _ = AnthropicProvider(api_key="k").analyze_image("m", IMAGE_B64, "what?")

        assert text == "a cat"
        kwargs = mock_instance.messages.create.call_args.kwargs
        assert "system" not in kwargs
        assert kwargs["max_tokens"] == 1000
        assert len(kwargs["messages"]) == 1
        assert kwargs["messages"][0]["content"][0]["text"] == "what?"


# ── OpenAI ──


class TestOpenAIProvider:
    @patch("stealthassist.infra.providers.openai_provider.OpenAI")
    def test_init_creates_client_without_retries(self, mock_cls):
        p = OpenAIProvider(api_key="sk-test")
        assert p.provider_name == "gpt4"
        mock_cls.assert_called_once_with(api_key="sk-test", timeout=60.0, max_retries=0)

    @patch("stealthassist.infra.providers.openai_provider.OpenAI")
    def test_chat_returns_text_and_usage(self, mock_cls):
        mock_instance = MagicMock()
        mock_instance.chat.completions.create.return_value = _openai_response(
            text="result", prompt=200, completion=100, total=300
        )
        mock_cls.return_value = mock_instance

        text, usage = OpenAIProvider(api_key="sk").chat("gpt-4-turbo", "system", HISTORY, "user")

        assert text == "result"
        assert usage == TokenUsage(200, 100, 300, 1)
        mock_instance.chat.completions.create.assert_called_once_with(
            model="gpt-4-turbo",
            messages=[
                {"role": "system", "content": "system"},
                {"role": "user", "content": "earlier question"},
                {"role": "assistant", "content": "earlier answer"},
                {"role": "user", "content": "user"},
            ],
            max_tokens=1000,
            temperature=0.7,
        )

    @patch("stealthassist.infra.providers.openai_provider.OpenAI")
    def test_chat_image_uses_data_url(self, mock_cls):
        mock_instance = MagicMock()
        mock_instance.chat.completions.create.return_value = _openai_response()
        mock_cls.return_value = mock_instance

        OpenAIProvider(api_key="sk").chat("gpt-4o", "sys", [], "look", image_base64=IMAGE_B64)

        last = mock_instance.chat.completions.create.call_args.kwargs["messages"][-1]
        assert last["content"][1] == {
            "type": "image_url",
            "image_url": {"url": f"data:image/png;base64,{IMAGE_B64}"},
        }

    @patch("stealthassist.infra.providers.openai_provider.OpenAI")
    def test_missing_usage_is_none(self, mock_cls):
        mock_instance = MagicMock()
        resp = _openai_response()
        resp.usage = None
        mock_instance.chat.completions.create.return_value = resp
        mock_cls.return_value = mock_instance

        _, usage = OpenAIProvider(api_key="sk").chat("m", "s", [], "u")
        assert usage is None

    @patch("stealthassist.infra.providers.openai_provider.OpenAI")
    def test_vendor_error_propagates(self, mock_cls):
        mock_instance = MagicMock()
        mock_instance.chat.completions.create.side_effect = RuntimeError("timeout")
        mock_cls.return_value = mock_instance

        with pytest.raises(RuntimeError, match="timeout"):
            OpenAIProvider(api_key="sk").chat("m", "s", [], "u")


# ── Gemini ──


class TestGeminiProvider:
    @patch("stealthassist.infra.providers.gemini_provider.genai.Client")
    def test_chat_uses_model_role_and_system_instruction(self, mock_cls):
        mock_instance = MagicMock()
        mock_instance.models.generate_content.return_value = _gemini_response("gem")
        mock_cls.return_value = mock_instance

        p = GeminiProvider(api_key="g-key")
        text, usage = p.chat("gemini-2.5-flash", "sys", HISTORY, "now?")

        assert p.provider_name == "gemini"
        assert text == "gem"
        assert usage == TokenUsage(90, 45, 135, 1)
        kwargs = mock_instance.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "gemini-2.5-flash"
        assert kwargs["contents"] == [
            {"role": "user", "parts": [{"text": "earlier question"}]},
            {"role": "model", "parts": [{"text": "earlier answer"}]},
            {"role": "user", "parts": [{"text": "now?"}]},
        ]
        config = kwargs["config"]
        assert config.system_instruction == "sys"
        assert config.max_output_tokens == 1000
        assert config.temperature == 0.7

    @patch("stealthassist.infra.providers.gemini_provider.genai.Client")
    def test_analyze_image_inlines_decoded_bytes(self, mock_cls):
        mock_instance = MagicMock()
        mock_instance.models.generate_content.return_value = _gemini_response("a chart")
        mock_cls.return_value = mock_instance

        text, _ = GeminiProvider(api_key="g").analyze_image("gemini-2.5-flash", IMAGE_B64, "q?")

        assert text == "a chart"
        contents = mock_instance.models.generate_content.call_args.kwargs["contents"]
        assert len(contents) == 1
        parts = contents[0]["parts"]
        assert parts[0] == {"text": "q?"}
        assert parts[1] == {"inline_data": {"mime_type": "image/png", "data": b"\x89PNG fake"}}

    @patch("stealthassist.infra.providers.gemini_provider.genai.Client")
    def test_missing_usage_metadata(self, mock_cls):
        mock_instance = MagicMock()
        mock_instance.models.generate_content.return_value = SimpleNamespace(
            text="ok", usage_metadata=None
        )
        mock_cls.return_value = mock_instance

        _, usage = GeminiProvider(api_key="g").chat("m", "s", [], "u")
        assert usage is None


# ── Grok ──


GROK_URL = f"{DEFAULT_BASE_URL}/chat/completions"


class TestGrokProvider:
    @respx.mock
    def test_chat_posts_openai_compatible_payload(self):
        route = respx.post(GROK_URL).mock(
            return_value=httpx.Response(
                200,
                json={
                    "choices": [{"message": {"content": "witty"}}],
                    "usage": {"prompt_tokens": 5, "completion_tokens": 3, "total_tokens": 8},
                },
            )
        )

        text, usage = GrokProvider(api_key="xai-key").chat("grok-2-latest", "sys", HISTORY, "hi")

        assert text == "witty"
        assert usage == TokenUsage(5, 3, 8, 1)
        request = route.calls[0].request
        assert request.headers["Authorization"] == "Bearer xai-key"
        body = json.loads(request.content)
        assert body["model"] == "grok-2-latest"
        assert body["max_tokens"] == 1000
        assert body["temperature"] == 0.7
        assert body["messages"][0] == {"role": "system", "content": "sys"}
        assert body["messages"][-1] == {"role": "user", "content": "hi"}
        assert len(body["messages"]) == 4

    @respx.mock
    def test_base_url_override(self):
        route = respx.post("https://grok.internal/v2/chat/completions").mock(
            return_value=httpx.Response(200, json={"choices": [{"message": {"content": "x"}}]})
        )
        p = GrokProvider(api_key="k", base_url="https://grok.internal/v2/")

        text, usage = p.chat("m", "s", [], "u")

        assert route.called
        assert p.base_url == "https://grok.internal/v2"
        assert text == "x"
        assert usage is None

    @respx.mock
    def test_http_error_raises(self):
        respx.post(GROK_URL).mock(return_value=httpx.Response(404))
        with pytest.raises(httpx.HTTPStatusError):
            GrokProvider(api_key="k").chat("m", "s", [], "u")

    @respx.mock
    def test_image_ignored_in_chat(self):
        route = respx.post(GROK_URL).mock(
            return_value=httpx.Response(200, json={"choices": [{"message": {"content": "x"}}]})
        )
        GrokProvider(api_key="k").chat("m", "s", [], "look", image_base64=IMAGE_B64)
        body = json.loads(route.calls[0].request.content)
        assert body["messages"][-1] == {"role": "user", "content": "look"}

    def test_analyze_image_unsupported(self):
        with pytest.raises(UnsupportedCapabilityError):
            GrokProvider(api_key="k").analyze_image("m", IMAGE_B64, "q")

    def test_close_closes_http_client(self):
        p = GrokProvider(api_key="k")
        p.close()
        assert p._client.is_closed


class TestClose:
    def test_base_close_is_noop(self):
        class TextOnly(LLMProvider):
            provider_name = "text-only"

            def chat(self, model, system_prompt, history, message, *, image_base64=None):
                return "", None

        TextOnly().close()

    @patch("stealthassist.infra.providers.openai_provider.OpenAI")
    def test_openai_close(self, mock_cls):
        OpenAIProvider(api_key="sk").close()
        mock_cls.return_value.close.assert_called_once_with()

    @patch("stealthassist.infra.providers.anthropic_provider.anthropic.Anthropic")
    def test_anthropic_close(self, mock_cls):
        AnthropicProvider(api_key="k").close()
        mock_cls.return_value.close.assert_called_once_with()
