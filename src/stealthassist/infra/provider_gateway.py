"""ProviderGateway: uniform send / analyze_image over every vendor client.

Routes through the PROVIDERS table, builds prompts, issues one vendor call,
and normalizes the answer (or the failure) into an LLMResult.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from stealthassist.exceptions import (
    ProviderNotConfiguredError,
    StealthAssistError,
    UnsupportedCapabilityError,
    VendorTransportError,
)
from stealthassist.infra.client_registry import ClientRegistry
from stealthassist.infra.provider_catalog import ProviderDescriptor, get_descriptor
from stealthassist.models import ConversationContext, LLMResult, ProviderId, TokenUsage
from stealthassist.prompts import build_system_prompt

if TYPE_CHECKING:
    from stealthassist.infra.providers.base import LLMProvider
    from stealthassist.infra.usage_tracker import UsageTracker

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_QUESTION = "What do you see in this image?"

VendorCall = Callable[["LLMProvider"], tuple[str, "TokenUsage | None"]]


class ProviderGateway:
    """Dispatches requests to vendor clients and isolates their failures.

    Raised to the caller: UnknownProviderError, UnsupportedCapabilityError.
    Returned as LLMResult(error=True): missing client, vendor exceptions,
    malformed responses. Providers flagged degrade_to_mock turn transport
    failures into a synthetic success instead.
    """

    def __init__(
        self,
        registry: ClientRegistry,
        usage_tracker: UsageTracker | None = None,
    ) -> None:
        self._registry = registry
        self._tracker = usage_tracker

    @property
    def usage_tracker(self) -> UsageTracker | None:
        return self._tracker

    def is_configured(self, provider: str | ProviderId) -> bool:
        descriptor = get_descriptor(provider)
        return self._registry.get(descriptor.provider) is not None

    def send(
        self,
        provider: str | ProviderId,
        message: str,
        context: ConversationContext | None = None,
    ) -> LLMResult:
        """Chat turn with history, system prompt and optional screenshot."""
        descriptor = get_descriptor(provider)
        context = context or ConversationContext()

        image = context.screenshot if descriptor.supports_vision else None
        model = descriptor.vision_model if image else descriptor.text_model

        def _call(client: LLMProvider) -> tuple[str, TokenUsage | None]:
            system_prompt = build_system_prompt(context)
            logger.debug(
                "Chat request: system_prompt=%d chars, history=%d, message=%d chars, image=%s",
                len(system_prompt),
                len(context.recent_messages),
                len(message),
                bool(image),
            )
            return client.chat(
                model,
                system_prompt,
                context.recent_messages,
                message,
                image_base64=image,
            )

        return self._dispatch(descriptor, model, _call, message=message)

    def analyze_image(
        self,
        provider: str | ProviderId,
        image_base64: str,
        question: str = "",
    ) -> LLMResult:
        """Single user turn: question plus inline image, no history."""
        descriptor = self.require_vision(provider)
        question = (question or "").strip() or DEFAULT_IMAGE_QUESTION
        model = descriptor.vision_model

        def _call(client: LLMProvider) -> tuple[str, TokenUsage | None]:
            logger.debug(
                "Image request: question=%d chars, image=%d bytes (base64)",
                len(question),
                len(image_base64),
            )
            return client.analyze_image(model, image_base64, question)

        return self._dispatch(descriptor, model, _call, message=question)

    def require_vision(self, provider: str | ProviderId) -> ProviderDescriptor:
        """Descriptor of a vision-capable provider, or UnsupportedCapabilityError."""
        descriptor = get_descriptor(provider)
        if not descriptor.supports_vision:
            raise UnsupportedCapabilityError(descriptor.display_name, "image analysis")
        return descriptor

    # ── internals ──

    def _dispatch(
        self,
        descriptor: ProviderDescriptor,
        model: str,
        call: VendorCall,
        *,
        message: str,
    ) -> LLMResult:
        name = descriptor.display_name
        try:
            client = self._registry.get(descriptor.provider)
            if client is None:
                raise ProviderNotConfiguredError(name)

            logger.info("LLM call: provider=%s model=%s", descriptor.provider.value, model)
            t0 = time.monotonic()
            try:
                text, usage = call(client)
            except StealthAssistError:
                raise
            except Exception as e:
                raise VendorTransportError(name, e) from e
            elapsed = time.monotonic() - t0

            if not isinstance(text, str):
                raise VendorTransportError(name, ValueError("response contained no text"))

            if usage is not None:
                logger.info(
                    "LLM tokens: prompt=%d completion=%d total=%d (%.1fs)",
                    usage.prompt_tokens,
                    usage.completion_tokens,
                    usage.total_tokens,
                    elapsed,
                )
                if self._tracker:
                    self._tracker.record(descriptor.provider.value, model, usage)
            logger.debug("LLM response: %d chars", len(text))

            return LLMResult(response=text, provider=name, model=model, usage=usage)
        except VendorTransportError as e:
            if descriptor.degrade_to_mock:
                logger.warning("%s unavailable, returning mock response: %s", name, e.cause)
                return self._mock_result(descriptor, message)
            logger.warning("LLM call failed: %s", e, exc_info=True)
            return self._error_result(descriptor, e)
        except ProviderNotConfiguredError as e:
            logger.warning("LLM call skipped: %s", e)
            return self._error_result(descriptor, e)

    @staticmethod
    def _mock_result(descriptor: ProviderDescriptor, message: str) -> LLMResult:
        name = descriptor.display_name
        return LLMResult(
            response=(
                f'{name} says: "{message}" - I understand your request and I\'m here to help '
                f"with a witty and informative response! (Note: This is a mock response "
                f"because the {name} API is not available.)"
            ),
            provider=name,
            model=descriptor.mock_model,
        )

    @staticmethod
    def _error_result(descriptor: ProviderDescriptor, exc: StealthAssistError) -> LLMResult:
        name = descriptor.display_name
        return LLMResult(
            response=(
                f"Sorry, I encountered an error with {name}: {exc}. "
                "Please try again or switch to a different provider."
            ),
            provider=name,
            error=True,
        )
