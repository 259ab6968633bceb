"""Static provider table: one descriptor per ProviderId.

Every table lookup goes through PROVIDERS, and the module refuses to import
unless every ProviderId has an entry.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from stealthassist.models import ProviderCredential, ProviderId

if TYPE_CHECKING:
    from stealthassist.config import AppConfig
    from stealthassist.infra.providers.base import LLMProvider

ClientFactory = Callable[[ProviderCredential, "AppConfig"], "LLMProvider"]


def _anthropic_factory(credential: ProviderCredential, config: AppConfig) -> LLMProvider:
    from stealthassist.infra.providers.anthropic_provider import AnthropicProvider

    return AnthropicProvider(api_key=credential.api_key, timeout=config.vendor_timeout)


def _openai_factory(credential: ProviderCredential, config: AppConfig) -> LLMProvider:
    from stealthassist.infra.providers.openai_provider import OpenAIProvider

    return OpenAIProvider(api_key=credential.api_key, timeout=config.vendor_timeout)


def _gemini_factory(credential: ProviderCredential, config: AppConfig) -> LLMProvider:
    from stealthassist.infra.providers.gemini_provider import GeminiProvider

    return GeminiProvider(api_key=credential.api_key, timeout=config.vendor_timeout)


def _grok_factory(credential: ProviderCredential, config: AppConfig) -> LLMProvider:
    from stealthassist.infra.providers.grok_provider import GrokProvider

    return GrokProvider(
        api_key=credential.api_key,
        base_url=credential.base_url or config.grok_base_url,
        timeout=config.vendor_timeout,
    )


@dataclass(frozen=True)
class ProviderDescriptor:
    """What the gateway needs to know about a provider.

    vision_model None means the provider is text-only.
    degrade_to_mock: transport failures become a synthetic success result.
    """

    provider: ProviderId
    display_name: str
    credential_key: str
    text_model: str
    vision_model: str | None
    factory: ClientFactory
    degrade_to_mock: bool = False
    mock_model: str | None = None

    @property
    def supports_vision(self) -> bool:
        return self.vision_model is not None


PROVIDERS: dict[ProviderId, ProviderDescriptor] = {
    ProviderId.CLAUDE: ProviderDescriptor(
        provider=ProviderId.CLAUDE,
        display_name="Claude",
        credential_key="anthropic",
        text_model="claude-sonnet-4-5-20250929",
        vision_model="claude-sonnet-4-5-20250929",
        factory=_anthropic_factory,
    ),
    ProviderId.GPT4: ProviderDescriptor(
        provider=ProviderId.GPT4,
        display_name="GPT-4",
        credential_key="openai",
        text_model="gpt-4-turbo",
        vision_model="gpt-4o",
        factory=_openai_factory,
    ),
    ProviderId.GEMINI: ProviderDescriptor(
        provider=ProviderId.GEMINI,
        display_name="Gemini",
        credential_key="google",
        text_model="gemini-2.5-flash",
        vision_model="gemini-2.5-flash",
        factory=_gemini_factory,
    ),
    ProviderId.GROK: ProviderDescriptor(
        provider=ProviderId.GROK,
        display_name="Grok",
        credential_key="grok",
        text_model="grok-2-latest",
        vision_model=None,
        factory=_grok_factory,
        degrade_to_mock=True,
        mock_model="grok-mock",
    ),
}

_missing = set(ProviderId) - set(PROVIDERS)
if _missing:
    raise RuntimeError(f"Provider table incomplete: {sorted(p.value for p in _missing)}")


def get_descriptor(provider: str | ProviderId) -> ProviderDescriptor:
    """Look up a descriptor. Raises UnknownProviderError for unrecognized ids."""
    return PROVIDERS[ProviderId.parse(provider)]
