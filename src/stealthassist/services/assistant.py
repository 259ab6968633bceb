"""Host-shell facade: quota gate → gateway dispatch → usage commit.

This is the only surface the window/tray/shortcut layer talks to.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from stealthassist.config import AppConfig
from stealthassist.exceptions import ProviderNotConfiguredError
from stealthassist.infra.client_registry import ClientRegistry
from stealthassist.infra.provider_catalog import PROVIDERS, ProviderDescriptor, get_descriptor
from stealthassist.infra.provider_gateway import ProviderGateway
from stealthassist.infra.settings_store import SettingsStore
from stealthassist.infra.usage_governor import UsageGovernor
from stealthassist.infra.usage_tracker import UsageTracker
from stealthassist.models import (
    TIER_LIMITS,
    ConversationContext,
    DisplaySettings,
    LLMResult,
    ProviderCredential,
    ProviderId,
    SubscriptionTier,
)

logger = logging.getLogger(__name__)

API_KEYS_KEY = "api_keys"
BASE_URLS_KEY = "base_urls"
SUBSCRIPTION_KEY = "subscription"
SETTINGS_KEY = "settings"


class AssistantService:
    """Combines UsageGovernor and ProviderGateway behind the host-facing operations.

    Usage:
        service = AssistantService(config, SettingsStore(config.state_path))
        result = service.send_to_llm("claude", "hello", ConversationContext())
    """

    def __init__(
        self,
        config: AppConfig,
        store: SettingsStore,
        *,
        clock: Callable[[], datetime] = datetime.now,
        usage_tracker: UsageTracker | None = None,
    ) -> None:
        self._config = config
        self._store = store
        self._registry = ClientRegistry(config)
        self._governor = UsageGovernor(store, clock=clock)
        self._gateway = ProviderGateway(self._registry, usage_tracker or UsageTracker())
        self._load_clients()

    @classmethod
    def from_config(cls, config: AppConfig) -> AssistantService:
        return cls(config, SettingsStore(config.state_path))

    @property
    def gateway(self) -> ProviderGateway:
        return self._gateway

    def _load_clients(self) -> None:
        for descriptor in PROVIDERS.values():
            credential = self._credential(descriptor)
            if credential is not None:
                self._registry.rebuild(descriptor.provider, credential)
        logger.debug(
            "Configured providers at startup: %s",
            [p.value for p in self._registry.configured()],
        )

    def _credential(self, descriptor: ProviderDescriptor) -> ProviderCredential | None:
        api_key = self._store.get(API_KEYS_KEY, {}).get(descriptor.credential_key)
        if not api_key:
            return None
        base_url = self._store.get(BASE_URLS_KEY, {}).get(descriptor.credential_key)
        return ProviderCredential(api_key=api_key, base_url=base_url)

    # ── LLM operations ──

    def send_to_llm(
        self,
        provider: str | ProviderId,
        message: str,
        context: ConversationContext | None = None,
    ) -> LLMResult:
        """Quota check, dispatch, and usage recording for one chat turn.

        Raises:
            UnknownProviderError, ProviderNotConfiguredError, QuotaExceededError:
                before any vendor call is attempted.
        """
        descriptor = get_descriptor(provider)
        self._gate(descriptor)

        result = self._gateway.send(descriptor.provider, message, context)
        self._commit(descriptor, result)
        return result

    def analyze_image(
        self,
        provider: str | ProviderId,
        image_base64: str,
        question: str = "",
    ) -> LLMResult:
        """Image analysis with the same governance as send_to_llm.

        Raises:
            UnsupportedCapabilityError: for text-only providers, before the quota check.
        """
        descriptor = self._gateway.require_vision(provider)
        self._gate(descriptor)

        result = self._gateway.analyze_image(descriptor.provider, image_base64, question)
        self._commit(descriptor, result)
        return result

    def _gate(self, descriptor: ProviderDescriptor) -> None:
        if not self._gateway.is_configured(descriptor.provider):
            raise ProviderNotConfiguredError(descriptor.display_name)
        self._governor.check_limit(descriptor.provider, self.get_subscription_tier())

    def _commit(self, descriptor: ProviderDescriptor, result: LLMResult) -> None:
        if result.error:
            logger.info("Usage not recorded: %s call returned an error", descriptor.display_name)
            return
        self._governor.record_usage(descriptor.provider)

    # ── Credentials ──

    def set_credential(
        self,
        provider: str | ProviderId,
        secret: str,
        base_url: str | None = None,
    ) -> None:
        """Persist the key (empty removes it) and rebuild that provider's client."""
        descriptor = get_descriptor(provider)
        key = descriptor.credential_key
        secret = (secret or "").strip()

        def _set_key(api_keys: dict) -> dict:
            if secret:
                api_keys[key] = secret
            else:
                api_keys.pop(key, None)
            return api_keys

        self._store.update(API_KEYS_KEY, _set_key, default={})

        if base_url is not None:

            def _set_url(base_urls: dict) -> dict:
                if base_url.strip():
                    base_urls[key] = base_url.strip()
                else:
                    base_urls.pop(key, None)
                return base_urls

            self._store.update(BASE_URLS_KEY, _set_url, default={})

        self._registry.rebuild(descriptor.provider, self._credential(descriptor))
        logger.info(
            "Credential %s for %s", "stored" if secret else "cleared", descriptor.provider.value
        )

    def list_configured_providers(self) -> list[str]:
        """Display names of providers with a stored key, in ProviderId order."""
        api_keys = self._store.get(API_KEYS_KEY, {})
        return [d.display_name for d in PROVIDERS.values() if api_keys.get(d.credential_key)]

    # ── Subscription & usage ──

    def get_subscription_tier(self) -> SubscriptionTier:
        subscription = self._store.get(SUBSCRIPTION_KEY, {})
        return SubscriptionTier.parse(subscription.get("tier"))

    def set_subscription_tier(self, tier: str | SubscriptionTier) -> SubscriptionTier:
        """Change tier. Existing usage counters are kept as they are."""
        new_tier = SubscriptionTier(tier)
        self._store.set(SUBSCRIPTION_KEY, {"tier": new_tier.value})
        logger.info("Subscription tier set to %s", new_tier.value)
        return new_tier

    def usage_snapshot(self) -> list[dict]:
        """Effective counters and current-tier limits per provider."""
        limits = TIER_LIMITS[self.get_subscription_tier()]
        rows = []
        for provider, record in self._governor.snapshot().items():
            rows.append(
                {
                    "provider": provider.value,
                    "display_name": PROVIDERS[provider].display_name,
                    "daily": record.daily,
                    "monthly": record.monthly,
                    "daily_limit": limits.daily,
                    "monthly_limit": limits.monthly,
                }
            )
        return rows

    def token_report(self) -> str | None:
        """Session token report, or None before any usage was recorded."""
        tracker = self._gateway.usage_tracker
        if tracker is None or not tracker.model_usages:
            return None
        return tracker.format_report()

    # ── Display settings ──

    def get_settings(self) -> DisplaySettings:
        return DisplaySettings.from_dict(self._store.get(SETTINGS_KEY))

    def save_settings(self, settings: DisplaySettings) -> None:
        self._store.set(SETTINGS_KEY, settings.to_dict())
