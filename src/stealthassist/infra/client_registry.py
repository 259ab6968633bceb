"""Per-provider vendor client registry."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from stealthassist.infra.provider_catalog import PROVIDERS
from stealthassist.models import ProviderCredential, ProviderId

if TYPE_CHECKING:
    from stealthassist.config import AppConfig
    from stealthassist.infra.providers.base import LLMProvider

logger = logging.getLogger(__name__)


class ClientRegistry:
    """Holds one vendor client per configured provider.

    rebuild() swaps a single entry under the lock and closes the client it
    replaced.
    """

    def __init__(self, config: AppConfig) -> None:
        self._config = config
        self._clients: dict[ProviderId, LLMProvider] = {}
        self._lock = threading.Lock()

    def get(self, provider: ProviderId) -> LLMProvider | None:
        with self._lock:
            return self._clients.get(provider)

    def rebuild(self, provider: ProviderId, credential: ProviderCredential | None) -> None:
        """Replace the provider's client. A missing or empty key removes it."""
        client = None
        if credential is not None and credential.api_key:
            client = PROVIDERS[provider].factory(credential, self._config)

        with self._lock:
            old = self._clients.pop(provider, None)
            if client is not None:
                self._clients[provider] = client
        if old is not None and old is not client:
            old.close()
        logger.info(
            "Client %s: provider=%s", "rebuilt" if client else "removed", provider.value
        )

    def configured(self) -> list[ProviderId]:
        """Providers with a live client, in ProviderId order."""
        with self._lock:
            return [p for p in ProviderId if p in self._clients]
