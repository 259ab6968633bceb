"""stealth-assist exception hierarchy.

Hierarchy:
    StealthAssistError
    ├── UnknownProviderError        (unrecognized provider id)
    ├── ProviderNotConfiguredError  (no credential / client for the provider)
    ├── QuotaExceededError          (daily or monthly tier limit reached)
    ├── UnsupportedCapabilityError  (e.g. image analysis on a text-only provider)
    └── VendorTransportError        (network / HTTP / schema failure from a vendor)
"""


class StealthAssistError(Exception):
    """Base class for every stealth-assist error."""

    code = "error"


class UnknownProviderError(StealthAssistError):
    """The provider identifier does not name a supported provider."""

    code = "unknown_provider"

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Unsupported provider: {value}")


class ProviderNotConfiguredError(StealthAssistError):
    """No API key has been stored for the provider."""

    code = "provider_not_configured"

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(f"{provider} API key not configured")


class QuotaExceededError(StealthAssistError):
    """The subscription tier's daily or monthly limit has been reached."""

    code = "quota_exceeded"

    def __init__(self, provider: str, scope: str, limit: int):
        self.provider = provider
        self.scope = scope
        self.limit = limit
        super().__init__(
            f"{scope.capitalize()} limit reached for {provider} ({limit} calls). "
            "Upgrade your subscription for more usage."
        )


class UnsupportedCapabilityError(StealthAssistError):
    """The provider does not offer the requested capability."""

    code = "unsupported_capability"

    def __init__(self, provider: str, capability: str):
        self.provider = provider
        self.capability = capability
        super().__init__(f"{capability.capitalize()} not supported for {provider}")


class VendorTransportError(StealthAssistError):
    """A vendor call failed or returned a payload we could not read."""

    code = "vendor_transport_error"

    def __init__(self, provider: str, cause: Exception):
        self.provider = provider
        self.cause = cause
        super().__init__(f"{provider} request failed: {cause}")
