"""Data models shared by the governor, the gateway and the host-facing services."""

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum

from stealthassist.exceptions import UnknownProviderError


# ── Providers ──


class ProviderId(str, Enum):
    """Supported LLM providers. Key for credentials, clients and usage counters."""

    CLAUDE = "claude"
    GPT4 = "gpt4"
    GEMINI = "gemini"
    GROK = "grok"

    @classmethod
    def parse(cls, value: "str | ProviderId") -> "ProviderId":
        """Resolve a loose provider string (case-insensitive, with aliases)."""
        if isinstance(value, ProviderId):
            return value
        key = str(value).strip().lower()
        key = _PROVIDER_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise UnknownProviderError(str(value)) from None


_PROVIDER_ALIASES = {
    "gpt-4": "gpt4",
    "openai": "gpt4",
    "anthropic": "claude",
    "google": "gemini",
}


# ── Subscription tiers ──


class SubscriptionTier(str, Enum):
    FREE = "free"
    BASIC = "basic"
    PRO = "pro"
    UNLIMITED = "unlimited"

    @classmethod
    def parse(cls, value: "str | SubscriptionTier | None") -> "SubscriptionTier":
        """Unknown or missing tiers fall back to FREE."""
        if isinstance(value, SubscriptionTier):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.FREE


@dataclass(frozen=True)
class TierLimits:
    """Call ceilings for one tier. None = no ceiling."""

    daily: int | None
    monthly: int | None


TIER_LIMITS: dict[SubscriptionTier, TierLimits] = {
    SubscriptionTier.FREE: TierLimits(daily=10, monthly=100),
    SubscriptionTier.BASIC: TierLimits(daily=100, monthly=1000),
    SubscriptionTier.PRO: TierLimits(daily=1000, monthly=10000),
    SubscriptionTier.UNLIMITED: TierLimits(daily=None, monthly=None),
}


# ── Conversation context ──


class Sender(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class Mode(str, Enum):
    """Assistant modes. Only steer system-prompt construction."""

    INTERVIEW = "interview"
    CODING = "coding"
    LEARNING = "learning"


@dataclass
class ChatMessage:
    sender: Sender
    content: str

    @classmethod
    def from_dict(cls, d: dict) -> "ChatMessage":
        sender = Sender.USER if d.get("sender") == "user" else Sender.ASSISTANT
        return cls(sender=sender, content=str(d.get("content", "")))


@dataclass
class ContextSettings:
    mode: Mode | None = None


@dataclass
class ConversationContext:
    """Everything a request carries besides the message itself.

    recent_messages is oldest-first; the prompt helpers forward only the tail.
    screenshot is a base64-encoded PNG.
    """

    recent_messages: list[ChatMessage] = field(default_factory=list)
    screenshot: str | None = None
    settings: ContextSettings = field(default_factory=ContextSettings)

    @classmethod
    def from_dict(cls, d: dict | None) -> "ConversationContext":
        """Parse the host shell's JSON shape (camelCase or snake_case keys)."""
        d = d or {}
        raw_messages = d.get("recentMessages", d.get("recent_messages")) or []
        raw_settings = d.get("settings") or {}
        mode = raw_settings.get("mode")
        try:
            parsed_mode = Mode(mode) if mode else None
        except ValueError:
            parsed_mode = None
        return cls(
            recent_messages=[ChatMessage.from_dict(m) for m in raw_messages],
            screenshot=d.get("screenshot") or None,
            settings=ContextSettings(mode=parsed_mode),
        )


# ── Usage ──


@dataclass
class UsageRecord:
    """Per-provider call counters with the calendar keys they belong to."""

    daily: int = 0
    monthly: int = 0
    last_daily_key: str = ""
    last_monthly_key: str = ""

    @classmethod
    def from_dict(cls, d: dict | None) -> "UsageRecord":
        d = d or {}
        return cls(
            daily=max(int(d.get("daily", 0)), 0),
            monthly=max(int(d.get("monthly", 0)), 0),
            last_daily_key=d.get("last_daily_key", ""),
            last_monthly_key=d.get("last_monthly_key", ""),
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class TokenUsage:
    """Vendor-reported token statistics, normalized."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    call_count: int = 0

    def __add__(self, other: "TokenUsage") -> "TokenUsage":
        return TokenUsage(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            completion_tokens=self.completion_tokens + other.completion_tokens,
            total_tokens=self.total_tokens + other.total_tokens,
            call_count=self.call_count + other.call_count,
        )


@dataclass
class ModelUsage:
    """Session-cumulative usage for one provider/model pair."""

    provider: str
    model: str
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    call_count: int = 0


# ── Results ──


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class LLMResult:
    """The only response shape callers see, whichever vendor answered."""

    response: str
    provider: str
    model: str | None = None
    timestamp: str = field(default_factory=utc_timestamp)
    usage: TokenUsage | None = None
    error: bool | None = None

    def to_dict(self) -> dict:
        """Serialize, omitting absent optional fields."""
        d: dict = {
            "response": self.response,
            "provider": self.provider,
            "timestamp": self.timestamp,
        }
        if self.model is not None:
            d["model"] = self.model
        if self.usage is not None:
            d["usage"] = asdict(self.usage)
        if self.error is not None:
            d["error"] = self.error
        return d


# ── Display settings ──


@dataclass
class DisplaySettings:
    """Overlay display preferences. Stored as-is; the core never interprets them."""

    theme: str = "dark"
    opacity: float = 0.9
    position: str = "top-right"
    auto_hide: bool = True
    stealth_by_default: bool = False
    default_provider: str = ProviderId.CLAUDE.value

    @classmethod
    def from_dict(cls, d: dict | None) -> "DisplaySettings":
        """Accepts snake_case or the host shell's camelCase keys."""
        d = d or {}
        defaults = cls()

        def _get(name: str, camel: str, default):
            return d.get(name, d.get(camel, default))

        return cls(
            theme=d.get("theme", defaults.theme),
            opacity=float(d.get("opacity", defaults.opacity)),
            position=d.get("position", defaults.position),
            auto_hide=bool(_get("auto_hide", "autoHide", defaults.auto_hide)),
            stealth_by_default=bool(
                _get("stealth_by_default", "stealthByDefault", defaults.stealth_by_default)
            ),
            default_provider=_get("default_provider", "defaultProvider", defaults.default_provider),
        )

    def to_dict(self) -> dict:
        return asdict(self)


# ── Credentials ──


@dataclass(frozen=True)
class ProviderCredential:
    """Stored secret for one provider. base_url only matters for SDK-less providers."""

    api_key: str
    base_url: str | None = None
