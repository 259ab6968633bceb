"""Base class for LLM vendor clients."""

from abc import ABC, abstractmethod

from stealthassist.exceptions import UnsupportedCapabilityError
from stealthassist.models import ChatMessage, TokenUsage

# Fixed request budget for every vendor call.
MAX_OUTPUT_TOKENS = 1000
TEMPERATURE = 0.7

IMAGE_MEDIA_TYPE = "image/png"


class LLMProvider(ABC):
    """Abstract base class for vendor clients.

    Each concrete provider wraps one vendor SDK (or raw HTTP endpoint) and
    translates the abstract conversation into that vendor's request schema.
    Both calls return (response_text, token_usage_or_None) and issue exactly
    one request.
    """

    @abstractmethod
    def chat(
        self,
        model: str,
        system_prompt: str,
        history: list[ChatMessage],
        message: str,
        *,
        image_base64: str | None = None,
    ) -> tuple[str, TokenUsage | None]:
        """Send one chat turn.

        Args:
            model: Vendor model identifier.
            system_prompt: System / persona prompt.
            history: Prior turns, oldest first.
            message: The new user message.
            image_base64: Optional PNG attached to the new user turn.
                Providers without vision support ignore it.
        """

    def analyze_image(
        self, model: str, image_base64: str, question: str
    ) -> tuple[str, TokenUsage | None]:
        """Single user turn with the question and an inline image. Default: unsupported."""
        raise UnsupportedCapabilityError(self.provider_name, "image analysis")

    def close(self) -> None:
        """Release transport resources. Default: nothing to release."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Short identifier for this provider (e.g. 'claude')."""
