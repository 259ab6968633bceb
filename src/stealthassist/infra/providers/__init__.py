"""LLM vendor client abstraction layer."""

from stealthassist.infra.providers.base import LLMProvider

__all__ = ["LLMProvider"]
