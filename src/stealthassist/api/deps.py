"""FastAPI dependency injection."""

from functools import lru_cache

from stealthassist.config import AppConfig
from stealthassist.services.assistant import AssistantService


@lru_cache
def get_config() -> AppConfig:
    return AppConfig()


@lru_cache
def get_assistant() -> AssistantService:
    return AssistantService.from_config(get_config())
