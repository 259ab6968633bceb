import dataclasses
from datetime import datetime
from pathlib import Path

import pytest

from stealthassist.config import AppConfig
from stealthassist.infra.provider_catalog import PROVIDERS
from stealthassist.infra.providers.base import LLMProvider
from stealthassist.infra.settings_store import SettingsStore
from stealthassist.models import ProviderId, TokenUsage


@pytest.fixture(autouse=True)
def _use_test_env(monkeypatch):
    """Never read the developer's .env during tests."""
    monkeypatch.setattr(
        AppConfig, "model_config", {**AppConfig.model_config, "env_file": ".env.test"}
    )


class FakeClock:
    """Settable clock for calendar-rollover tests."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class FakeProvider(LLMProvider):
    """In-memory vendor client that records every call."""

    def __init__(self, name: str, text: str = "fake answer") -> None:
        self._name = name
        self.text = text
        self.usage: TokenUsage | None = TokenUsage(10, 5, 15, 1)
        self.error: Exception | None = None
        self.chat_calls: list[dict] = []
        self.image_calls: list[dict] = []

    @property
    def provider_name(self) -> str:
        return self._name

    def chat(self, model, system_prompt, history, message, *, image_base64=None):
        self.chat_calls.append(
            {
                "model": model,
                "system_prompt": system_prompt,
                "history": history,
                "message": message,
                "image_base64": image_base64,
            }
        )
        if self.error is not None:
            raise self.error
        return self.text, self.usage

    def analyze_image(self, model, image_base64, question):
        self.image_calls.append(
            {"model": model, "image_base64": image_base64, "question": question}
        )
        if self.error is not None:
            raise self.error
        return self.text, self.usage

    @property
    def call_count(self) -> int:
        return len(self.chat_calls) + len(self.image_calls)


@pytest.fixture
def test_config(tmp_path: Path) -> AppConfig:
    return AppConfig(data_dir=tmp_path / "data", log_dir=tmp_path / ".log")


@pytest.fixture
def store(test_config: AppConfig) -> SettingsStore:
    return SettingsStore(test_config.state_path)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2025, 3, 14, 10, 30))


@pytest.fixture
def fake_providers(monkeypatch) -> dict[ProviderId, FakeProvider]:
    """Swap every descriptor's client factory for one returning a FakeProvider."""
    fakes = {p: FakeProvider(p.value) for p in ProviderId}
    for provider, descriptor in list(PROVIDERS.items()):
        monkeypatch.setitem(
            PROVIDERS,
            provider,
            dataclasses.replace(descriptor, factory=lambda cred, cfg, _p=provider: fakes[_p]),
        )
    return fakes


@pytest.fixture
def fake_provider_cls() -> type[FakeProvider]:
    return FakeProvider
