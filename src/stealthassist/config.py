from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    """Application settings. Loaded from .env or STEALTH_ASSIST_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="STEALTH_ASSIST_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Paths
    data_dir: Path = Path("data")
    log_dir: Path = Path(".log")

    # Vendor transport
    # Used for Grok when no per-credential base URL override is stored.
    grok_base_url: str = "https://api.x.ai/v1"
    vendor_timeout: float = 60.0

    @property
    def state_path(self) -> Path:
        """Persistent store: credentials, usage, subscription, display settings."""
        return self.data_dir / "state.json"
