from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from EXAM_WALLET_* environment variables."""

    model_config = SettingsConfigDict(env_prefix="EXAM_WALLET_", env_file=".env", extra="ignore")

    log_level: str = "WARNING"

    supabase_url: str = ""
    supabase_key: str = ""
    access_token: Optional[str] = None
    user_id: Optional[str] = None
    request_timeout_seconds: float = 30.0

    freshness_seconds: float = 60 * 60
    subscriptions_file: Optional[Path] = Path(".exam_subscriptions.json")

    serpapi_api_key: Optional[str] = None
    perplexity_api_key: Optional[str] = None
    perplexity_model: str = "sonar"
