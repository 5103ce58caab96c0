# feedback_analytics/config/settings.py
from pydantic_settings import BaseSettings
from pathlib import Path
from typing import List, Optional

# Get project root (2 levels up from this file)
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Values shipped in example .env files; treated as "not configured"
PLACEHOLDER_VALUES = {
    "",
    "placeholder",
    "placeholder-anon-key",
    "https://placeholder.supabase.co",
    "your_supabase_project_url_here",
    "your_supabase_anon_key_here",
    "your_postgres_host_here",
    "your_postgres_password_here",
}


def _is_set(value: Optional[str]) -> bool:
    return value is not None and value.strip() not in PLACEHOLDER_VALUES


class Settings(BaseSettings):
    # PostgreSQL (feedback store)
    postgres_host: Optional[str] = None
    postgres_port: int = 5432
    postgres_database: Optional[str] = None
    postgres_username: Optional[str] = None
    postgres_password: Optional[str] = None
    postgres_sslmode: str = "require"

    # Supabase auth
    supabase_url: Optional[str] = None
    supabase_anon_key: Optional[str] = None
    auth_timeout_seconds: float = 10.0

    # Analytics config
    recent_window_days: int = 7
    topic_trend_limit: int = 8
    alert_limit: int = 3
    sentiment_trend_days: int = 30
    response_time_fallback_hours: float = 24.0
    hardware_keywords: List[str] = ["lcd", "screen", "display"]

    # Pipeline config
    max_workers: int = 4
    log_level: str = "INFO"

    class Config:
        env_file = str(PROJECT_ROOT / ".env")
        case_sensitive = False
        extra = "ignore"

    @property
    def is_store_configured(self) -> bool:
        """True when every credential needed to reach the feedback store is present."""
        return all(
            _is_set(value)
            for value in (
                self.postgres_host,
                self.postgres_database,
                self.postgres_username,
                self.postgres_password,
            )
        )

    @property
    def is_auth_configured(self) -> bool:
        """True when the auth collaborator URL and key are present."""
        return _is_set(self.supabase_url) and _is_set(self.supabase_anon_key)
