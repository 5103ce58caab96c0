"""Unit tests for settings loading."""
from feedback_analytics.config.settings import Settings


def _settings(**kwargs):
    return Settings(_env_file=None, **kwargs)


class TestStoreConfiguration:
    """Test detection of a usable feedback store."""

    def test_missing_credentials(self, monkeypatch):
        for name in ("POSTGRES_HOST", "POSTGRES_DATABASE", "POSTGRES_USERNAME", "POSTGRES_PASSWORD"):
            monkeypatch.delenv(name, raising=False)

        assert _settings().is_store_configured is False

    def test_placeholder_values_count_as_missing(self):
        settings = _settings(
            postgres_host="your_postgres_host_here",
            postgres_database="postgres",
            postgres_username="postgres",
            postgres_password="your_postgres_password_here",
        )
        assert settings.is_store_configured is False

    def test_configured(self):
        settings = _settings(
            postgres_host="db.example.com",
            postgres_database="postgres",
            postgres_username="analytics",
            postgres_password="secret",
        )
        assert settings.is_store_configured is True

    def test_environment_is_case_insensitive(self, monkeypatch):
        monkeypatch.setenv("postgres_host", "db.example.com")
        monkeypatch.setenv("POSTGRES_DATABASE", "postgres")
        monkeypatch.setenv("POSTGRES_USERNAME", "analytics")
        monkeypatch.setenv("POSTGRES_PASSWORD", "secret")

        assert _settings().is_store_configured is True


class TestAuthConfiguration:
    """Test detection of a usable auth collaborator."""

    def test_placeholder_url(self):
        settings = _settings(supabase_url="https://placeholder.supabase.co", supabase_anon_key="key")
        assert settings.is_auth_configured is False

    def test_configured(self):
        settings = _settings(supabase_url="https://abc.supabase.co", supabase_anon_key="key")
        assert settings.is_auth_configured is True


class TestAnalyticsDefaults:
    """Test analytics knobs."""

    def test_defaults(self):
        settings = _settings()

        assert settings.recent_window_days == 7
        assert settings.topic_trend_limit == 8
        assert settings.alert_limit == 3
        assert settings.response_time_fallback_hours == 24.0
        assert settings.hardware_keywords == ["lcd", "screen", "display"]

    def test_keywords_from_environment(self, monkeypatch):
        monkeypatch.setenv("HARDWARE_KEYWORDS", '["layar", "lcd"]')

        assert _settings().hardware_keywords == ["layar", "lcd"]
