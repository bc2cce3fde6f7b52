"""Tests for application settings."""

from logiflow.core.config import Settings, get_settings


class TestSettings:
    """Tests for Settings defaults and environment overrides."""

    def test_defaults(self, monkeypatch):
        for name in ("ADMIN_ROLE", "DEFAULT_REJECTION_REASON", "NOTIFICATION_WEBHOOK_URL", "LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.admin_role == "admin"
        assert settings.default_rejection_reason == "Rejected"
        assert settings.notification_webhook_url is None
        assert settings.log_level == "INFO"
        assert settings.log_levels == {}
        assert settings.webhook_max_retries == 3

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("ADMIN_ROLE", "superuser")
        monkeypatch.setenv("DATABASE_URL", "sqlite:///./erp.db")
        monkeypatch.setenv("WEBHOOK_TIMEOUT", "5")

        settings = Settings(_env_file=None)

        assert settings.admin_role == "superuser"
        assert settings.database_url == "sqlite:///./erp.db"
        assert settings.webhook_timeout == 5

    def test_celery_urls_fall_back_to_redis(self):
        settings = Settings(_env_file=None, redis_url="redis://cache:6379/1")

        assert settings.celery_broker == "redis://cache:6379/1"
        assert settings.celery_backend == "redis://cache:6379/1"

    def test_explicit_celery_urls(self):
        settings = Settings(
            _env_file=None,
            celery_broker_url="amqp://guest@mq//",
            celery_result_backend="redis://cache:6379/2",
        )

        assert settings.celery_broker == "amqp://guest@mq//"
        assert settings.celery_backend == "redis://cache:6379/2"


def test_get_settings_is_cached():
    assert get_settings() is get_settings()
