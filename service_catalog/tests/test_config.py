"""
Unit tests for service configuration.
"""

from shared.config import get_config


class TestServiceConfig:
    """Test cases for ServiceConfig."""

    def test_defaults(self, monkeypatch):
        for name in ("OPENROUTER_KEY", "ADMIN_REFRESH_KEY", "IOS_MIN_VERSION", "PORT", "CATALOG_REDIS_URL"):
            monkeypatch.delenv(name, raising=False)

        config = get_config("catalog")

        assert config.service_name == "catalog"
        assert config.upstream_base_url == "https://openrouter.ai/api/v1"
        assert config.upstream_api_key == ""
        assert config.refresh_interval_seconds == 120.0
        assert config.rate_limit_window_seconds == 60.0
        assert config.redis_url is None
        assert config.ios_min_version == "1.0"
        assert config.catalog_single_flight is False

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("OPENROUTER_KEY", "or-key")
        monkeypatch.setenv("ADMIN_REFRESH_KEY", "admin")
        monkeypatch.setenv("IOS_MIN_VERSION", "2.5")
        monkeypatch.setenv("PORT", "9001")
        monkeypatch.setenv("CATALOG_RATE_LIMIT_MAX_REQUESTS", "5")
        monkeypatch.setenv("CATALOG_REFRESH_INTERVAL_SECONDS", "30")
        monkeypatch.setenv("CATALOG_SINGLE_FLIGHT", "true")

        config = get_config("catalog")

        assert config.upstream_api_key == "or-key"
        assert config.admin_refresh_key == "admin"
        assert config.ios_min_version == "2.5"
        assert config.port == 9001
        assert config.rate_limit_max_requests == 5
        assert config.refresh_interval_seconds == 30.0
        assert config.catalog_single_flight is True

    def test_overrides_win_over_environment(self, monkeypatch):
        monkeypatch.setenv("OPENROUTER_KEY", "from-env")

        config = get_config("catalog", upstream_api_key="from-code", rate_limit_max_requests=2)

        assert config.upstream_api_key == "from-code"
        assert config.rate_limit_max_requests == 2
