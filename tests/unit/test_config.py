"""Test configuration module."""

import pytest
from pydantic import ValidationError

from adaptive_router.config import RouterConfig


class TestRouterConfig:
    """Test router configuration."""

    def test_should_load_default_values(self):
        """Test default configuration."""
        config = RouterConfig()
        assert config.app_name == "AdaptiveRouter"
        assert config.cache_max_size == 1000
        assert config.cache_ttl_seconds == 86400
        assert config.cache_min_savings_threshold == 30.0
        assert config.fallback_handler_id == "project-manager"

    def test_should_convert_ttl_to_milliseconds(self):
        """Test TTL in milliseconds."""
        config = RouterConfig(cache_ttl_seconds=1.5)
        assert config.cache_ttl_ms == 1500

    def test_should_normalize_log_level(self):
        """Test log level is upper-cased."""
        config = RouterConfig(log_level="debug")
        assert config.log_level == "DEBUG"

    def test_should_load_from_environment(self, monkeypatch):
        """Test environment variables override defaults."""
        monkeypatch.setenv("ROUTER_CACHE_MAX_SIZE", "25")
        monkeypatch.setenv("ROUTER_FALLBACK_HANDLER_ID", "triage")

        config = RouterConfig()

        assert config.cache_max_size == 25
        assert config.fallback_handler_id == "triage"

    def test_should_reject_invalid_threshold(self):
        """Test savings threshold bounds."""
        with pytest.raises(ValidationError):
            RouterConfig(cache_min_savings_threshold=150)

    def test_should_identify_development_environment(self):
        """Test environment detection."""
        config = RouterConfig(app_env="development")
        assert config.is_development is True
        assert config.is_production is False

    def test_should_identify_production_environment(self):
        """Test production detection."""
        config = RouterConfig(app_env="production")
        assert config.is_production is True
