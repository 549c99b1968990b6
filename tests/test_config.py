"""
Tests for configuration management
"""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from customer_management.infrastructure.configuration.config import (
    Settings,
    get_config,
    reset_config,
)


class TestSettings:
    """Test Settings model"""

    def test_settings_from_environment(self):
        """Values come from the environment"""
        settings = Settings()

        assert settings.database_url == "sqlite:///:memory:"
        assert settings.environment == "test"
        assert settings.log_level == "DEBUG"
        assert settings.is_production is False

    def test_settings_default_values(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.database_url == "sqlite:///data/customers.db"
        assert settings.cache_backend == "memory"
        assert settings.request_timeout_seconds == 30.0
        assert settings.token_refresh_skew_seconds == 30
        assert settings.customer_cache_ttl_seconds == 600
        assert settings.listing_cache_ttl_seconds == 300

    def test_base_urls_end_with_slash(self):
        """Routes are joined onto base URLs, so both end in a slash"""
        settings = Settings()

        assert settings.customer_api_base_url == "https://customers.test/api/"
        assert settings.auth_base_url == "https://identity.test/"

    def test_log_level_is_upper_cased(self):
        with patch.dict(os.environ, {"LOG_LEVEL": "warning"}):
            assert Settings().log_level == "WARNING"

    def test_production_environment(self):
        with patch.dict(os.environ, {"ENVIRONMENT": "Production"}):
            assert Settings().is_production is True

    def test_invalid_cache_backend(self):
        with patch.dict(os.environ, {"CACHE_BACKEND": "memcached"}):
            with pytest.raises(ValidationError):
                Settings()

    def test_non_positive_timeout_rejected(self):
        with patch.dict(os.environ, {"REQUEST_TIMEOUT_SECONDS": "0"}):
            with pytest.raises(ValidationError):
                Settings()


class TestGetConfig:
    """Test the shared settings instance"""

    def test_get_config_is_cached(self):
        first = get_config()
        second = get_config()

        assert first is second

    def test_reset_config_reloads(self):
        first = get_config()
        with patch.dict(os.environ, {"ENVIRONMENT": "staging"}):
            reset_config()
            second = get_config()

        assert second is not first
        assert second.environment == "staging"
