"""Tests for Settings and DiscoveryConfig."""

import pytest
from pydantic import SecretStr, ValidationError

from moviefinder.config import DiscoveryConfig, Environment, Settings


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings(_env_file=None)  # type: ignore[call-arg]

        assert settings.app_env == Environment.DEVELOPMENT
        assert settings.request_timeout == 10.0
        assert settings.debounce_ms == 500
        assert settings.cors_relay_url == "https://corsproxy.io/?"

    def test_token_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TMDB_TOKEN", "env-token")

        settings = Settings(_env_file=None)  # type: ignore[call-arg]

        assert settings.has_tmdb_token is True
        assert settings.tmdb_token.get_secret_value() == "env-token"

    def test_vite_token_alias(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that the front-end build variable name is accepted too."""
        monkeypatch.delenv("TMDB_TOKEN", raising=False)
        monkeypatch.setenv("VITE_TMDB_TOKEN", "vite-token")

        settings = Settings(_env_file=None)  # type: ignore[call-arg]

        assert settings.tmdb_token.get_secret_value() == "vite-token"

    def test_token_is_not_printed(self, test_settings: Settings) -> None:
        assert "test-token" not in repr(test_settings)

    def test_production_uses_json_logs(self) -> None:
        settings = Settings(app_env="production", _env_file=None)  # type: ignore[arg-type, call-arg]

        assert settings.use_json_logs is True

    def test_rejects_non_positive_timeout(self) -> None:
        with pytest.raises(ValidationError):
            Settings(request_timeout=0, _env_file=None)  # type: ignore[call-arg]


class TestDiscoveryConfig:
    def test_from_settings(self, test_settings: Settings) -> None:
        config = DiscoveryConfig.from_settings(test_settings)

        assert config.catalog_base_url == test_settings.catalog_proxy_url
        assert config.upstream_base_url == "https://api.themoviedb.org/3"
        assert config.debounce_window == 0.5
        assert config.request_timeout == 10.0
        assert config.has_credential is True

    def test_from_settings_without_token(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("TMDB_TOKEN", raising=False)
        monkeypatch.delenv("VITE_TMDB_TOKEN", raising=False)
        settings = Settings(_env_file=None)  # type: ignore[call-arg]

        config = DiscoveryConfig.from_settings(settings)

        assert config.credential is None
        assert config.has_credential is False

    def test_is_frozen(self) -> None:
        config = DiscoveryConfig(
            catalog_base_url="http://proxy.test", credential=SecretStr("x")
        )

        with pytest.raises(ValidationError):
            config.request_timeout = 1.0  # type: ignore[misc]
