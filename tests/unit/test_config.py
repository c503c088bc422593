"""Tests for autoscript.config."""

import logging

import pytest
from autoscript.config import FREE_MODELS, Settings, configure_logging, get_settings
from pydantic import ValidationError


@pytest.fixture
def clean_env(monkeypatch):
    for name in [
        "AUTOSCRIPT_MODEL",
        "AUTOSCRIPT_API_KEY",
        "AUTOSCRIPT_MAX_ATTEMPTS",
        "AUTOSCRIPT_BASE_URL",
        "OPENROUTER_API_KEY",
    ]:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def reset_singleton():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    def test_defaults(self, clean_env):
        settings = Settings(_env_file=None)
        assert settings.base_url == "https://openrouter.ai/api/v1"
        assert settings.model == "x-ai/grok-4-fast:free"
        assert settings.api_key is None
        assert settings.max_attempts == 5
        assert settings.initial_backoff == 1.0
        assert settings.backoff_multiplier == 2.0

    def test_environment_overrides(self, clean_env, monkeypatch):
        monkeypatch.setenv("AUTOSCRIPT_MODEL", "google/gemini-2.0-flash-exp:free")
        monkeypatch.setenv("AUTOSCRIPT_API_KEY", "env-secret")
        monkeypatch.setenv("AUTOSCRIPT_MAX_ATTEMPTS", "3")

        settings = Settings(_env_file=None)
        assert settings.model == "google/gemini-2.0-flash-exp:free"
        assert settings.api_key.get_secret_value() == "env-secret"
        assert settings.max_attempts == 3

    def test_openrouter_key_fallback(self, clean_env, monkeypatch):
        monkeypatch.setenv("OPENROUTER_API_KEY", "router-secret")
        assert Settings(_env_file=None).api_key.get_secret_value() == "router-secret"

    def test_prefixed_key_wins(self, clean_env, monkeypatch):
        monkeypatch.setenv("OPENROUTER_API_KEY", "router-secret")
        monkeypatch.setenv("AUTOSCRIPT_API_KEY", "own-secret")
        assert Settings(_env_file=None).api_key.get_secret_value() == "own-secret"

    def test_api_key_not_leaked_in_repr(self, clean_env):
        settings = Settings(_env_file=None, api_key="very-secret")
        assert "very-secret" not in repr(settings)

    @pytest.mark.parametrize(
        "kwargs",
        [{"max_attempts": 0}, {"initial_backoff": -1.0}, {"backoff_multiplier": 0.5}],
    )
    def test_invalid_values(self, clean_env, kwargs):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **kwargs)

    def test_retry_policy(self, clean_env):
        policy = Settings(
            _env_file=None, max_attempts=3, initial_backoff=0.5, backoff_multiplier=3
        ).retry_policy()
        assert list(policy.waits()) == [0.5, 1.5]

    def test_get_settings_is_cached(self, clean_env, reset_singleton):
        assert get_settings() is get_settings()


def test_free_models_catalogue():
    ids = [model.id for model in FREE_MODELS]
    assert ids == ["x-ai/grok-4-fast:free", "google/gemini-2.0-flash-exp:free"]


def test_configure_logging_sets_level():
    logger = logging.getLogger("autoscript")
    previous_level, previous_handlers = logger.level, list(logger.handlers)
    try:
        configure_logging("debug")
        assert logger.level == logging.DEBUG
        handlers = len(logger.handlers)
        configure_logging("warning")
        assert logger.level == logging.WARNING
        assert len(logger.handlers) == handlers
    finally:
        logger.setLevel(previous_level)
        logger.handlers[:] = previous_handlers
