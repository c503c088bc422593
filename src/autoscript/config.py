"""
Configuration for Autoscript.

Every setting can be overridden via environment variables with the
AUTOSCRIPT_ prefix, e.g. AUTOSCRIPT_MODEL=google/gemini-2.0-flash-exp:free.
"""

import logging
import os
from functools import lru_cache
from typing import List, Optional

from pydantic import BaseModel, Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .llm import OPENROUTER_BASE_URL
from .retry import RetryPolicy


class ModelOption(BaseModel):
    id: str
    name: str
    provider: str
    description: str = ""


FREE_MODELS: List[ModelOption] = [
    ModelOption(
        id="x-ai/grok-4-fast:free",
        name="Grok-4 Fast",
        provider="x-ai",
        description="Fast and reliable AI assistant",
    ),
    ModelOption(
        id="google/gemini-2.0-flash-exp:free",
        name="Gemini-2.0-Flash-Exp",
        provider="Google",
        description="Slow but reliable AI assistant",
    ),
]


class Settings(BaseSettings):
    """Runtime settings, read from the environment and an optional .env file."""

    model_config = SettingsConfigDict(
        env_prefix="AUTOSCRIPT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    base_url: str = Field(
        default=OPENROUTER_BASE_URL, description="Chat-completions endpoint base URL"
    )
    model: str = Field(
        default=FREE_MODELS[0].id, description="Model identifier sent with each request"
    )
    api_key: Optional[SecretStr] = Field(
        default=None, description="Bearer credential; falls back to OPENROUTER_API_KEY"
    )
    request_timeout: float = Field(default=120.0, gt=0)
    max_attempts: int = Field(default=5, ge=1)
    initial_backoff: float = Field(default=1.0, ge=0.0)
    backoff_multiplier: float = Field(default=2.0, ge=1.0)
    log_level: str = Field(
        default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    @model_validator(mode="after")
    def _fallback_api_key(self) -> "Settings":
        if self.api_key is None and os.environ.get("OPENROUTER_API_KEY"):
            self.api_key = SecretStr(os.environ["OPENROUTER_API_KEY"])
        return self

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.max_attempts,
            initial_backoff=self.initial_backoff,
            multiplier=self.backoff_multiplier,
        )


@lru_cache()
def get_settings() -> Settings:
    return Settings()


def configure_logging(level: Optional[str] = None) -> None:
    """Attaches a stream handler to the package logger at the configured level."""
    logger = logging.getLogger("autoscript")
    logger.setLevel((level or get_settings().log_level).upper())
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(handler)
