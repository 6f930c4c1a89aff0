"""Engine configuration loaded from the environment."""

import logging
import os

from pydantic import BaseModel, Field, field_validator

from contentengine.models.requests import GenerationOptions, ResponseFormat, TextModel

logger = logging.getLogger(__name__)

GLOBAL_LIMITER_KEY = "openai-global"


class LimiterConfig(BaseModel):
    """Sliding-window limiter settings."""

    window_ms: int = Field(60_000, gt=0, description="Window length in milliseconds")
    max_count: int = Field(..., ge=1, description="Attempts allowed per key per window")


class EngineConfig(BaseModel):
    """Top-level settings for a dispatcher instance."""

    openai_api_key: str | None = Field(None, description="Bearer credential for the model endpoint")
    model: str = Field(TextModel.GPT_4O.value, min_length=1)
    max_tokens: int = Field(3000, ge=1, le=16000)
    temperature: float = Field(0.7, ge=0.0, le=2.0)
    timeout_seconds: float = Field(45.0, description="Upstream timeout, clamped to 30-60s")
    response_format: ResponseFormat = ResponseFormat.JSON_SCHEMA
    identity_limiter: LimiterConfig = Field(default_factory=lambda: LimiterConfig(window_ms=60_000, max_count=3))
    global_limiter: LimiterConfig = Field(default_factory=lambda: LimiterConfig(window_ms=60_000, max_count=10))
    storage_timeout_seconds: float = Field(2.0, gt=0, description="Per-attempt limit on usage store calls")

    @field_validator("timeout_seconds")
    @classmethod
    def clamp_timeout(cls, value: float) -> float:
        """Keep the upstream timeout within 30-60 seconds."""
        return min(max(value, 30.0), 60.0)

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """
        Build a config from ``OPENAI_API_KEY`` and ``CONTENT_ENGINE_*`` variables.

        Returns:
            EngineConfig with unset variables left at their defaults
        """
        values: dict = {"openai_api_key": os.getenv("OPENAI_API_KEY")}
        env_map = {
            "model": "CONTENT_ENGINE_MODEL",
            "max_tokens": "CONTENT_ENGINE_MAX_TOKENS",
            "temperature": "CONTENT_ENGINE_TEMPERATURE",
            "timeout_seconds": "CONTENT_ENGINE_TIMEOUT_SECONDS",
            "response_format": "CONTENT_ENGINE_RESPONSE_FORMAT",
        }
        for field_name, env_name in env_map.items():
            raw = os.getenv(env_name)
            if raw:
                values[field_name] = raw

        identity_limit = os.getenv("CONTENT_ENGINE_IDENTITY_LIMIT")
        if identity_limit:
            values["identity_limiter"] = LimiterConfig(max_count=int(identity_limit))
        global_limit = os.getenv("CONTENT_ENGINE_GLOBAL_LIMIT")
        if global_limit:
            values["global_limiter"] = LimiterConfig(max_count=int(global_limit))

        config = cls(**values)
        logger.debug(f"⚙️ [EngineConfig] Loaded config: model={config.model}, timeout={config.timeout_seconds}s")
        return config

    def generation_options(self) -> GenerationOptions:
        """Default options for every upstream call."""
        return GenerationOptions(
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            timeout_seconds=self.timeout_seconds,
            response_format=self.response_format,
        )
