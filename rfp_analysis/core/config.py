"""Runtime configuration for the proposal analysis pipeline."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEFAULT_LLM_TIMEOUT = 60.0


class Settings(BaseSettings):
    """Central settings loaded from environment variables and ``.env``."""

    llm_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("RFP_LLM_API_KEY", "HUGGINGFACE_API_KEY"),
    )
    llm_base_url: str = Field(default="https://router.huggingface.co/v1")
    llm_model: str = Field(default="mistralai/Mistral-7B-Instruct-v0.3")
    # 0 or less is stored as None, which disables the HTTP timeout.
    llm_timeout: Optional[float] = Field(default=DEFAULT_LLM_TIMEOUT)
    llm_max_retries: int = Field(default=3)
    llm_temperature: float = Field(default=0.3)
    # Completion budget for comparison requests; analysis requests use 2500.
    llm_max_tokens: int = Field(default=2000)

    cache_ttl_seconds: float = Field(default=3600.0)
    cache_maxsize: int = Field(default=512)

    log_level: str = Field(default="INFO")

    model_config = {
        "env_file": ".env",
        "env_prefix": "RFP_",
        "case_sensitive": False,
        "extra": "ignore",
        "populate_by_name": True,
    }

    @property
    def endpoint(self) -> Optional[str]:
        if not self.llm_base_url:
            return None
        return self.llm_base_url.rstrip("/")

    @field_validator("llm_timeout", mode="before")
    @classmethod
    def normalise_timeout(cls, value: Any) -> Optional[float]:
        """Blank or unparsable values use the default; zero or less means no timeout."""
        if value is None or value == "":
            return DEFAULT_LLM_TIMEOUT
        try:
            seconds = float(value)
        except (TypeError, ValueError):
            logger.warning(f"Invalid LLM timeout {value!r}, using {DEFAULT_LLM_TIMEOUT}s")
            return DEFAULT_LLM_TIMEOUT
        if seconds <= 0:
            return None
        return seconds


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()  # type: ignore[arg-type]

