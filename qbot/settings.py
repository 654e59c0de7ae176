# qbot/settings.py
import os
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # core
    APP_NAME: str = Field(default="QBOT Orchestrator")
    ENV: str = Field(default=os.getenv("APP_ENV", "dev"))
    DEBUG: bool = Field(default=True)
    LOG_LEVEL: str = Field(default="INFO")

    # provider credentials (presence is what marks a provider as configured)
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o"

    GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL: str = "gemini-1.5-flash"
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"

    DEEPSEEK_API_KEY: Optional[str] = None
    DEEPSEEK_MODEL: str = "deepseek-chat"
    DEEPSEEK_BASE_URL: str = "https://api.deepseek.com"

    MISTRAL_API_KEY: Optional[str] = None
    MISTRAL_MODEL: str = "mistral-large-latest"
    MISTRAL_BASE_URL: str = "https://api.mistral.ai/v1"

    # selection / fallback
    DEFAULT_PROVIDER: str = "openai"
    SELECTION_STRATEGY: str = "priority"  # "priority" | "daily"
    PROVIDER_TIMEOUT_SECONDS: float = 30.0

    # tiers
    FREE_MAX_TOKENS: int = 200
    PREMIUM_MAX_TOKENS: int = 600
    DEFAULT_MIN_WORDS: int = 97
    DEFAULT_MAX_WORDS: int = 97
    TIER_CONFIG_PATH: str = "config/tiers.yaml"
    MIN_ANSWER_FRACTION: float = 0.25
    UNRESTRICTED_IDENTITIES: List[str] = Field(default_factory=lambda: ["45016180", "44885683", "premium-fallback"])
    PREMIUM_ORACLE_URL: Optional[str] = None
    PREMIUM_ORACLE_TIMEOUT_SECONDS: float = 5.0

    # prompt
    RULES_PREFIX_CHARS: int = 800

    model_config = SettingsConfigDict(
        env_file=".env.dev",
        extra="ignore",
    )

    @property
    def app_name(self) -> str:
        return self.APP_NAME


settings = Settings()
