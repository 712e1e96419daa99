# studio/settings.py
import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # core
    APP_NAME: str = Field(default="Gemini Studio")
    ENV: str = Field(default=os.getenv("APP_ENV", "dev"))
    DEBUG: bool = Field(default=True)
    LOG_LEVEL: str = Field(default="INFO")

    # model provider
    GEMINI_API_KEY: str | None = None
    GEMINI_MODEL: str = Field(default="gemini-2.0-flash")
    GEMINI_BASE_URL: str = Field(default="https://generativelanguage.googleapis.com/v1beta")
    PROVIDER_TIMEOUT_S: float = Field(default=60.0)

    # conversation context
    HISTORY_MAX_TURNS: int = Field(default=20)

    # retry policy (dispatcher side)
    RETRY_MAX_ATTEMPTS: int = Field(default=3)
    RETRY_INITIAL_DELAY: float = Field(default=0.5)
    RETRY_BACKOFF_FACTOR: float = Field(default=2.0)
    RETRY_MAX_DELAY: float = Field(default=8.0)

    # empty string turns the interaction log off
    INTERACTION_LOG_PATH: str = Field(default="data/interactions.sqlite")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    @property
    def app_name(self) -> str:
        return self.APP_NAME


settings = Settings()
