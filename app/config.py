"""Application configuration with validation."""
from typing import Optional, Literal
from functools import lru_cache
from pydantic import Field, field_validator, model_validator, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from the environment / .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "LeadGen Maturity Assessment"
    APP_VERSION: str = "1.0.0"
    APP_ENV: Literal["development", "staging", "production"] = "development"
    DEBUG: bool = False
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    LOG_FORMAT: Literal["json", "console"] = "json"

    # Snowflake (persistence)
    SNOWFLAKE_ACCOUNT: Optional[str] = None
    SNOWFLAKE_USER: Optional[str] = None
    SNOWFLAKE_PASSWORD: Optional[SecretStr] = None
    SNOWFLAKE_DATABASE: Optional[str] = None
    SNOWFLAKE_SCHEMA: Optional[str] = None
    SNOWFLAKE_WAREHOUSE: Optional[str] = None
    SNOWFLAKE_ROLE: Optional[str] = None

    # Redis
    REDIS_URL: str = "redis://localhost:6379/0"
    CACHE_TTL_RESULTS: int = Field(default=120, ge=1)  # 2 minutes

    # Narrative generation (OpenAI-compatible chat completions)
    OPENAI_API_KEY: Optional[SecretStr] = None
    LLM_BASE_URL: str = "https://api.openai.com/v1"
    LLM_MODEL: str = "gpt-3.5-turbo"
    LLM_TEMPERATURE: float = Field(default=0.7, ge=0.0, le=2.0)
    LLM_MAX_TOKENS: int = Field(default=1000, ge=100, le=4000)
    LLM_TIMEOUT_SECONDS: float = Field(default=20.0, ge=1.0, le=120.0)
    NARRATIVE_TOP_GAPS: int = Field(default=10, ge=3, le=28)

    # HubSpot CRM
    HUBSPOT_API_KEY: Optional[SecretStr] = None
    HUBSPOT_BASE_URL: str = "https://api.hubapi.com"
    HUBSPOT_TIMEOUT_SECONDS: float = Field(default=10.0, ge=1.0, le=60.0)
    HUBSPOT_DEAL_CLOSE_DAYS: int = Field(default=30, ge=1, le=365)

    # Advisory rules
    INFRA_PREREQUISITE_THRESHOLD: int = Field(default=40, ge=0, le=100)
    ADVISORY_PRESENCE_TRIGGER: Literal["present", "absent", "never"] = "present"

    @field_validator("OPENAI_API_KEY")
    @classmethod
    def validate_openai_key(cls, v: Optional[SecretStr]) -> Optional[SecretStr]:
        if v is not None and not v.get_secret_value().startswith("sk-"):
            raise ValueError("Invalid OpenAI API key format")
        return v

    @model_validator(mode="after")
    def validate_production_settings(self):
        """Ensure production has safe settings."""
        if self.APP_ENV == "production" and self.DEBUG:
            raise ValueError("DEBUG must be False in production")
        return self

    @property
    def narrative_enabled(self) -> bool:
        return self.OPENAI_API_KEY is not None

    @property
    def hubspot_enabled(self) -> bool:
        return self.HUBSPOT_API_KEY is not None


@lru_cache
def get_settings() -> Settings:
    return Settings()

settings = get_settings()
