import os
from pathlib import Path
from functools import lru_cache

from pydantic import Field, BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv


dotenv_path = Path(__file__).resolve().parents[2] / '.env'
load_dotenv(dotenv_path)


class AppConfig(BaseModel):
    """Application configurations."""

    # Defines the root directory of the application.
    BASE_DIR: Path = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Global configurations."""

    model_config = SettingsConfigDict(extra="ignore", case_sensitive=True)

    APP_CONFIG: AppConfig = AppConfig()

    # News sources (empty key = source disabled)
    NEWSAPI_KEY: str = Field("", description="newsapi.org API key")
    ALPHA_VANTAGE_API_KEY: str = Field("", description="Alpha Vantage API key")
    NEWSAPI_BASE_URL: str = "https://newsapi.org/v2"
    ALPHA_VANTAGE_BASE_URL: str = "https://www.alphavantage.co/query"

    NEWS_MAX_ARTICLES_PER_SOURCE: int = Field(10, ge=1, le=100)
    NEWS_TIMEOUT_MS: int = Field(10000, ge=1000, le=60000)

    # Generation providers (empty key = provider disabled)
    OPENAI_API_KEY: str = Field("", description="OpenAI API key")
    ANTHROPIC_API_KEY: str = Field("", description="Anthropic API key")
    OPENAI_MODEL: str = "gpt-4o-mini"
    ANTHROPIC_MODEL: str = "claude-3-5-haiku-latest"
    ENABLE_RULE_BASED_PROVIDER: bool = True

    AI_MAX_TOKENS: int = Field(1000, ge=100, le=4000)
    AI_TEMPERATURE: float = Field(0.3, ge=0.0, le=2.0)
    AI_TIMEOUT_MS: int = Field(30000, ge=5000, le=120000)

    # Quality gates (0-100). Kept separate per content type.
    QUALITY_THRESHOLD_HIGHLIGHTS: int = Field(60, ge=0, le=100)
    QUALITY_THRESHOLD_SOCIAL: int = Field(60, ge=0, le=100)

    AI_HEALTH_CHECK_INTERVAL_SECONDS: int = Field(300, ge=0)
    AI_UNHEALTHY_COOLDOWN_SECONDS: int = Field(300, ge=0)
    AI_MAX_PROVIDER_ATTEMPTS: int = Field(2, ge=1, le=5)

    # Cache
    CACHE_BACKEND: str = Field("memory", pattern="^(memory|redis)$")
    CACHE_DEFAULT_TTL: int = Field(900, ge=1)
    CACHE_TTL_NEWS: int = Field(60 * 15, ge=1)
    REDIS_HOST: str = os.getenv("REDIS_HOST", "localhost")
    REDIS_PORT: int = int(os.getenv("REDIS_PORT", 6379))
    REDIS_PASSWORD: str = os.getenv("REDIS_PASSWORD", '')
    REDIS_DB: int = int(os.getenv("REDIS_DB", 0))

    # Record store
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///data/news.db")
    DATABASE_ECHO: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"
    LOG_DIR: str = "logs"


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
