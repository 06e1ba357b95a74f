from functools import lru_cache
from typing import Literal
import os
from pydantic_settings import BaseSettings, SettingsConfigDict

EnvName = Literal["development", "production"]

def _env_file_for(app_env: EnvName) -> str:
    return ".env.development" if app_env == "development" else ".env.production"

class Settings(BaseSettings):

    # Core
    APP_ENV: EnvName = "development"
    APP_NAME: str = "Clovet"
    DEBUG: bool # ✅ declared
    GIT_SHA: str = "unknown"
    ALLOWED_ORIGINS: str = ""

    # Dev mode: skip LLM and marketplace network calls
    DISABLE_EXTERNAL_API: bool = False

    # Mongo
    MONGO_URI: str # ✅ declared
    MONGO_DB: str # ✅ declared

    # Redis (optional, recommendation cache falls back to process memory)
    REDIS_URL: str = ""

    # OpenAI (suggestion engine)
    OPENAI_API_KEY: str = ""
    OPENAI_SUGGESTION_MODEL: str = "gpt-4o-mini"
    openai_timeout_s: int = 30  # seconds

    # Marketplace (Carousell via RapidAPI)
    RAPIDAPI_KEY: str = ""
    RAPIDAPI_HOST: str = "carousell.p.rapidapi.com"
    marketplace_country: str = "sg"
    marketplace_cache_ttl: int = 5 * 60          # 5 minutes
    marketplace_timeout_s: int = 15
    marketplace_page_size: int = 50
    marketplace_mock_fallback: bool = True

    # Recommendation feed
    reco_cache_ttl: int = 60 * 60                # 1 hour freshness window
    reco_cache_prefix: str = "reco"              # redis key namespace
    reco_search_concurrency: int = 1             # sequential fan-out by default
    reco_query_timeout_s: int = 20

    # pydantic-settings config will be set dynamically in the factory below
    model_config = SettingsConfigDict(env_file=None, case_sensitive=True)

    @property
    def marketplace_configured(self) -> bool:
        return bool(self.RAPIDAPI_KEY and self.RAPIDAPI_HOST)

    @property
    def llm_configured(self) -> bool:
        return bool(self.OPENAI_API_KEY)

@lru_cache
def get_settings() -> Settings:
    """
    Factory that chooses the right .env file based on APP_ENV.
    Cache makes it cheap to inject via FastAPI dependencies.
    """
    app_env: EnvName = os.getenv("APP_ENV", "development")  # earliest switch
    env_file = _env_file_for(app_env)
    return Settings(
                _env_file=env_file,  # load .env.development or .env.production
                _env_file_encoding="utf-8"
    )
