# ttm_coach/config.py
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
    # ── Database
    DATABASE_URL: str = "sqlite:///./ttm_coach.db"  # override in .env for Postgres

    # OpenAI (tone rewrite + work chat); LLM endpoints answer 503 without it
    OPENAI_API_KEY: Optional[str] = None
    LLM_MODEL: str = Field("gpt-4o-mini", env="LLM_MODEL")
    REVIEW_MODEL: Optional[str] = Field(None, env="REVIEW_MODEL")

    # Catalog (bundled JSON unless overridden)
    CATALOG_PATH: Optional[str] = Field(None, env="CATALOG_PATH")

    # Self-efficacy message policy: stage_conditional | always_banded
    SELF_EFFICACY_POLICY: str = Field("stage_conditional", env="SELF_EFFICACY_POLICY")

    # Environment label for /health
    ENV: str = Field("development", env="ENV")

    # Debug logging
    TTM_COACH_DEBUG: bool = Field(False, env="TTM_COACH_DEBUG")


    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # ignore unexpected keys instead of erroring
    )

settings = Settings()
