# backend/app/core/config.py

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    SUPABASE_URL: str
    SUPABASE_SERVICE_ROLE_KEY: str
    SUPABASE_JWT_SECRET: str
    ALGORITHM: str = "HS256"

    # Base used to build the public link of a survey (/f/<id>)
    PUBLIC_BASE_URL: str = ""

    LOG_LEVEL: str = "INFO"

    RESPONSES_PAGE_SIZE: int = 20

    # Rows requested per round trip when reading every response of a survey
    STATS_FETCH_PAGE_SIZE: int = 1000

    # Required checkboxes answered with [] pass validation unless this is on
    REJECT_EMPTY_REQUIRED_CHECKBOX: bool = False

    # CORS origins
    BACKEND_CORS_ORIGINS: List[str] = []

    model_config = SettingsConfigDict(env_file=".env")

settings = Settings()
