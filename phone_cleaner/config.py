from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DEFAULT_COUNTRY_ISO2: str = "SA"
    COUNTRIES_FILE: Optional[str] = None
    CHUNK_SIZE: int = 500
    REDIS_URL: str = "redis://localhost:6379/0"
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    class Config:
        env_file = ".env"
        env_prefix = "PHONE_CLEANER_"


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
