from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str
    REDIS_URL: str = "redis://localhost:6379/0"
    ENVIRONMENT: str = "development"
    BASE_URL: str = "http://localhost:8000"

    LONG_LINK_MAX_LENGTH: int = 200
    ALIAS_MAX_LENGTH: int = 50

    # Empty KEYGEN_URL means keys are generated locally
    KEYGEN_URL: str = ""
    KEYGEN_KEY_LENGTH: int = 7
    KEYGEN_BUFFER_SIZE: int = 50
    HTTP_TIMEOUT_SECONDS: float = 5.0

    SAFE_BROWSING_API_KEY: str = ""
    SAFE_BROWSING_URL: str = "https://safebrowsing.googleapis.com/v4/threatMatches:find"
    RISK_BLOCKLIST: List[str] = []

    CREATE_RATE_LIMIT: int = 30
    CREATE_RATE_WINDOW_SECONDS: int = 60

settings = Settings()
