from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Optional
from dotenv import load_dotenv
load_dotenv()

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # Application Settings
    APP_NAME: str = "Revenue Insights"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database Settings
    DATABASE_URL: Optional[str] = None
    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    DB_USER: str = "root"
    DB_PASSWORD: str = "root"
    DB_NAME: str = "revenue_insights"
    SQL_ECHO: bool = False

    # Ingestion Settings
    INSERT_BATCH_SIZE: int = 1000
    INSERT_MAX_ATTEMPTS: int = 3
    MAX_UPLOAD_BYTES: int = 20 * 1024 * 1024

    # Analytics Settings
    TOP_N: int = 5
    FORECAST_WINDOW: int = 7
    FORECAST_HISTORY_LIMIT: int = 365

    # API Settings
    API_PREFIX: str = "/api"
    CORS_ORIGINS: str = "http://localhost:3000"

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"mysql+pymysql://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    @property
    def cors_origins(self):
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

@lru_cache()
def get_settings():
    return Settings()

settings = get_settings()
