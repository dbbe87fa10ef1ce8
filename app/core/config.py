from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    APP_ENV: str = "local"
    APP_NAME: str = "storefront-catalog"
    LOG_LEVEL: str = "INFO"

    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:8081"

    DATABASE_URL: str = "sqlite+pysqlite:///./storefront.db"

    DEFAULT_LOCALE: str = "en"
    SUPPORTED_LOCALES: str = "en,es"

    QUERY_DEFAULT_PAGE: int = 1
    QUERY_DEFAULT_LIMIT: int = 100

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def supported_locales_list(self) -> List[str]:
        return [o.strip().lower() for o in self.SUPPORTED_LOCALES.split(",") if o.strip()]

settings = Settings()
