from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional

from inventory_service.infrastructure.product_client import ProductClientConfig

class Settings(BaseSettings):
    POSTGRES_HOST: str = "postgres"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "inventory"
    POSTGRES_USER: str = "inventory"
    POSTGRES_PASSWORD: str = "inventory"
    # Overrides the POSTGRES_* settings when set (e.g. sqlite for local runs)
    DATABASE_URL: Optional[str] = None

    # Remote product lookup
    PRODUCTS_SERVICE_URL: str = "http://product-service:8000/api/v1/products"
    PRODUCTS_SERVICE_API_KEY: str = ""
    PRODUCT_SERVICE_TIMEOUT_MS: int = 5000
    PRODUCT_SERVICE_MAX_RETRIES: int = 3
    PRODUCT_SERVICE_RETRY_DELAY_MS: int = 1000
    # 0 keeps the delay fixed; otherwise added once per further attempt
    PRODUCT_SERVICE_RETRY_DELAY_INCREMENT_MS: int = 0

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+psycopg2://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    def product_client_config(self) -> ProductClientConfig:
        return ProductClientConfig(
            base_url=self.PRODUCTS_SERVICE_URL,
            api_key=self.PRODUCTS_SERVICE_API_KEY,
            timeout_ms=self.PRODUCT_SERVICE_TIMEOUT_MS,
            max_attempts=self.PRODUCT_SERVICE_MAX_RETRIES,
            retry_delay_ms=self.PRODUCT_SERVICE_RETRY_DELAY_MS,
            retry_delay_increment_ms=self.PRODUCT_SERVICE_RETRY_DELAY_INCREMENT_MS,
        )

@lru_cache
def get_settings() -> Settings:
    return Settings()
