from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Setlone API"
    app_version: str = "1.0.0"
    environment: str = "development"
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite:///./setlone.db"
    db_pool_size: int = 10
    db_max_overflow: int = 0
    db_pool_timeout_seconds: int = 30

    # Upstream market data
    request_timeout_seconds: float = 8.0
    equity_base_url: str = "https://query1.finance.yahoo.com/v8/finance/chart"
    futures_base_url: str = "https://fapi.binance.com/fapi/v1/klines"
    futures_default_limit: int = 500

    # User identifiers
    uid_max_attempts: int = 100
    registration_max_attempts: int = 3

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
