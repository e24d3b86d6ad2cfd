from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = Field(default="Spartan Bites Backend", validation_alias='APP_NAME')

    # Server
    host: str = Field(default="0.0.0.0", validation_alias='HOST')
    port: int = Field(default=3000, validation_alias='PORT')
    log_level: str = Field(default="info", validation_alias='LOG_LEVEL')

    # Any origin by default; narrow with a JSON list, e.g. CORS_ORIGINS='["https://shop.example"]'
    cors_origins: List[str] = Field(default=["*"], validation_alias='CORS_ORIGINS')

    # Store
    first_order_id: int = Field(default=1000, validation_alias='FIRST_ORDER_ID')

    model_config = SettingsConfigDict(env_file='.env', extra='ignore')


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[arg-type]
