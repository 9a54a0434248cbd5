from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    celery_broker_url: str = "redis://localhost:6379/0"
    celery_result_backend: str = "redis://localhost:6379/1"

    rover_api_url: str = "http://localhost:5000"
    rover_api_token: Optional[str] = None
    rover_api_timeout: float = 10.0

    pushgateway_url: str = "http://pushgateway:9091"


settings = Settings()
