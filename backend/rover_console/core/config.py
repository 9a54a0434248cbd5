from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    project_name: str = "rover-console"
    database_url: str = "sqlite:///./rover_console.db"

    rover_api_url: str = "http://localhost:5000"
    rover_api_token: Optional[str] = None
    rover_api_timeout: float = 10.0
    detection_limit: int = 100

    local_poll_seconds: float = 5.0
    remote_poll_seconds: float = 30.0
    polling_enabled: bool = True
    seed_sample_alerts: bool = True

    celery_broker_url: str = "redis://localhost:6379/0"
    celery_result_backend: str = "redis://localhost:6379/1"

    log_level: str = "INFO"


settings = Settings()
