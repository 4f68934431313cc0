from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    personalbudget_api_url: str = "http://localhost:8080"
    api_timeout_seconds: float = 10.0
    cors_origins: str = "http://localhost:5173"

    range_retries: int = 2
    date_retries: int = 1
    range_cache_ttl_seconds: int = 120
    date_cache_ttl_seconds: int = 300

    default_period_days: int = 30
    timezone: str = "America/Sao_Paulo"
    log_level: str = "INFO"

    class Config:
        env_prefix = ""
        case_sensitive = False
        env_file = ".env"

settings = Settings()
