"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Transaction API
    api_base_url: str = "http://localhost:5000"

    # Service
    service_name: str = "finance-tracker"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 5.0
    fetch_max_retries: int = 3
    fetch_backoff_base: float = 0.5  # Exponential backoff base in seconds

    # Views
    top_categories_limit: int = 3


settings = Settings()
