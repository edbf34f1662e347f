from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "fieldops-api"
    environment: str = "dev"
    database_url: str | None = None
    database_pool_min_size: int = 1
    database_pool_max_size: int = 10
    database_command_timeout_seconds: float = 15.0
    jwt_secret: str | None = None
    jwt_algorithm: str = "HS256"
    default_page_limit: int = 20
    max_page_limit: int = 100
    expose_error_details: bool = False
    otel_enabled: bool = True
    otel_service_name: str = "fieldops-api"
    otel_exporter_otlp_endpoint: str | None = None
    otel_exporter_otlp_headers: str | None = None
    otel_trace_sample_ratio: float = 1.0
    otel_log_correlation: bool = True

    model_config = SettingsConfigDict(env_prefix="FIELDOPS_", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()
