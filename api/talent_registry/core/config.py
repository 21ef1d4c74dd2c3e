from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "talent-registry-api"
    environment: str = "dev"
    database_url: str | None = None
    database_pool_min_size: int = 1
    database_pool_max_size: int = 10
    supabase_url: str | None = None
    supabase_anon_key: str | None = None
    auth_timeout_seconds: float = 5.0
    anonymous_session_cookie: str = "tr_session"
    profile_view_window_hours: int = 24
    profile_cache_max_age_seconds: int = 30
    candidate_page_size_max: int = 100
    otel_enabled: bool = True
    otel_service_name: str = "talent-registry-api"
    otel_exporter_otlp_endpoint: str | None = None
    otel_exporter_otlp_headers: str | None = None
    otel_trace_sample_ratio: float = 1.0

    model_config = SettingsConfigDict(env_prefix="TR_", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()
